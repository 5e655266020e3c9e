import pytest

from findings_engine.core.domain.severity import bucket, map_cia


@pytest.mark.parametrize(
    "score, expected",
    [
        (None, "none"),
        (0, "none"),
        (0.1, "low"),
        (3.9, "low"),
        (4.0, "medium"),
        (6.9, "medium"),
        (7.0, "high"),
        (8.9, "high"),
        (9.0, "critical"),
        (10.0, "critical"),
    ],
)
def test_bucket_thresholds(score, expected):
    assert bucket(score) == expected


@pytest.mark.parametrize(
    "label, expected",
    [
        ("COMPLETE", 1.0),
        ("HIGH", 1.0),
        ("PARTIAL", 0.5),
        ("LOW", 0.5),
        ("NONE", 0.0),
        ("", 0.0),
        (None, 0.0),
        ("high", 0.0),
    ],
)
def test_map_cia(label, expected):
    assert map_cia(label) == expected
