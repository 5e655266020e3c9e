from findings_engine.core.domain.mapping import parse_findings
from findings_engine.core.services.merger import merge_findings
from tests.findings_engine.fakes import raw_finding


def _findings(*raw):
    return parse_findings({"Vulnerabilities": list(raw)})


def test_same_id_merges_into_one_record():
    merged = merge_findings(_findings(
        raw_finding("CVE-2021-1234", "lodash", "4.17.15", 7.5),
        raw_finding("CVE-2021-1234", "lodash", "4.17.10", 9.1),
    ))

    assert list(merged) == ["CVE-2021-1234"]
    record = merged["CVE-2021-1234"]
    assert len(record.affected) == 2
    assert record.severity_score == 7.5


def test_first_writer_wins_for_representative_fields():
    merged = merge_findings(_findings(
        raw_finding("CVE-2021-1234", "a", "1.0.0", None),
        raw_finding("CVE-2021-1234", "b", "1.0.0", 9.8),
    ))
    assert merged["CVE-2021-1234"].severity is None


def test_duplicate_dependency_version_is_recorded_once():
    merged = merge_findings(_findings(
        raw_finding("CVE-2021-1234", "lodash", "4.17.15", finding_id="1"),
        raw_finding("CVE-2021-1234", "lodash", "4.17.15", finding_id="2"),
    ))
    assert len(merged["CVE-2021-1234"].affected) == 1


def test_every_affected_entry_shares_the_key():
    merged = merge_findings(_findings(
        raw_finding("CVE-1", "a"),
        raw_finding("CVE-2", "b"),
        raw_finding("CVE-1", "c"),
    ))
    for key, record in merged.items():
        assert all(a.vulnerability_id == key for a in record.affected)
    assert [a.affected_dependency for a in merged["CVE-1"].affected] == ["a", "c"]


def test_empty_input():
    assert merge_findings([]) == {}
