"""CVSS vector parsing and score resolution for reports.

Scores are computed with the ``cvss`` library; discrete metrics are reported
with the labels NVD uses in its JSON feeds.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from cvss import CVSS2 as _CVSS2Vector
from cvss import CVSS3 as _CVSS3Vector
from cvss.exceptions import CVSSError

from ..domain.exceptions import InvalidCVSSVector
from ..domain.knowledge import NvdMetric, NvdRecord, OsvRecord
from ..domain.report import CVSS2, CVSS3, SeverityInfo
from ..ports import LoggerPort

NVD_SOURCE = "nvd@nist.gov"

_V3_LABELS = {
    "AV": {"N": "NETWORK", "A": "ADJACENT_NETWORK", "L": "LOCAL", "P": "PHYSICAL"},
    "AC": {"L": "LOW", "H": "HIGH"},
    "PR": {"N": "NONE", "L": "LOW", "H": "HIGH"},
    "UI": {"N": "NONE", "R": "REQUIRED"},
    "S": {"U": "UNCHANGED", "C": "CHANGED"},
    "C": {"H": "HIGH", "L": "LOW", "N": "NONE"},
    "I": {"H": "HIGH", "L": "LOW", "N": "NONE"},
    "A": {"H": "HIGH", "L": "LOW", "N": "NONE"},
}

_V2_LABELS = {
    "AV": {"L": "LOCAL", "A": "ADJACENT_NETWORK", "N": "NETWORK"},
    "AC": {"H": "HIGH", "M": "MEDIUM", "L": "LOW"},
    "Au": {"M": "MULTIPLE", "S": "SINGLE", "N": "NONE"},
    "C": {"N": "NONE", "P": "PARTIAL", "C": "COMPLETE"},
    "I": {"N": "NONE", "P": "PARTIAL", "C": "COMPLETE"},
    "A": {"N": "NONE", "P": "PARTIAL", "C": "COMPLETE"},
}

_ONE_DECIMAL = Decimal("0.1")


def _round1(value: Decimal) -> float:
    return float(Decimal(value).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def _label(table: dict[str, dict[str, str]], metrics: dict[str, str], key: str) -> str:
    return table[key].get(metrics.get(key, ""), "")


def parse_cvss3(vector: str) -> CVSS3:
    """Parse a ``CVSS:3.0/`` or ``CVSS:3.1/`` vector.

    Raises:
        InvalidCVSSVector: If the vector cannot be parsed
    """
    if not isinstance(vector, str) or not vector.startswith(("CVSS:3.0/", "CVSS:3.1/")):
        raise InvalidCVSSVector(str(vector))
    try:
        parsed = _CVSS3Vector(vector)
    except CVSSError as e:
        raise InvalidCVSSVector(vector) from e

    metrics = parsed.metrics
    return CVSS3(
        base_score=float(parsed.base_score),
        exploitability_score=_round1(parsed.esc),
        impact_score=_round1(parsed.isc),
        attack_vector=_label(_V3_LABELS, metrics, "AV"),
        attack_complexity=_label(_V3_LABELS, metrics, "AC"),
        privileges_required=_label(_V3_LABELS, metrics, "PR"),
        user_interaction=_label(_V3_LABELS, metrics, "UI"),
        scope=_label(_V3_LABELS, metrics, "S"),
        confidentiality_impact=_label(_V3_LABELS, metrics, "C"),
        integrity_impact=_label(_V3_LABELS, metrics, "I"),
        availability_impact=_label(_V3_LABELS, metrics, "A"),
    )


def parse_cvss31(vector: str) -> CVSS3:
    """Parse a vector that must carry the ``CVSS:3.1/`` prefix."""
    if not isinstance(vector, str) or not vector.startswith("CVSS:3.1/"):
        raise InvalidCVSSVector(str(vector))
    return parse_cvss3(vector)


def parse_cvss2(vector: str, user_interaction_required: bool | None = None) -> CVSS2:
    """Parse a CVSS v2 base vector (``AV:N/AC:L/Au:N/C:P/I:P/A:P``).

    Raises:
        InvalidCVSSVector: If the vector cannot be parsed
    """
    if not isinstance(vector, str) or not vector:
        raise InvalidCVSSVector(str(vector))
    try:
        parsed = _CVSS2Vector(vector)
    except CVSSError as e:
        raise InvalidCVSSVector(vector) from e

    metrics = parsed.metrics
    impact = Decimal("10.41") * (
        1
        - (1 - parsed.get_value("C"))
        * (1 - parsed.get_value("I"))
        * (1 - parsed.get_value("A"))
    )
    exploitability = Decimal("20") * parsed.get_value("AV") * parsed.get_value("AC") * parsed.get_value("Au")
    return CVSS2(
        base_score=float(parsed.base_score),
        exploitability_score=_round1(exploitability),
        impact_score=_round1(impact),
        access_vector=_label(_V2_LABELS, metrics, "AV"),
        access_complexity=_label(_V2_LABELS, metrics, "AC"),
        authentication=_label(_V2_LABELS, metrics, "Au"),
        confidentiality_impact=_label(_V2_LABELS, metrics, "C"),
        integrity_impact=_label(_V2_LABELS, metrics, "I"),
        availability_impact=_label(_V2_LABELS, metrics, "A"),
        user_interaction_required=user_interaction_required,
    )


def select_metric(entries: Sequence[NvdMetric]) -> NvdMetric | None:
    """Pick the metric entry to report.

    With several entries the one published by NVD itself wins, otherwise the
    first one; a single entry is taken as is.
    """
    if not entries:
        return None
    if len(entries) == 1:
        return entries[0]
    for entry in entries:
        if entry.source == NVD_SOURCE:
            return entry
    return entries[0]


class CVSSScorer:
    """Resolves structured severities from knowledge records.

    Vectors that fail to parse are logged and skipped.
    """

    def __init__(self, *, logger: LoggerPort) -> None:
        self._logger = logger

    def nvd_severities(self, record: NvdRecord) -> SeverityInfo:
        cvss_2 = cvss_3 = cvss_31 = None

        metric = select_metric(record.cvss_v2)
        if metric is not None:
            cvss_2 = self._safe(parse_cvss2, metric.vector, record.nvd_id, metric.user_interaction_required)
        metric = select_metric(record.cvss_v30)
        if metric is not None:
            cvss_3 = self._safe(parse_cvss3, metric.vector, record.nvd_id)
        metric = select_metric(record.cvss_v31)
        if metric is not None:
            cvss_31 = self._safe(parse_cvss31, metric.vector, record.nvd_id)

        return SeverityInfo(cvss_31=cvss_31, cvss_3=cvss_3, cvss_2=cvss_2)

    def osv_severities(self, record: OsvRecord) -> SeverityInfo:
        cvss_2 = cvss_3 = cvss_31 = None
        for severity in record.severity:
            if severity.type == "CVSS_V3":
                if severity.score.startswith("CVSS:3.1/"):
                    cvss_31 = self._safe(parse_cvss31, severity.score, record.osv_id)
                else:
                    cvss_3 = self._safe(parse_cvss3, severity.score, record.osv_id)
            elif severity.type == "CVSS_V2":
                cvss_2 = self._safe(parse_cvss2, severity.score, record.osv_id)
        return SeverityInfo(cvss_31=cvss_31, cvss_3=cvss_3, cvss_2=cvss_2)

    def _safe(self, parser, vector: str, record_id: str, *args):
        try:
            return parser(vector, *args)
        except InvalidCVSSVector as e:
            self._logger.warning(
                "cvss_vector_skipped",
                record_id=record_id,
                vector=e.vector,
            )
            return None
