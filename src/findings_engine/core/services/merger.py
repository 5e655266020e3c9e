from __future__ import annotations

from typing import Iterable

from ..domain.models import AffectedVuln, Finding, MergedVulnerability


def to_affected(finding: Finding) -> AffectedVuln:
    return AffectedVuln(
        vulnerability_id=finding.vulnerability_id,
        affected_dependency=finding.affected_dependency,
        affected_version=finding.affected_version,
        sources=finding.sources,
        severity=finding.severity,
        weaknesses=finding.weaknesses,
        osv_match=finding.osv_match,
        nvd_match=finding.nvd_match,
    )


def merge_findings(findings: Iterable[Finding]) -> dict[str, MergedVulnerability]:
    """Group findings by vulnerability id in a single pass.

    The first finding of an id provides the record's representative fields;
    later findings only contribute affected entries. A dependency@version
    pair is recorded once per id.
    """
    merged: dict[str, MergedVulnerability] = {}
    seen_pairs: dict[str, set[tuple[str, str]]] = {}

    for finding in findings:
        key = finding.vulnerability_id
        record = merged.get(key)
        if record is None:
            record = MergedVulnerability(
                id=finding.id,
                vulnerability_id=key,
                sources=finding.sources,
                severity=finding.severity,
                weaknesses=finding.weaknesses,
            )
            merged[key] = record
            seen_pairs[key] = set()

        pair = (finding.affected_dependency, finding.affected_version)
        if pair in seen_pairs[key]:
            continue
        seen_pairs[key].add(pair)
        record.affected.append(to_affected(finding))

    return merged
