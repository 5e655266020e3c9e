from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Iterable, Sequence

from ..domain.models import Finding, SbomWorkspace
from ..domain.owasp import OWASP_FILTER_SUFFIX
from ..domain.severity import SEVERITY_BUCKETS, bucket, map_cia
from ..domain.stats import (
    AnalysisStats,
    AttackVectorCount,
    DependencyStats,
    WeekNumber,
    WeeklySeverity,
)

_ATTACK_VECTORS = {
    "N": "NETWORK",
    "A": "ADJACENT_NETWORK",
    "L": "LOCAL",
    "P": "PHYSICAL",
}


def _mean(total: float, count: int) -> float:
    return total / count if count else 0.0


def _with_diffs(current: dict[str, float], previous: dict[str, float]) -> dict[str, float]:
    values: dict[str, float] = {}
    for name, value in current.items():
        values[name] = value
        values[f"{name}_diff"] = value - previous.get(name, 0)
    return values


def _vulnerability_counters(findings: Sequence[Finding], sbom: SbomWorkspace | None) -> dict[str, float]:
    counters: dict[str, float] = {
        "number_of_issues": len(findings),
        "number_of_vulnerabilities": 0,
        "number_of_vulnerable_dependencies": 0,
        "number_of_direct_vulnerabilities": 0,
        "number_of_transitive_vulnerabilities": 0,
        "mean_severity": 0.0,
        "max_severity": 0.0,
    }
    for suffix in OWASP_FILTER_SUFFIX.values():
        counters[f"number_of_owasp_top_10_2021_{suffix}"] = 0
    for name in SEVERITY_BUCKETS:
        counters[f"number_of_{name}"] = 0

    transitive_names = {d.name for d in sbom.dependencies if d.transitive} if sbom is not None else set()

    severity_sum = confidentiality_sum = integrity_sum = availability_sum = 0.0
    with_severity = 0
    seen_vulns: set[str] = set()
    seen_deps: set[str] = set()

    for finding in findings:
        if finding.affected_dependency not in seen_deps:
            seen_deps.add(finding.affected_dependency)
            if sbom is not None:
                if sbom.is_direct(finding.affected_dependency):
                    counters["number_of_direct_vulnerabilities"] += 1
                if finding.affected_dependency in transitive_names:
                    counters["number_of_transitive_vulnerabilities"] += 1

        severity = finding.severity
        if severity is not None:
            score = severity.score or 0.0
            with_severity += 1
            severity_sum += score
            counters["max_severity"] = max(counters["max_severity"], score)
            confidentiality_sum += map_cia(severity.confidentiality_impact)
            integrity_sum += map_cia(severity.integrity_impact)
            availability_sum += map_cia(severity.availability_impact)

        if finding.vulnerability_id in seen_vulns:
            continue
        seen_vulns.add(finding.vulnerability_id)

        for weakness in finding.weaknesses:
            suffix = OWASP_FILTER_SUFFIX.get(weakness.owasp_top10_id)
            if suffix is not None:
                counters[f"number_of_owasp_top_10_2021_{suffix}"] += 1
                break
        counters[f"number_of_{bucket(severity.score if severity else None)}"] += 1

    counters["number_of_vulnerabilities"] = len(seen_vulns)
    counters["number_of_vulnerable_dependencies"] = len(seen_deps)
    counters["mean_severity"] = _mean(severity_sum, with_severity)
    counters["mean_confidentiality_impact"] = _mean(confidentiality_sum, with_severity)
    counters["mean_integrity_impact"] = _mean(integrity_sum, with_severity)
    counters["mean_availability_impact"] = _mean(availability_sum, with_severity)
    return counters


def compute_stats(
    current: Sequence[Finding],
    previous: Sequence[Finding] | None = None,
    current_sbom: SbomWorkspace | None = None,
    previous_sbom: SbomWorkspace | None = None,
) -> AnalysisStats:
    """Aggregate vulnerability counters of a run and their change since ``previous``.

    A missing previous run counts as an empty one, so every diff then equals
    its current value.
    """
    now = _vulnerability_counters(current, current_sbom)
    before = _vulnerability_counters(previous or [], previous_sbom)
    return AnalysisStats(**_with_diffs(now, before))


def _dependency_counters(sbom: SbomWorkspace | None) -> dict[str, float]:
    if sbom is None:
        sbom = SbomWorkspace(dependencies=())
    deps = sbom.dependencies
    return {
        "number_of_dependencies": len(deps),
        "number_of_direct_dependencies": sum(1 for d in deps if not d.transitive),
        "number_of_transitive_dependencies": sum(1 for d in deps if d.transitive),
        "number_of_dev_dependencies": len(sbom.dev_direct),
        "number_of_non_dev_dependencies": len(sbom.direct),
        "number_of_bundled_dependencies": sum(1 for d in deps if d.bundled),
        "number_of_optional_dependencies": sum(1 for d in deps if d.optional),
        "number_of_unlicensed_dependencies": sum(1 for d in deps if not d.licenses),
    }


def dependency_stats(current: SbomWorkspace, previous: SbomWorkspace | None = None) -> DependencyStats:
    return DependencyStats(**_with_diffs(_dependency_counters(current), _dependency_counters(previous)))


def weekly_series(runs: Iterable[tuple[datetime, Sequence[Finding]]]) -> list[WeeklySeverity]:
    """Bucket finding severities by the ISO week of their run, oldest week first."""
    buckets: dict[tuple[int, int], dict[str, float]] = {}
    for created_on, findings in runs:
        year, week, _ = created_on.isocalendar()
        entry = buckets.setdefault(
            (year, week),
            {f"nmb_{name}": 0 for name in SEVERITY_BUCKETS} | {"summed_severity": 0.0},
        )
        for finding in findings:
            score = finding.severity.score if finding.severity is not None else None
            entry["summed_severity"] += score or 0.0
            entry[f"nmb_{bucket(score)}"] += 1

    return [
        WeeklySeverity(week_number=WeekNumber(week=week, year=year), **values)
        for (year, week), values in sorted(buckets.items())
    ]


def _attack_vector(vector: str) -> str:
    for part in vector.split("/"):
        if part.startswith("AV:"):
            return _ATTACK_VECTORS.get(part[3:], part[3:])
    return "UNKNOWN"


def attack_vector_distribution(findings: Iterable[Finding]) -> list[AttackVectorCount]:
    """Count findings per CVSS attack vector, in order of first appearance."""
    counts: Counter[str] = Counter()
    for finding in findings:
        if finding.severity is None:
            continue
        counts[_attack_vector(finding.severity.vector)] += 1
    return [AttackVectorCount(attack_vector=name, count=count) for name, count in counts.items()]
