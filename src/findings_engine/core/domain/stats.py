from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnalysisStats:
    """Vulnerability counters of one run, each paired with ``<name>_diff``
    (current minus previous run)."""

    number_of_issues: int = 0
    number_of_issues_diff: int = 0
    number_of_vulnerabilities: int = 0
    number_of_vulnerabilities_diff: int = 0
    number_of_vulnerable_dependencies: int = 0
    number_of_vulnerable_dependencies_diff: int = 0
    number_of_direct_vulnerabilities: int = 0
    number_of_direct_vulnerabilities_diff: int = 0
    number_of_transitive_vulnerabilities: int = 0
    number_of_transitive_vulnerabilities_diff: int = 0

    mean_severity: float = 0.0
    mean_severity_diff: float = 0.0
    max_severity: float = 0.0
    max_severity_diff: float = 0.0

    number_of_owasp_top_10_2021_a1: int = 0
    number_of_owasp_top_10_2021_a1_diff: int = 0
    number_of_owasp_top_10_2021_a2: int = 0
    number_of_owasp_top_10_2021_a2_diff: int = 0
    number_of_owasp_top_10_2021_a3: int = 0
    number_of_owasp_top_10_2021_a3_diff: int = 0
    number_of_owasp_top_10_2021_a4: int = 0
    number_of_owasp_top_10_2021_a4_diff: int = 0
    number_of_owasp_top_10_2021_a5: int = 0
    number_of_owasp_top_10_2021_a5_diff: int = 0
    number_of_owasp_top_10_2021_a6: int = 0
    number_of_owasp_top_10_2021_a6_diff: int = 0
    number_of_owasp_top_10_2021_a7: int = 0
    number_of_owasp_top_10_2021_a7_diff: int = 0
    number_of_owasp_top_10_2021_a8: int = 0
    number_of_owasp_top_10_2021_a8_diff: int = 0
    number_of_owasp_top_10_2021_a9: int = 0
    number_of_owasp_top_10_2021_a9_diff: int = 0
    number_of_owasp_top_10_2021_a10: int = 0
    number_of_owasp_top_10_2021_a10_diff: int = 0

    number_of_critical: int = 0
    number_of_critical_diff: int = 0
    number_of_high: int = 0
    number_of_high_diff: int = 0
    number_of_medium: int = 0
    number_of_medium_diff: int = 0
    number_of_low: int = 0
    number_of_low_diff: int = 0
    number_of_none: int = 0
    number_of_none_diff: int = 0

    mean_confidentiality_impact: float = 0.0
    mean_confidentiality_impact_diff: float = 0.0
    mean_integrity_impact: float = 0.0
    mean_integrity_impact_diff: float = 0.0
    mean_availability_impact: float = 0.0
    mean_availability_impact_diff: float = 0.0


@dataclass(frozen=True)
class DependencyStats:
    number_of_dependencies: int = 0
    number_of_dependencies_diff: int = 0
    number_of_direct_dependencies: int = 0
    number_of_direct_dependencies_diff: int = 0
    number_of_transitive_dependencies: int = 0
    number_of_transitive_dependencies_diff: int = 0
    number_of_dev_dependencies: int = 0
    number_of_dev_dependencies_diff: int = 0
    number_of_non_dev_dependencies: int = 0
    number_of_non_dev_dependencies_diff: int = 0
    number_of_bundled_dependencies: int = 0
    number_of_bundled_dependencies_diff: int = 0
    number_of_optional_dependencies: int = 0
    number_of_optional_dependencies_diff: int = 0
    number_of_unlicensed_dependencies: int = 0
    number_of_unlicensed_dependencies_diff: int = 0


@dataclass(frozen=True)
class WeekNumber:
    week: int
    year: int


@dataclass(frozen=True)
class WeeklySeverity:
    week_number: WeekNumber
    nmb_critical: int = 0
    nmb_high: int = 0
    nmb_medium: int = 0
    nmb_low: int = 0
    nmb_none: int = 0
    summed_severity: float = 0.0


@dataclass(frozen=True)
class AttackVectorCount:
    attack_vector: str
    count: int
