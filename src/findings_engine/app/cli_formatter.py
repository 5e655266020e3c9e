"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from ..core.domain.models import (
    DependencyRow,
    LicenseRow,
    MergedVulnerability,
    PatchRow,
    ToolStatus,
    WorkspacesOverview,
)
from ..core.domain.report import VulnerabilityDetails
from ..core.domain.severity import bucket
from ..core.domain.stats import AttackVectorCount, WeeklySeverity
from ..core.services.query_engine import Page


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


def _page_footer(page: Page[Any]) -> list[str]:
    lines = [
        f"Page {page.page + 1}/{max(page.total_pages, 1)} "
        f"({page.entry_count} shown, {page.matching_count} matching, {page.total_entries} total)"
    ]
    if page.filter_count:
        facets = ", ".join(f"{name}={count}" for name, count in page.filter_count.items())
        lines.append(f"Filters: {facets}")
    return lines


def format_vulnerability_page(page: Page[MergedVulnerability]) -> str:
    """Format a page of merged vulnerabilities as a table.

    Args:
        page: Result of the vulnerability list query

    Returns:
        Formatted string for display
    """
    if not page.data:
        return "No vulnerabilities found."

    lines = ["-" * 110]
    lines.append(f"{'Vulnerability':<22} {'Severity':>8} {'Level':<9} {'Patch':<8} {'Dependencies':<40} {'Source':<6}")
    lines.append("-" * 110)
    for vuln in page.data:
        score = vuln.severity_score
        deps = ", ".join(f"{a.affected_dependency}@{a.affected_version}" for a in vuln.affected)
        lines.append(
            f"{vuln.vulnerability_id:<22} "
            f"{(f'{score:.1f}' if score is not None else 'N/A'):>8} "
            f"{bucket(score):<9} "
            f"{(vuln.patch_type or '-'):<8} "
            f"{_truncate(deps, 40):<40} "
            f"{vuln.winning_source or '-':<6}"
        )
    lines.append("-" * 110)
    lines.extend(_page_footer(page))
    return "\n".join(lines)


def format_report(report: VulnerabilityDetails) -> str:
    """Format an assembled vulnerability report for human-readable CLI output."""
    info = report.vulnerability_info
    lines = ["=" * 80, f"VULNERABILITY REPORT: {info.vulnerability_id}", "=" * 80]

    if report.dependency_info is not None:
        dep = report.dependency_info
        lines.append(f"\nDependency: {dep.name}@{dep.version}")
        if dep.description:
            lines.append(f"  {dep.description}")
    lines.append(f"Affected versions: {info.version_info.affected_versions_string or 'N/A'}")
    if info.published:
        lines.append(f"Published: {info.published}")
    if info.aliases:
        lines.append(f"Aliases: {', '.join(info.aliases)}")

    lines.append("\n" + "-" * 80)
    lines.append("SEVERITY")
    lines.append("-" * 80)
    for label, score in (("CVSS 3.1", report.severities.cvss_31), ("CVSS 3.0", report.severities.cvss_3), ("CVSS 2", report.severities.cvss_2)):
        if score is not None:
            lines.append(f"{label}: {score.base_score} (exploitability {score.exploitability_score}, impact {score.impact_score})")
    if report.severities.is_empty:
        lines.append("No CVSS data available")

    if report.owasp_top_10 is not None:
        lines.append(f"\nOWASP Top 10: {report.owasp_top_10.name}")
    if report.weaknesses:
        lines.append("\nWeaknesses:")
        for weakness in report.weaknesses:
            lines.append(f"  {weakness.id}: {weakness.name}")

    if info.description:
        lines.append("\n" + "-" * 80)
        lines.append("DESCRIPTION")
        lines.append("-" * 80)
        lines.append(info.description)

    if report.patch is not None:
        patch = report.patch
        lines.append(f"\nPatch: {patch.patch_type}" + (f" (update to {patch.update})" if patch.update else ""))

    if report.references:
        lines.append("\nReferences:")
        for ref in report.references:
            lines.append(f"  {ref.url}")

    lines.append("\n" + "=" * 80)
    return "\n".join(lines)


def format_counters(stats: Any) -> str:
    """Format a flat stats record as ``name  value  (diff)`` rows."""
    lines = []
    for f in fields(stats):
        if f.name.endswith("_diff"):
            continue
        value = getattr(stats, f.name)
        diff = getattr(stats, f"{f.name}_diff", None)
        shown = f"{value:.2f}" if isinstance(value, float) else str(value)
        line = f"{f.name:<40} {shown:>10}"
        if diff:
            line += f"  ({diff:+.2f})" if isinstance(diff, float) else f"  ({diff:+d})"
        lines.append(line)
    return "\n".join(lines)


def format_weekly(series: list[WeeklySeverity]) -> str:
    if not series:
        return "No analyses in range."
    lines = [f"{'Week':<10} {'Critical':>8} {'High':>6} {'Medium':>7} {'Low':>5} {'None':>5} {'Sum':>8}"]
    for entry in series:
        week = f"{entry.week_number.year}-W{entry.week_number.week:02d}"
        lines.append(
            f"{week:<10} {entry.nmb_critical:>8} {entry.nmb_high:>6} {entry.nmb_medium:>7} "
            f"{entry.nmb_low:>5} {entry.nmb_none:>5} {entry.summed_severity:>8.1f}"
        )
    return "\n".join(lines)


def format_attack_vectors(distribution: list[AttackVectorCount]) -> str:
    if not distribution:
        return "No CVSS vectors found."
    return "\n".join(f"{entry.attack_vector:<20} {entry.count:>6}" for entry in distribution)


def format_dependency_page(page: Page[DependencyRow]) -> str:
    if not page.data:
        return "No dependencies found."
    lines = [f"{'Dependency':<40} {'Version':<14} {'Newest':<14} {'Direct':<7} {'Vulns':>5} {'Severity':>8}"]
    for dep in page.data:
        lines.append(
            f"{_truncate(dep.name, 40):<40} {dep.version:<14} {dep.newest_release or '-':<14} "
            f"{('yes' if dep.is_direct else 'no'):<7} {len(dep.vulnerabilities):>5} {dep.combined_severity:>8.1f}"
        )
    lines.extend(_page_footer(page))
    return "\n".join(lines)


def format_license_page(page: Page[LicenseRow]) -> str:
    if not page.data:
        return "No licenses found."
    lines = [f"{'License':<30} {'Category':<12} {'Deps':>5}  Flags"]
    for lic in page.data:
        flags = []
        if lic.license_compliance_violation:
            flags.append("violation")
        if lic.unable_to_infer:
            flags.append("unrecognized")
        lines.append(
            f"{_truncate(lic.id, 30):<30} {lic.license_category or '-':<12} "
            f"{len(lic.deps_using_license):>5}  {', '.join(flags)}"
        )
    lines.extend(_page_footer(page))
    return "\n".join(lines)


def format_patch_page(page: Page[PatchRow]) -> str:
    if not page.data:
        return "No patches found."
    lines = [f"{'Dependency':<45} {'Patch':<8} {'Update':<12} Vulnerabilities"]
    for patch in page.data:
        lines.append(
            f"{_truncate(patch.key, 45):<45} {patch.patch_type:<8} {patch.update or '-':<12} "
            f"{', '.join(patch.vulnerability_ids)}"
        )
    lines.extend(_page_footer(page))
    return "\n".join(lines)


def format_status(status: ToolStatus) -> str:
    lines = [f"Started:  {status.stage_start or 'N/A'}", f"Finished: {status.stage_end or 'N/A'}"]
    if status.public_errors:
        lines.append("Errors:")
        for error in status.public_errors:
            lines.append(f"  [{error.type}] {error.description}")
    return "\n".join(lines)


def format_workspaces(overview: WorkspacesOverview) -> str:
    lines = [f"Package manager: {overview.package_manager or 'N/A'}"]
    for name, path in overview.workspaces_map.items():
        lines.append(f"  {name:<30} {path}")
    return "\n".join(lines)
