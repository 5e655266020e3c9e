"""Tests for CLI formatter utilities."""

from findings_engine.app.cli_formatter import (
    format_attack_vectors,
    format_counters,
    format_dependency_page,
    format_license_page,
    format_patch_page,
    format_status,
    format_vulnerability_page,
    format_weekly,
    format_workspaces,
)
from findings_engine.core.domain.models import PatchRow, StatusError, ToolStatus, WorkspacesOverview
from findings_engine.core.domain.stats import AnalysisStats, AttackVectorCount, WeekNumber, WeeklySeverity
from findings_engine.core.services.query_engine import Page


def _page(data, **kw):
    defaults = dict(
        page=0,
        entry_count=len(data),
        entries_per_page=20,
        total_entries=len(data),
        total_pages=1 if data else 0,
        matching_count=len(data),
    )
    defaults.update(kw)
    return Page(data=list(data), **defaults)


def test_empty_pages_have_messages():
    assert format_vulnerability_page(_page([])) == "No vulnerabilities found."
    assert format_dependency_page(_page([])) == "No dependencies found."
    assert format_license_page(_page([])) == "No licenses found."
    assert format_patch_page(_page([])) == "No patches found."


def test_format_patch_page_footer_and_facets():
    row = PatchRow(
        key="lodash@4.17.15",
        affected_dep_name="lodash",
        affected_dep_version="4.17.15",
        patch_type="FULL",
        vulnerability_ids=("GHSA-jf85-cpcp-j695",),
        patchable_ids=("GHSA-jf85-cpcp-j695",),
    )
    page = _page([row], total_entries=3, matching_count=1, filter_count={"patchable": 1})

    output = format_patch_page(page)

    assert "lodash@4.17.15" in output
    assert "GHSA-jf85-cpcp-j695" in output
    assert "Page 1/1 (1 shown, 1 matching, 3 total)" in output
    assert "Filters: patchable=1" in output


def test_format_counters_shows_diffs_only_when_nonzero():
    stats = AnalysisStats(number_of_issues=4, number_of_issues_diff=-2, number_of_critical=1, max_severity=9.8, max_severity_diff=1.5)

    lines = format_counters(stats).splitlines()

    issues = next(line for line in lines if line.startswith("number_of_issues "))
    critical = next(line for line in lines if line.startswith("number_of_critical "))
    max_sev = next(line for line in lines if line.startswith("max_severity "))
    assert issues.endswith("(-2)")
    assert "(" not in critical
    assert "9.80" in max_sev and max_sev.endswith("(+1.50)")
    assert not any(line.startswith("number_of_issues_diff") for line in lines)


def test_format_weekly():
    assert format_weekly([]) == "No analyses in range."
    output = format_weekly([WeeklySeverity(week_number=WeekNumber(week=3, year=2024), nmb_high=2, summed_severity=15.0)])
    assert "2024-W03" in output
    assert "15.0" in output


def test_format_attack_vectors():
    assert format_attack_vectors([]) == "No CVSS vectors found."
    assert "NETWORK" in format_attack_vectors([AttackVectorCount("NETWORK", 5)])


def test_format_status_lists_public_errors():
    status = ToolStatus(
        stage_start="2024-03-01T10:00:00Z",
        stage_end="",
        public_errors=(StatusError(type="FailedToParse", description="package-lock.json is malformed"),),
    )

    output = format_status(status)

    assert "Started:  2024-03-01T10:00:00Z" in output
    assert "Finished: N/A" in output
    assert "[FailedToParse] package-lock.json is malformed" in output


def test_format_workspaces():
    output = format_workspaces(WorkspacesOverview(workspaces_map={"web": "shop/package.json"}, package_manager="NPM"))
    assert "Package manager: NPM" in output
    assert "shop/package.json" in output
