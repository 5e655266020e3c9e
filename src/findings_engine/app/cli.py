from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable

import typer

from . import main
from .cli_formatter import (
    format_attack_vectors,
    format_counters,
    format_dependency_page,
    format_license_page,
    format_patch_page,
    format_report,
    format_status,
    format_vulnerability_page,
    format_weekly,
    format_workspaces,
)
from .config import AppConfig
from ..core.domain.exceptions import EngineError, NotAuthorized
from ..core.domain.models import VULN_PLUGIN
from ..core.services.query_engine import QueryParams
from ..shared.to_jsonable import to_jsonable

try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass

app = typer.Typer(add_completion=False, no_args_is_help=True)

OrgOption = typer.Option(..., "--org", help="Organization id")
ProjectOption = typer.Option(..., "--project", help="Project id")
AnalysisOption = typer.Option(..., "--analysis", help="Analysis id")
WorkspaceOption = typer.Option(..., "--workspace", "-w", help="Workspace name")
UserOption = typer.Option(None, "--user", "-u", help="Requesting user (defaults to FINDINGS_ENGINE_ACCESS__DEFAULT_USER)")
JsonOption = typer.Option(False, "--json", help="Output result as JSON")


def _list_params(
    page: int | None,
    per_page: int | None,
    sort_by: str | None,
    sort_direction: str | None,
    filters: str | None,
    search: str | None,
) -> QueryParams:
    return main.query_params(
        page=page,
        entries_per_page=per_page,
        sort_by=sort_by,
        sort_direction=sort_direction,
        filters=filters,
        search=search,
    )


def _emit(json_output: bool, call: Callable[[AppConfig], Any], formatter: Callable[[Any], str]) -> None:
    """Run ``call`` and print its result, mapping engine errors to exit codes.

    ``NotAuthorized`` exits with code 2, every other ``EngineError`` with 1.
    """
    config = AppConfig()
    try:
        result = call(config)
    except EngineError as e:
        if json_output:
            typer.echo(json.dumps(e.to_dict(), ensure_ascii=False, indent=2))
        else:
            typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=2 if isinstance(e, NotAuthorized) else 1)

    if json_output:
        typer.echo(json.dumps(to_jsonable(result), ensure_ascii=False, indent=2))
    else:
        typer.echo(formatter(result))


@app.command()
def vulns(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    workspace: str = WorkspaceOption,
    user: str | None = UserOption,
    page: int | None = typer.Option(None, "--page", help="Zero-based page number"),
    per_page: int | None = typer.Option(None, "--per-page", help="Entries per page"),
    sort_by: str | None = typer.Option(None, "--sort-by", help="cve, dep_name, dep_version, severity, weakness, exploitability, owasp_top_10"),
    sort_direction: str | None = typer.Option(None, "--sort-direction", help="ASC or DESC"),
    filters: str | None = typer.Option(None, "--filters", help="Active filters, e.g. '[severity_critical,patchable]'"),
    search: str | None = typer.Option(None, "--search", help="Substring of a vulnerability id or dependency name"),
    json_output: bool = JsonOption,
):
    """List the merged vulnerabilities of a workspace."""
    params = _list_params(page, per_page, sort_by, sort_direction, filters, search)
    _emit(
        json_output,
        lambda config: main.list_vulnerabilities(org, project, analysis, workspace, user=user, params=params, config=config),
        format_vulnerability_page,
    )


@app.command()
def report(
    vulnerability_id: str = typer.Argument(..., help="Vulnerability id, e.g. GHSA-xxxx-xxxx-xxxx or CVE-2021-1234"),
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    workspace: str = WorkspaceOption,
    user: str | None = UserOption,
    json_output: bool = JsonOption,
):
    """Show the assembled report of one vulnerability."""
    _emit(
        json_output,
        lambda config: main.get_report(org, project, analysis, workspace, vulnerability_id, user=user, config=config),
        format_report,
    )


@app.command()
def stats(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    workspace: str | None = typer.Option(None, "--workspace", "-w", help="Workspace name"),
    project_level: bool = typer.Option(False, "--project-level", help="Aggregate every workspace"),
    user: str | None = UserOption,
    json_output: bool = JsonOption,
):
    """Vulnerability statistics with changes since the previous analysis."""
    if workspace is None and not project_level:
        typer.echo("Error: --workspace or --project-level is required.", err=True)
        raise typer.Exit(code=1)
    target = None if project_level else workspace
    _emit(
        json_output,
        lambda config: main.get_stats(org, project, analysis, target, user=user, config=config),
        format_counters,
    )


@app.command(name="dep-stats")
def dep_stats(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    workspace: str | None = typer.Option(None, "--workspace", "-w", help="Workspace name (all when omitted)"),
    user: str | None = UserOption,
    json_output: bool = JsonOption,
):
    """Dependency graph statistics with changes since the previous analysis."""
    _emit(
        json_output,
        lambda config: main.get_dependency_stats(org, project, analysis, workspace, user=user, config=config),
        format_counters,
    )


@app.command()
def weekly(
    org: str = OrgOption,
    project: str = ProjectOption,
    start: datetime | None = typer.Option(None, "--start", formats=["%Y-%m-%d"], help="First day (UTC)"),
    end: datetime | None = typer.Option(None, "--end", formats=["%Y-%m-%d"], help="Last day (UTC)"),
    user: str | None = UserOption,
    json_output: bool = JsonOption,
):
    """Severity counts per ISO week over every analysis of a project."""
    start_utc = start.replace(tzinfo=timezone.utc) if start is not None else None
    end_utc = end.replace(hour=23, minute=59, second=59, tzinfo=timezone.utc) if end is not None else None
    _emit(
        json_output,
        lambda config: main.weekly_severity(org, project, start=start_utc, end=end_utc, user=user, config=config),
        format_weekly,
    )


@app.command(name="attack-vectors")
def attack_vectors(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    workspace: str | None = typer.Option(None, "--workspace", "-w", help="Workspace name (all when omitted)"),
    user: str | None = UserOption,
    json_output: bool = JsonOption,
):
    """Count findings per CVSS attack vector."""
    _emit(
        json_output,
        lambda config: main.attack_vectors(org, project, analysis, workspace, user=user, config=config),
        format_attack_vectors,
    )


@app.command()
def deps(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    workspace: str = WorkspaceOption,
    user: str | None = UserOption,
    page: int | None = typer.Option(None, "--page"),
    per_page: int | None = typer.Option(None, "--per-page"),
    sort_by: str | None = typer.Option(None, "--sort-by"),
    sort_direction: str | None = typer.Option(None, "--sort-direction"),
    filters: str | None = typer.Option(None, "--filters"),
    search: str | None = typer.Option(None, "--search"),
    json_output: bool = JsonOption,
):
    """List the dependencies of a workspace."""
    params = _list_params(page, per_page, sort_by, sort_direction, filters, search)
    _emit(
        json_output,
        lambda config: main.list_dependencies(org, project, analysis, workspace, user=user, params=params, config=config),
        format_dependency_page,
    )


@app.command()
def licenses(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    workspace: str = WorkspaceOption,
    user: str | None = UserOption,
    page: int | None = typer.Option(None, "--page"),
    per_page: int | None = typer.Option(None, "--per-page"),
    sort_by: str | None = typer.Option(None, "--sort-by"),
    sort_direction: str | None = typer.Option(None, "--sort-direction"),
    filters: str | None = typer.Option(None, "--filters"),
    search: str | None = typer.Option(None, "--search"),
    json_output: bool = JsonOption,
):
    """List the licenses used in a workspace."""
    params = _list_params(page, per_page, sort_by, sort_direction, filters, search)
    _emit(
        json_output,
        lambda config: main.list_licenses(org, project, analysis, workspace, user=user, params=params, config=config),
        format_license_page,
    )


@app.command()
def patches(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    workspace: str = WorkspaceOption,
    user: str | None = UserOption,
    page: int | None = typer.Option(None, "--page"),
    per_page: int | None = typer.Option(None, "--per-page"),
    sort_by: str | None = typer.Option(None, "--sort-by"),
    sort_direction: str | None = typer.Option(None, "--sort-direction"),
    filters: str | None = typer.Option(None, "--filters"),
    search: str | None = typer.Option(None, "--search"),
    json_output: bool = JsonOption,
):
    """List the patch suggestions of a workspace."""
    params = _list_params(page, per_page, sort_by, sort_direction, filters, search)
    _emit(
        json_output,
        lambda config: main.list_patches(org, project, analysis, workspace, user=user, params=params, config=config),
        format_patch_page,
    )


@app.command()
def status(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    plugin: str = typer.Option(VULN_PLUGIN, "--plugin", help="js-vuln-finder, js-sbom, js-license or js-patching"),
    user: str | None = UserOption,
    json_output: bool = JsonOption,
):
    """Show the run status of a producing tool."""
    _emit(
        json_output,
        lambda config: main.get_status(org, project, analysis, plugin, user=user, config=config),
        format_status,
    )


@app.command()
def workspaces(
    org: str = OrgOption,
    project: str = ProjectOption,
    analysis: str = AnalysisOption,
    user: str | None = UserOption,
    json_output: bool = JsonOption,
):
    """List the workspaces of an analysis with their package files."""
    _emit(
        json_output,
        lambda config: main.list_workspaces(org, project, analysis, user=user, config=config),
        format_workspaces,
    )


if __name__ == "__main__":
    app()
