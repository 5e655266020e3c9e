from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

from .config import AppConfig
from .container import Container
from ..core.domain.models import DependencyRow, LicenseRow, MergedVulnerability, PatchRow, ToolStatus, WorkspacesOverview
from ..core.domain.report import VulnerabilityDetails
from ..core.domain.stats import AnalysisStats, AttackVectorCount, DependencyStats, WeeklySeverity
from ..core.services.query_engine import Page, QueryParams, parse_active_filters


def _create_container(config: AppConfig | None = None) -> Container:
    """Create and initialize a container.

    Args:
        config: Optional config. If None, loads from environment variables.

    Returns:
        Initialized container instance
    """
    container = Container()

    if config is None:
        config = AppConfig()

    container.config.from_pydantic(config)
    container.init_resources()

    return container


def _run(config: AppConfig | None, use_case: str, user: str | None, **kwargs: Any) -> Any:
    """Build ``use_case`` from a fresh container, execute it and release resources."""
    container = _create_container(config)
    try:
        identity = user if user is not None else container.config.access.default_user()
        return getattr(container, use_case)().execute(user=identity, **kwargs)
    finally:
        container.shutdown_resources()


def query_params(
    *,
    page: int | None = None,
    entries_per_page: int | None = None,
    sort_by: str | None = None,
    sort_direction: str | None = None,
    filters: str | Sequence[str] | None = None,
    search: str | None = None,
) -> QueryParams:
    """Build list parameters; ``filters`` accepts the bracketed ``"[a,b]"`` form."""
    return QueryParams(
        page=page,
        entries_per_page=entries_per_page,
        sort_by=sort_by,
        sort_direction=sort_direction,
        active_filters=parse_active_filters(filters),
        search_key=search,
    )


def list_vulnerabilities(
    org_id: str,
    project_id: str,
    analysis_id: str,
    workspace: str,
    *,
    user: str | None = None,
    params: QueryParams | None = None,
    config: AppConfig | None = None,
) -> Page[MergedVulnerability]:
    """List the merged vulnerabilities of a workspace.

    Args:
        org_id: Organization owning the project
        project_id: Project of the analysis
        analysis_id: Analysis identifier
        workspace: Workspace name
        user: Requesting identity (defaults to ``access.default_user``)
        params: Search, filter, sort and pagination parameters
        config: Optional config for testing. If None, loads from env vars.

    Returns:
        One page of merged vulnerabilities with facet counts
    """
    return _run(
        config, "list_vulnerabilities_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id, workspace=workspace, params=params,
    )


def get_report(
    org_id: str,
    project_id: str,
    analysis_id: str,
    workspace: str,
    vulnerability_id: str,
    *,
    user: str | None = None,
    config: AppConfig | None = None,
) -> VulnerabilityDetails:
    """Assemble the detailed report of one vulnerability."""
    return _run(
        config, "get_report_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id,
        workspace=workspace, vulnerability_id=vulnerability_id,
    )


def get_stats(
    org_id: str,
    project_id: str,
    analysis_id: str,
    workspace: str | None = None,
    *,
    user: str | None = None,
    config: AppConfig | None = None,
) -> AnalysisStats:
    """Vulnerability statistics with diffs against the previous analysis.

    Args:
        workspace: Workspace name, or None to aggregate every workspace
    """
    return _run(
        config, "get_stats_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id, workspace=workspace,
    )


def get_dependency_stats(
    org_id: str,
    project_id: str,
    analysis_id: str,
    workspace: str | None = None,
    *,
    user: str | None = None,
    config: AppConfig | None = None,
) -> DependencyStats:
    return _run(
        config, "get_dependency_stats_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id, workspace=workspace,
    )


def weekly_severity(
    org_id: str,
    project_id: str,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    user: str | None = None,
    config: AppConfig | None = None,
) -> list[WeeklySeverity]:
    """Week-bucketed severity counts over every analysis of a project."""
    return _run(
        config, "weekly_severity_uc", user,
        org_id=org_id, project_id=project_id, start=start, end=end,
    )


def attack_vectors(
    org_id: str,
    project_id: str,
    analysis_id: str,
    workspace: str | None = None,
    *,
    user: str | None = None,
    config: AppConfig | None = None,
) -> list[AttackVectorCount]:
    return _run(
        config, "attack_vector_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id, workspace=workspace,
    )


def list_dependencies(
    org_id: str,
    project_id: str,
    analysis_id: str,
    workspace: str,
    *,
    user: str | None = None,
    params: QueryParams | None = None,
    config: AppConfig | None = None,
) -> Page[DependencyRow]:
    return _run(
        config, "list_dependencies_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id, workspace=workspace, params=params,
    )


def list_licenses(
    org_id: str,
    project_id: str,
    analysis_id: str,
    workspace: str,
    *,
    user: str | None = None,
    params: QueryParams | None = None,
    config: AppConfig | None = None,
) -> Page[LicenseRow]:
    return _run(
        config, "list_licenses_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id, workspace=workspace, params=params,
    )


def list_patches(
    org_id: str,
    project_id: str,
    analysis_id: str,
    workspace: str,
    *,
    user: str | None = None,
    params: QueryParams | None = None,
    config: AppConfig | None = None,
) -> Page[PatchRow]:
    return _run(
        config, "list_patches_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id, workspace=workspace, params=params,
    )


def get_status(
    org_id: str,
    project_id: str,
    analysis_id: str,
    plugin: str,
    *,
    user: str | None = None,
    config: AppConfig | None = None,
) -> ToolStatus:
    """Run status of one producing tool (``js-vuln-finder``, ``js-sbom``, ...)."""
    return _run(
        config, "get_status_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id, plugin=plugin,
    )


def list_workspaces(
    org_id: str,
    project_id: str,
    analysis_id: str,
    *,
    user: str | None = None,
    config: AppConfig | None = None,
) -> WorkspacesOverview:
    return _run(
        config, "list_workspaces_uc", user,
        org_id=org_id, project_id=project_id, analysis_id=analysis_id,
    )
