from __future__ import annotations

from typing import Any, Mapping

from ..domain.exceptions import UnknownWorkspace
from ..domain.mapping import parse_findings, parse_sbom_workspace
from ..domain.models import SBOM_PLUGIN, VULN_PLUGIN, AnalysisResult, Finding, SbomWorkspace
from ..domain.stats import AnalysisStats, DependencyStats
from ..ports import AccessControlPort, LoggerPort
from ..services import ResultReader
from ..services.stats import compute_stats, dependency_stats


def _select(workspaces: Mapping[str, Any], workspace: str | None) -> list[Any]:
    if workspace is None:
        return list(workspaces.values())
    blob = workspaces.get(workspace)
    return [blob] if blob is not None else []


def _findings(result: AnalysisResult | None, workspace: str | None) -> list[Finding]:
    if result is None:
        return []
    findings: list[Finding] = []
    for blob in _select(result.workspaces, workspace):
        findings.extend(parse_findings(blob))
    return findings


def _sbom(result: AnalysisResult | None, workspace: str | None) -> SbomWorkspace | None:
    """Combine the dependency graphs of the selected workspaces into one."""
    if result is None:
        return None
    parsed = [parse_sbom_workspace(blob) for blob in _select(result.workspaces, workspace)]
    if not parsed:
        return None
    if len(parsed) == 1:
        return parsed[0]
    return SbomWorkspace(
        dependencies=tuple(d for sbom in parsed for d in sbom.dependencies),
        direct=tuple(name for sbom in parsed for name in sbom.direct),
        dev_direct=tuple(name for sbom in parsed for name in sbom.dev_direct),
    )


class GetStatsUseCase:
    """Use case for vulnerability statistics of an analysis.

    The previous run is the newest analysis of the same project created
    before the requested one. With ``workspace=None`` every workspace of both
    runs is aggregated (project level).
    """

    def __init__(self, *, access: AccessControlPort, reader: ResultReader, logger: LoggerPort) -> None:
        self._access = access
        self._reader = reader
        self._logger = logger

    def execute(
        self,
        *,
        org_id: str,
        project_id: str,
        analysis_id: str,
        user: str,
        workspace: str | None = None,
    ) -> AnalysisStats:
        self._access.check_access(org_id, project_id, analysis_id, user)

        current = self._reader.load(analysis_id, VULN_PLUGIN)
        if workspace is not None:
            self._reader.workspace(current, workspace)

        previous_ref = self._reader.previous_analysis(analysis_id)
        previous = previous_sbom_result = None
        if previous_ref is not None:
            previous = self._reader.try_load(previous_ref.analysis_id, VULN_PLUGIN)
            previous_sbom_result = self._reader.try_load(previous_ref.analysis_id, SBOM_PLUGIN)

        stats = compute_stats(
            _findings(current, workspace),
            _findings(previous, workspace),
            current_sbom=_sbom(self._reader.try_load(analysis_id, SBOM_PLUGIN), workspace),
            previous_sbom=_sbom(previous_sbom_result, workspace),
        )
        self._logger.info(
            "stats_computed",
            analysis_id=analysis_id,
            workspace=workspace,
            previous_analysis_id=previous_ref.analysis_id if previous_ref else None,
        )
        return stats


class GetDependencyStatsUseCase:
    """Use case for dependency-graph statistics of an analysis, with diffs."""

    def __init__(self, *, access: AccessControlPort, reader: ResultReader, logger: LoggerPort) -> None:
        self._access = access
        self._reader = reader
        self._logger = logger

    def execute(
        self,
        *,
        org_id: str,
        project_id: str,
        analysis_id: str,
        user: str,
        workspace: str | None = None,
    ) -> DependencyStats:
        self._access.check_access(org_id, project_id, analysis_id, user)

        current = self._reader.load(analysis_id, SBOM_PLUGIN)
        if workspace is not None and workspace not in current.workspaces:
            raise UnknownWorkspace(workspace)

        previous_ref = self._reader.previous_analysis(analysis_id)
        previous = None
        if previous_ref is not None:
            previous = self._reader.try_load(previous_ref.analysis_id, SBOM_PLUGIN)

        current_sbom = _sbom(current, workspace) or SbomWorkspace(dependencies=())
        self._logger.debug("dependency_stats_computed", analysis_id=analysis_id, workspace=workspace)
        return dependency_stats(current_sbom, _sbom(previous, workspace))
