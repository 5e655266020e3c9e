from __future__ import annotations

from datetime import datetime, timezone

from ..domain.mapping import parse_findings
from ..domain.models import VULN_PLUGIN, AnalysisRef, Finding
from ..domain.stats import AttackVectorCount, WeeklySeverity
from ..ports import AccessControlPort, LoggerPort
from ..services import ResultReader
from ..services.stats import attack_vector_distribution, weekly_series


def _as_utc(moment: datetime | None) -> datetime | None:
    """Naive bounds are taken as UTC; stored creation times are always aware."""
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=timezone.utc)


def _all_findings(reader: ResultReader, analysis_id: str) -> list[Finding] | None:
    result = reader.try_load(analysis_id, VULN_PLUGIN)
    if result is None:
        return None
    findings: list[Finding] = []
    for blob in result.workspaces.values():
        findings.extend(parse_findings(blob))
    return findings


class WeeklySeverityUseCase:
    """Use case for the week-bucketed severity series of a project.

    Analyses without a usable vulnerability result are skipped.
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
        user: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[WeeklySeverity]:
        self._access.check_project_access(org_id, project_id, user)

        runs: list[tuple[datetime, list[Finding]]] = []
        for ref in self._in_range(self._reader.project_analyses(project_id), start, end):
            findings = _all_findings(self._reader, ref.analysis_id)
            if findings is not None:
                runs.append((ref.created_on, findings))

        series = weekly_series(runs)
        self._logger.info("weekly_series_computed", project_id=project_id, runs=len(runs), weeks=len(series))
        return series

    @staticmethod
    def _in_range(refs: list[AnalysisRef], start: datetime | None, end: datetime | None) -> list[AnalysisRef]:
        start, end = _as_utc(start), _as_utc(end)
        return [
            ref for ref in refs
            if (start is None or ref.created_on >= start) and (end is None or ref.created_on <= end)
        ]


class AttackVectorUseCase:
    """Use case for the CVSS attack vector distribution of an analysis."""

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
    ) -> list[AttackVectorCount]:
        self._access.check_access(org_id, project_id, analysis_id, user)

        result = self._reader.load(analysis_id, VULN_PLUGIN)
        if workspace is not None:
            findings = parse_findings(self._reader.workspace(result, workspace))
        else:
            findings = [f for blob in result.workspaces.values() for f in parse_findings(blob)]

        distribution = attack_vector_distribution(findings)
        self._logger.debug("attack_vectors_computed", analysis_id=analysis_id, vectors=len(distribution))
        return distribution
