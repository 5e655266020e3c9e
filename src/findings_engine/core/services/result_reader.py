from __future__ import annotations

from typing import Any, Mapping

from ..domain.exceptions import EngineError, PluginFailed, PluginResultNotAvailable, UnknownWorkspace
from ..domain.models import AnalysisRef, AnalysisResult
from ..ports import LoggerPort, ResultStorePort


class ResultReader:
    """Loads tool outputs and enforces their availability and workspace rules."""

    def __init__(self, *, store: ResultStorePort, logger: LoggerPort) -> None:
        self._store = store
        self._logger = logger

    def load(self, analysis_id: str, plugin: str, *, allow_failed: bool = False) -> AnalysisResult:
        """Load the latest result of ``plugin``.

        Raises:
            PluginResultNotAvailable: If the tool has not stored a result
            PluginFailed: If the stored result reports a failure (unless ``allow_failed``)
        """
        result = self._store.get_latest_result(analysis_id, plugin)
        if result is None:
            raise PluginResultNotAvailable(plugin)
        if result.info.status == "failure" and not allow_failed:
            raise PluginFailed(plugin)
        return result

    def try_load(self, analysis_id: str, plugin: str) -> AnalysisResult | None:
        """Best-effort variant of ``load`` for optional enrichment data."""
        try:
            return self.load(analysis_id, plugin)
        except EngineError as e:
            self._logger.debug(
                "optional_result_unavailable",
                analysis_id=analysis_id,
                plugin=plugin,
                error_code=e.error_code,
            )
            return None

    @staticmethod
    def workspace(result: AnalysisResult, workspace: str) -> Mapping[str, Any]:
        """Return the raw workspace blob.

        Raises:
            UnknownWorkspace: If the result has no such workspace
        """
        if workspace not in result.workspaces:
            raise UnknownWorkspace(workspace)
        return result.workspaces[workspace]

    def previous_analysis(self, analysis_id: str) -> AnalysisRef | None:
        """Return the newest analysis of the same project created before ``analysis_id``."""
        current = self._store.get_analysis(analysis_id)
        if current is None:
            return None
        for ref in self._store.list_analyses(current.project_id):
            if ref.analysis_id != analysis_id and ref.created_on < current.created_on:
                return ref
        return None

    def project_analyses(self, project_id: str) -> list[AnalysisRef]:
        """List the analyses of a project, oldest first."""
        return sorted(self._store.list_analyses(project_id), key=lambda ref: ref.created_on)
