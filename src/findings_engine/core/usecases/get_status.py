from __future__ import annotations

from ..domain.models import ToolStatus
from ..ports import AccessControlPort, LoggerPort
from ..services import ResultReader


class GetStatusUseCase:
    """Use case for the run status of one producing tool.

    Error lists are reported only when the run recorded private errors;
    a clean run yields just its stage timestamps.
    """

    def __init__(self, *, access: AccessControlPort, reader: ResultReader, logger: LoggerPort) -> None:
        self._access = access
        self._reader = reader
        self._logger = logger

    def execute(self, *, org_id: str, project_id: str, analysis_id: str, plugin: str, user: str) -> ToolStatus:
        """Execute the use case.

        Raises:
            NotAuthorized: If the user may not read the analysis
            PluginResultNotAvailable: If the tool has not stored a result yet
        """
        self._access.check_access(org_id, project_id, analysis_id, user)

        info = self._reader.load(analysis_id, plugin, allow_failed=True).info
        if info.private_errors:
            self._logger.warning(
                "tool_reported_errors",
                analysis_id=analysis_id,
                plugin=plugin,
                private_errors=len(info.private_errors),
            )
            return ToolStatus(
                stage_start=info.analysis_start_time,
                stage_end=info.analysis_end_time,
                public_errors=info.public_errors,
                private_errors=info.private_errors,
            )
        return ToolStatus(stage_start=info.analysis_start_time, stage_end=info.analysis_end_time)
