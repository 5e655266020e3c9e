from __future__ import annotations

from ..domain.mapping import parse_patch_workspace
from ..domain.models import PATCHING_PLUGIN, PatchRow
from ..ports import AccessControlPort, LoggerPort
from ..services import ResultReader
from ..services.query_engine import CollectionSpec, Page, QueryParams, run_query


class ListPatchesUseCase:
    def __init__(
        self,
        *,
        access: AccessControlPort,
        reader: ResultReader,
        collection: CollectionSpec[PatchRow],
        logger: LoggerPort,
    ) -> None:
        self._access = access
        self._reader = reader
        self._collection = collection
        self._logger = logger

    def execute(
        self,
        *,
        org_id: str,
        project_id: str,
        analysis_id: str,
        workspace: str,
        user: str,
        params: QueryParams | None = None,
    ) -> Page[PatchRow]:
        self._access.check_access(org_id, project_id, analysis_id, user)

        result = self._reader.load(analysis_id, PATCHING_PLUGIN)
        rows = parse_patch_workspace(self._reader.workspace(result, workspace))

        page = run_query(self._collection, rows, params or QueryParams())
        self._logger.info("patches_listed", analysis_id=analysis_id, workspace=workspace, patches=len(rows))
        return page
