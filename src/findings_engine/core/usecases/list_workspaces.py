from __future__ import annotations

from ..domain.models import SBOM_PLUGIN, WorkspacesOverview
from ..ports import AccessControlPort, LoggerPort
from ..services import ResultReader


def clean_package_file_path(path: str) -> str:
    """Shorten a checkout path to ``<project dir>/<package file>``.

    The checkout directory carries a ``-<suffix>`` appended by the scanner,
    which is dropped: ``/tmp/repo-4f2a/package.json`` -> ``repo/package.json``.
    """
    parts = [p for p in path.replace("\\", "/").split("/") if p]
    if len(parts) < 2:
        return path
    base_dir, base_file = parts[-2], parts[-1]
    if "-" in base_dir:
        base_dir = base_dir.rsplit("-", 1)[0]
    return f"{base_dir}/{base_file}"


class ListWorkspacesUseCase:
    def __init__(self, *, access: AccessControlPort, reader: ResultReader, logger: LoggerPort) -> None:
        self._access = access
        self._reader = reader
        self._logger = logger

    def execute(self, *, org_id: str, project_id: str, analysis_id: str, user: str) -> WorkspacesOverview:
        self._access.check_access(org_id, project_id, analysis_id, user)

        info = self._reader.load(analysis_id, SBOM_PLUGIN).info
        workspaces_map = {
            name: clean_package_file_path(path)
            for name, path in info.workspace_package_file_paths.items()
        }
        self._logger.debug("workspaces_listed", analysis_id=analysis_id, workspaces=len(workspaces_map))
        return WorkspacesOverview(workspaces_map=workspaces_map, package_manager=info.package_manager)
