from __future__ import annotations

import json
from pathlib import Path
from typing import Any, NoReturn

from ...core.domain.exceptions import NotAuthorized
from ...core.ports import LoggerPort, ResultStorePort


class FileAccessControl:
    """Membership-based access checks backed by a JSON file.

    File shape::

        {"organizations": {"<org_id>": {"members": ["<user>"], "projects": ["<project_id>"]}}}

    A user may read a project when they are a member of the organization
    owning it, and an analysis when it belongs to that project. With
    ``enforce=False`` every check passes.
    """

    def __init__(
        self,
        *,
        access_file: Path,
        store: ResultStorePort,
        logger: LoggerPort,
        enforce: bool = True,
    ) -> None:
        self._access_file = access_file
        self._store = store
        self._logger = logger
        self._enforce = enforce
        self._organizations: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._organizations is None:
            data: Any = {}
            if self._access_file.exists():
                try:
                    data = json.loads(self._access_file.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    self._logger.error("access_file_unreadable", path=str(self._access_file), error=str(e))
                    data = {}
            organizations = data.get("organizations") if isinstance(data, dict) else None
            self._organizations = organizations if isinstance(organizations, dict) else {}
        return self._organizations

    def _deny(self, reason: str, **fields) -> NoReturn:
        self._logger.warning("access_denied", reason=reason, **fields)
        raise NotAuthorized()

    def check_project_access(self, org_id: str, project_id: str, user: str) -> None:
        if not self._enforce:
            return
        org = self._load().get(org_id)
        if not isinstance(org, dict):
            self._deny("unknown_organization", org_id=org_id, user=user)
        if user not in (org.get("members") or []):
            self._deny("not_a_member", org_id=org_id, user=user)
        if project_id not in (org.get("projects") or []):
            self._deny("project_not_in_organization", org_id=org_id, project_id=project_id, user=user)

    def check_access(self, org_id: str, project_id: str, analysis_id: str, user: str) -> None:
        if not self._enforce:
            return
        self.check_project_access(org_id, project_id, user)
        ref = self._store.get_analysis(analysis_id)
        if ref is None or ref.project_id != project_id or ref.organization_id != org_id:
            self._deny("analysis_not_in_project", project_id=project_id, analysis_id=analysis_id, user=user)
