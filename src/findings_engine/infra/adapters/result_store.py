from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ...core.domain.mapping import parse_analysis_info
from ...core.domain.models import AnalysisRef, AnalysisResult
from ...core.ports import LoggerPort

ANALYSIS_FILE = "analysis.json"


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        parsed = datetime.fromtimestamp(0, tz=timezone.utc)
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


class JsonResultStore:
    """Tool outputs stored as JSON files.

    Layout::

        <results_dir>/<analysis_id>/analysis.json   {project_id, organization_id, created_on}
        <results_dir>/<analysis_id>/<plugin>.json   {workspaces, analysis_info}
    """

    def __init__(self, *, results_dir: Path, logger: LoggerPort) -> None:
        self._results_dir = results_dir
        self._logger = logger

    def _read(self, fp: Path) -> Optional[dict]:
        if not fp.exists():
            return None
        try:
            data = json.loads(fp.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self._logger.warning("stored_blob_unreadable", path=str(fp), error=str(e))
            return None
        if not isinstance(data, dict):
            self._logger.warning("stored_blob_unreadable", path=str(fp), error="not an object")
            return None
        return data

    def save_analysis(self, ref: AnalysisRef) -> None:
        fp = self._results_dir / ref.analysis_id / ANALYSIS_FILE
        fp.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "project_id": ref.project_id,
            "organization_id": ref.organization_id,
            "created_on": ref.created_on.isoformat(),
        }
        fp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def save_result(self, analysis_id: str, plugin: str, payload: dict[str, Any]) -> None:
        fp = self._results_dir / analysis_id / f"{plugin}.json"
        fp.parent.mkdir(parents=True, exist_ok=True)
        fp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def get_analysis(self, analysis_id: str) -> AnalysisRef | None:
        fp = self._results_dir / analysis_id / ANALYSIS_FILE
        data = self._read(fp)
        if data is None:
            return None
        try:
            created_on = _parse_timestamp(data.get("created_on"))
        except ValueError as e:
            self._logger.warning("stored_blob_unreadable", path=str(fp), error=str(e))
            return None
        return AnalysisRef(
            analysis_id=analysis_id,
            project_id=str(data.get("project_id", "")),
            organization_id=str(data.get("organization_id", "")),
            created_on=created_on,
        )

    def get_latest_result(self, analysis_id: str, plugin: str) -> AnalysisResult | None:
        fp = self._results_dir / analysis_id / f"{plugin}.json"
        data = self._read(fp)
        if data is None:
            return None
        ref = self.get_analysis(analysis_id)
        created_on = ref.created_on if ref is not None else _parse_timestamp(None)
        return AnalysisResult(
            analysis_id=analysis_id,
            plugin=plugin,
            created_on=created_on,
            info=parse_analysis_info(data.get("analysis_info")),
            workspaces=data.get("workspaces") or {},
        )

    def list_analyses(self, project_id: str) -> list[AnalysisRef]:
        refs: list[AnalysisRef] = []
        if not self._results_dir.exists():
            return refs
        for directory in self._results_dir.iterdir():
            if not directory.is_dir():
                continue
            ref = self.get_analysis(directory.name)
            if ref is not None and ref.project_id == project_id:
                refs.append(ref)
        refs.sort(key=lambda r: r.created_on, reverse=True)
        return refs
