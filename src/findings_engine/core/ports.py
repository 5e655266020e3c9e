from __future__ import annotations

from typing import Protocol

from .domain.knowledge import LicenseRecord, NvdRecord, OsvRecord, PackageRecord, WeaknessRecord
from .domain.models import AnalysisRef, AnalysisResult


class ResultStorePort(Protocol):
    """Port for reading stored tool outputs and analysis metadata."""

    def get_latest_result(self, analysis_id: str, plugin: str) -> AnalysisResult | None:
        """Return the most recent result of ``plugin`` for an analysis.

        Returns:
            The stored result, or None if the tool has not stored one yet
        """
        ...

    def get_analysis(self, analysis_id: str) -> AnalysisRef | None:
        ...

    def list_analyses(self, project_id: str) -> list[AnalysisRef]:
        """List the analyses of a project, newest first."""
        ...


class PackageMetadataPort(Protocol):
    """Port for package registry metadata."""

    def get_package(self, name: str) -> PackageRecord | None:
        ...


class KnowledgePort(Protocol):
    """Port for the static knowledge bases.

    Every lookup returns None for an unknown id; callers decide whether the
    absence is an error.
    """

    def get_osv(self, osv_id: str) -> OsvRecord | None:
        ...

    def find_osv_by_cve(self, cve: str) -> OsvRecord | None:
        """Return the advisory aliasing ``cve``, if any."""
        ...

    def get_nvd(self, cve: str) -> NvdRecord | None:
        ...

    def get_weakness(self, cwe_id: str) -> WeaknessRecord | None:
        """Look up a CWE record by its numeric id (``"79"``)."""
        ...

    def get_license(self, license_id: str) -> LicenseRecord | None:
        ...


class AccessControlPort(Protocol):
    """Port for authorization checks.

    Both checks raise ``NotAuthorized`` without telling which part failed.
    """

    def check_access(self, org_id: str, project_id: str, analysis_id: str, user: str) -> None:
        ...

    def check_project_access(self, org_id: str, project_id: str, user: str) -> None:
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Extra keyword arguments are attached to the record as structured fields.
    """

    def debug(self, message: str, **kwargs) -> None:
        ...

    def info(self, message: str, **kwargs) -> None:
        ...

    def warning(self, message: str, **kwargs) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        ...

    def exception(self, message: str, **kwargs) -> None:
        ...
