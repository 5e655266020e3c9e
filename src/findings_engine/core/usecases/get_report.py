from __future__ import annotations

from ..domain.exceptions import EntityNotFound, ReportGenerationFailed
from ..domain.mapping import parse_findings, parse_patch_workspace
from ..domain.models import PATCHING_PLUGIN, SBOM_PLUGIN, VULN_PLUGIN, Finding, PatchRow
from ..domain.report import VulnerabilityDetails
from ..ports import AccessControlPort, LoggerPort, PackageMetadataPort
from ..services import KnowledgeLookup, ReportAssembler, ResultReader


class GetReportUseCase:
    """Use case for the detailed report of one vulnerability in a workspace.

    Package metadata, the package manager and the patch suggestion are
    best-effort enrichments; only missing advisory data fails the report.
    """

    def __init__(
        self,
        *,
        access: AccessControlPort,
        reader: ResultReader,
        knowledge: KnowledgeLookup,
        packages: PackageMetadataPort,
        assembler: ReportAssembler,
        logger: LoggerPort,
    ) -> None:
        self._access = access
        self._reader = reader
        self._knowledge = knowledge
        self._packages = packages
        self._assembler = assembler
        self._logger = logger

    def execute(
        self,
        *,
        org_id: str,
        project_id: str,
        analysis_id: str,
        workspace: str,
        vulnerability_id: str,
        user: str,
    ) -> VulnerabilityDetails:
        """Execute the use case.

        Raises:
            NotAuthorized: If the user may not read the analysis
            UnknownWorkspace: If the workspace does not exist
            EntityNotFound: If no finding carries ``vulnerability_id``
            ReportGenerationFailed: If neither OSV nor NVD knows the vulnerability
        """
        self._access.check_access(org_id, project_id, analysis_id, user)

        result = self._reader.load(analysis_id, VULN_PLUGIN)
        findings = parse_findings(self._reader.workspace(result, workspace))
        finding = next((f for f in findings if f.vulnerability_id == vulnerability_id), None)
        if finding is None:
            raise EntityNotFound(f"Vulnerability not found: {vulnerability_id}")

        osv, nvd = self._knowledge.advisory_records(vulnerability_id)
        if osv is None and nvd is None:
            self._logger.warning("report_sources_missing", vulnerability_id=vulnerability_id)
            raise ReportGenerationFailed()

        package = self._packages.get_package(finding.affected_dependency)

        package_manager = ""
        sbom = self._reader.try_load(analysis_id, SBOM_PLUGIN)
        if sbom is not None:
            package_manager = sbom.info.package_manager

        report = self._assembler.assemble(
            finding,
            osv,
            nvd,
            package=package,
            package_manager=package_manager,
            patch=self._patch(analysis_id, workspace, finding),
        )
        self._logger.info(
            "report_generated",
            analysis_id=analysis_id,
            vulnerability_id=vulnerability_id,
            primary_source="OSV" if osv is not None else "NVD",
        )
        return report

    def _patch(self, analysis_id: str, workspace: str, finding: Finding) -> PatchRow | None:
        patching = self._reader.try_load(analysis_id, PATCHING_PLUGIN)
        if patching is None or workspace not in patching.workspaces:
            return None
        rows = parse_patch_workspace(patching.workspaces[workspace])
        dependency_key = f"{finding.affected_dependency}@{finding.affected_version}"
        for row in rows:
            if row.key == dependency_key:
                return row
        for row in rows:
            if finding.vulnerability_id in row.vulnerability_ids:
                return row
        return None
