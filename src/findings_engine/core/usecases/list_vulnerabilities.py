from __future__ import annotations

from ..domain.mapping import parse_findings, parse_patch_workspace
from ..domain.models import PATCHING_PLUGIN, VULN_PLUGIN, MergedVulnerability
from ..ports import AccessControlPort, LoggerPort
from ..services import KnowledgeLookup, ResultReader
from ..services.collections import vulnerability_patch_types
from ..services.merger import merge_findings
from ..services.query_engine import CollectionSpec, Page, QueryParams, run_query
from ..services.report_assembler import describe


class ListVulnerabilitiesUseCase:
    """Use case for the merged, faceted vulnerability list of a workspace.

    Patch types are attached before filtering (they feed the patch facets);
    descriptions are resolved only for the returned page.
    """

    def __init__(
        self,
        *,
        access: AccessControlPort,
        reader: ResultReader,
        knowledge: KnowledgeLookup,
        collection: CollectionSpec[MergedVulnerability],
        logger: LoggerPort,
    ) -> None:
        self._access = access
        self._reader = reader
        self._knowledge = knowledge
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
    ) -> Page[MergedVulnerability]:
        """Execute the use case.

        Raises:
            NotAuthorized: If the user may not read the analysis
            PluginResultNotAvailable: If the scan has not stored a result
            PluginFailed: If the scan failed
            UnknownWorkspace: If the workspace does not exist
        """
        self._access.check_access(org_id, project_id, analysis_id, user)

        result = self._reader.load(analysis_id, VULN_PLUGIN)
        findings = parse_findings(self._reader.workspace(result, workspace))
        merged = list(merge_findings(findings).values())

        patch_types = self._patch_types(analysis_id, workspace)
        for vuln in merged:
            vuln.patch_type = patch_types.get(vuln.vulnerability_id)

        page = run_query(self._collection, merged, params or QueryParams())

        for vuln in page.data:
            osv, nvd = self._knowledge.advisory_records(vuln.vulnerability_id)
            vuln.description = describe(osv, nvd)
            vuln.winning_source = "OSV" if osv is not None else ("NVD" if nvd is not None else "")

        self._logger.info(
            "vulnerabilities_listed",
            analysis_id=analysis_id,
            workspace=workspace,
            findings=len(findings),
            matching=page.matching_count,
        )
        return page

    def _patch_types(self, analysis_id: str, workspace: str) -> dict[str, str]:
        patching = self._reader.try_load(analysis_id, PATCHING_PLUGIN)
        if patching is None or workspace not in patching.workspaces:
            return {}
        return vulnerability_patch_types(parse_patch_workspace(patching.workspaces[workspace]))
