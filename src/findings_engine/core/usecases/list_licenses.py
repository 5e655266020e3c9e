from __future__ import annotations

from ..domain.mapping import parse_license_workspace
from ..domain.models import LICENSE_PLUGIN, LicenseRow
from ..ports import AccessControlPort, LoggerPort
from ..services import KnowledgeLookup, ResultReader
from ..services.query_engine import CollectionSpec, Page, QueryParams, run_query


class ListLicensesUseCase:
    """Use case for the license list of a workspace.

    Recognized (SPDX) licenses are enriched from the license knowledge base;
    unrecognized ones are flagged ``unable_to_infer``.
    """

    def __init__(
        self,
        *,
        access: AccessControlPort,
        reader: ResultReader,
        knowledge: KnowledgeLookup,
        collection: CollectionSpec[LicenseRow],
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
    ) -> Page[LicenseRow]:
        self._access.check_access(org_id, project_id, analysis_id, user)

        result = self._reader.load(analysis_id, LICENSE_PLUGIN)
        spdx, non_spdx, violations = parse_license_workspace(self._reader.workspace(result, workspace))

        rows: list[LicenseRow] = []
        for license_id, deps in spdx.items():
            record = self._knowledge.get_license(license_id)
            if record is None:
                self._logger.debug("license_record_missing", license_id=license_id)
                rows.append(LicenseRow(
                    id=license_id,
                    license_compliance_violation=license_id in violations,
                    deps_using_license=deps,
                ))
                continue
            rows.append(LicenseRow(
                id=license_id,
                name=record.name,
                description=record.description,
                license_compliance_violation=license_id in violations,
                deps_using_license=deps,
                license_category=record.classification,
                license_properties=record.properties,
                references=record.see_also,
            ))
        for license_id, deps in non_spdx.items():
            rows.append(LicenseRow(
                id=license_id,
                name=license_id,
                unable_to_infer=True,
                license_compliance_violation=license_id in violations,
                deps_using_license=deps,
            ))

        page = run_query(self._collection, rows, params or QueryParams())
        self._logger.info("licenses_listed", analysis_id=analysis_id, workspace=workspace, licenses=len(rows))
        return page
