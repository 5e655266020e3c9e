import pytest

from findings_engine.core.domain.exceptions import (
    EntityNotFound,
    NotAuthorized,
    PluginFailed,
    PluginResultNotAvailable,
    ReportGenerationFailed,
    UnknownWorkspace,
)
from findings_engine.core.domain.knowledge import NvdDescription, NvdRecord, OsvRecord, PackageRecord
from findings_engine.core.domain.models import PATCHING_PLUGIN, SBOM_PLUGIN, VULN_PLUGIN
from findings_engine.core.services import CVSSScorer, KnowledgeLookup, ReportAssembler, ResultReader
from findings_engine.core.services.collections import vulnerability_collection
from findings_engine.core.services.query_engine import QueryParams
from findings_engine.core.usecases.get_report import GetReportUseCase
from findings_engine.core.usecases.list_vulnerabilities import ListVulnerabilitiesUseCase
from tests.findings_engine.fakes import (
    FakeAccess,
    FakeKnowledge,
    FakeLogger,
    FakeStore,
    blob,
    raw_finding,
    ts,
    vuln_blob,
)

GHSA = OsvRecord(
    osv_id="GHSA-jf85-cpcp-j695",
    cve="CVE-2019-10744",
    summary="Prototype Pollution in lodash",
    details="Versions of lodash before 4.17.12 are vulnerable.",
    aliases=("CVE-2019-10744",),
)
NVD_ONLY = NvdRecord(nvd_id="CVE-2020-0001", descriptions=(NvdDescription(lang="en", value="NVD only"),))


@pytest.fixture
def store():
    store = FakeStore()
    store.add_analysis("a1", ts(2024, 3, 1))
    store.add_result("a1", VULN_PLUGIN, vuln_blob({
        "web": [
            raw_finding("GHSA-jf85-cpcp-j695", "lodash", "4.17.15", 9.1),
            raw_finding("GHSA-jf85-cpcp-j695", "lodash", "4.17.10", 9.1),
            raw_finding("CVE-2020-0001", "minimist", "1.2.0", 5.6),
            raw_finding("CVE-2020-0002", "minimist", "1.2.0", 2.0),
        ],
    }))
    store.add_result("a1", PATCHING_PLUGIN, blob({
        "web": {
            "patches": {
                "lodash@4.17.15": {"IsPatchable": "FULL", "Patchable": [{"Vulnerability": "GHSA-jf85-cpcp-j695"}]},
                "minimist@1.2.0": {
                    "IsPatchable": "PARTIAL",
                    "Patchable": [{"Vulnerability": "CVE-2020-0001"}],
                    "Unpatchable": [{"Vulnerability": "CVE-2020-0002"}],
                },
            },
        },
    }))
    store.add_result("a1", SBOM_PLUGIN, blob({"web": {}}, package_manager="NPM"))
    return store


@pytest.fixture
def knowledge():
    return FakeKnowledge(
        osv=[GHSA],
        nvd=[NVD_ONLY],
        packages=[PackageRecord(name="lodash", description="Lodash modular utilities.")],
    )


def _list_uc(store, knowledge, access=None, logger=None):
    logger = logger or FakeLogger()
    return ListVulnerabilitiesUseCase(
        access=access or FakeAccess(),
        reader=ResultReader(store=store, logger=logger),
        knowledge=KnowledgeLookup(knowledge=knowledge),
        collection=vulnerability_collection(),
        logger=logger,
    )


def _report_uc(store, knowledge, access=None, logger=None):
    logger = logger or FakeLogger()
    lookup = KnowledgeLookup(knowledge=knowledge)
    return GetReportUseCase(
        access=access or FakeAccess(),
        reader=ResultReader(store=store, logger=logger),
        knowledge=lookup,
        packages=knowledge,
        assembler=ReportAssembler(knowledge=lookup, scorer=CVSSScorer(logger=logger), logger=logger),
        logger=logger,
    )


def _list(uc, params=None, workspace="web", user="alice"):
    return uc.execute(
        org_id="org", project_id="proj", analysis_id="a1", workspace=workspace, user=user, params=params,
    )


class TestListVulnerabilities:
    def test_merges_and_enriches(self, store, knowledge):
        page = _list(_list_uc(store, knowledge))

        assert page.total_entries == 3
        assert [v.vulnerability_id for v in page.data] == ["GHSA-jf85-cpcp-j695", "CVE-2020-0001", "CVE-2020-0002"]
        lodash = page.data[0]
        assert len(lodash.affected) == 2
        assert lodash.winning_source == "OSV"
        assert lodash.description.startswith("#### Prototype Pollution in lodash.")
        assert page.data[1].winning_source == "NVD"
        assert page.data[1].description == "NVD only"
        assert page.data[2].winning_source == ""

    def test_patch_types_feed_filters(self, store, knowledge):
        page = _list(_list_uc(store, knowledge), QueryParams(active_filters=("patchable",)))

        assert [v.vulnerability_id for v in page.data] == ["GHSA-jf85-cpcp-j695", "CVE-2020-0001"]
        assert page.filter_count["not_patchable"] == 0
        assert page.filter_count["severity_critical"] == 1

        unfiltered = _list(_list_uc(store, knowledge))
        assert unfiltered.filter_count["patchable"] == 2
        assert unfiltered.filter_count["not_patchable"] == 1

    def test_without_patching_result(self, store, knowledge):
        del store.results[("a1", PATCHING_PLUGIN)]
        page = _list(_list_uc(store, knowledge))
        assert all(v.patch_type is None for v in page.data)

    def test_unknown_workspace(self, store, knowledge):
        with pytest.raises(UnknownWorkspace):
            _list(_list_uc(store, knowledge), workspace="api")

    def test_missing_result(self, knowledge):
        store = FakeStore()
        store.add_analysis("a1", ts(2024, 3, 1))
        with pytest.raises(PluginResultNotAvailable):
            _list(_list_uc(store, knowledge))

    def test_failed_result(self, store, knowledge):
        store.add_result("a1", VULN_PLUGIN, vuln_blob({"web": []}, status="failure"))
        with pytest.raises(PluginFailed):
            _list(_list_uc(store, knowledge))

    def test_access_is_checked_first(self, store, knowledge):
        access = FakeAccess(allow=False)
        with pytest.raises(NotAuthorized):
            _list(_list_uc(store, knowledge, access=access), workspace="does-not-matter")
        assert access.calls == [("analysis", "org", "proj", "a1", "alice")]


class TestGetReport:
    def _execute(self, uc, vulnerability_id, workspace="web"):
        return uc.execute(
            org_id="org",
            project_id="proj",
            analysis_id="a1",
            workspace=workspace,
            vulnerability_id=vulnerability_id,
            user="alice",
        )

    def test_report(self, store, knowledge):
        report = self._execute(_report_uc(store, knowledge), "GHSA-jf85-cpcp-j695")

        assert report.vulnerability_info.vulnerability_id == "CVE-2019-10744"
        assert report.dependency_info.version == "4.17.15"
        assert report.dependency_info.description == "Lodash modular utilities."
        assert report.other == {"package_manager": "NPM"}
        assert report.patch.key == "lodash@4.17.15"

    def test_nvd_only_report(self, store, knowledge):
        report = self._execute(_report_uc(store, knowledge), "CVE-2020-0001")
        assert report.patch.key == "minimist@1.2.0"
        assert report.vulnerability_info.description == "NVD only"

    def test_patch_found_by_vulnerability_id(self, store, knowledge):
        store.add_result("a1", PATCHING_PLUGIN, blob({
            "web": {"patches": {"minimist@1.2.6": {"IsPatchable": "FULL", "Patchable": [{"Vulnerability": "CVE-2020-0001"}]}}},
        }))
        report = self._execute(_report_uc(store, knowledge), "CVE-2020-0001")
        assert report.patch.key == "minimist@1.2.6"

    def test_report_without_enrichment(self, store, knowledge):
        del store.results[("a1", PATCHING_PLUGIN)]
        del store.results[("a1", SBOM_PLUGIN)]
        report = self._execute(_report_uc(store, knowledge), "GHSA-jf85-cpcp-j695")
        assert report.patch is None
        assert report.other == {"package_manager": ""}

    def test_unknown_vulnerability(self, store, knowledge):
        with pytest.raises(EntityNotFound):
            self._execute(_report_uc(store, knowledge), "CVE-1999-0001")

    def test_no_advisory_data(self, store, knowledge):
        logger = FakeLogger()
        with pytest.raises(ReportGenerationFailed):
            self._execute(_report_uc(store, knowledge, logger=logger), "CVE-2020-0002")
        assert "report_sources_missing" in logger.messages("warning")

    def test_unknown_workspace(self, store, knowledge):
        with pytest.raises(UnknownWorkspace):
            self._execute(_report_uc(store, knowledge), "GHSA-jf85-cpcp-j695", workspace="api")
