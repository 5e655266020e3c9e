from findings_engine.core.domain.mapping import parse_findings
from findings_engine.core.domain.models import DependencyRow, LicenseRow, PatchRow, SeverityDist
from findings_engine.core.services.collections import (
    dependency_collection,
    license_collection,
    patch_collection,
    vulnerability_collection,
    vulnerability_patch_types,
)
from findings_engine.core.services.merger import merge_findings
from findings_engine.core.services.query_engine import QueryParams, run_query
from tests.findings_engine.fakes import raw_finding

INJECTION = {"WeaknessId": "CWE-79", "OWASPTop10Id": "1347", "OWASPTop10Name": "A03: Injection"}
ACCESS = {"WeaknessId": "CWE-22", "OWASPTop10Id": "1345", "OWASPTop10Name": "A01: Broken Access Control"}


def _merged(*raw):
    return list(merge_findings(parse_findings({"Vulnerabilities": list(raw)})).values())


def _ids(page):
    return [v.vulnerability_id for v in page.data]


class TestVulnerabilityCollection:
    def test_owasp_filter_matches_any_weakness(self):
        records = _merged(
            raw_finding("CVE-1", weaknesses=[{"WeaknessId": "CWE-1"}, INJECTION]),
            raw_finding("CVE-2", weaknesses=[ACCESS]),
            raw_finding("CVE-3"),
        )
        spec = vulnerability_collection()

        page = run_query(spec, records, QueryParams(active_filters=("owasp_top_10_2021_a3",)))
        assert _ids(page) == ["CVE-1"]

        page = run_query(spec, records, QueryParams(active_filters=("owasp_uncategorized",)))
        assert _ids(page) == ["CVE-3"]

    def test_impact_filters(self):
        records = _merged(
            raw_finding("CVE-1", cia=("HIGH", "NONE", "NONE")),
            raw_finding("CVE-2", cia=("NONE", "LOW", "NONE")),
            raw_finding("CVE-3", score=None),
        )
        page = run_query(vulnerability_collection(), records, QueryParams())
        assert page.filter_count["confidentiality_impact"] == 1
        assert page.filter_count["integrity_impact"] == 1
        assert page.filter_count["availability_impact"] == 0
        assert page.filter_count["severity_none"] == 1

    def test_patch_filters_use_patch_type(self):
        records = _merged(raw_finding("CVE-1"), raw_finding("CVE-2"))
        records[0].patch_type = "FULL"
        records[1].patch_type = "PARTIAL"

        page = run_query(vulnerability_collection(), records, QueryParams(active_filters=("patchable",)))
        assert _ids(page) == ["CVE-1"]
        assert page.filter_count["partially_patchable"] == 0

    def test_search_matches_id_or_dependency(self):
        records = _merged(raw_finding("CVE-1", "lodash"), raw_finding("GHSA-abcd", "minimist"))
        spec = vulnerability_collection()
        assert _ids(run_query(spec, records, QueryParams(search_key="MINI"))) == ["GHSA-abcd"]
        assert _ids(run_query(spec, records, QueryParams(search_key="cve"))) == ["CVE-1"]

    def test_default_sort_is_severity_desc(self):
        records = _merged(
            raw_finding("CVE-1", score=3.1),
            raw_finding("CVE-2", score=9.8),
            raw_finding("CVE-3", score=None),
        )
        assert _ids(run_query(vulnerability_collection(), records, QueryParams())) == ["CVE-2", "CVE-1", "CVE-3"]

    def test_sort_by_dependency_version(self):
        records = _merged(
            raw_finding("CVE-1", "a", "1.10.0"),
            raw_finding("CVE-2", "b", "1.9.0"),
        )
        page = run_query(vulnerability_collection(), records, QueryParams(sort_by="dep_version", sort_direction="ASC"))
        assert _ids(page) == ["CVE-2", "CVE-1"]

    def test_per_page_limits_come_from_arguments(self):
        spec = vulnerability_collection(default_entries_per_page=5, max_entries_per_page=10)
        assert spec.default_entries_per_page == 5
        assert spec.max_entries_per_page == 10


class TestDependencyCollection:
    def test_filters(self):
        rows = [
            DependencyRow(name="a", version="1.0.0", newest_release="1.0.0", is_direct=True, licenses=("MIT",)),
            DependencyRow(
                name="b", version="1.0.0", newest_release="2.0.0", transitive=True, outdated=True,
                vulnerable=True, vulnerabilities=("CVE-1",), severity_dist=SeverityDist(high=1), combined_severity=7.5,
            ),
        ]
        page = run_query(dependency_collection(), rows, QueryParams())
        assert page.filter_count["user_installed"] == 1
        assert page.filter_count["not_user_installed"] == 1
        assert page.filter_count["unlicensed"] == 1
        assert page.filter_count["severity_high"] == 1
        assert page.filter_count["outdated"] == 1
        assert [r.name for r in page.data] == ["b", "a"]


class TestLicenseCollection:
    def test_type_sort_puts_violations_first(self):
        rows = [
            LicenseRow(id="MIT", license_category="permissive"),
            LicenseRow(id="GPL-3.0", license_category="copy_left", license_compliance_violation=True),
            LicenseRow(id="Custom", unable_to_infer=True),
        ]
        page = run_query(license_collection(), rows, QueryParams())
        assert [r.id for r in page.data] == ["GPL-3.0", "Custom", "MIT"]
        assert page.filter_count["copy_left"] == 1
        assert page.filter_count["unrecognized"] == 1


class TestPatches:
    def _row(self, key, patch_type, patchable=(), unpatchable=()):
        name, _, version = key.rpartition("@")
        return PatchRow(
            key=key,
            affected_dep_name=name,
            affected_dep_version=version,
            patch_type=patch_type,
            vulnerability_ids=tuple(patchable) + tuple(unpatchable),
            patchable_ids=tuple(patchable),
            unpatchable_ids=tuple(unpatchable),
        )

    def test_patch_sort_puts_full_first(self):
        rows = [self._row("a@1.0.0", "NONE"), self._row("b@1.0.0", "FULL"), self._row("c@1.0.0", "PARTIAL")]
        page = run_query(patch_collection(), rows, QueryParams())
        assert [r.patch_type for r in page.data] == ["FULL", "PARTIAL", "NONE"]

    def test_vulnerability_patch_types(self):
        rows = [
            self._row("a@1.0.0", "PARTIAL", patchable=["CVE-1", "CVE-2"], unpatchable=["CVE-3"]),
            self._row("b@1.0.0", "NONE", unpatchable=["CVE-2"]),
        ]
        assert vulnerability_patch_types(rows) == {"CVE-1": "FULL", "CVE-2": "PARTIAL", "CVE-3": "NONE"}
