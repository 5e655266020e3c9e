"""Shared fixtures for app-level tests: a data home seeded through the real adapters."""
import json

import pytest

from findings_engine.app.config import AccessConfig, AppConfig, DirectoryConfig
from findings_engine.core.domain.models import (
    LICENSE_PLUGIN,
    PATCHING_PLUGIN,
    SBOM_PLUGIN,
    VULN_PLUGIN,
    AnalysisRef,
)
from findings_engine.infra.adapters.result_store import JsonResultStore
from tests.findings_engine.fakes import FakeLogger, blob, raw_finding, sbom_workspace, ts, vuln_blob


def seed_home(home):
    """Write two analyses of project ``proj`` plus knowledge records under ``home``."""
    store = JsonResultStore(results_dir=home / "results", logger=FakeLogger())
    store.save_analysis(AnalysisRef("a0", "proj", "org", ts(2024, 2, 26)))
    store.save_analysis(AnalysisRef("a1", "proj", "org", ts(2024, 3, 4)))

    store.save_result("a0", VULN_PLUGIN, vuln_blob({"web": [raw_finding("CVE-2020-0001", "minimist", "1.2.0", 5.6)]}))
    store.save_result("a1", VULN_PLUGIN, vuln_blob({
        "web": [
            raw_finding("GHSA-jf85-cpcp-j695", "lodash", "4.17.15", 9.1),
            raw_finding("CVE-2020-0001", "minimist", "1.2.0", 5.6),
        ],
    }))
    store.save_result("a1", SBOM_PLUGIN, blob(
        {
            "web": sbom_workspace(
                {"lodash": {"4.17.15": {"Licenses": ["MIT"]}}, "minimist": {"1.2.0": {"Transitive": True}}},
                direct=["lodash"],
            ),
        },
        package_manager="NPM",
        work_space_package_file_paths={"web": "/tmp/checkout/shop-9c1e/package.json"},
    ))
    store.save_result("a1", LICENSE_PLUGIN, blob({"web": {"LicensesDepMap": {"MIT": ["lodash@4.17.15"]}}}))
    store.save_result("a1", PATCHING_PLUGIN, blob({
        "web": {"patches": {"lodash@4.17.15": {"IsPatchable": "FULL", "Patchable": [{"Vulnerability": "GHSA-jf85-cpcp-j695"}]}}},
    }))

    osv_dir = home / "knowledge" / "osv"
    osv_dir.mkdir(parents=True, exist_ok=True)
    (osv_dir / "GHSA-jf85-cpcp-j695.json").write_text(json.dumps({
        "id": "GHSA-jf85-cpcp-j695",
        "summary": "Prototype Pollution in lodash",
        "details": "Versions of lodash before 4.17.12 are vulnerable.",
        "aliases": ["CVE-2019-10744"],
        "severity": [{"type": "CVSS_V3", "score": "CVSS:3.1/AV:N/AC:L/PR:N/UI:N/S:U/C:N/I:H/A:H"}],
    }), encoding="utf-8")

    (home / "organizations.json").write_text(json.dumps({
        "organizations": {"org": {"members": ["alice"], "projects": ["proj"]}},
    }), encoding="utf-8")


@pytest.fixture
def seeded_home(tmp_path):
    seed_home(tmp_path)
    return tmp_path


@pytest.fixture
def test_config(seeded_home):
    """Create test configuration with explicit values."""
    return AppConfig(
        directories=DirectoryConfig(home=seeded_home),
        access=AccessConfig(default_user="alice"),
    )
