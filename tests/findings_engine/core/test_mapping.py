from findings_engine.core.domain.mapping import (
    parse_analysis_info,
    parse_finding,
    parse_license_workspace,
    parse_patch_workspace,
    parse_sbom_workspace,
    split_dependency_key,
)
from tests.findings_engine.fakes import raw_finding, sbom_workspace


def test_parse_finding():
    finding = parse_finding(raw_finding(
        "GHSA-aaaa-bbbb-cccc",
        "lodash",
        "4.17.15",
        9.1,
        weaknesses=[{"WeaknessId": "CWE-1321", "OWASPTop10Id": "1347", "WeaknessName": "Prototype Pollution"}],
    ))

    assert finding.vulnerability_id == "GHSA-aaaa-bbbb-cccc"
    assert finding.severity.score == 9.1
    assert finding.severity.confidentiality_impact == "HIGH"
    assert finding.weaknesses[0].cwe_number == 1321
    assert finding.weaknesses[0].owasp_top10_id == "1347"
    assert str(finding.osv_match.primary.ranges[0].fixed) == "4.17.21"
    assert finding.nvd_match is None


def test_parse_finding_tolerates_missing_keys():
    finding = parse_finding({"VulnerabilityId": "CVE-2024-0001"})
    assert finding.id == "CVE-2024-0001"
    assert finding.severity is None
    assert finding.weaknesses == ()


def test_parse_finding_skips_ranges_with_non_numeric_parts():
    raw = raw_finding("CVE-2024-0002", "left-pad", "1.0.0")
    raw["OSVMatch"]["AffectedInfo"][0]["Ranges"] = [
        {"IntroducedSemver": {"Major": "x", "Minor": 0, "Patch": 0}},
        {
            "IntroducedSemver": {"Major": 1, "Minor": 0, "Patch": 0},
            "FixedSemver": {"Major": 1, "Minor": "two", "Patch": 0},
        },
        {
            "IntroducedSemver": {"Major": "2", "Minor": 0, "Patch": 0},
            "FixedSemver": {"Major": 2, "Minor": 1, "Patch": 0},
        },
    ]

    ranges = parse_finding(raw).osv_match.primary.ranges

    assert [(str(r.introduced), str(r.fixed)) for r in ranges] == [("2.0.0", "2.1.0")]


def test_parse_analysis_info():
    info = parse_analysis_info({
        "status": "failure",
        "public_errors": [{"type": "Timeout", "description": "took too long"}],
        "private_errors": ["stack trace"],
        "package_manager": "NPM",
        "work_space_package_file_paths": {"web": "/tmp/repo-1/package.json"},
    })
    assert info.status == "failure"
    assert info.public_errors[0].type == "Timeout"
    assert info.private_errors[0].description == "stack trace"
    assert info.workspace_package_file_paths == {"web": "/tmp/repo-1/package.json"}


def test_parse_analysis_info_defaults_to_success():
    assert parse_analysis_info(None).status == "success"


def test_parse_sbom_workspace():
    sbom = parse_sbom_workspace(sbom_workspace(
        {"@babel/core": {"7.0.0": {"Dev": True, "Licenses": ["MIT"]}, "7.1.0": {}}},
        dev_direct=["@babel/core"],
    ))
    assert [(d.name, d.version, d.key) for d in sbom.dependencies] == [
        ("@babel/core", "7.0.0", "@babel/core@7.0.0"),
        ("@babel/core", "7.1.0", "@babel/core@7.1.0"),
    ]
    assert sbom.dependencies[0].dev
    assert sbom.is_direct("@babel/core")


def test_split_dependency_key_keeps_scope():
    assert split_dependency_key("@babel/core@7.0.0") == ("@babel/core", "7.0.0")
    assert split_dependency_key("lodash@4.17.15") == ("lodash", "4.17.15")
    assert split_dependency_key("lodash") == ("lodash", "")


def test_parse_patch_workspace():
    rows = parse_patch_workspace({
        "patches": {
            "lodash@4.17.15": {
                "IsPatchable": "FULL",
                "Patchable": [{"Vulnerability": {"VulnerabilityId": "CVE-1"}}],
                "Unpatchable": [],
                "Update": {"Major": 4, "Minor": 17, "Patch": 21},
                "TopLevelVulnerable": True,
            },
        },
        "dev_patches": {
            "minimist@1.2.0": {"IsPatchable": "NONE", "Unpatchable": [{"Vulnerability": "CVE-2"}]},
        },
    })

    assert [r.key for r in rows] == ["lodash@4.17.15", "minimist@1.2.0"]
    assert rows[0].update == "4.17.21"
    assert rows[0].patchable_ids == ("CVE-1",)
    assert rows[0].top_level_vulnerable
    assert rows[1].dev
    assert rows[1].vulnerability_ids == ("CVE-2",)
    assert rows[1].update == ""


def test_parse_license_workspace():
    spdx, non_spdx, violations = parse_license_workspace({
        "LicensesDepMap": {"MIT": ["lodash@4.17.15"]},
        "NonSpdxLicensesDepMap": {"SEE LICENSE IN LICENSE.md": ["private@1.0.0"]},
        "LicenseComplianceViolations": ["GPL-3.0"],
    })
    assert spdx == {"MIT": ("lodash@4.17.15",)}
    assert non_spdx == {"SEE LICENSE IN LICENSE.md": ("private@1.0.0",)}
    assert violations == frozenset({"GPL-3.0"})
