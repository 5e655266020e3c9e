"""Mapping of stored tool outputs (plain JSON objects) into domain records.

The producing tools emit PascalCase keys for vulnerability and patch data and
snake_case keys for analysis metadata. All lookups tolerate missing keys so a
partially written blob still yields usable records.
"""

from __future__ import annotations

from typing import Any, Mapping

from .models import (
    AffectedInfo,
    AffectedRange,
    AnalysisInfo,
    Finding,
    PatchRow,
    SbomDependency,
    SbomWorkspace,
    SemVer,
    Severity,
    SourceMatch,
    StatusError,
    Weakness,
)


def _float_or_none(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_semver(raw: Mapping[str, Any] | None) -> SemVer | None:
    """Returns None when absent or when a numeric part is not a number."""
    if not raw:
        return None
    try:
        return SemVer(
            major=int(raw.get("Major", 0) or 0),
            minor=int(raw.get("Minor", 0) or 0),
            patch=int(raw.get("Patch", 0) or 0),
            prerelease=str(raw.get("PreReleaseTag", "") or ""),
        )
    except (TypeError, ValueError):
        return None


def parse_source_match(raw: Mapping[str, Any] | None) -> SourceMatch | None:
    if not raw:
        return None
    infos: list[AffectedInfo] = []
    for info in raw.get("AffectedInfo") or []:
        ranges: list[AffectedRange] = []
        for r in info.get("Ranges") or []:
            introduced = parse_semver(r.get("IntroducedSemver"))
            fixed = parse_semver(r.get("FixedSemver"))
            # unreadable fix: skip rather than leave the range unbounded
            if introduced is None or (fixed is None and r.get("FixedSemver")):
                continue
            ranges.append(AffectedRange(introduced=introduced, fixed=fixed))
        exact = tuple(
            str(e.get("VersionString", "")) if isinstance(e, Mapping) else str(e)
            for e in info.get("Exact") or []
        )
        infos.append(AffectedInfo(ranges=tuple(ranges), exact=exact, universal=bool(info.get("Universal", False))))
    return SourceMatch(affected_info=tuple(infos))


def parse_severity(raw: Mapping[str, Any] | None) -> Severity | None:
    if not raw:
        return None
    return Severity(
        score=_float_or_none(raw.get("Severity")),
        severity_type=str(raw.get("SeverityType", "") or ""),
        vector=str(raw.get("Vector", "") or ""),
        impact=_float_or_none(raw.get("Impact")),
        exploitability=_float_or_none(raw.get("Exploitability")),
        confidentiality_impact=str(raw.get("ConfidentialityImpact", "") or ""),
        integrity_impact=str(raw.get("IntegrityImpact", "") or ""),
        availability_impact=str(raw.get("AvailabilityImpact", "") or ""),
    )


def parse_weakness(raw: Mapping[str, Any]) -> Weakness:
    return Weakness(
        weakness_id=str(raw.get("WeaknessId", "") or ""),
        owasp_top10_id=str(raw.get("OWASPTop10Id", "") or ""),
        owasp_top10_name=str(raw.get("OWASPTop10Name", "") or ""),
        name=str(raw.get("WeaknessName", "") or ""),
        description=str(raw.get("WeaknessDescription", "") or ""),
        extended_description=str(raw.get("WeaknessExtendedDescription", "") or ""),
    )


def parse_finding(raw: Mapping[str, Any]) -> Finding:
    vulnerability_id = str(raw.get("VulnerabilityId", "") or "")
    return Finding(
        id=str(raw.get("Id") or vulnerability_id),
        vulnerability_id=vulnerability_id,
        affected_dependency=str(raw.get("AffectedDependency", "") or ""),
        affected_version=str(raw.get("AffectedVersion", "") or ""),
        sources=tuple(str(s) for s in raw.get("Sources") or []),
        severity=parse_severity(raw.get("Severity")),
        weaknesses=tuple(parse_weakness(w) for w in raw.get("Weaknesses") or []),
        osv_match=parse_source_match(raw.get("OSVMatch")),
        nvd_match=parse_source_match(raw.get("NVDMatch")),
    )


def parse_findings(workspace: Mapping[str, Any] | None) -> list[Finding]:
    """Findings of one vulnerability-scan workspace, in stored order."""
    if not workspace:
        return []
    return [parse_finding(raw) for raw in workspace.get("Vulnerabilities") or []]


def _parse_errors(raw: Any) -> tuple[StatusError, ...]:
    errors: list[StatusError] = []
    for item in raw or []:
        if isinstance(item, Mapping):
            errors.append(StatusError(type=str(item.get("type", "")), description=str(item.get("description", ""))))
        else:
            errors.append(StatusError(type="", description=str(item)))
    return tuple(errors)


def parse_analysis_info(raw: Mapping[str, Any] | None) -> AnalysisInfo:
    raw = raw or {}
    return AnalysisInfo(
        status=str(raw.get("status", "success") or "success"),
        public_errors=_parse_errors(raw.get("public_errors")),
        private_errors=_parse_errors(raw.get("private_errors")),
        analysis_start_time=str(raw.get("analysis_start_time", "") or ""),
        analysis_end_time=str(raw.get("analysis_end_time", "") or ""),
        package_manager=str(raw.get("package_manager", "") or ""),
        workspace_package_file_paths=dict(raw.get("work_space_package_file_paths") or {}),
    )


def parse_sbom_workspace(raw: Mapping[str, Any] | None) -> SbomWorkspace:
    raw = raw or {}
    dependencies: list[SbomDependency] = []
    for name, versions in (raw.get("dependencies") or {}).items():
        for version, dep in (versions or {}).items():
            dependencies.append(SbomDependency(
                name=name,
                version=version,
                key=str(dep.get("Key") or f"{name}@{version}"),
                requires=dict(dep.get("Requires") or {}),
                dependencies=dict(dep.get("Dependencies") or {}),
                optional=bool(dep.get("Optional", False)),
                bundled=bool(dep.get("Bundled", False)),
                dev=bool(dep.get("Dev", False)),
                transitive=bool(dep.get("Transitive", False)),
                licenses=tuple(dep.get("Licenses") or ()),
            ))
    start = raw.get("start") or {}
    return SbomWorkspace(
        dependencies=tuple(dependencies),
        direct=tuple(d.get("name", "") for d in start.get("dependencies") or []),
        dev_direct=tuple(d.get("name", "") for d in start.get("dev_dependencies") or []),
    )


def split_dependency_key(key: str) -> tuple[str, str]:
    """Split ``name@version`` at its last ``@`` (scoped names keep their leading ``@``)."""
    index = key.rfind("@")
    if index <= 0:
        return key, ""
    return key[:index], key[index + 1:]


def _to_patch_vulnerability_id(item: Mapping[str, Any]) -> str:
    vulnerability = item.get("Vulnerability")
    if isinstance(vulnerability, Mapping):
        return str(vulnerability.get("VulnerabilityId", "") or "")
    return str(vulnerability or "")


def parse_patch_workspace(raw: Mapping[str, Any] | None) -> list[PatchRow]:
    """Flatten ``patches`` and ``dev_patches`` into one row per dependency key."""
    raw = raw or {}
    rows: list[PatchRow] = []
    for section, dev in (("patches", False), ("dev_patches", True)):
        for key, info in (raw.get(section) or {}).items():
            name, version = split_dependency_key(key)
            patchable = tuple(_to_patch_vulnerability_id(p) for p in info.get("Patchable") or [])
            unpatchable = tuple(_to_patch_vulnerability_id(p) for p in info.get("Unpatchable") or [])
            update = parse_semver(info.get("Update"))
            rows.append(PatchRow(
                key=key,
                affected_dep_name=name,
                affected_dep_version=version,
                patch_type=str(info.get("IsPatchable", "NONE") or "NONE"),
                vulnerability_ids=tuple(dict.fromkeys(patchable + unpatchable)),
                patchable_ids=patchable,
                unpatchable_ids=unpatchable,
                top_level_vulnerable=bool(info.get("TopLevelVulnerable", False)),
                update=str(update) if update is not None else "",
                dev=dev,
            ))
    return rows


def parse_license_workspace(
    raw: Mapping[str, Any] | None,
) -> tuple[dict[str, tuple[str, ...]], dict[str, tuple[str, ...]], frozenset[str]]:
    """Return the SPDX license map, the unrecognized license map and the violating ids."""
    raw = raw or {}
    spdx = {str(k): tuple(v or ()) for k, v in (raw.get("LicensesDepMap") or {}).items()}
    non_spdx = {str(k): tuple(v or ()) for k, v in (raw.get("NonSpdxLicensesDepMap") or {}).items()}
    violations = frozenset(str(v) for v in raw.get("LicenseComplianceViolations") or [])
    return spdx, non_spdx, violations
