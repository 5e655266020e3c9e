"""Collection definitions (search fields, filters, sort keys) of the list views."""

from __future__ import annotations

from ..domain.models import DependencyRow, LicenseRow, MergedVulnerability, PatchRow
from ..domain.owasp import OWASP_FILTER_SUFFIX
from ..domain.severity import SEVERITY_BUCKETS, bucket
from ..versions import version_key
from .query_engine import CollectionSpec

PATCH_TYPE_WEIGHT = {"FULL": 1.0, "PARTIAL": 0.5, "NONE": 0.0}


# ---------------------------------------------------------------------------
# Vulnerabilities


def _owasp_filter(category_id: str):
    def predicate(vuln: MergedVulnerability) -> bool:
        return any(w.owasp_top10_id == category_id for w in vuln.weaknesses)
    return predicate


def _is_uncategorized(vuln: MergedVulnerability) -> bool:
    return not any(w.owasp_top10_id for w in vuln.weaknesses)


def _severity_filter(name: str):
    def predicate(vuln: MergedVulnerability) -> bool:
        return bucket(vuln.severity_score) == name
    return predicate


def _impact_filter(attribute: str):
    def predicate(vuln: MergedVulnerability) -> bool:
        if vuln.severity is None:
            return False
        return getattr(vuln.severity, attribute) not in ("NONE", "")
    return predicate


def _patch_filter(patch_type: str):
    def predicate(vuln: MergedVulnerability) -> bool:
        return vuln.patch_type == patch_type
    return predicate


def _first_affected(vuln: MergedVulnerability, attribute: str) -> str:
    return getattr(vuln.affected[0], attribute) if vuln.affected else ""


def _owasp_sort_key(vuln: MergedVulnerability) -> tuple[int, int]:
    for weakness in vuln.weaknesses:
        if weakness.owasp_top10_id.isdigit():
            return (1, -int(weakness.owasp_top10_id))
    return (0, 0)


def _weakness_sort_key(vuln: MergedVulnerability) -> tuple[int, int]:
    for weakness in vuln.weaknesses:
        number = weakness.cwe_number
        if number is not None:
            return (0, number)
    return (1, 0)


def _vulnerability_filters() -> dict:
    filters = {}
    for category_id, suffix in OWASP_FILTER_SUFFIX.items():
        filters[f"owasp_top_10_2021_{suffix}"] = _owasp_filter(category_id)
    filters["owasp_uncategorized"] = _is_uncategorized
    filters["patchable"] = _patch_filter("FULL")
    filters["partially_patchable"] = _patch_filter("PARTIAL")
    filters["not_patchable"] = _patch_filter("NONE")
    for name in SEVERITY_BUCKETS:
        filters[f"severity_{name}"] = _severity_filter(name)
    filters["availability_impact"] = _impact_filter("availability_impact")
    filters["confidentiality_impact"] = _impact_filter("confidentiality_impact")
    filters["integrity_impact"] = _impact_filter("integrity_impact")
    return filters


def vulnerability_collection(
    default_entries_per_page: int = 20,
    max_entries_per_page: int = 100,
) -> CollectionSpec[MergedVulnerability]:
    return CollectionSpec(
        name="vulnerabilities",
        search_fields=lambda v: [v.vulnerability_id, *(a.affected_dependency for a in v.affected)],
        filters=_vulnerability_filters(),
        sort_keys={
            "cve": lambda v: v.vulnerability_id,
            "dep_name": lambda v: _first_affected(v, "affected_dependency"),
            "dep_version": lambda v: version_key(_first_affected(v, "affected_version")),
            "file_path": lambda v: 0,
            "severity": lambda v: v.severity_score or 0.0,
            "weakness": _weakness_sort_key,
            "exploitability": lambda v: (v.severity.exploitability or 0.0) if v.severity else 0.0,
            "owasp_top_10": _owasp_sort_key,
        },
        default_sort="severity",
        default_entries_per_page=default_entries_per_page,
        max_entries_per_page=max_entries_per_page,
    )


# ---------------------------------------------------------------------------
# Dependencies


def _dist_filter(name: str):
    def predicate(dep: DependencyRow) -> bool:
        return getattr(dep.severity_dist, name) > 0
    return predicate


def dependency_collection(
    default_entries_per_page: int = 20,
    max_entries_per_page: int = 100,
) -> CollectionSpec[DependencyRow]:
    filters = {
        "user_installed": lambda d: d.is_direct,
        "not_user_installed": lambda d: d.transitive and not d.is_direct,
        "deprecated": lambda d: d.deprecated,
        "outdated": lambda d: d.outdated,
        "unlicensed": lambda d: d.unlicensed,
        "vulnerable": lambda d: d.vulnerable,
        "not_vulnerable": lambda d: not d.vulnerable,
    }
    for name in SEVERITY_BUCKETS:
        filters[f"severity_{name}"] = _dist_filter(name)

    return CollectionSpec(
        name="dependencies",
        search_fields=lambda d: [d.name, d.version],
        filters=filters,
        sort_keys={
            "combined_severity": lambda d: d.combined_severity,
            "name": lambda d: d.name,
            "version": lambda d: version_key(d.version),
            "package_manager": lambda d: d.package_manager,
            "unlicensed": lambda d: d.unlicensed,
            "deprecated": lambda d: d.deprecated,
            "outdated": lambda d: d.outdated,
            "licenses": lambda d: d.licenses[0] if d.licenses else "",
            "newest_release": lambda d: version_key(d.newest_release),
            "last_published": lambda d: d.last_published or "",
            "user_installed": lambda d: d.is_direct,
            "release": lambda d: d.release or "",
        },
        default_sort="combined_severity",
        default_entries_per_page=default_entries_per_page,
        max_entries_per_page=max_entries_per_page,
    )


# ---------------------------------------------------------------------------
# Licenses


def license_collection(
    default_entries_per_page: int = 20,
    max_entries_per_page: int = 100,
) -> CollectionSpec[LicenseRow]:
    return CollectionSpec(
        name="licenses",
        search_fields=lambda lic: [lic.id, lic.name],
        filters={
            "compliance_violation": lambda lic: lic.license_compliance_violation,
            "unrecognized": lambda lic: lic.unable_to_infer,
            "permissive": lambda lic: lic.license_category == "permissive",
            "copy_left": lambda lic: lic.license_category == "copy_left",
        },
        sort_keys={
            "dep_count": lambda lic: len(lic.deps_using_license),
            "license_id": lambda lic: lic.id,
            "type": lambda lic: (lic.license_compliance_violation, lic.unable_to_infer),
        },
        default_sort="type",
        default_entries_per_page=default_entries_per_page,
        max_entries_per_page=max_entries_per_page,
    )


# ---------------------------------------------------------------------------
# Patches


def patch_collection(
    default_entries_per_page: int = 20,
    max_entries_per_page: int = 100,
) -> CollectionSpec[PatchRow]:
    return CollectionSpec(
        name="patches",
        search_fields=lambda p: [p.affected_dep_name, *p.vulnerability_ids],
        filters={
            "full_patch": lambda p: p.patch_type == "FULL",
            "partial_patch": lambda p: p.patch_type == "PARTIAL",
            "none_patch": lambda p: p.patch_type == "NONE",
        },
        sort_keys={
            "patch_type": lambda p: PATCH_TYPE_WEIGHT.get(p.patch_type, 0.0),
        },
        default_sort="patch_type",
        default_entries_per_page=default_entries_per_page,
        max_entries_per_page=max_entries_per_page,
    )


def vulnerability_patch_types(patches: list[PatchRow]) -> dict[str, str]:
    """Derive each vulnerability's patch type from the patch suggestions.

    FULL when the id only appears as patchable, NONE when it only appears as
    unpatchable, PARTIAL when it appears as both.
    """
    patchable: set[str] = set()
    unpatchable: set[str] = set()
    for patch in patches:
        patchable.update(patch.patchable_ids)
        unpatchable.update(patch.unpatchable_ids)

    result: dict[str, str] = {}
    for vulnerability_id in patchable | unpatchable:
        if vulnerability_id in patchable and vulnerability_id in unpatchable:
            result[vulnerability_id] = "PARTIAL"
        elif vulnerability_id in patchable:
            result[vulnerability_id] = "FULL"
        else:
            result[vulnerability_id] = "NONE"
    return result
