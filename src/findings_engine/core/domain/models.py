from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Mapping

Source = Literal["NVD", "OSV"]
PatchType = Literal["FULL", "PARTIAL", "NONE"]

# Plugin names of the producing tools
VULN_PLUGIN = "js-vuln-finder"
SBOM_PLUGIN = "js-sbom"
LICENSE_PLUGIN = "js-license"
PATCHING_PLUGIN = "js-patching"


@dataclass(frozen=True)
class SemVer:
    """A version as emitted by the scan tool (major/minor/patch + prerelease tag)."""
    major: int
    minor: int
    patch: int
    prerelease: str = ""

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.prerelease}" if self.prerelease else base


@dataclass(frozen=True)
class AffectedRange:
    introduced: SemVer
    fixed: SemVer | None = None


@dataclass(frozen=True)
class AffectedInfo:
    """Affected-version evidence of one source: ranges, an exact list, or 'all versions'."""
    ranges: tuple[AffectedRange, ...] = ()
    exact: tuple[str, ...] = ()
    universal: bool = False


@dataclass(frozen=True)
class SourceMatch:
    affected_info: tuple[AffectedInfo, ...] = ()

    @property
    def primary(self) -> AffectedInfo | None:
        return self.affected_info[0] if self.affected_info else None


@dataclass(frozen=True)
class Severity:
    """Severity attached to a finding by the scan tool.

    ``score`` is the single derived numeric severity in [0, 10]; the CIA
    fields hold discrete CVSS labels (NONE/LOW/PARTIAL/HIGH/COMPLETE).
    """
    score: float | None
    severity_type: str = ""  # CVSS_V2, CVSS_V3, CVSS_V31
    vector: str = ""
    impact: float | None = None
    exploitability: float | None = None
    confidentiality_impact: str = ""
    integrity_impact: str = ""
    availability_impact: str = ""


@dataclass(frozen=True)
class Weakness:
    weakness_id: str  # e.g. "CWE-79"
    owasp_top10_id: str = ""  # CWE category id, e.g. "1347"
    owasp_top10_name: str = ""
    name: str = ""
    description: str = ""
    extended_description: str = ""

    @property
    def cwe_number(self) -> int | None:
        digits = self.weakness_id.upper().replace("CWE-", "").strip()
        return int(digits) if digits.isdigit() else None


@dataclass(frozen=True)
class Finding:
    """One (vulnerability, dependency, version) triple reported by the scan tool."""
    id: str
    vulnerability_id: str
    affected_dependency: str
    affected_version: str
    sources: tuple[str, ...] = ()
    severity: Severity | None = None
    weaknesses: tuple[Weakness, ...] = ()
    osv_match: SourceMatch | None = None
    nvd_match: SourceMatch | None = None


@dataclass(frozen=True)
class AffectedVuln:
    vulnerability_id: str
    affected_dependency: str
    affected_version: str
    sources: tuple[str, ...] = ()
    severity: Severity | None = None
    weaknesses: tuple[Weakness, ...] = ()
    osv_match: SourceMatch | None = None
    nvd_match: SourceMatch | None = None


@dataclass
class MergedVulnerability:
    """All findings sharing one vulnerability id.

    Representative fields (``severity``, ``weaknesses``, ``sources``) come from
    the first finding seen for the id and are never overwritten.
    """
    id: str
    vulnerability_id: str
    sources: tuple[str, ...]
    severity: Severity | None
    weaknesses: tuple[Weakness, ...]
    affected: list[AffectedVuln] = field(default_factory=list)
    description: str = ""
    winning_source: str = ""
    patch_type: str | None = None

    @property
    def severity_score(self) -> float | None:
        return self.severity.score if self.severity is not None else None


# ---------------------------------------------------------------------------
# Analysis results


@dataclass(frozen=True)
class AnalysisRef:
    analysis_id: str
    project_id: str
    organization_id: str
    created_on: datetime


@dataclass(frozen=True)
class StatusError:
    type: str
    description: str


@dataclass(frozen=True)
class AnalysisInfo:
    status: str  # "success" | "failure"
    public_errors: tuple[StatusError, ...] = ()
    private_errors: tuple[StatusError, ...] = ()
    analysis_start_time: str = ""
    analysis_end_time: str = ""
    package_manager: str = ""
    workspace_package_file_paths: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AnalysisResult:
    """One stored tool output. ``workspaces`` stays in its storage shape."""
    analysis_id: str
    plugin: str
    created_on: datetime
    info: AnalysisInfo
    workspaces: Mapping[str, Any]


@dataclass(frozen=True)
class ToolStatus:
    stage_start: str
    stage_end: str
    public_errors: tuple[StatusError, ...] = ()
    private_errors: tuple[StatusError, ...] = ()


@dataclass(frozen=True)
class WorkspacesOverview:
    workspaces_map: Mapping[str, str]
    package_manager: str


# ---------------------------------------------------------------------------
# Dependency graph, licenses, patches


@dataclass(frozen=True)
class SbomDependency:
    name: str
    version: str
    key: str = ""
    requires: Mapping[str, str] = field(default_factory=dict)
    dependencies: Mapping[str, str] = field(default_factory=dict)
    optional: bool = False
    bundled: bool = False
    dev: bool = False
    transitive: bool = False
    licenses: tuple[str, ...] = ()


@dataclass(frozen=True)
class SbomWorkspace:
    dependencies: tuple[SbomDependency, ...]
    direct: tuple[str, ...] = ()  # names declared in the manifest
    dev_direct: tuple[str, ...] = ()

    def is_direct(self, name: str) -> bool:
        return name in self.direct or name in self.dev_direct


@dataclass(frozen=True)
class SeverityDist:
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    none: int = 0


@dataclass(frozen=True)
class DependencyRow:
    """One dependency@version entry of the dependency list view."""
    name: str
    version: str
    newest_release: str
    is_direct: bool = False
    transitive: bool = False
    dev: bool = False
    optional: bool = False
    bundled: bool = False
    licenses: tuple[str, ...] = ()
    deprecated: bool = False
    outdated: bool = False
    vulnerable: bool = False
    vulnerabilities: tuple[str, ...] = ()
    severity_dist: SeverityDist = field(default_factory=SeverityDist)
    combined_severity: float = 0.0
    release: str | None = None
    last_published: str | None = None
    package_manager: str = ""

    @property
    def unlicensed(self) -> bool:
        return not self.licenses


@dataclass(frozen=True)
class LicenseRow:
    id: str
    name: str = ""
    description: str = ""
    unable_to_infer: bool = False
    license_compliance_violation: bool = False
    deps_using_license: tuple[str, ...] = ()
    license_category: str = ""
    license_properties: Mapping[str, tuple[str, ...]] | None = None
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class PatchRow:
    key: str  # dependency key "name@version"
    affected_dep_name: str
    affected_dep_version: str
    patch_type: str  # FULL | PARTIAL | NONE
    vulnerability_ids: tuple[str, ...] = ()
    patchable_ids: tuple[str, ...] = ()
    unpatchable_ids: tuple[str, ...] = ()
    top_level_vulnerable: bool = False
    update: str = ""
    dev: bool = False
