"""Structures of an assembled vulnerability report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .knowledge import CommonConsequence, OwaspCategory
from .models import PatchRow


@dataclass(frozen=True)
class CVSS3:
    """CVSS v3.0 / v3.1 base metrics and scores."""
    base_score: float
    exploitability_score: float
    impact_score: float
    attack_vector: str
    attack_complexity: str
    privileges_required: str
    user_interaction: str
    scope: str
    confidentiality_impact: str
    integrity_impact: str
    availability_impact: str


@dataclass(frozen=True)
class CVSS2:
    base_score: float
    exploitability_score: float
    impact_score: float
    access_vector: str
    access_complexity: str
    authentication: str
    confidentiality_impact: str
    integrity_impact: str
    availability_impact: str
    user_interaction_required: bool | None = None


@dataclass(frozen=True)
class SeverityInfo:
    cvss_31: CVSS3 | None = None
    cvss_3: CVSS3 | None = None
    cvss_2: CVSS2 | None = None

    @property
    def is_empty(self) -> bool:
        return self.cvss_31 is None and self.cvss_3 is None and self.cvss_2 is None


@dataclass(frozen=True)
class VulnSource:
    name: str
    vuln_url: str


@dataclass(frozen=True)
class VersionStatus:
    version: str
    status: str  # affected | not_affected
    release: str | None = None


@dataclass(frozen=True)
class VersionInfo:
    affected_versions_string: str
    versions: tuple[VersionStatus, ...] = ()


@dataclass(frozen=True)
class VulnerabilityInfo:
    vulnerability_id: str
    description: str
    version_info: VersionInfo
    published: str
    last_modified: str
    sources: tuple[VulnSource, ...]
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class PackageManagerLink:
    package_manager: str
    url: str


@dataclass(frozen=True)
class DependencyInfo:
    """Dependency section of a report; metadata fields are omitted when unknown."""
    name: str
    version: str
    published: str | None = None
    description: str | None = None
    keywords: tuple[str, ...] = ()
    homepage: str | None = None
    package_manager_links: tuple[PackageManagerLink, ...] = ()
    github_link: str | None = None
    issues_link: str | None = None

    def to_jsonable(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "keywords": list(self.keywords),
            "package_manager_links": [
                {"package_manager": link.package_manager, "url": link.url}
                for link in self.package_manager_links
            ],
        }
        for key in ("published", "description", "homepage", "github_link", "issues_link"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class WeaknessInfo:
    id: str
    name: str
    description: str


@dataclass(frozen=True)
class ReferenceInfo:
    url: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class VulnerabilityDetails:
    vulnerability_info: VulnerabilityInfo
    dependency_info: DependencyInfo | None
    severities: SeverityInfo
    owasp_top_10: OwaspCategory | None
    weaknesses: tuple[WeaknessInfo, ...]
    patch: PatchRow | None
    common_consequences: Mapping[str, tuple[CommonConsequence, ...]]
    references: tuple[ReferenceInfo, ...]
    location: tuple[str, ...] = ()
    other: Mapping[str, str] = field(default_factory=dict)
