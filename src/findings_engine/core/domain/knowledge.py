"""Records read from the knowledge bases (OSV, NVD, CWE, packages, licenses)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class OsvSeverity:
    type: str  # CVSS_V2 | CVSS_V3 | ...
    score: str  # the vector string


@dataclass(frozen=True)
class OsvReference:
    type: str
    url: str


@dataclass(frozen=True)
class OsvRecord:
    osv_id: str
    cve: str | None = None
    summary: str = ""
    details: str = ""
    published: str = ""
    modified: str = ""
    aliases: tuple[str, ...] = ()
    severity: tuple[OsvSeverity, ...] = ()
    references: tuple[OsvReference, ...] = ()


@dataclass(frozen=True)
class NvdMetric:
    source: str
    vector: str
    user_interaction_required: bool | None = None


@dataclass(frozen=True)
class NvdDescription:
    lang: str
    value: str


@dataclass(frozen=True)
class NvdReference:
    url: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class NvdRecord:
    nvd_id: str
    descriptions: tuple[NvdDescription, ...] = ()
    published: str = ""
    last_modified: str = ""
    cvss_v2: tuple[NvdMetric, ...] = ()
    cvss_v30: tuple[NvdMetric, ...] = ()
    cvss_v31: tuple[NvdMetric, ...] = ()
    references: tuple[NvdReference, ...] = ()

    @property
    def english_description(self) -> str:
        for description in self.descriptions:
            if description.lang == "en":
                return description.value
        return ""


@dataclass(frozen=True)
class CommonConsequence:
    scope: tuple[str, ...]
    impact: tuple[str, ...]
    description: str = ""


@dataclass(frozen=True)
class WeaknessRecord:
    cwe_id: str  # numeric part, e.g. "79"
    name: str
    description: str = ""
    extended_description: str = ""
    common_consequences: tuple[CommonConsequence, ...] = ()


@dataclass(frozen=True)
class OwaspCategory:
    id: str  # "A01"
    name: str  # "A01: Broken Access Control"
    description: str
    cwe_category_id: str  # "1345"


@dataclass(frozen=True)
class PackageVersion:
    version: str
    time: str | None = None
    deprecated: str | None = None


@dataclass(frozen=True)
class PackageRecord:
    """Package registry metadata for one package name."""
    name: str
    description: str = ""
    keywords: tuple[str, ...] = ()
    homepage: str | None = None
    repository_url: str | None = None
    latest_version: str | None = None
    time: str | None = None  # last publication of any version
    versions: tuple[PackageVersion, ...] = ()

    def version(self, version: str) -> PackageVersion | None:
        for candidate in self.versions:
            if candidate.version == version:
                return candidate
        return None


@dataclass(frozen=True)
class LicenseRecord:
    license_id: str
    name: str
    description: str = ""
    classification: str = ""  # permissive | copy_left | ...
    properties: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    see_also: tuple[str, ...] = ()
