"""JSON-file knowledge base (OSV, NVD, CWE, package registry, licenses).

Each record lives in ``<knowledge_dir>/<kind>/<id>.json`` in the shape the
upstream feed publishes it (OSV schema, NVD CVE API 2.0, npm registry
document, SPDX license list entry, CWE catalog entry). Files are validated
with pydantic and mapped to domain records; invalid files are logged and
treated as absent.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...core.domain.knowledge import (
    CommonConsequence,
    LicenseRecord,
    NvdDescription,
    NvdMetric,
    NvdRecord,
    NvdReference,
    OsvRecord,
    OsvReference,
    OsvSeverity,
    PackageRecord,
    PackageVersion,
    WeaknessRecord,
)
from ...core.ports import LoggerPort

M = TypeVar("M", bound=BaseModel)


class _Feed(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _OsvSeverity(_Feed):
    type: str = ""
    score: str = ""


class _OsvReference(_Feed):
    type: str = ""
    url: str = ""


class OsvDocument(_Feed):
    id: str
    summary: str = ""
    details: str = ""
    published: str = ""
    modified: str = ""
    aliases: list[str] = Field(default_factory=list)
    severity: list[_OsvSeverity] = Field(default_factory=list)
    references: list[_OsvReference] = Field(default_factory=list)

    def to_domain(self) -> OsvRecord:
        return OsvRecord(
            osv_id=self.id,
            cve=next((a for a in self.aliases if a.startswith("CVE-")), None),
            summary=self.summary,
            details=self.details,
            published=self.published,
            modified=self.modified,
            aliases=tuple(self.aliases),
            severity=tuple(OsvSeverity(type=s.type, score=s.score) for s in self.severity),
            references=tuple(OsvReference(type=r.type, url=r.url) for r in self.references),
        )


class _CvssData(_Feed):
    vector_string: str = Field(default="", alias="vectorString")


class _NvdMetric(_Feed):
    source: str = ""
    cvss_data: _CvssData = Field(default_factory=_CvssData, alias="cvssData")
    user_interaction_required: Optional[bool] = Field(default=None, alias="userInteractionRequired")

    def to_domain(self) -> NvdMetric:
        return NvdMetric(
            source=self.source,
            vector=self.cvss_data.vector_string,
            user_interaction_required=self.user_interaction_required,
        )


class _NvdMetrics(_Feed):
    cvss_v31: list[_NvdMetric] = Field(default_factory=list, alias="cvssMetricV31")
    cvss_v30: list[_NvdMetric] = Field(default_factory=list, alias="cvssMetricV30")
    cvss_v2: list[_NvdMetric] = Field(default_factory=list, alias="cvssMetricV2")


class _NvdDescription(_Feed):
    lang: str = ""
    value: str = ""


class _NvdReference(_Feed):
    url: str = ""
    tags: list[str] = Field(default_factory=list)


class NvdDocument(_Feed):
    id: str
    published: str = ""
    last_modified: str = Field(default="", alias="lastModified")
    descriptions: list[_NvdDescription] = Field(default_factory=list)
    metrics: _NvdMetrics = Field(default_factory=_NvdMetrics)
    references: list[_NvdReference] = Field(default_factory=list)

    def to_domain(self) -> NvdRecord:
        return NvdRecord(
            nvd_id=self.id,
            descriptions=tuple(NvdDescription(lang=d.lang, value=d.value) for d in self.descriptions),
            published=self.published,
            last_modified=self.last_modified,
            cvss_v2=tuple(m.to_domain() for m in self.metrics.cvss_v2),
            cvss_v30=tuple(m.to_domain() for m in self.metrics.cvss_v30),
            cvss_v31=tuple(m.to_domain() for m in self.metrics.cvss_v31),
            references=tuple(NvdReference(url=r.url, tags=tuple(r.tags)) for r in self.references),
        )


class _Consequence(_Feed):
    scope: list[str] = Field(default_factory=list, alias="Scope")
    impact: list[str] = Field(default_factory=list, alias="Impact")
    note: str = Field(default="", alias="Note")


class WeaknessDocument(_Feed):
    id: str = Field(alias="ID")
    name: str = Field(default="", alias="Name")
    description: str = Field(default="", alias="Description")
    extended_description: str = Field(default="", alias="ExtendedDescription")
    common_consequences: list[_Consequence] = Field(default_factory=list, alias="CommonConsequences")

    def to_domain(self) -> WeaknessRecord:
        return WeaknessRecord(
            cwe_id=self.id.upper().replace("CWE-", ""),
            name=self.name,
            description=self.description,
            extended_description=self.extended_description,
            common_consequences=tuple(
                CommonConsequence(scope=tuple(c.scope), impact=tuple(c.impact), description=c.note)
                for c in self.common_consequences
            ),
        )


class _PackageVersion(_Feed):
    deprecated: Union[str, bool, None] = None

    @property
    def deprecation_message(self) -> str | None:
        if isinstance(self.deprecated, str) and self.deprecated:
            return self.deprecated
        return "deprecated" if self.deprecated is True else None


class PackageDocument(_Feed):
    name: str
    description: str = ""
    keywords: list[str] = Field(default_factory=list)
    homepage: Optional[str] = None
    repository: Any = None
    dist_tags: dict[str, str] = Field(default_factory=dict, alias="dist-tags")
    time: dict[str, str] = Field(default_factory=dict)
    versions: dict[str, _PackageVersion] = Field(default_factory=dict)

    def to_domain(self) -> PackageRecord:
        repository = self.repository
        if isinstance(repository, dict):
            repository = repository.get("url")
        return PackageRecord(
            name=self.name,
            description=self.description,
            keywords=tuple(self.keywords),
            homepage=self.homepage,
            repository_url=repository if isinstance(repository, str) else None,
            latest_version=self.dist_tags.get("latest"),
            time=self.time.get("modified"),
            versions=tuple(
                PackageVersion(version=v, time=self.time.get(v), deprecated=info.deprecation_message)
                for v, info in self.versions.items()
            ),
        )


class LicenseDocument(_Feed):
    license_id: str = Field(alias="licenseId")
    name: str = ""
    description: str = ""
    classification: str = ""
    properties: dict[str, list[str]] = Field(default_factory=dict)
    see_also: list[str] = Field(default_factory=list, alias="seeAlso")

    def to_domain(self) -> LicenseRecord:
        return LicenseRecord(
            license_id=self.license_id,
            name=self.name,
            description=self.description,
            classification=self.classification,
            properties={k: tuple(v) for k, v in self.properties.items()},
            see_also=tuple(self.see_also),
        )


class JsonKnowledgeBase:
    """Implements both ``KnowledgePort`` and ``PackageMetadataPort``."""

    def __init__(self, *, knowledge_dir: Path, logger: LoggerPort) -> None:
        self._knowledge_dir = knowledge_dir
        self._logger = logger
        self._cve_index: dict[str, str] | None = None

    def _load(self, kind: str, record_id: str, model: type[M]) -> M | None:
        if not record_id or ".." in record_id:
            return None
        fp = self._knowledge_dir / kind / f"{record_id}.json"
        if not fp.exists():
            return None
        try:
            return model.model_validate(json.loads(fp.read_text(encoding="utf-8")))
        except (OSError, ValueError, ValidationError) as e:
            self._logger.warning("knowledge_record_invalid", kind=kind, record_id=record_id, error=str(e))
            return None

    def get_osv(self, osv_id: str) -> OsvRecord | None:
        doc = self._load("osv", osv_id, OsvDocument)
        return doc.to_domain() if doc is not None else None

    def _build_cve_index(self) -> dict[str, str]:
        index: dict[str, str] = {}
        osv_dir = self._knowledge_dir / "osv"
        if not osv_dir.exists():
            return index
        for fp in sorted(osv_dir.glob("*.json")):
            doc = self._load("osv", fp.stem, OsvDocument)
            if doc is None:
                continue
            for alias in doc.aliases:
                if alias.startswith("CVE-"):
                    index.setdefault(alias, doc.id)
        return index

    def find_osv_by_cve(self, cve: str) -> OsvRecord | None:
        if self._cve_index is None:
            self._cve_index = self._build_cve_index()
        osv_id = self._cve_index.get(cve)
        return self.get_osv(osv_id) if osv_id is not None else None

    def get_nvd(self, cve: str) -> NvdRecord | None:
        doc = self._load("nvd", cve, NvdDocument)
        return doc.to_domain() if doc is not None else None

    def get_weakness(self, cwe_id: str) -> WeaknessRecord | None:
        doc = self._load("cwe", cwe_id, WeaknessDocument)
        return doc.to_domain() if doc is not None else None

    def get_license(self, license_id: str) -> LicenseRecord | None:
        doc = self._load("licenses", license_id, LicenseDocument)
        return doc.to_domain() if doc is not None else None

    def get_package(self, name: str) -> PackageRecord | None:
        doc = self._load("packages", name, PackageDocument)
        return doc.to_domain() if doc is not None else None
