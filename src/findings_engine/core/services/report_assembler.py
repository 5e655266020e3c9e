from __future__ import annotations

import re
from dataclasses import replace
from urllib.parse import urlparse

from ..domain.exceptions import ReportGenerationFailed
from ..domain.knowledge import CommonConsequence, NvdRecord, OsvRecord, OwaspCategory, PackageRecord
from ..domain.models import AffectedInfo, Finding, PatchRow, SourceMatch
from ..domain.report import (
    DependencyInfo,
    PackageManagerLink,
    ReferenceInfo,
    SeverityInfo,
    VersionInfo,
    VersionStatus,
    VulnerabilityDetails,
    VulnerabilityInfo,
    VulnSource,
    WeaknessInfo,
)
from ..ports import LoggerPort
from ..versions import satisfies
from .cvss_scorer import CVSSScorer
from .knowledge import KnowledgeLookup

OSV_URL = "https://osv.dev/vulnerability/{id}"
NVD_URL = "https://nvd.nist.gov/vuln/detail/{id}"

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E]+")
_WHITESPACE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Strip non-printable characters and collapse whitespace."""
    return _WHITESPACE.sub(" ", _NON_PRINTABLE.sub("", text or "")).strip()


def clean_description(text: str) -> str:
    """Reduce a markdown advisory description to its lead and its code samples.

    Runs of ``#`` split the text into sections (the ``#`` characters are
    dropped). The first section and every section containing a code fence
    are kept; trailing newlines of the last kept section are removed.
    """
    sections = [section for section in re.split(r"#+", text or "") if section != ""]
    kept = [section for index, section in enumerate(sections) if index == 0 or "```" in section]
    if kept:
        kept[-1] = kept[-1].rstrip("\n")
    return "\n".join(kept)


def describe(osv: OsvRecord | None, nvd: NvdRecord | None) -> str:
    """Short description used by the vulnerability list view."""
    details = osv.details if osv is not None else ""
    if not details and nvd is not None and nvd.english_description:
        return nvd.english_description
    if osv is None:
        return ""
    description = f"#### {osv.summary}.\n\n{clean_description(details)}"
    if not description.endswith((".", "```")):
        description += "."
    return description


def affected_versions_string(affected_info: AffectedInfo | None) -> str:
    """Render affected-version evidence as an npm-style constraint."""
    if affected_info is None:
        return ""
    if affected_info.ranges:
        parts = []
        for r in affected_info.ranges:
            part = f">= {r.introduced}"
            if r.fixed is not None:
                part += f" < {r.fixed}"
            parts.append(part)
        return " || ".join(parts)
    if affected_info.exact:
        return " || ".join(affected_info.exact)
    if affected_info.universal:
        return "*"
    return ""


def _primary_info(primary: SourceMatch | None, secondary: SourceMatch | None) -> AffectedInfo | None:
    for match in (primary, secondary):
        if match is not None and match.primary is not None:
            return match.primary
    return None


def package_manager_links(name: str, package_manager: str) -> tuple[PackageManagerLink, ...]:
    if package_manager.upper() not in ("NPM", "YARN"):
        return ()
    return (
        PackageManagerLink(package_manager="NPM", url=f"https://www.npmjs.com/package/{name}"),
        PackageManagerLink(package_manager="YARN", url=f"https://yarn.pm/{name}"),
    )


def _github_link(repository_url: str | None) -> str | None:
    if not repository_url:
        return None
    url = repository_url
    if url.startswith("git+"):
        url = url[4:]
    if url.endswith(".git"):
        url = url[:-4]
    parsed = urlparse(url)
    if parsed.hostname != "github.com":
        return None
    return f"https://github.com{parsed.path}"


class ReportAssembler:
    """Builds the detailed report of one vulnerability affecting one dependency.

    The OSV advisory is the primary source when present; the NVD record fills
    in when OSV is missing or lacks severities.
    """

    def __init__(self, *, knowledge: KnowledgeLookup, scorer: CVSSScorer, logger: LoggerPort) -> None:
        self._knowledge = knowledge
        self._scorer = scorer
        self._logger = logger

    def assemble(
        self,
        finding: Finding,
        osv: OsvRecord | None,
        nvd: NvdRecord | None,
        package: PackageRecord | None = None,
        package_manager: str = "",
        patch: PatchRow | None = None,
    ) -> VulnerabilityDetails:
        """Assemble the report.

        Raises:
            ReportGenerationFailed: If neither an OSV nor an NVD record exists
        """
        if osv is None and nvd is None:
            raise ReportGenerationFailed()

        if osv is not None:
            vulnerability_info, severities = self._from_osv(finding, osv, nvd)
            references = tuple(ReferenceInfo(url=ref.url, tags=(ref.type,)) for ref in osv.references)
        else:
            vulnerability_info, severities = self._from_nvd(finding, nvd, osv)
            references = tuple(ReferenceInfo(url=ref.url, tags=ref.tags) for ref in nvd.references)

        vulnerability_info = replace(
            vulnerability_info,
            version_info=self._version_info(vulnerability_info.version_info.affected_versions_string, package),
        )

        weaknesses, consequences = self._weaknesses(finding)

        return VulnerabilityDetails(
            vulnerability_info=vulnerability_info,
            dependency_info=self._dependency_info(finding, package, package_manager),
            severities=severities,
            owasp_top_10=self._owasp(finding),
            weaknesses=weaknesses,
            patch=patch,
            common_consequences=consequences,
            references=references,
            location=(),
            other={"package_manager": package_manager},
        )

    def _from_osv(
        self, finding: Finding, osv: OsvRecord, nvd: NvdRecord | None
    ) -> tuple[VulnerabilityInfo, SeverityInfo]:
        sources = [VulnSource(name="OSV", vuln_url=OSV_URL.format(id=osv.osv_id))]
        if nvd is not None:
            sources.append(VulnSource(name="NVD", vuln_url=NVD_URL.format(id=nvd.nvd_id)))
        aliases = (osv.osv_id, osv.cve) if osv.cve else (osv.osv_id,)

        severities = self._scorer.osv_severities(osv)
        if severities.is_empty and nvd is not None:
            severities = self._scorer.nvd_severities(nvd)

        info = VulnerabilityInfo(
            vulnerability_id=osv.cve or osv.osv_id,
            description=clean_description(osv.details),
            version_info=VersionInfo(
                affected_versions_string=affected_versions_string(
                    _primary_info(finding.osv_match, finding.nvd_match)
                ),
            ),
            published=osv.published,
            last_modified=osv.modified,
            sources=tuple(sources),
            aliases=aliases,
        )
        return info, severities

    def _from_nvd(
        self, finding: Finding, nvd: NvdRecord, osv: OsvRecord | None
    ) -> tuple[VulnerabilityInfo, SeverityInfo]:
        sources = [VulnSource(name="NVD", vuln_url=NVD_URL.format(id=nvd.nvd_id))]
        aliases: tuple[str, ...] = ()
        if osv is not None:
            sources.append(VulnSource(name="OSV", vuln_url=OSV_URL.format(id=osv.osv_id)))
            aliases = (osv.osv_id,)

        severities = self._scorer.nvd_severities(nvd)
        if severities.is_empty and osv is not None:
            severities = self._scorer.osv_severities(osv)

        info = VulnerabilityInfo(
            vulnerability_id=nvd.nvd_id,
            description=nvd.english_description,
            version_info=VersionInfo(
                affected_versions_string=affected_versions_string(
                    _primary_info(finding.nvd_match, finding.osv_match)
                ),
            ),
            published=nvd.published,
            last_modified=nvd.last_modified,
            sources=tuple(sources),
            aliases=aliases,
        )
        return info, severities

    def _version_info(self, affected: str, package: PackageRecord | None) -> VersionInfo:
        if package is None:
            return VersionInfo(affected_versions_string=affected)
        statuses = tuple(
            VersionStatus(
                version=v.version,
                status="affected" if affected and satisfies(v.version, affected) else "not_affected",
                release=v.time,
            )
            for v in package.versions
        )
        return VersionInfo(affected_versions_string=affected, versions=statuses)

    def _dependency_info(
        self, finding: Finding, package: PackageRecord | None, package_manager: str
    ) -> DependencyInfo:
        name, version = finding.affected_dependency, finding.affected_version
        if package is None:
            self._logger.debug("package_metadata_missing", dependency=name)
            return DependencyInfo(name=name, version=version)

        version_record = package.version(version)
        repository = _github_link(package.repository_url)
        return DependencyInfo(
            name=name,
            version=version,
            published=version_record.time if version_record is not None else None,
            description=package.description,
            keywords=package.keywords,
            homepage=package.homepage or None,
            package_manager_links=package_manager_links(name, package_manager),
            github_link=repository,
            issues_link=f"{repository}/issues" if repository else None,
        )

    def _weaknesses(
        self, finding: Finding
    ) -> tuple[tuple[WeaknessInfo, ...], dict[str, tuple[CommonConsequence, ...]]]:
        weaknesses: list[WeaknessInfo] = []
        consequences: dict[str, tuple[CommonConsequence, ...]] = {}
        for weakness in finding.weaknesses:
            record = self._knowledge.find_weakness(weakness.weakness_id)
            if record is None:
                self._logger.debug("weakness_record_missing", weakness_id=weakness.weakness_id)
                continue
            weaknesses.append(WeaknessInfo(
                id=weakness.weakness_id,
                name=record.name,
                description=clean_text(record.description),
            ))
            if record.common_consequences:
                consequences[weakness.weakness_id] = tuple(
                    CommonConsequence(
                        scope=c.scope,
                        impact=c.impact,
                        description=clean_text(c.description),
                    )
                    for c in record.common_consequences
                )
        return tuple(weaknesses), consequences

    def _owasp(self, finding: Finding) -> OwaspCategory | None:
        for weakness in finding.weaknesses:
            if weakness.owasp_top10_id:
                return self._knowledge.find_owasp_category(weakness.owasp_top10_id)
        return None
