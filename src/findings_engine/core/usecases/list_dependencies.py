from __future__ import annotations

from collections import defaultdict

from ..domain.mapping import parse_findings, parse_sbom_workspace
from ..domain.models import (
    SBOM_PLUGIN,
    VULN_PLUGIN,
    DependencyRow,
    Finding,
    SbomDependency,
    SeverityDist,
)
from ..domain.severity import bucket
from ..ports import AccessControlPort, LoggerPort, PackageMetadataPort
from ..services import ResultReader
from ..services.query_engine import CollectionSpec, Page, QueryParams, run_query
from ..versions import compare_versions


def _severity_dist(findings: list[Finding]) -> tuple[SeverityDist, float]:
    """Count each vulnerability id once and return the distribution with the highest score."""
    counts = {"critical": 0, "high": 0, "medium": 0, "low": 0, "none": 0}
    highest = 0.0
    seen: set[str] = set()
    for finding in findings:
        if finding.vulnerability_id in seen:
            continue
        seen.add(finding.vulnerability_id)
        score = finding.severity.score if finding.severity is not None else None
        counts[bucket(score)] += 1
        highest = max(highest, score or 0.0)
    return SeverityDist(**counts), highest


class ListDependenciesUseCase:
    """Use case for the dependency list of a workspace.

    Rows come from the dependency graph; vulnerability data and registry
    metadata are joined in when available.
    """

    def __init__(
        self,
        *,
        access: AccessControlPort,
        reader: ResultReader,
        packages: PackageMetadataPort,
        collection: CollectionSpec[DependencyRow],
        logger: LoggerPort,
    ) -> None:
        self._access = access
        self._reader = reader
        self._packages = packages
        self._collection = collection
        self._logger = logger

    def execute(
        self,
        *,
        org_id: str,
        project_id: str,
        analysis_id: str,
        workspace: str,
        user: str,
        params: QueryParams | None = None,
    ) -> Page[DependencyRow]:
        self._access.check_access(org_id, project_id, analysis_id, user)

        sbom_result = self._reader.load(analysis_id, SBOM_PLUGIN)
        sbom = parse_sbom_workspace(self._reader.workspace(sbom_result, workspace))

        by_dependency: dict[tuple[str, str], list[Finding]] = defaultdict(list)
        vulns = self._reader.try_load(analysis_id, VULN_PLUGIN)
        if vulns is not None and workspace in vulns.workspaces:
            for finding in parse_findings(vulns.workspaces[workspace]):
                by_dependency[(finding.affected_dependency, finding.affected_version)].append(finding)

        rows = [
            self._row(
                dep,
                is_direct=sbom.is_direct(dep.name) and not dep.transitive,
                findings=by_dependency.get((dep.name, dep.version), []),
                package_manager=sbom_result.info.package_manager,
            )
            for dep in sbom.dependencies
        ]

        page = run_query(self._collection, rows, params or QueryParams())
        self._logger.info(
            "dependencies_listed",
            analysis_id=analysis_id,
            workspace=workspace,
            dependencies=len(rows),
            matching=page.matching_count,
        )
        return page

    def _row(
        self,
        dep: SbomDependency,
        *,
        is_direct: bool,
        findings: list[Finding],
        package_manager: str,
    ) -> DependencyRow:
        severity_dist, combined = _severity_dist(findings)

        newest_release = ""
        deprecated = outdated = False
        release = last_published = None
        package = self._packages.get_package(dep.name)
        if package is not None:
            newest_release = package.latest_version or ""
            outdated = bool(newest_release) and compare_versions(dep.version, newest_release) < 0
            last_published = package.time
            version = package.version(dep.version)
            if version is not None:
                deprecated = bool(version.deprecated)
                release = version.time

        return DependencyRow(
            name=dep.name,
            version=dep.version,
            newest_release=newest_release,
            is_direct=is_direct,
            transitive=dep.transitive,
            dev=dep.dev,
            optional=dep.optional,
            bundled=dep.bundled,
            licenses=dep.licenses,
            deprecated=deprecated,
            outdated=outdated,
            vulnerable=bool(findings),
            vulnerabilities=tuple(dict.fromkeys(f.vulnerability_id for f in findings)),
            severity_dist=severity_dist,
            combined_severity=combined,
            release=release,
            last_published=last_published,
            package_manager=package_manager,
        )
