from __future__ import annotations

from dependency_injector import containers, providers

from .config import AppConfig
from ..core.services import CVSSScorer, KnowledgeLookup, ReportAssembler, ResultReader
from ..core.services.collections import (
    dependency_collection,
    license_collection,
    patch_collection,
    vulnerability_collection,
)
from ..core.usecases.dashboard import AttackVectorUseCase, WeeklySeverityUseCase
from ..core.usecases.get_report import GetReportUseCase
from ..core.usecases.get_stats import GetDependencyStatsUseCase, GetStatsUseCase
from ..core.usecases.get_status import GetStatusUseCase
from ..core.usecases.list_dependencies import ListDependenciesUseCase
from ..core.usecases.list_licenses import ListLicensesUseCase
from ..core.usecases.list_patches import ListPatchesUseCase
from ..core.usecases.list_vulnerabilities import ListVulnerabilitiesUseCase
from ..core.usecases.list_workspaces import ListWorkspacesUseCase
from ..infra.adapters.access_control import FileAccessControl
from ..infra.adapters.knowledge_base import JsonKnowledgeBase
from ..infra.adapters.result_store import JsonResultStore
from ..infra.logging import EngineLogger


class Container(containers.DeclarativeContainer):
    """DI container with Pydantic BaseSettings support."""

    config = providers.Configuration(pydantic_settings=[AppConfig()])

    # Logger (Resource: manages lifecycle with init/shutdown)
    logger = providers.Resource(
        EngineLogger,
        logs_dir=config.directories.logs_dir,
        logger_name=config.logging.logger_name,
        json_file=config.logging.json_file,
        console_output=config.logging.console_output,
        level=config.logging.level,
    )

    # Adapters
    result_store = providers.Singleton(
        JsonResultStore,
        results_dir=config.directories.results_dir,
        logger=logger,
    )

    knowledge_base = providers.Singleton(
        JsonKnowledgeBase,
        knowledge_dir=config.directories.knowledge_dir,
        logger=logger,
    )

    access_control = providers.Singleton(
        FileAccessControl,
        access_file=config.directories.access_file,
        store=result_store,
        logger=logger,
        enforce=config.access.enforce,
    )

    # Domain services
    reader = providers.Factory(ResultReader, store=result_store, logger=logger)
    knowledge = providers.Factory(KnowledgeLookup, knowledge=knowledge_base)
    scorer = providers.Factory(CVSSScorer, logger=logger)
    assembler = providers.Factory(ReportAssembler, knowledge=knowledge, scorer=scorer, logger=logger)

    vulnerability_spec = providers.Singleton(
        vulnerability_collection,
        default_entries_per_page=config.pagination.vulnerabilities_per_page,
        max_entries_per_page=config.pagination.vulnerabilities_max_per_page,
    )
    dependency_spec = providers.Singleton(
        dependency_collection,
        default_entries_per_page=config.pagination.dependencies_per_page,
        max_entries_per_page=config.pagination.dependencies_max_per_page,
    )
    license_spec = providers.Singleton(
        license_collection,
        default_entries_per_page=config.pagination.licenses_per_page,
        max_entries_per_page=config.pagination.licenses_max_per_page,
    )
    patch_spec = providers.Singleton(
        patch_collection,
        default_entries_per_page=config.pagination.patches_per_page,
        max_entries_per_page=config.pagination.patches_max_per_page,
    )

    # Use cases
    list_vulnerabilities_uc = providers.Factory(
        ListVulnerabilitiesUseCase,
        access=access_control,
        reader=reader,
        knowledge=knowledge,
        collection=vulnerability_spec,
        logger=logger,
    )

    get_report_uc = providers.Factory(
        GetReportUseCase,
        access=access_control,
        reader=reader,
        knowledge=knowledge,
        packages=knowledge_base,
        assembler=assembler,
        logger=logger,
    )

    get_stats_uc = providers.Factory(GetStatsUseCase, access=access_control, reader=reader, logger=logger)

    get_dependency_stats_uc = providers.Factory(
        GetDependencyStatsUseCase,
        access=access_control,
        reader=reader,
        logger=logger,
    )

    weekly_severity_uc = providers.Factory(
        WeeklySeverityUseCase,
        access=access_control,
        reader=reader,
        logger=logger,
    )

    attack_vector_uc = providers.Factory(AttackVectorUseCase, access=access_control, reader=reader, logger=logger)

    list_dependencies_uc = providers.Factory(
        ListDependenciesUseCase,
        access=access_control,
        reader=reader,
        packages=knowledge_base,
        collection=dependency_spec,
        logger=logger,
    )

    list_licenses_uc = providers.Factory(
        ListLicensesUseCase,
        access=access_control,
        reader=reader,
        knowledge=knowledge,
        collection=license_spec,
        logger=logger,
    )

    list_patches_uc = providers.Factory(
        ListPatchesUseCase,
        access=access_control,
        reader=reader,
        collection=patch_spec,
        logger=logger,
    )

    get_status_uc = providers.Factory(GetStatusUseCase, access=access_control, reader=reader, logger=logger)

    list_workspaces_uc = providers.Factory(
        ListWorkspacesUseCase,
        access=access_control,
        reader=reader,
        logger=logger,
    )
