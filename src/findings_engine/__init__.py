from .app.main import (
    attack_vectors,
    get_dependency_stats,
    get_report,
    get_stats,
    get_status,
    list_dependencies,
    list_licenses,
    list_patches,
    list_vulnerabilities,
    list_workspaces,
    query_params,
    weekly_severity,
)

__all__ = [
    "attack_vectors",
    "get_dependency_stats",
    "get_report",
    "get_stats",
    "get_status",
    "list_dependencies",
    "list_licenses",
    "list_patches",
    "list_vulnerabilities",
    "list_workspaces",
    "query_params",
    "weekly_severity",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
