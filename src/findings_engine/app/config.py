from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "findings_engine"


def _default_home() -> Path:
    """Get default home directory using platformdirs."""
    return Path(PlatformDirs(appname=APP_NAME, appauthor=False).user_data_dir)


class DirectoryConfig(BaseSettings):
    """Directory configuration with computed paths."""

    home: Path = Field(
        default_factory=_default_home,
        description="Base directory for all findings_engine data",
    )

    @computed_field
    @property
    def results_dir(self) -> Path:
        """Stored tool outputs, one directory per analysis."""
        path = self.home / "results"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def knowledge_dir(self) -> Path:
        """OSV, NVD, CWE, package and license records."""
        path = self.home / "knowledge"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def logs_dir(self) -> Path:
        path = self.home / "logs"
        path.mkdir(parents=True, exist_ok=True)
        return path

    @computed_field
    @property
    def access_file(self) -> Path:
        """Organization membership file used by access control."""
        return self.home / "organizations.json"


class PaginationConfig(BaseSettings):
    """Default and maximum page sizes of the list views."""

    vulnerabilities_per_page: int = Field(default=20, ge=1)
    vulnerabilities_max_per_page: int = Field(default=100, ge=1)
    dependencies_per_page: int = Field(default=20, ge=1)
    dependencies_max_per_page: int = Field(default=100, ge=1)
    licenses_per_page: int = Field(default=20, ge=1)
    licenses_max_per_page: int = Field(default=100, ge=1)
    patches_per_page: int = Field(default=20, ge=1)
    patches_max_per_page: int = Field(default=100, ge=1)


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR)")
    logger_name: str = Field(default="findings_engine", description="Logger name and JSONL file stem")
    console_output: bool = Field(default=False, description="Mirror log records to stderr")
    json_file: bool = Field(default=True, description="Write JSON lines to logs_dir")


class AccessConfig(BaseSettings):
    """Access control settings."""

    default_user: str = Field(default="", description="Identity used by the CLI when --user is omitted")
    enforce: bool = Field(default=True, description="Disable to skip membership checks (local use)")


class AppConfig(BaseSettings):
    """Root application configuration.

    All configuration is loaded from environment variables with FINDINGS_ENGINE_ prefix.
    Use double underscore for nested config: FINDINGS_ENGINE_LOGGING__LEVEL

    Example env vars:
        export FINDINGS_ENGINE_DIRECTORIES__HOME=/srv/findings
        export FINDINGS_ENGINE_ACCESS__DEFAULT_USER=alice@example.com
        export FINDINGS_ENGINE_ACCESS__ENFORCE=false
        export FINDINGS_ENGINE_LOGGING__LEVEL=DEBUG
        export FINDINGS_ENGINE_PAGINATION__VULNERABILITIES_PER_PAGE=50
    """

    model_config = SettingsConfigDict(
        env_prefix="FINDINGS_ENGINE_",
        env_nested_delimiter="__",
        frozen=True,
        extra="forbid",
    )

    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)
    pagination: PaginationConfig = Field(default_factory=PaginationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    access: AccessConfig = Field(default_factory=AccessConfig)
