"""Tests for Pydantic BaseSettings configuration."""
from pathlib import Path

import pytest
from pydantic import ValidationError

from findings_engine.app.config import AccessConfig, AppConfig, DirectoryConfig, LoggingConfig, PaginationConfig


def test_directory_config_computed_paths(tmp_path):
    config = DirectoryConfig(home=tmp_path)

    assert config.results_dir == tmp_path / "results"
    assert config.knowledge_dir == tmp_path / "knowledge"
    assert config.logs_dir == tmp_path / "logs"
    assert config.results_dir.is_dir()
    assert config.knowledge_dir.is_dir()
    assert config.logs_dir.is_dir()


def test_access_file_is_not_created(tmp_path):
    config = DirectoryConfig(home=tmp_path)
    assert config.access_file == tmp_path / "organizations.json"
    assert not config.access_file.exists()


def test_defaults(tmp_path):
    config = AppConfig(directories=DirectoryConfig(home=tmp_path))

    assert config.pagination.vulnerabilities_per_page == 20
    assert config.pagination.patches_max_per_page == 100
    assert config.logging.level == "INFO"
    assert config.logging.console_output is False
    assert config.access.enforce is True
    assert config.access.default_user == ""


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("FINDINGS_ENGINE_DIRECTORIES__HOME", str(tmp_path))
    monkeypatch.setenv("FINDINGS_ENGINE_ACCESS__DEFAULT_USER", "alice@example.com")
    monkeypatch.setenv("FINDINGS_ENGINE_ACCESS__ENFORCE", "false")
    monkeypatch.setenv("FINDINGS_ENGINE_PAGINATION__VULNERABILITIES_PER_PAGE", "50")
    monkeypatch.setenv("FINDINGS_ENGINE_LOGGING__LEVEL", "DEBUG")

    config = AppConfig()

    assert config.directories.home == Path(tmp_path)
    assert config.access.default_user == "alice@example.com"
    assert config.access.enforce is False
    assert config.pagination.vulnerabilities_per_page == 50
    assert config.logging.level == "DEBUG"


def test_config_is_frozen(tmp_path):
    config = AppConfig(directories=DirectoryConfig(home=tmp_path))
    with pytest.raises(ValidationError):
        config.access = AccessConfig(enforce=False)


def test_unknown_keys_are_rejected(tmp_path):
    with pytest.raises(ValidationError):
        AppConfig(directories=DirectoryConfig(home=tmp_path), unknown=1)


def test_page_sizes_must_be_positive():
    with pytest.raises(ValidationError):
        PaginationConfig(licenses_per_page=0)


def test_logging_config_fields():
    config = LoggingConfig(level="WARNING", json_file=False)
    assert config.level == "WARNING"
    assert config.json_file is False
