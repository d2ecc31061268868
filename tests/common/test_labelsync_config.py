from __future__ import annotations

import logging
from pathlib import Path

import pytest

from labelsync.common import configure_logging
from labelsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_codec_config,
    get_data_dir,
    get_database_config,
    get_pool_config,
    get_registry_config,
    get_sync_config,
    optional_env_var,
    require_env_vars,
)
from labelsync.domain.pool import DEFAULT_POOL

REGISTRY_ENV = {
    "LABELSYNC_REGISTRY_URL": "https://registry.test/",
    "LABELSYNC_REGISTRY_COMPANY": "ACME",
    "LABELSYNC_REGISTRY_STORE": "S01",
    "LABELSYNC_REGISTRY_TOKEN": "secret-token",
}


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", " value ")

    assert require_env_vars(["EXAMPLE_VAR"]) == {"EXAMPLE_VAR": "value"}


def test_require_env_vars_reports_all_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)
    assert isinstance(exc.value, ConfigurationError)


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")

    assert optional_env_var("EXAMPLE_VAR") is None


def test_registry_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in REGISTRY_ENV.items():
        monkeypatch.setenv(name, value)

    config = get_registry_config()

    assert config.base_url == "https://registry.test"
    assert config.company == "ACME"
    assert config.store == "S01"
    assert config.resilience.ratelimit is not None
    assert "secret-token" not in repr(config)


def test_registry_config_requires_token(monkeypatch: pytest.MonkeyPatch) -> None:
    for name, value in REGISTRY_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.delenv("LABELSYNC_REGISTRY_TOKEN")

    with pytest.raises(MissingConfigurationError, match="LABELSYNC_REGISTRY_TOKEN"):
        get_registry_config()


def test_codec_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "LABELSYNC_CONSTANT_FIELDS",
        "LABELSYNC_SLOT_FIELD",
        "LABELSYNC_NAME_FIELD",
        "LABELSYNC_POOL_PREFIX",
    ):
        monkeypatch.delenv(name, raising=False)

    config = get_codec_config()

    assert dict(config.constant_fields) == {}
    assert config.slot_field is None
    assert config.name_field is None
    assert config.pool == DEFAULT_POOL


def test_codec_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LABELSYNC_CONSTANT_FIELDS", '{"STORE": "S01", "FLOOR": 2}')
    monkeypatch.setenv("LABELSYNC_SLOT_FIELD", "ARTICLE_ID")
    monkeypatch.setenv("LABELSYNC_NAME_FIELD", "NAME")
    monkeypatch.setenv("LABELSYNC_POOL_PREFIX", "VIRT-")

    config = get_codec_config()

    assert dict(config.constant_fields) == {"STORE": "S01", "FLOOR": "2"}
    assert config.slot_field == "ARTICLE_ID"
    assert config.name_field == "NAME"
    assert config.pool.prefix == "VIRT-"
    assert get_pool_config().prefix == "VIRT-"


@pytest.mark.parametrize("raw", ["{not json", '["STORE"]'])
def test_codec_config_rejects_bad_constants(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("LABELSYNC_CONSTANT_FIELDS", raw)

    with pytest.raises(ConfigurationError, match="LABELSYNC_CONSTANT_FIELDS"):
        get_codec_config()


def test_database_config_defaults_to_sqlite_in_data_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    data_dir = tmp_path / "state"
    monkeypatch.setenv("LABELSYNC_DATA_DIR", str(data_dir))
    monkeypatch.delenv("DATABASE_URI", raising=False)

    uri = get_database_config().uri

    assert get_data_dir() == data_dir.resolve()
    assert uri == f"sqlite+pysqlite:///{data_dir.resolve() / 'labelsync.db'}"
    assert data_dir.is_dir()


def test_data_dir_falls_back_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("LABELSYNC_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    assert get_data_dir() == (tmp_path / "labelsync").resolve()


def test_database_uri_env_overrides_data_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", " sqlite+pysqlite:///:memory: ")

    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"


def test_sync_config_default_page_size() -> None:
    assert get_sync_config().page_size == 100


def test_configure_logging_sets_level() -> None:
    configure_logging(level=logging.DEBUG, force=True)
    try:
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging(level=logging.WARNING, force=True)
