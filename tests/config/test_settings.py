"""
Tests for inventory_config: the settings entrypoint, the YAML loader and
the kernel bridge.
"""

import pytest

from inventory_config import (
    ConfigError,
    KernelSettings,
    get_active_config,
)
from inventory_config.bridges import build_inventory_service, init_kernel
from inventory_kernel.db.engine import get_engine, reset_engine
from inventory_kernel.db.triggers import triggers_installed


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("INVENTORY_CONFIG", raising=False)
    monkeypatch.delenv("INVENTORY_DATABASE_URL", raising=False)


def _write(tmp_path, body: str):
    path = tmp_path / "settings.yaml"
    path.write_text(body)
    return path


class TestGetActiveConfig:

    def test_packaged_default(self):
        settings = get_active_config()

        assert isinstance(settings, KernelSettings)
        assert settings.database.url.startswith("sqlite:///")
        assert settings.store.timeout_seconds == 5.0
        assert settings.store.install_triggers is True
        assert settings.logging.level == "INFO"
        assert settings.source.endswith("default.yaml")

    def test_explicit_path(self, tmp_path):
        path = _write(
            tmp_path,
            "database:\n  url: sqlite:///other.db\nstore:\n  timeout_seconds: 2\n",
        )
        settings = get_active_config(path)

        assert settings.database.url == "sqlite:///other.db"
        assert settings.store.timeout_seconds == 2.0

    def test_path_from_environment(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "database:\n  url: sqlite:///env.db\n")
        monkeypatch.setenv("INVENTORY_CONFIG", str(path))

        assert get_active_config().database.url == "sqlite:///env.db"

    def test_database_url_override(self, tmp_path, monkeypatch):
        path = _write(tmp_path, "database:\n  url: sqlite:///file.db\n")
        monkeypatch.setenv("INVENTORY_DATABASE_URL", "postgresql://u:p@db/inventory")

        assert get_active_config(path).database.url == "postgresql://u:p@db/inventory"

    def test_defaults_for_missing_sections(self, tmp_path):
        settings = get_active_config(_write(tmp_path, "database:\n  url: sqlite://\n"))

        assert settings.database.pool_size == 10
        assert settings.store.timeout_seconds == 5.0
        assert settings.logging.level == "INFO"

    def test_config_loaded_logged(self, tmp_path, captured_logs):
        get_active_config(_write(tmp_path, "database:\n  url: sqlite://\n"))

        records = [r for r in captured_logs() if r["message"] == "config_loaded"]
        assert len(records) == 1
        assert records[0]["database_url_overridden"] is False


class TestInvalidSettings:

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            get_active_config(tmp_path / "absent.yaml")

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(ConfigError, match="Invalid YAML"):
            get_active_config(_write(tmp_path, "database: [unclosed\n"))

    def test_top_level_not_mapping(self, tmp_path):
        with pytest.raises(ConfigError, match="mapping"):
            get_active_config(_write(tmp_path, "- a\n- b\n"))

    def test_missing_url(self, tmp_path):
        with pytest.raises(ConfigError, match="database.url"):
            get_active_config(_write(tmp_path, "store:\n  timeout_seconds: 1\n"))

    @pytest.mark.parametrize(
        "body, match",
        [
            ("database:\n  url: sqlite://\nstore:\n  timeout_seconds: 0\n", "timeout_seconds"),
            ("database:\n  url: sqlite://\nstore:\n  timeout_seconds: true\n", "boolean"),
            ("database:\n  url: sqlite://\n  pool_size: 0\n", "pool_size"),
            ("database:\n  url: sqlite://\n  pool_size: ten\n", "pool_size"),
            ("database:\n  url: sqlite://\n  colour: blue\n", "Unknown keys"),
            ("database:\n  url: sqlite://\nextras: {}\n", "Unknown settings sections"),
            ("database:\n  url: sqlite://\nlogging:\n  level: LOUD\n", "logging.level"),
        ],
    )
    def test_invalid_values(self, tmp_path, body, match):
        with pytest.raises(ConfigError, match=match):
            get_active_config(_write(tmp_path, body))

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestBridges:

    def test_init_kernel_creates_schema_and_service(self, tmp_path):
        path = _write(
            tmp_path,
            f"database:\n  url: sqlite:///{tmp_path / 'bridge.db'}\n"
            "store:\n  timeout_seconds: 3\n",
        )
        settings = get_active_config(path)

        try:
            init_kernel(settings)
            assert triggers_installed(get_engine())

            service = build_inventory_service(settings, actor="bridge-test")
            assert service.lock_timeout == 3.0

            wh = service.register_warehouse("Bridge", "Here", "Meat", 10)
            assert service.import_product(wh.id, "Meat", 10).load_after == 10
        finally:
            reset_engine()

    def test_init_kernel_without_triggers(self, tmp_path):
        path = _write(
            tmp_path,
            f"database:\n  url: sqlite:///{tmp_path / 'plain.db'}\n"
            "store:\n  install_triggers: false\n",
        )
        try:
            init_kernel(get_active_config(path))
            assert not triggers_installed(get_engine())
        finally:
            reset_engine()
