from __future__ import annotations

from pathlib import Path

import pytest
from config import ConfigurationSet

from record_cache.config import CacheSettings, ConfigurationError, create_config, load_cache_settings


def test_create_config_returns_defaults() -> None:
    cfg = create_config(yaml_path="/nonexistent/record-cache.yaml")
    assert isinstance(cfg, ConfigurationSet)
    assert cfg["store.backend"] == "sqlite"
    assert cfg["cache.namespace"] == "test"
    assert cfg["cache.set"] == "cache"
    assert cfg["cache.default_ttl"] == 0


def test_yaml_overrides_defaults(tmp_path: Path) -> None:
    yaml_file = tmp_path / "record-cache.yaml"
    yaml_file.write_text("cache:\n  namespace: prod\n  default_ttl: 600\n")
    cfg = create_config(yaml_path=str(yaml_file))
    assert cfg["cache.namespace"] == "prod"
    assert cfg["cache.default_ttl"] == 600
    # Defaults still apply for unset keys
    assert cfg["cache.set"] == "cache"


def test_env_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    yaml_file = tmp_path / "record-cache.yaml"
    yaml_file.write_text("cache:\n  namespace: prod\n")
    monkeypatch.setenv("RECORD_CACHE__CACHE__NAMESPACE", "staging")
    monkeypatch.setenv("RECORD_CACHE__CACHE__DEFAULT_TTL", "30")

    cfg = create_config(yaml_path=str(yaml_file))
    assert cfg["cache.namespace"] == "staging"
    assert cfg["cache.default_ttl"] == "30"  # env vars are strings


def test_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RECORD_CACHE__CACHE__NAMESPACE", "staging")
    cfg = create_config(yaml_path="/nonexistent.yaml", overrides={"cache": {"namespace": "explicit"}})
    assert cfg["cache.namespace"] == "explicit"


class TestLoadCacheSettings:
    def test_defaults(self) -> None:
        settings = load_cache_settings(create_config(yaml_path="/nonexistent.yaml"))
        assert settings == CacheSettings(
            backend="sqlite",
            db_path=Path("~/.cache/record-cache/records.db").expanduser(),
            hosts=(("127.0.0.1", 3000),),
            namespace="test",
            set_name="cache",
            cache_namespace="",
            default_ttl=0,
        )

    def test_env_strings_are_converted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECORD_CACHE__CACHE__DEFAULT_TTL", "45")
        monkeypatch.setenv("RECORD_CACHE__STORE__HOSTS", "db1:3000,db2:3100")
        settings = load_cache_settings(create_config(yaml_path="/nonexistent.yaml"))
        assert settings.default_ttl == 45
        assert settings.hosts == (("db1", 3000), ("db2", 3100))

    def test_rejects_unknown_backend(self) -> None:
        cfg = create_config(yaml_path="/nonexistent.yaml", overrides={"store": {"backend": "redis"}})
        with pytest.raises(ConfigurationError, match="Unknown store backend"):
            load_cache_settings(cfg)

    def test_rejects_negative_ttl(self) -> None:
        cfg = create_config(yaml_path="/nonexistent.yaml", overrides={"cache": {"default_ttl": -1}})
        with pytest.raises(ConfigurationError, match="non-negative"):
            load_cache_settings(cfg)

    def test_rejects_non_integer_ttl(self) -> None:
        cfg = create_config(yaml_path="/nonexistent.yaml", overrides={"cache": {"default_ttl": "soon"}})
        with pytest.raises(ConfigurationError, match="integer"):
            load_cache_settings(cfg)

    def test_rejects_bad_host(self) -> None:
        cfg = create_config(yaml_path="/nonexistent.yaml", overrides={"store": {"hosts": ["localhost"]}})
        with pytest.raises(ConfigurationError, match="host:port"):
            load_cache_settings(cfg)
