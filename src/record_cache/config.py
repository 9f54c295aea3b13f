from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, cast

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

if TYPE_CHECKING:
    from collections.abc import Iterable

BACKENDS = ("sqlite", "aerospike")


class AppConfig(Protocol):
    def __getitem__(self, key: str) -> object: ...


class ConfigurationError(Exception):
    """Raised when configuration values are missing or invalid."""


_DEFAULTS: dict[str, object] = {
    "store": {
        "backend": "sqlite",
        "db_path": "~/.cache/record-cache/records.db",
        "hosts": ["127.0.0.1:3000"],
    },
    "cache": {
        "namespace": "test",
        "set": "cache",
        "cache_namespace": "",
        "default_ttl": 0,
    },
}


@dataclass(frozen=True)
class CacheSettings:
    """Everything needed to build a record store and a cache adapter over it.

    Attributes:
        backend: Record store implementation, one of ``BACKENDS``.
        db_path: SQLite file for the ``sqlite`` backend.
        hosts: ``host:port`` seeds for the ``aerospike`` backend.
        namespace: Store namespace holding the cache set.
        set_name: Store set holding the cache records.
        cache_namespace: Sub-namespace prefix for cache keys.
        default_ttl: Default lifetime in seconds, 0 for no expiry.
    """

    backend: str = "sqlite"
    db_path: Path = Path("~/.cache/record-cache/records.db")
    hosts: tuple[tuple[str, int], ...] = (("127.0.0.1", 3000),)
    namespace: str = "test"
    set_name: str = "cache"
    cache_namespace: str = ""
    default_ttl: int = 0


def create_config(
    yaml_path: str = "record-cache.yaml",
    env_prefix: str = "RECORD_CACHE",
    defaults: dict[str, object] | None = None,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file.
        env_prefix: Prefix for environment variables (``RECORD_CACHE__CACHE__NAMESPACE``).
        defaults: Default configuration values.
        overrides: Values that win over every other layer.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)


def load_cache_settings(cfg: AppConfig | None = None) -> CacheSettings:
    """Read and validate CacheSettings. Env vars arrive as strings and are converted here.

    Raises:
        ConfigurationError: If the backend is unknown, the TTL is not a non-negative
            integer, or a host is not ``host:port``.
    """
    if cfg is None:
        cfg = create_config()

    backend = str(cfg["store.backend"]).lower()
    if backend not in BACKENDS:
        raise ConfigurationError(f"Unknown store backend {backend!r}, expected one of {', '.join(BACKENDS)}")

    try:
        default_ttl = int(str(cfg["cache.default_ttl"]))
    except ValueError:
        raise ConfigurationError(f"cache.default_ttl must be an integer, got {cfg['cache.default_ttl']!r}") from None
    if default_ttl < 0:
        raise ConfigurationError(f"cache.default_ttl must be non-negative, got {default_ttl}")

    namespace = str(cfg["cache.namespace"])
    if not namespace:
        raise ConfigurationError("cache.namespace must not be empty")

    return CacheSettings(
        backend=backend,
        db_path=Path(str(cfg["store.db_path"])).expanduser(),
        hosts=_parse_hosts(cfg["store.hosts"]),
        namespace=namespace,
        set_name=str(cfg["cache.set"]),
        cache_namespace=str(cfg["cache.cache_namespace"] or ""),
        default_ttl=default_ttl,
    )


def _parse_hosts(raw: object) -> tuple[tuple[str, int], ...]:
    entries = raw.split(",") if isinstance(raw, str) else list(cast("Iterable[object]", raw))
    hosts: list[tuple[str, int]] = []
    for entry in entries:
        host, sep, port = str(entry).strip().rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ConfigurationError(f"store.hosts entries must look like host:port, got {entry!r}")
        hosts.append((host, int(port)))
    return tuple(hosts)
