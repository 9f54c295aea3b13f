import json
from pathlib import Path
from typing import Annotated, Any

import typer

from record_cache.cli._logging import configure_logging
from record_cache.cli._output import print_error, print_miss, print_result, print_value
from record_cache.config import CacheSettings, ConfigurationError, create_config, load_cache_settings
from record_cache.errors import CacheError, InvalidKeyError, RecordStoreError
from record_cache.factory import open_cache

app = typer.Typer(help="Inspect and maintain a record store cache.")

_DEFAULT_CONFIG = "record-cache.yaml"


def _settings(ctx: typer.Context) -> CacheSettings:
    config_path: str = ctx.obj["config_path"]
    try:
        return load_cache_settings(create_config(yaml_path=config_path))
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Annotated[Path, typer.Option("--config", "-c", help="YAML configuration file.")] = Path(_DEFAULT_CONFIG),
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = {"config_path": str(config)}


@app.command("get")
def get_cmd(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Cache key.")],
) -> None:
    """Print the cached value for KEY."""
    marker = object()
    try:
        with open_cache(_settings(ctx)) as cache:
            value = cache.get(key, marker)
    except (InvalidKeyError, RecordStoreError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    if value is marker:
        print_miss(key)
        raise typer.Exit(code=1)
    print_value(value)


@app.command("has")
def has_cmd(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Cache key.")],
) -> None:
    """Exit 0 if KEY is cached, 1 otherwise."""
    try:
        with open_cache(_settings(ctx)) as cache:
            found = cache.contains(key)
    except (InvalidKeyError, RecordStoreError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    if not found:
        print_miss(key)
        raise typer.Exit(code=1)
    print_result("Found", True, key)


@app.command("set")
def set_cmd(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Cache key.")],
    value: Annotated[str, typer.Argument(help="Value to store.")],
    ttl: Annotated[int | None, typer.Option("--ttl", min=0, help="Lifetime in seconds, 0 for no expiry.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Parse VALUE as JSON.")] = False,
) -> None:
    """Store VALUE under KEY."""
    payload: Any = value
    if as_json:
        try:
            payload = json.loads(value)
        except json.JSONDecodeError as e:
            print_error(f"VALUE is not valid JSON: {e}")
            raise typer.Exit(code=1) from None
    try:
        with open_cache(_settings(ctx)) as cache:
            saved = cache.set(key, payload, ttl)
    except (InvalidKeyError, RecordStoreError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    print_result("Saved", saved, key)
    if not saved:
        raise typer.Exit(code=1)


@app.command("delete")
def delete_cmd(
    ctx: typer.Context,
    keys: Annotated[list[str], typer.Argument(help="Cache keys to delete.")],
) -> None:
    """Delete one or more KEYS."""
    try:
        with open_cache(_settings(ctx)) as cache:
            deleted = cache.delete_many(keys)
    except (InvalidKeyError, RecordStoreError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    print_result("Deleted", deleted, ", ".join(keys))
    if not deleted:
        raise typer.Exit(code=1)


@app.command("clear")
def clear_cmd(
    ctx: typer.Context,
    prefix: Annotated[str, typer.Option("--prefix", "-p", help="Only clear keys starting with this prefix.")] = "",
) -> None:
    """Clear the cache, or only the keys under --prefix."""
    try:
        with open_cache(_settings(ctx)) as cache:
            cleared = cache.clear(prefix)
    except (CacheError, RecordStoreError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from None
    print_result("Cleared", cleared, prefix)
    if not cleared:
        raise typer.Exit(code=1)
