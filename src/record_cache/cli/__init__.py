from record_cache.cli.app import app

__all__ = ["app"]
