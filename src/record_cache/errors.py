class CacheError(Exception):
    """Raised when a cache operation cannot leave the cache in a consistent state.

    Attributes:
        message: Human-readable error description, usually the store's own error text.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidKeyError(CacheError, ValueError):
    """Raised for cache keys that are empty, not strings, or contain reserved characters."""


class RecordStoreError(Exception):
    """Raised by a record store client when the store cannot be reached at all.

    Attributes:
        message: Human-readable error description.
        cause: Optional underlying exception that caused this error.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message
