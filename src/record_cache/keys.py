"""Cache key validation and namespacing.

Keys end up as the user key of a store record and are matched by prefix
during a scoped clear, so the namespace separator must never appear inside a
key or a namespace.
"""

from record_cache.errors import InvalidKeyError

NAMESPACE_SEPARATOR = ":"
RESERVED_CHARACTERS = "{}()/\\@:"


def validate_key(key: object) -> str:
    """Return key unchanged if it is a usable cache key.

    Raises:
        InvalidKeyError: If key is not a string, is empty, or contains a reserved character.
    """
    if not isinstance(key, str):
        raise InvalidKeyError(f"Cache key must be a string, {type(key).__name__} given")
    if key == "":
        raise InvalidKeyError("Cache key length must be greater than zero")
    for char in RESERVED_CHARACTERS:
        if char in key:
            raise InvalidKeyError(f"Cache key {key!r} contains reserved character {char!r}")
    return key


def namespace_prefix(cache_namespace: str) -> str:
    """Prefix prepended to every key stored under cache_namespace ("" when there is none)."""
    if cache_namespace == "":
        return ""
    return f"{cache_namespace}{NAMESPACE_SEPARATOR}"
