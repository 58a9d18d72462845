"""Cache key builders. Single place for key format.

Client numbers are normalized, eight-digit strings, so they never contain
CACHE_KEY_SEP; other components are checked.
"""

from wastesearch.core.constants import (
    CACHE_KEY_SEP,
    CACHE_PREFIX_CLIENT,
    CACHE_PREFIX_CLIENT_LOCATIONS,
)


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value contains the cache key separator."""
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def client_key(client_number: str) -> str:
    """Cache key for a client by number."""
    _validate_key_component(client_number, "client_number")
    return f"{CACHE_PREFIX_CLIENT}{CACHE_KEY_SEP}{client_number}"


def client_locations_key(client_number: str) -> str:
    """Cache key for all locations of a client."""
    _validate_key_component(client_number, "client_number")
    return f"{CACHE_PREFIX_CLIENT_LOCATIONS}{CACHE_KEY_SEP}{client_number}"
