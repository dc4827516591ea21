"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .errors import (
    SwiftUIError,
    ComponentError,
    MissingRequiredProp,
    PropTypeMismatch,
    UnknownProp,
    UnknownState,
    DefinitionError,
    RegistrationInvariantViolation,
    ComponentDepthExceeded,
    StoreAccessError,
    BindingReadOnlyError,
)
from .logging_config import configure_logging, get_logger, LogContext
from .json import safe_json_dumps, safe_json_loads, JSONParseError, validate_json_depth
from .hash import Algorithm, hash_string, hash_bytes, hash_fields
from .cache import LRUCache, Stats


def create_container(**overrides):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(**overrides)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Errors
    "SwiftUIError",
    "ComponentError",
    "MissingRequiredProp",
    "PropTypeMismatch",
    "UnknownProp",
    "UnknownState",
    "DefinitionError",
    "RegistrationInvariantViolation",
    "ComponentDepthExceeded",
    "StoreAccessError",
    "BindingReadOnlyError",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "safe_json_dumps",
    "safe_json_loads",
    "JSONParseError",
    "validate_json_depth",
    # DI
    "create_container",
    # Hashing
    "Algorithm",
    "hash_string",
    "hash_bytes",
    "hash_fields",
    # Caching
    "LRUCache",
    "Stats",
]
