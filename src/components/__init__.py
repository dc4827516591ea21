"""Declarative server-rendered components."""

from .schema import (
    ComponentSchema,
    binding,
    computed,
    observe,
    observed,
    prop,
    slot,
    state,
)
from .caching import CacheOptions, FragmentCache, MemoizedOutput, cache_key
from .environment import RenderEnvironment
from .fingerprint import canonicalize, fingerprint
from .slots import EMPTY
from .base import Component
from .collection import ComponentCollection, ItemIteration

__all__ = [
    # Declarations
    "ComponentSchema",
    "binding",
    "computed",
    "observe",
    "observed",
    "prop",
    "slot",
    "state",
    # Component
    "Component",
    "ComponentCollection",
    "ItemIteration",
    "EMPTY",
    # Caching
    "CacheOptions",
    "FragmentCache",
    "MemoizedOutput",
    "cache_key",
    "RenderEnvironment",
    # Fingerprints
    "canonicalize",
    "fingerprint",
]
