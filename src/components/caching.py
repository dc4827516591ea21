"""
Render caching.

Two layers: a per-instance memo (markup plus the fingerprint it was
rendered from) and an optional process-wide fragment cache shared across
instances of classes that opt in with ``cache=CacheOptions(...)``.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from pydantic import BaseModel, ConfigDict, Field

from core.cache import LRUCache, Stats
from core.hash import Algorithm, hash_fields
from core.logging_config import get_logger
from dsl.element import Markup

from .fingerprint import canonicalize

if TYPE_CHECKING:
    from monitoring.metrics import MetricsCollector
    from reactive.store import ObservableStore
    from .base import Component

logger = get_logger(__name__)


@dataclass(frozen=True)
class MemoizedOutput:
    """Markup produced by one render and the fingerprint it was keyed on."""

    markup: Markup
    fingerprint: str
    dependencies: tuple[tuple["ObservableStore", int], ...] = ()

    def matches(self, current: str) -> bool:
        return self.fingerprint == current and self.is_fresh()

    def is_fresh(self) -> bool:
        """True while every store read during the render is still at the version seen then."""
        return all(store.version == version for store, version in self.dependencies)


class CacheOptions(BaseModel):
    """Fragment cache options for a component class."""

    model_config = ConfigDict(frozen=True)

    expires_in: int | None = Field(default=None, gt=0, description="TTL override in seconds")
    key_attributes: tuple[str, ...] = Field(
        default=(), description="Props/state that make up the key; empty means the full fingerprint"
    )
    version: str | None = Field(default=None, description="Bumped to invalidate old fragments")


class FragmentCache:
    """
    Cross-instance markup cache.

    Entries with a per-class ``expires_in`` are checked against their own
    TTL; everything else uses the cache-wide TTL.
    """

    def __init__(
        self,
        max_size: int = 500,
        ttl_seconds: int | None = 3600,
        metrics: "MetricsCollector | None" = None,
    ) -> None:
        self._cache = LRUCache[Markup](max_size=max_size, ttl_seconds=ttl_seconds)
        self._short_lived: dict[int, LRUCache[Markup]] = {}
        self._max_size = max_size
        self._metrics = metrics

    def _cache_for(self, expires_in: int | None) -> LRUCache[Markup]:
        if expires_in is None:
            return self._cache
        cache = self._short_lived.get(expires_in)
        if cache is None:
            cache = self._short_lived.setdefault(
                expires_in, LRUCache[Markup](max_size=self._max_size, ttl_seconds=expires_in)
            )
        return cache

    def fetch(self, key: str, producer: Callable[[], Markup], expires_in: int | None = None) -> tuple[Markup, bool]:
        """
        Return the cached markup for ``key`` or produce and store it.

        Returns:
            ``(markup, hit)``
        """
        produced = False

        def produce() -> Markup:
            nonlocal produced
            produced = True
            return producer()

        markup = self._cache_for(expires_in).get_or_set(key, produce)
        if not produced:
            logger.debug("fragment_cache_hit", key=key)
            return markup, True

        if self._metrics is not None:
            self._metrics.set_fragment_cache_size(len(self))
        return markup, False

    def invalidate(self, key: str) -> bool:
        removed = self._cache.delete(key)
        for cache in list(self._short_lived.values()):
            removed = cache.delete(key) or removed
        return removed

    def clear(self) -> None:
        self._cache.clear()
        for cache in list(self._short_lived.values()):
            cache.clear()

    @property
    def stats(self) -> Stats:
        return self._cache.stats

    def __len__(self) -> int:
        return len(self._cache) + sum(len(c) for c in list(self._short_lived.values()))


def cache_key(component: "Component", cache_version: str = "v1", algorithm: Algorithm = Algorithm.XXHASH64) -> str:
    """
    Fragment cache key for a component instance.

    Built from the class identity, the global and per-class versions, and
    either the listed key attributes or the full fingerprint.
    """
    cls = type(component)
    options = cls.__schema__.cache
    parts = [
        f"{cls.__module__}.{cls.__qualname__}",
        f"cache:{cache_version}",
        f"version:{options.version if options and options.version else ''}",
    ]
    if options and options.key_attributes:
        for name in options.key_attributes:
            parts.append(f"{name}:{canonicalize(component.key_value(name), algorithm)}")
    else:
        parts.append(f"fingerprint:{component.current_fingerprint()}")
    return f"swift_ui/{cls.__name__}/{hash_fields(*parts, algorithm=algorithm)}"
