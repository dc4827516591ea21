"""Services a component needs at render time."""

from dataclasses import dataclass

from core.config import Settings
from monitoring.metrics import MetricsCollector
from reactive.store import StoreRegistry

from .caching import FragmentCache


@dataclass(frozen=True)
class RenderEnvironment:
    """
    Settings plus the shared services, bundled for injection.

    Built by the container for the process; tests construct their own to
    get a private store registry and metrics registry.
    """

    settings: Settings
    stores: StoreRegistry
    fragments: FragmentCache
    metrics: MetricsCollector | None = None

    @classmethod
    def create(cls, settings: Settings | None = None, metrics: MetricsCollector | None = None) -> "RenderEnvironment":
        """Fresh environment with its own registry and fragment cache."""
        settings = settings or Settings()
        metrics = metrics if metrics is not None else MetricsCollector()
        return cls(
            settings=settings,
            stores=StoreRegistry(metrics=metrics),
            fragments=FragmentCache(
                max_size=settings.fragment_cache_size,
                ttl_seconds=settings.fragment_cache_ttl,
                metrics=metrics,
            ),
            metrics=metrics,
        )
