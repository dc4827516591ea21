"""Dependency Injection Container."""

from functools import lru_cache

from injector import Injector, Module, provider, singleton

from components.caching import FragmentCache
from components.environment import RenderEnvironment
from monitoring.metrics import MetricsCollector, metrics_collector
from reactive.store import StoreRegistry

from .config import Settings, get_settings


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Settings | None = None, metrics: MetricsCollector | None = None) -> None:
        self.settings = settings
        self.metrics = metrics

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        """Provide settings singleton."""
        return self.settings if self.settings is not None else get_settings()

    @singleton
    @provider
    def provide_metrics(self) -> MetricsCollector:
        """Provide metrics collector (process-wide registry unless overridden)."""
        return self.metrics if self.metrics is not None else metrics_collector

    @singleton
    @provider
    def provide_store_registry(self, metrics: MetricsCollector) -> StoreRegistry:
        """Provide the process-wide store registry."""
        return StoreRegistry(metrics=metrics)

    @singleton
    @provider
    def provide_fragment_cache(self, settings: Settings, metrics: MetricsCollector) -> FragmentCache:
        """Provide the cross-instance fragment cache."""
        return FragmentCache(
            max_size=settings.fragment_cache_size,
            ttl_seconds=settings.fragment_cache_ttl,
            metrics=metrics,
        )

    @singleton
    @provider
    def provide_environment(
        self,
        settings: Settings,
        stores: StoreRegistry,
        fragments: FragmentCache,
        metrics: MetricsCollector,
    ) -> RenderEnvironment:
        """Provide the render environment with all dependencies."""
        return RenderEnvironment(settings=settings, stores=stores, fragments=fragments, metrics=metrics)


def create_container(settings: Settings | None = None, metrics: MetricsCollector | None = None) -> Injector:
    """Create configured injector."""
    return Injector([CoreModule(settings, metrics)])


@lru_cache
def get_environment() -> RenderEnvironment:
    """Process-wide render environment from the default container."""
    return create_container().get(RenderEnvironment)
