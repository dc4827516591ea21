"""Tests for dependency injection container."""

from prometheus_client import CollectorRegistry

from components import FragmentCache, RenderEnvironment
from core.config import Settings
from core.container import create_container, get_environment
from monitoring.metrics import MetricsCollector
from reactive import StoreRegistry


def test_container_provides_singletons():
    """Services resolve to one instance per container."""
    container = create_container(Settings(), MetricsCollector(CollectorRegistry()))

    assert container.get(StoreRegistry) is container.get(StoreRegistry)
    assert container.get(FragmentCache) is container.get(FragmentCache)


def test_environment_wires_shared_services():
    """The environment holds the container's registry, cache and metrics."""
    settings = Settings(cache_version="v9")
    metrics = MetricsCollector(CollectorRegistry())
    container = create_container(settings, metrics)

    env = container.get(RenderEnvironment)

    assert env.settings is settings
    assert env.metrics is metrics
    assert env.stores is container.get(StoreRegistry)
    assert env.fragments is container.get(FragmentCache)


def test_separate_containers_are_isolated():
    """Two containers never share a store registry."""
    first = create_container(Settings(), MetricsCollector(CollectorRegistry()))
    second = create_container(Settings(), MetricsCollector(CollectorRegistry()))

    assert first.get(StoreRegistry) is not second.get(StoreRegistry)


def test_default_environment_is_cached():
    """The process-wide environment is built once."""
    assert get_environment() is get_environment()


def test_environment_create_is_private():
    """RenderEnvironment.create builds fresh services each time."""
    first = RenderEnvironment.create(settings=Settings(), metrics=MetricsCollector(CollectorRegistry()))
    second = RenderEnvironment.create(settings=Settings(), metrics=MetricsCollector(CollectorRegistry()))

    assert first.stores is not second.stores
    assert first.fragments is not second.fragments
