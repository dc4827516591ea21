"""Pytest configuration and fixtures."""

import os

import pytest
from prometheus_client import CollectorRegistry

from components import RenderEnvironment
from core.config import Settings, get_settings
from dsl import Builder, DSLContext
from monitoring.metrics import MetricsCollector
from reactive import StoreRegistry


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["SWIFTUI_LOG_LEVEL"] = "DEBUG"
    os.environ["SWIFTUI_MEMOIZATION_ENABLED"] = "true"
    os.environ["SWIFTUI_MAXIMUM_COMPONENT_DEPTH"] = "50"
    get_settings.cache_clear()


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Fresh settings built from the test environment."""
    return Settings()


@pytest.fixture
def metrics():
    """Metrics collector on a private Prometheus registry."""
    return MetricsCollector(CollectorRegistry())


# ============================================================================
# Reactive Fixtures
# ============================================================================

@pytest.fixture
def store_registry(metrics):
    """Isolated store registry."""
    registry = StoreRegistry(metrics=metrics)
    yield registry
    registry.clear()


# ============================================================================
# Component Fixtures
# ============================================================================

@pytest.fixture
def env(settings, metrics):
    """Render environment with its own stores, fragment cache and metrics."""
    environment = RenderEnvironment.create(settings=settings, metrics=metrics)
    yield environment
    environment.stores.clear()
    environment.fragments.clear()


# ============================================================================
# DSL Fixtures
# ============================================================================

@pytest.fixture
def context():
    """DSL context without an owning component."""
    return DSLContext()


@pytest.fixture
def ui(context):
    """Builder bound to the context fixture."""
    return context.builder


@pytest.fixture
def adhoc():
    """Standalone builder with no context."""
    return Builder()
