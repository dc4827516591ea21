"""
Metrics Collection
Prometheus metrics for render, memoization and store activity
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class MetricsCollector:
    """
    Collects and exposes Prometheus metrics for component rendering.

    Each collector owns its metric objects on one registry; pass a private
    CollectorRegistry to keep instances independent.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()

        # Render metrics
        self.renders_total = Counter(
            "swiftui_renders_total",
            "Component renders by outcome",
            ["component", "outcome"],
            registry=self.registry,
        )
        self.render_duration = Histogram(
            "swiftui_render_duration_seconds",
            "Time spent executing component bodies",
            ["component"],
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0],
            registry=self.registry,
        )
        self.render_errors = Counter(
            "swiftui_render_errors_total",
            "Component renders that raised",
            ["component", "error_type"],
            registry=self.registry,
        )

        # Store metrics
        self.store_updates = Counter(
            "swiftui_store_updates_total",
            "Store updates by outcome",
            ["outcome"],
            registry=self.registry,
        )
        self.store_notifications = Counter(
            "swiftui_store_notifications_total",
            "Diffs delivered to store subscribers",
            registry=self.registry,
        )
        self.store_subscriber_errors = Counter(
            "swiftui_store_subscriber_errors_total",
            "Store subscriber callbacks that raised",
            registry=self.registry,
        )

        # Fragment cache
        self.fragment_cache_size = Gauge(
            "swiftui_fragment_cache_entries",
            "Entries in the fragment cache",
            registry=self.registry,
        )

    def record_render(self, component: str, outcome: str, duration: float | None = None) -> None:
        """Record a render; ``outcome`` is rendered, memoized or fragment_cached."""
        self.renders_total.labels(component=component, outcome=outcome).inc()
        if duration is not None:
            self.render_duration.labels(component=component).observe(duration)

    def record_render_error(self, component: str, error_type: str) -> None:
        self.render_errors.labels(component=component, error_type=error_type).inc()

    def record_store_update(self, changed: bool) -> None:
        self.store_updates.labels(outcome="changed" if changed else "noop").inc()

    def record_store_notifications(self, count: int = 1) -> None:
        self.store_notifications.inc(count)

    def record_subscriber_error(self) -> None:
        self.store_subscriber_errors.inc()

    def set_fragment_cache_size(self, size: int) -> None:
        self.fragment_cache_size.set(size)

    @contextmanager
    def measure_duration(self, callback: Callable[[float], None]) -> Iterator[None]:
        """Context manager to measure operation duration."""
        start = time.perf_counter()
        try:
            yield
        finally:
            callback(time.perf_counter() - start)

    def get_metrics(self) -> bytes:
        """Get metrics in Prometheus format."""
        return generate_latest(self.registry)


# Process-wide collector on the default registry
metrics_collector = MetricsCollector(REGISTRY)
