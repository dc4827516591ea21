"""
Performance Monitoring
Prometheus-based metrics collection for component rendering
"""

from .metrics import MetricsCollector, metrics_collector

__all__ = [
    "MetricsCollector",
    "metrics_collector",
]
