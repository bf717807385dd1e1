"""
Shared metrics configuration for the GitHub auth service.
"""

from prometheus_client import Counter, Histogram, Info, CollectorRegistry
from typing import Dict, Any, Optional
import time
from contextlib import contextmanager


class MetricsCollector:
    """Centralized metrics collector for the service.

    Each collector owns its registry unless one is passed in, so several
    authenticators can live in one process without clashing series.
    """

    def __init__(self, service_name: str, registry: Optional[CollectorRegistry] = None):
        self.service_name = service_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up common metrics for the service."""

        self._metrics["service_info"] = Info(
            "service_info",
            "Service information",
            registry=self.registry
        )
        self._metrics["service_info"].info({
            "service": self.service_name,
            "version": "1.0.0"
        })

        self._metrics["errors_total"] = Counter(
            "errors_total",
            "Total errors",
            ["error_type", "service"],
            registry=self.registry
        )

        self._setup_auth_metrics()

    def _setup_auth_metrics(self):
        """Set up auth-specific metrics."""
        self._metrics["authentications_total"] = Counter(
            "authentications_total",
            "Total authentication attempts",
            ["status"],
            registry=self.registry
        )

        self._metrics["verifications_total"] = Counter(
            "verifications_total",
            "Total credential verifications",
            ["status"],
            registry=self.registry
        )

        self._metrics["membership_cache_total"] = Counter(
            "membership_cache_total",
            "Membership cache lookups",
            ["result"],
            registry=self.registry
        )

        self._metrics["github_pages_fetched_total"] = Counter(
            "github_pages_fetched_total",
            "Team pages fetched from GitHub",
            registry=self.registry
        )

        self._metrics["membership_resolution_duration_seconds"] = Histogram(
            "membership_resolution_duration_seconds",
            "Membership resolution duration in seconds",
            registry=self.registry
        )

    def get_metric(self, name: str):
        """Get a metric by name."""
        return self._metrics.get(name)

    def get_sample_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read a sample back from this collector's registry."""
        return self.registry.get_sample_value(name, labels or {})

    def record_error(self, error_type: str, service: Optional[str] = None):
        """Record error metrics."""
        service_name = service or self.service_name
        self._metrics["errors_total"].labels(error_type=error_type, service=service_name).inc()

    def record_authentication(self, status: str):
        self._metrics["authentications_total"].labels(status=status).inc()

    def record_verification(self, status: str):
        self._metrics["verifications_total"].labels(status=status).inc()

    def record_cache_lookup(self, hit: bool):
        self._metrics["membership_cache_total"].labels(result="hit" if hit else "miss").inc()

    def record_page_fetched(self):
        self._metrics["github_pages_fetched_total"].inc()

    @contextmanager
    def time_operation(self, operation_name: str, **labels):
        """Context manager to time an operation."""
        start_time = time.time()
        try:
            yield
        finally:
            duration = time.time() - start_time
            if operation_name in self._metrics:
                metric = self._metrics[operation_name]
                if labels:
                    metric = metric.labels(**labels)
                metric.observe(duration)


def get_metrics_collector(service_name: str, registry: Optional[CollectorRegistry] = None) -> MetricsCollector:
    """Get a metrics collector for a service."""
    return MetricsCollector(service_name, registry)
