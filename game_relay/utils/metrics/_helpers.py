"""
Idempotent Prometheus metric registration.

Metric modules can be imported more than once in one process (uvicorn
--reload, test applications built repeatedly); the second registration
returns the collector already in the default registry.
"""

from typing import TypeVar

from prometheus_client import REGISTRY, Counter, Gauge
from prometheus_client.metrics import MetricWrapperBase

MetricType = TypeVar("MetricType", bound=MetricWrapperBase)


def _get_or_create(
    metric_cls: type[MetricType],
    name: str,
    doc: str,
    labels: list[str] | None = None,
) -> MetricType:
    try:
        return metric_cls(name, doc, labels or [])
    except ValueError:
        # Duplicated timeseries, reuse the registered collector
        return REGISTRY._names_to_collectors[name]


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    """Counter `name`, created on first use."""
    return _get_or_create(Counter, name, doc, labels)


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    """Gauge `name`, created on first use."""
    return _get_or_create(Gauge, name, doc, labels)
