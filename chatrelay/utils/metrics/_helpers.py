"""
Helpers for Prometheus metric registration.

Creating a collector twice (``--reload``, or several applications built in
one test session) raises ``ValueError``; the helpers return the collector
already in the registry instead.
"""

from prometheus_client import REGISTRY, Counter, Gauge


def _get_or_create[M: (Counter, Gauge)](
    metric_cls: type[M], name: str, doc: str, labels: list[str] | None
) -> M:
    try:
        return metric_cls(name, doc, labels or [])
    except ValueError:
        # Counters are registered under both "x" and "x_total"
        return REGISTRY._names_to_collectors[name]  # type: ignore[return-value]


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    """
    Get existing counter or create new one.

    Args:
        name: Metric name, including the ``_total`` suffix.
        doc: Metric documentation.
        labels: Optional list of label names.
    """
    return _get_or_create(Counter, name, doc, labels)


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    """Get existing gauge or create new one."""
    return _get_or_create(Gauge, name, doc, labels)
