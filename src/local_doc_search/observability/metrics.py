"""Prometheus metrics for ingestion and search.

Each metric is a ``MetricBridge``: the prometheus_client collector is the
source of truth for scraping, and every update is mirrored to an
OpenTelemetry instrument so an installed meter provider sees the same data.
Without a provider the OTel side is a no-op.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
import time
from typing import Any, Literal

from opentelemetry import metrics as otel_metrics
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


MetricKind = Literal["counter", "histogram", "gauge"]

_PROMETHEUS_TYPES: dict[str, type[Counter] | type[Histogram] | type[Gauge]] = {
    "counter": Counter,
    "histogram": Histogram,
    "gauge": Gauge,
}


class _LabelledMetric:
    """A metric with its label values bound, mirroring prometheus' ``.labels()`` child."""

    def __init__(self, bridge: MetricBridge, labels: dict[str, str]) -> None:
        self._bridge = bridge
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._bridge.prometheus.labels(**self._labels).inc(amount)
        self._bridge.instrument().add(amount, self._labels)

    def observe(self, value: float) -> None:
        self._bridge.prometheus.labels(**self._labels).observe(value)
        self._bridge.instrument().record(value, self._labels)

    def set(self, value: float) -> None:
        # OTel has no settable gauge here; emit the change on an up-down counter
        self._bridge.prometheus.labels(**self._labels).set(value)
        delta = self._bridge.remember(self._labels, value)
        if delta:
            self._bridge.instrument().add(delta, self._labels)


class MetricBridge:
    """One named metric exported through prometheus_client and OpenTelemetry."""

    def __init__(
        self,
        kind: MetricKind,
        name: str,
        description: str,
        labelnames: Sequence[str],
        **prometheus_kwargs: Any,
    ) -> None:
        self.kind = kind
        self.name = name
        self.description = description
        self.prometheus = _PROMETHEUS_TYPES[kind](name, description, list(labelnames), **prometheus_kwargs)
        self._instrument: Any = None
        self._gauge_values: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _LabelledMetric:
        return _LabelledMetric(self, labels)

    def instrument(self) -> Any:
        """Create the OTel instrument on first use, from whatever meter provider is installed."""
        if self._instrument is None:
            meter = otel_metrics.get_meter("local_doc_search")
            if self.kind == "counter":
                self._instrument = meter.create_counter(self.name, description=self.description)
            elif self.kind == "histogram":
                self._instrument = meter.create_histogram(self.name, unit="s", description=self.description)
            else:
                self._instrument = meter.create_up_down_counter(self.name, description=self.description)
        return self._instrument

    def remember(self, labels: dict[str, str], value: float) -> float:
        """Store the latest gauge value for ``labels`` and return the change."""
        key = tuple(sorted(labels.items()))
        previous = self._gauge_values.get(key, 0.0)
        self._gauge_values[key] = value
        return value - previous


DOCUMENTS_INGESTED = MetricBridge(
    "counter",
    "doc_search_documents_ingested_total",
    "Documents ingested into the index",
    ["status"],
)

QUERIES = MetricBridge(
    "counter",
    "doc_search_queries_total",
    "Search queries served, by outcome (hit, miss, empty)",
    ["outcome"],
)

QUERY_LATENCY = MetricBridge(
    "histogram",
    "doc_search_query_latency_seconds",
    "Search and suggestion latency",
    ["operation"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25),
)

INDEX_TERMS = MetricBridge(
    "gauge",
    "doc_search_index_terms",
    "Distinct terms in the inverted index",
    ["store"],
)


@contextmanager
def track_latency(metric: MetricBridge, **labels: str) -> Iterator[None]:
    """Observe the wall time of the block on ``metric``, even when it raises."""
    start = time.perf_counter()
    try:
        yield
    finally:
        metric.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Render the default registry in Prometheus text format."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
