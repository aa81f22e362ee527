# backend/app/services/search/metrics.py
"""
Prometheus metrics for directory search.

Provides observability for:
- Search latency by stage
- Result counts per collection
- Degradation events (geocoding, category lookups)
"""
from __future__ import annotations

from typing import Dict, List

from prometheus_client import Counter, Gauge, Histogram

from app.monitoring.prometheus_metrics import REGISTRY, PrometheusMetrics

SEARCH_LATENCY = Histogram(
    "dogdir_search_latency_ms",
    "Search latency in milliseconds",
    ["stage", "location_mode"],
    registry=REGISTRY,
    buckets=[5, 10, 25, 50, 100, 200, 500, 1000, 2000],
)

SEARCH_RESULT_COUNT = Histogram(
    "dogdir_search_result_count",
    "Number of search results returned",
    ["collection"],
    registry=REGISTRY,
    buckets=[0, 1, 5, 10, 20, 50, 100],
)

SEARCH_ZERO_RESULTS = Counter(
    "dogdir_search_zero_results_total",
    "Count of searches returning zero results",
    ["search_type"],
    registry=REGISTRY,
)

GEOCODING_REQUESTS = Counter(
    "dogdir_geocoding_requests_total",
    "Outbound geocoding calls by outcome",
    ["provider", "outcome"],
    registry=REGISTRY,
)

CIRCUIT_BREAKER_STATE = Gauge(
    "dogdir_search_circuit_breaker_state",
    "Circuit breaker state (0=closed, 1=half-open, 2=open)",
    ["component"],
    registry=REGISTRY,
)

DEGRADATION_EVENTS = Counter(
    "dogdir_search_degradation_total",
    "Count of degradation events",
    ["component"],
    registry=REGISTRY,
)

SEARCH_REQUESTS = Counter(
    "dogdir_search_requests_total",
    "Total search requests",
    ["status", "search_type"],
    registry=REGISTRY,
)


def record_search_metrics(
    total_latency_ms: int,
    stage_latencies: Dict[str, int],
    location_mode: str,
    search_type: str,
    service_count: int,
    product_count: int,
    degradation_reasons: List[str],
) -> None:
    """Record all metrics for a completed search request."""

    SEARCH_LATENCY.labels(stage="total", location_mode=location_mode).observe(total_latency_ms)
    for stage, latency in stage_latencies.items():
        SEARCH_LATENCY.labels(stage=stage, location_mode=location_mode).observe(latency)

    SEARCH_RESULT_COUNT.labels(collection="services").observe(service_count)
    SEARCH_RESULT_COUNT.labels(collection="products").observe(product_count)

    total = service_count + product_count
    if total == 0:
        SEARCH_ZERO_RESULTS.labels(search_type=search_type).inc()

    for reason in degradation_reasons:
        DEGRADATION_EVENTS.labels(component=reason).inc()

    status = "success" if total > 0 else "zero_results"
    SEARCH_REQUESTS.labels(status=status, search_type=search_type).inc()

    PrometheusMetrics._invalidate_cache()


def record_search_failure(reason: str) -> None:
    """Record a search that ended with an error response."""
    SEARCH_REQUESTS.labels(status="error", search_type=reason).inc()
    PrometheusMetrics._invalidate_cache()


def record_geocoding_call(provider: str, outcome: str) -> None:
    """Record an outbound geocoding call (`hit`, `miss`, `error`, `circuit_open`)."""
    GEOCODING_REQUESTS.labels(provider=provider, outcome=outcome).inc()
    PrometheusMetrics._invalidate_cache()


def update_circuit_breaker_state(component: str, state: str) -> None:
    """Update circuit breaker state gauge."""
    state_value = {"closed": 0, "half_open": 1, "open": 2}.get(state, 0)
    CIRCUIT_BREAKER_STATE.labels(component=component).set(state_value)
    PrometheusMetrics._invalidate_cache()


__all__ = [
    "SEARCH_LATENCY",
    "SEARCH_RESULT_COUNT",
    "SEARCH_ZERO_RESULTS",
    "GEOCODING_REQUESTS",
    "CIRCUIT_BREAKER_STATE",
    "DEGRADATION_EVENTS",
    "SEARCH_REQUESTS",
    "record_search_metrics",
    "record_search_failure",
    "record_geocoding_call",
    "update_circuit_breaker_state",
]
