"""Prometheus metrics for monitoring verdicts, cache efficiency, and upstream health"""

from prometheus_client import Counter, Histogram

# Analysis metrics
analysis_counter = Counter(
    "site_viability_analysis_total",
    "Total site analyses completed",
    ["verdict"],  # OPEN | OPEN_WITH_CONDITIONS | DO_NOT_OPEN
)

cache_lookup_counter = Counter(
    "site_viability_cache_lookups_total",
    "Result cache lookups",
    ["result"],  # hit | miss
)

phase_duration_histogram = Histogram(
    "site_viability_phase_duration_seconds",
    "Pipeline phase wall time",
    ["phase"],  # geocode | nearby | details | score | llm | total
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
)

# Upstream metrics
upstream_failures_counter = Counter(
    "upstream_failures_total",
    "Failed upstream calls",
    ["upstream", "kind"],  # kind: rate_limited | timeout | error | not_found
)

insight_fallback_counter = Counter(
    "insight_fallback_total",
    "Insight packs served from the deterministic fallback",
    ["reason"],  # disabled | model_error
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_analysis(verdict: str) -> None:
    """Record outcome of a completed analysis"""
    analysis_counter.labels(verdict=verdict).inc()


def record_cache_lookup(hit: bool) -> None:
    """Record every result cache lookup, whether or not the analysis then succeeds"""
    cache_lookup_counter.labels(result="hit" if hit else "miss").inc()


def record_phase_timings(timings_ms: dict) -> None:
    """Observe each phase duration (milliseconds in, seconds recorded)"""
    for phase, duration_ms in timings_ms.items():
        phase_duration_histogram.labels(phase=phase).observe(duration_ms / 1000)
