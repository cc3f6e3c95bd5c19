"""Prometheus metrics for monitoring scoring volume, advisory health and cache fallbacks"""

from prometheus_client import Counter, Histogram

# Scoring metrics
score_request_counter = Counter(
    "kobi_score_requests_total",
    "Score requests by outcome",
    ["outcome"],  # computed | cached | rate_limited | not_found
)

score_band_counter = Counter(
    "kobi_score_band_total",
    "Computed scores by band",
    ["band"],  # 0-2, 2-3, 3-4, 4-5
)

# Advisory service metrics
advisory_latency_histogram = Histogram(
    "advisory_latency_seconds",
    "Advisory service response time",
    ["operation"],  # assess | explain | recommend
    buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

advisory_fallback_counter = Counter(
    "advisory_fallbacks_total",
    "Advisory calls replaced by the deterministic fallback",
    ["operation", "reason"],  # reason: unconfigured | failure
)

# Cache / rate limit backend
cache_backend_failures_counter = Counter(
    "cache_backend_failures_total",
    "Shared cache backend failures served from the in-process store",
    ["operation"],
)

# Eligibility
eligibility_counter = Counter(
    "kobi_eligibility_decisions_total",
    "Eligibility decisions by status",
    ["status"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(total_score: float) -> None:
    """Record a freshly computed score in its band for distribution analysis"""
    score_request_counter.labels(outcome="computed").inc()

    if total_score < 2.0:
        band = "0-2"
    elif total_score < 3.0:
        band = "2-3"
    elif total_score < 4.0:
        band = "3-4"
    else:
        band = "4-5"

    score_band_counter.labels(band=band).inc()
