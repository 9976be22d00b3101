"""
Metrics definitions for delivery pricing.

This module defines Prometheus metrics for monitoring
zone resolution and promotion calculation.
"""

from prometheus_client import Counter, Histogram, Gauge

# 카운터 메트릭
delivery_checks = Counter(
    "delivery_checks_total",
    "Number of delivery zone resolutions",
    ["mode", "in_zone"]
)

invalid_coordinates = Counter(
    "delivery_invalid_coordinates_total",
    "Number of resolutions rejected for malformed coordinates"
)

strategy_fallbacks = Counter(
    "delivery_strategy_fallbacks_total",
    "Zone strategies that could not place the address",
    ["strategy", "reason"]
)

lookup_timeouts = Counter(
    "pricing_lookup_timeouts_total",
    "External reads that exceeded the lookup deadline",
    ["lookup"]
)

promotions_applied = Counter(
    "promotions_applied_total",
    "Line items priced with a promotion",
    ["type"]
)

promotion_lookup_failures = Counter(
    "promotion_lookup_failures_total",
    "Promotion catalog reads that failed and were treated as empty"
)

# 히스토그램 메트릭
resolve_seconds = Histogram(
    "delivery_resolve_duration_seconds",
    "Time spent resolving a delivery zone",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

promotion_seconds = Histogram(
    "promotion_apply_duration_seconds",
    "Time spent applying promotions to an order",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

# 게이지 메트릭
uptime_seconds = Gauge(
    "uptime_seconds",
    "Service uptime in seconds"
)
