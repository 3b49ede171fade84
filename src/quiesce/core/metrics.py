"""Prometheus metrics for stabilization runs.

Metrics follow the naming convention: {namespace}_{name}_{unit}
Reference: https://prometheus.io/docs/practices/naming/
"""

from prometheus_client import Counter, Histogram

# Namespace for all metrics
NAMESPACE = "quiesce"

STABILIZATION_COUNT = Counter(
    name="stabilizations_total",
    documentation="Total stabilization runs by outcome",
    labelnames=["outcome"],
    namespace=NAMESPACE,
)

STABILIZATION_ITERATIONS = Histogram(
    name="stabilization_iterations",
    documentation="Loop iterations needed to reach a stable state",
    namespace=NAMESPACE,
    buckets=(0, 1, 2, 3, 5, 8, 13, 21, 30, 50),
)

RESOLVED_CALLS = Counter(
    name="resolved_calls_total",
    documentation="Captured requests resolved from call instructions",
    labelnames=["method", "status"],
    namespace=NAMESPACE,
)

SKIPPED_CANCELLED_CALLS = Counter(
    name="skipped_cancelled_calls_total",
    documentation="Cancelled captured requests skipped by the matcher",
    namespace=NAMESPACE,
)

REPEATING_TIMER_WARNINGS = Counter(
    name="repeating_timer_warnings_total",
    documentation="Repeating timers scheduled while the guard was installed",
    namespace=NAMESPACE,
)
