"""
Prometheus metrics collection for fieldrules

Metrics live on a private registry so embedding applications can expose them
alongside their own without name clashes.
"""
import os
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
)
from typing import Optional


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# VALIDATION METRICS
# =======================

# Validation passes counter
validation_passes_total = Counter(
    name="fieldrules_validation_passes_total",
    documentation="Total number of validation passes",
    labelnames=["rule_set", "outcome"],  # outcome: passed, failed, error
    registry=REGISTRY,
)

# Validation pass duration
validation_pass_duration_seconds = Histogram(
    name="fieldrules_validation_pass_duration_seconds",
    documentation="Time spent in one validation pass in seconds",
    labelnames=["rule_set"],
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

# Failures per pass
validation_failures_per_pass = Histogram(
    name="fieldrules_validation_failures_per_pass",
    documentation="Number of failures recorded by one validation pass",
    labelnames=["rule_set"],
    buckets=[0, 1, 2, 5, 10, 25, 50, 100],
    registry=REGISTRY,
)

# Rule failures counter
rule_failures_total = Counter(
    name="fieldrules_rule_failures_total",
    documentation="Total number of failed rule evaluations",
    labelnames=["rule_set", "rule"],
    registry=REGISTRY,
)

# Rule evaluations counter
rule_evaluations_total = Counter(
    name="fieldrules_rule_evaluations_total",
    documentation="Total number of rule applicability decisions",
    labelnames=["rule", "state"],  # state: applicable, skipped
    registry=REGISTRY,
)

# =======================
# ERROR METRICS
# =======================

# Configuration errors counter
configuration_errors_total = Counter(
    name="fieldrules_configuration_errors_total",
    documentation="Total number of configuration errors raised",
    labelnames=["error_type"],
    registry=REGISTRY,
)

# =======================
# PRESENCE VERIFIER METRICS
# =======================

# Presence queries counter
presence_queries_total = Counter(
    name="fieldrules_presence_queries_total",
    documentation="Total number of presence verifier count queries",
    labelnames=["table", "status"],  # status: success, error
    registry=REGISTRY,
)

# Presence query duration
presence_query_duration_seconds = Histogram(
    name="fieldrules_presence_query_duration_seconds",
    documentation="Time spent in presence verifier count queries in seconds",
    labelnames=["table"],
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
    registry=REGISTRY,
)

# Database connection pool size
db_connection_pool_size = Gauge(
    name="fieldrules_db_connection_pool_size",
    documentation="Current size of the presence verifier connection pool",
    labelnames=["pool_name"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Lazy import: the HTTP server is only needed when the endpoint is enabled
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


# =======================
# CONTEXT MANAGERS
# =======================

class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(presence_query_duration_seconds, table="users"):
            cursor.execute(query)
    """

    def __init__(self, histogram: Histogram, **labels):
        """
        Initialize duration tracker

        Args:
            histogram: Prometheus Histogram metric
            **labels: Label values for the metric
        """
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    gauge.labels(**labels).set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """
    Observe a value in a histogram metric

    Args:
        histogram: Prometheus Histogram metric
        value: Value to observe
        **labels: Label values for the metric
    """
    histogram.labels(**labels).observe(value)


# =======================
# VALIDATION HELPERS
# =======================

def record_validation_pass(rule_set: str, passed: bool, failure_count: int, duration_seconds: float) -> None:
    """
    Record the outcome of one validation pass.

    Args:
        rule_set: Rule set name ("adhoc" for inline rules)
        passed: Whether the pass recorded no failures
        failure_count: Number of failures recorded
        duration_seconds: Pass duration in seconds
    """
    outcome = "passed" if passed else "failed"
    increment_counter(validation_passes_total, 1, rule_set=rule_set, outcome=outcome)
    observe_histogram(validation_pass_duration_seconds, duration_seconds, rule_set=rule_set)
    observe_histogram(validation_failures_per_pass, failure_count, rule_set=rule_set)


def record_rule_failure(rule_set: str, rule: str) -> None:
    """
    Record a failed rule evaluation.

    Args:
        rule_set: Rule set name
        rule: Rule identifier that failed
    """
    increment_counter(rule_failures_total, 1, rule_set=rule_set, rule=rule)


def record_rule_evaluation(rule: str, applicable: bool) -> None:
    state = "applicable" if applicable else "skipped"
    increment_counter(rule_evaluations_total, 1, rule=rule, state=state)


def record_configuration_error(rule_set: str, error: Exception) -> None:
    """
    Record a configuration error that aborted a validation pass.

    Args:
        rule_set: Rule set name
        error: The raised error
    """
    increment_counter(validation_passes_total, 1, rule_set=rule_set, outcome="error")
    increment_counter(configuration_errors_total, 1, error_type=type(error).__name__)


def record_presence_query(table: str, success: bool) -> None:
    """
    Record a presence verifier count query.

    Duration is observed separately with
    track_duration(presence_query_duration_seconds, table=...).

    Args:
        table: Table queried
        success: Whether the query completed
    """
    status = "success" if success else "error"
    increment_counter(presence_queries_total, 1, table=table, status=status)
