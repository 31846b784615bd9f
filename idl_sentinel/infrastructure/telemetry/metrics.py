"""Prometheus metrics configuration."""

from prometheus_client import Counter, Histogram, Info

# Service info
SERVICE_INFO = Info("idl_sentinel", "IDL Sentinel service information")

# Request metrics
HTTP_REQUESTS_TOTAL = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Monitoring run metrics
MONITOR_RUNS_TOTAL = Counter(
    "monitor_runs_total",
    "Total monitoring runs",
    ["status"],  # status: completed, fatal
)

MONITOR_RUN_DURATION_SECONDS = Histogram(
    "monitor_run_duration_seconds",
    "Monitoring run latency in seconds",
    buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0),
)

TARGETS_CHECKED_TOTAL = Counter(
    "targets_checked_total",
    "Targets checked, by outcome",
    ["outcome"],  # outcome: unchanged, changed, not_found, error
)

DEFINITION_FETCH_DURATION_SECONDS = Histogram(
    "definition_fetch_duration_seconds",
    "Definition fetch latency in seconds, including retries",
    ["status"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

SNAPSHOTS_CREATED_TOTAL = Counter(
    "snapshots_created_total",
    "Total definition snapshots created",
)

CHANGES_DETECTED_TOTAL = Counter(
    "changes_detected_total",
    "Total changes detected",
    ["severity"],
)

# Notification metrics
NOTIFICATION_DELIVERIES_TOTAL = Counter(
    "notification_deliveries_total",
    "Notification delivery attempts",
    ["channel", "status"],  # status: sent, failed
)

NOTIFICATION_GROUPS_TOTAL = Counter(
    "notification_groups_total",
    "Target groups processed by the fan-out",
    ["channel", "outcome"],  # outcome: notified, no_subscribers, undelivered, error
)


def set_service_info(version: str, environment: str) -> None:
    """Set service information.

    Args:
        version: Service version
        environment: Deployment environment
    """
    SERVICE_INFO.info({
        "version": version,
        "environment": environment,
    })


def record_http_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record an HTTP request."""
    HTTP_REQUESTS_TOTAL.labels(
        method=method, endpoint=endpoint, status_code=str(status_code)
    ).inc()
    HTTP_REQUEST_DURATION_SECONDS.labels(method=method, endpoint=endpoint).observe(
        duration_seconds
    )


def record_monitor_run(status: str, duration_seconds: float) -> None:
    """Record a finished (or aborted) monitoring run."""
    MONITOR_RUNS_TOTAL.labels(status=status).inc()
    MONITOR_RUN_DURATION_SECONDS.observe(duration_seconds)


def record_target_checked(outcome: str) -> None:
    TARGETS_CHECKED_TOTAL.labels(outcome=outcome).inc()


def record_definition_fetch(status: str, duration_seconds: float) -> None:
    DEFINITION_FETCH_DURATION_SECONDS.labels(status=status).observe(duration_seconds)


def record_snapshot_created() -> None:
    SNAPSHOTS_CREATED_TOTAL.inc()


def record_change_detected(severity: str, count: int = 1) -> None:
    CHANGES_DETECTED_TOTAL.labels(severity=severity).inc(count)


def record_delivery(channel: str, status: str) -> None:
    NOTIFICATION_DELIVERIES_TOTAL.labels(channel=channel, status=status).inc()


def record_notification_group(channel: str, outcome: str) -> None:
    NOTIFICATION_GROUPS_TOTAL.labels(channel=channel, outcome=outcome).inc()
