"""Telemetry infrastructure (logging, tracing, metrics)."""

from idl_sentinel.infrastructure.telemetry.logging import (
    ContextLogger,
    channel_var,
    clear_request_context,
    configure_logging,
    get_logger,
    request_id_var,
    run_id_var,
    set_request_context,
    target_id_var,
)
from idl_sentinel.infrastructure.telemetry.metrics import (
    record_change_detected,
    record_definition_fetch,
    record_delivery,
    record_http_request,
    record_monitor_run,
    record_notification_group,
    record_snapshot_created,
    record_target_checked,
    set_service_info,
)
from idl_sentinel.infrastructure.telemetry.tracing import (
    configure_tracing,
    create_span,
    get_tracer,
    instrument_fastapi,
    instrument_httpx,
    instrument_sqlalchemy,
    record_exception,
    shutdown_tracing,
)

__all__ = [
    # Logging
    "ContextLogger",
    "configure_logging",
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "request_id_var",
    "run_id_var",
    "target_id_var",
    "channel_var",
    # Tracing
    "configure_tracing",
    "get_tracer",
    "create_span",
    "record_exception",
    "instrument_fastapi",
    "instrument_httpx",
    "instrument_sqlalchemy",
    "shutdown_tracing",
    # Metrics
    "set_service_info",
    "record_http_request",
    "record_monitor_run",
    "record_target_checked",
    "record_definition_fetch",
    "record_snapshot_created",
    "record_change_detected",
    "record_delivery",
    "record_notification_group",
]
