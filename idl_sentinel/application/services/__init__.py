"""Application services."""

from idl_sentinel.application.services.concurrency import TaskOutcome, bounded_map
from idl_sentinel.application.services.content_hash import (
    canonical_json,
    content_hash,
    normalize_definition,
)
from idl_sentinel.application.services.diff_engine import (
    DEFAULT_SENSITIVE_KEYWORDS,
    DiffEngine,
    deep_equal,
    detect_changes,
)
from idl_sentinel.application.services.monitoring_service import MonitoringService
from idl_sentinel.application.services.notification_service import NotificationService
from idl_sentinel.application.services.rendering import (
    SeverityBucket,
    bucket_by_severity,
    format_timestamp,
)

__all__ = [
    "TaskOutcome",
    "bounded_map",
    "canonical_json",
    "content_hash",
    "normalize_definition",
    "DEFAULT_SENSITIVE_KEYWORDS",
    "DiffEngine",
    "deep_equal",
    "detect_changes",
    "MonitoringService",
    "NotificationService",
    "SeverityBucket",
    "bucket_by_severity",
    "format_timestamp",
]
