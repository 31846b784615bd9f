"""Monitoring run results, fan-out results and persisted run logs."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID

from idl_sentinel.domain.errors import AppError

LogLevel = Literal["info", "warning", "error"]
TargetOutcomeStatus = Literal["unchanged", "changed", "not_found"]


@dataclass
class TargetError:
    """A failure confined to one target during a run."""

    target_id: str
    address: str
    error: AppError

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_id": self.target_id,
            "address": self.address,
            "error": self.error.to_dict(),
        }


@dataclass(frozen=True)
class TargetOutcome:
    """What happened to one target that was checked without error."""

    target_id: UUID
    status: TargetOutcomeStatus
    snapshot_created: bool = False
    changes_detected: int = 0


@dataclass
class RunResult:
    """Aggregate result of one monitoring run."""

    run_id: str
    checked: int = 0
    snapshots_created: int = 0
    changes_detected: int = 0
    not_found: int = 0
    errors: list[TargetError] = field(default_factory=list)
    duration_ms: int = 0

    def record(self, outcome: TargetOutcome) -> None:
        self.checked += 1
        if outcome.status == "not_found":
            self.not_found += 1
        if outcome.snapshot_created:
            self.snapshots_created += 1
        self.changes_detected += outcome.changes_detected

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "checked": self.checked,
            "snapshots_created": self.snapshots_created,
            "changes_detected": self.changes_detected,
            "not_found": self.not_found,
            "errors": [e.to_dict() for e in self.errors],
            "duration_ms": self.duration_ms,
        }


@dataclass
class InitialFetchResult:
    """Result of the first capture for a newly registered target."""

    success: bool
    snapshot_created: bool
    definition_found: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "snapshot_created": self.snapshot_created,
            "definition_found": self.definition_found,
            "error": self.error,
        }


@dataclass
class FanoutResult:
    """Aggregate result of one notification pass over a channel."""

    channel: str
    sent: int = 0
    failed: int = 0
    errors: list[AppError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "channel": self.channel,
            "sent": self.sent,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass
class MonitoringLog:
    """A persisted monitoring event, grouped by run."""

    id: UUID
    run_id: str
    level: LogLevel
    message: str
    target_id: UUID | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
