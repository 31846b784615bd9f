"""Change record entity and its classification vocabulary."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID

Severity = Literal["low", "medium", "high", "critical"]
ChangeCategory = Literal["instruction", "type", "account", "error"]
ChangeAction = Literal["added", "removed", "modified"]
NotificationChannel = Literal["webhook", "telegram"]

ChangeType = Literal[
    "initial_observation",
    "instruction_added",
    "instruction_removed",
    "instruction_modified",
    "type_added",
    "type_removed",
    "type_modified",
    "account_added",
    "account_removed",
    "account_modified",
    "error_added",
    "error_removed",
    "error_modified",
]

SEVERITY_ORDER: dict[str, int] = {"low": 0, "medium": 1, "high": 2, "critical": 3}
SEVERITIES: tuple[Severity, ...] = ("critical", "high", "medium", "low")
CHANNELS: tuple[NotificationChannel, ...] = ("webhook", "telegram")


def max_severity(*severities: Severity) -> Severity:
    """Return the most severe of the given severities (low if none)."""
    if not severities:
        return "low"
    return max(severities, key=lambda s: SEVERITY_ORDER[s])


@dataclass(frozen=True)
class ChangeDetail:
    """Structured description of a single change."""

    change_type: ChangeType
    item_name: str
    description: str
    old_value: Any = None
    new_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "changeType": self.change_type,
            "itemName": self.item_name,
            "description": self.description,
        }
        if self.old_value is not None:
            data["oldValue"] = self.old_value
        if self.new_value is not None:
            data["newValue"] = self.new_value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChangeDetail":
        return cls(
            change_type=data["changeType"],
            item_name=data.get("itemName", ""),
            description=data.get("description", ""),
            old_value=data.get("oldValue"),
            new_value=data.get("newValue"),
        )


@dataclass(frozen=True)
class DetectedChange:
    """A classified difference produced by the diff engine, not yet persisted."""

    change_type: ChangeType
    severity: Severity
    summary: str
    detail: ChangeDetail


@dataclass
class ChangeRecord:
    """A persisted change between two consecutive snapshots of a target.

    Each delivery channel has a notified flag and timestamp. A flag moves
    from False to True once and is never reset.
    """

    id: UUID
    target_id: UUID
    new_snapshot_id: UUID
    change_type: ChangeType
    severity: Severity
    summary: str
    detail: ChangeDetail

    old_snapshot_id: UUID | None = None  # None only for the initial observation
    detected_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    webhook_notified: bool = False
    webhook_notified_at: datetime | None = None
    telegram_notified: bool = False
    telegram_notified_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.severity not in SEVERITY_ORDER:
            raise ValueError(f"Unknown severity: {self.severity}")

    @classmethod
    def from_detected(
        cls,
        id: UUID,
        target_id: UUID,
        old_snapshot_id: UUID | None,
        new_snapshot_id: UUID,
        change: DetectedChange,
    ) -> "ChangeRecord":
        return cls(
            id=id,
            target_id=target_id,
            old_snapshot_id=old_snapshot_id,
            new_snapshot_id=new_snapshot_id,
            change_type=change.change_type,
            severity=change.severity,
            summary=change.summary,
            detail=change.detail,
        )

    def is_notified(self, channel: NotificationChannel) -> bool:
        """Check whether this change was already delivered on a channel."""
        return bool(getattr(self, f"{_check_channel(channel)}_notified"))

    def mark_notified(self, channel: NotificationChannel, at: datetime | None = None) -> bool:
        """Flip the channel flag to notified.

        Returns False (and leaves the original timestamp) if the flag was
        already set.
        """
        channel = _check_channel(channel)
        if self.is_notified(channel):
            return False
        setattr(self, f"{channel}_notified", True)
        setattr(self, f"{channel}_notified_at", at or datetime.now(UTC))
        return True


def _check_channel(channel: str) -> NotificationChannel:
    if channel not in CHANNELS:
        raise ValueError(f"Unknown notification channel: {channel}")
    return channel  # type: ignore[return-value]
