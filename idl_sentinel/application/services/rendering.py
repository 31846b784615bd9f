"""Channel-independent grouping of changes for notification messages."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from idl_sentinel.domain.entities import SEVERITIES, ChangeRecord, Severity

SEVERITY_EMOJI: dict[str, str] = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🟢",
}


@dataclass(frozen=True)
class SeverityBucket:
    """Changes of one severity with a bounded preview."""

    severity: Severity
    total: int
    preview: list[str] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        return self.total - len(self.preview)

    @property
    def title(self) -> str:
        return self.severity.capitalize()

    @property
    def emoji(self) -> str:
        return SEVERITY_EMOJI[self.severity]


def bucket_by_severity(changes: list[ChangeRecord], preview_limit: int) -> list[SeverityBucket]:
    """Group changes from critical down to low, skipping empty severities."""
    buckets: list[SeverityBucket] = []
    for severity in SEVERITIES:
        summaries = [c.summary for c in changes if c.severity == severity]
        if not summaries:
            continue
        buckets.append(
            SeverityBucket(
                severity=severity,
                total=len(summaries),
                preview=summaries[:preview_limit],
            )
        )
    return buckets


def format_timestamp(moment: datetime | None = None) -> str:
    """UTC timestamp as ``YYYY-MM-DD HH:MM:SS``."""
    moment = moment or datetime.now(UTC)
    return moment.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S")
