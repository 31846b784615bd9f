"""Tests for severity bucketing used by notification messages."""

from datetime import UTC, datetime, timedelta, timezone
from uuid import uuid4

from idl_sentinel.application.services.rendering import bucket_by_severity, format_timestamp
from idl_sentinel.domain.entities import ChangeDetail, ChangeRecord


def _change(severity: str, summary: str) -> ChangeRecord:
    return ChangeRecord(
        id=uuid4(),
        target_id=uuid4(),
        new_snapshot_id=uuid4(),
        change_type="type_added",
        severity=severity,  # type: ignore[arg-type]
        summary=summary,
        detail=ChangeDetail(change_type="type_added", item_name="x", description=""),
    )


class TestBucketBySeverity:
    def test_orders_from_critical_and_skips_empty(self):
        changes = [_change("low", "l1"), _change("critical", "c1"), _change("low", "l2")]

        buckets = bucket_by_severity(changes, preview_limit=5)

        assert [b.severity for b in buckets] == ["critical", "low"]
        assert buckets[1].preview == ["l1", "l2"]
        assert buckets[1].remaining == 0

    def test_preview_is_capped(self):
        changes = [_change("medium", f"m{i}") for i in range(8)]

        (bucket,) = bucket_by_severity(changes, preview_limit=5)

        assert bucket.total == 8
        assert bucket.preview == ["m0", "m1", "m2", "m3", "m4"]
        assert bucket.remaining == 3
        assert bucket.title == "Medium"
        assert bucket.emoji == "🟡"


class TestFormatTimestamp:
    def test_converts_to_utc(self):
        moment = datetime(2024, 5, 1, 14, 30, 5, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(moment) == "2024-05-01 12:30:05"

    def test_defaults_to_now(self):
        assert format_timestamp().startswith(str(datetime.now(UTC).year))
