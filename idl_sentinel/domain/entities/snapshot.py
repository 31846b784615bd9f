"""Definition snapshot entity - immutable, versioned capture of a definition."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from idl_sentinel.domain.entities.definition import InterfaceDefinition


@dataclass(frozen=True)
class Snapshot:
    """A content-addressed capture of one target's definition.

    Snapshots are append-only. ``version_number`` increases per target;
    two snapshots may share a content hash when concurrent runs race.
    """

    id: UUID
    target_id: UUID
    content_hash: str
    definition: InterfaceDefinition
    version_number: int
    fetched_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.content_hash:
            raise ValueError("Snapshot content_hash is required")
        if self.version_number < 1:
            raise ValueError("Snapshot version_number must be positive")
