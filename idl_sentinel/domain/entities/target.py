"""Monitored target entity - an on-chain program being watched."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID


@dataclass
class MonitoredTarget:
    """A program whose published interface definition is polled."""

    id: UUID
    address: str
    name: str

    description: str | None = None
    is_active: bool = True

    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if not self.address:
            raise ValueError("Target address is required")
        if not self.name:
            raise ValueError("Target name is required")

    @property
    def short_address(self) -> str:
        """Abbreviated address for log lines and chat messages."""
        if len(self.address) <= 12:
            return self.address
        return f"{self.address[:4]}...{self.address[-4:]}"
