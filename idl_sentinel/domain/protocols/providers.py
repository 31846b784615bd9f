"""Provider protocols - abstract interfaces for external services."""

from typing import Any, Protocol

from idl_sentinel.domain.entities import (
    ChangeRecord,
    InterfaceDefinition,
    MonitoredTarget,
    NotificationChannel,
    SubscriberEndpoint,
)


class AccountLookupClient(Protocol):
    """Read-only remote account lookup (address -> raw bytes)."""

    async def get_account_data(self, address: str) -> bytes | None:
        """Return the account's data, or None if no account exists.

        Raises TransientFetchError on transport or RPC failure.
        """
        ...


class DefinitionReader(Protocol):
    """Fetches and decodes a target's published interface definition."""

    async def fetch(self, target_address: str) -> InterfaceDefinition | None:
        """Return the definition, None if none is published.

        Raises after exhausting retries on transient or parse failures.
        """
        ...


class ChannelSender(Protocol):
    """Renders and delivers change notifications for one channel."""

    @property
    def channel(self) -> NotificationChannel:
        """Channel name used for flags, logs and metrics."""
        ...

    def render(self, target: MonitoredTarget, changes: list[ChangeRecord]) -> Any:
        """Build one aggregated message for a target's pending changes."""
        ...

    async def deliver(self, subscriber: SubscriberEndpoint, message: Any) -> None:
        """Send a rendered message to one subscriber.

        Raises DeliveryError when the endpoint rejects or cannot be reached.
        """
        ...

    async def send_test(self, endpoint: str) -> bool:
        """Send a test notification to verify an endpoint."""
        ...
