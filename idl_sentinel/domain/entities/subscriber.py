"""Subscriber read model - who wants notifications for which target."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class SubscriberEndpoint:
    """One subscriber's configured endpoint for a single channel.

    ``endpoint`` is a webhook URL for the webhook channel and a chat id for
    the Telegram channel. Subscribers are managed outside this service.
    """

    subscriber_id: UUID
    channel: str
    endpoint: str
    label: str = ""

    @property
    def display_name(self) -> str:
        if self.label:
            return f"{self.label[:8]}..." if len(self.label) > 8 else self.label
        return str(self.subscriber_id)[:8]
