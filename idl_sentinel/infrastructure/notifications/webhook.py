"""Webhook channel - Slack-compatible incoming webhook messages."""

from typing import Any

import httpx

from idl_sentinel.application.services.rendering import bucket_by_severity, format_timestamp
from idl_sentinel.config import Settings
from idl_sentinel.domain.entities import ChangeRecord, MonitoredTarget, SubscriberEndpoint
from idl_sentinel.domain.protocols.providers import ChannelSender
from idl_sentinel.infrastructure.notifications.base import HttpChannelSender


class WebhookSender(HttpChannelSender):
    """Sends Block Kit JSON to each subscriber's webhook URL."""

    channel_name = "webhook"

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        super().__init__(timeout=settings.webhook_timeout_seconds, client=client)
        self.preview_limit = settings.notification_preview_limit

    def render(self, target: MonitoredTarget, changes: list[ChangeRecord]) -> dict[str, Any]:
        if not changes:
            return {"text": f"🔍 IDL Sentinel - No changes detected for program *{target.name}*"}

        blocks: list[dict[str, Any]] = [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": "🚨 IDL Sentinel - Changes Detected",
                    "emoji": True,
                },
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Program:*\n{target.name}"},
                    {"type": "mrkdwn", "text": f"*Total Changes:*\n{len(changes)}"},
                    {"type": "mrkdwn", "text": f"*Address:*\n`{target.address}`"},
                    {"type": "mrkdwn", "text": f"*Detected:*\n{format_timestamp()} UTC"},
                ],
            },
            {"type": "divider"},
        ]

        for bucket in bucket_by_severity(changes, self.preview_limit):
            lines = [f"• {summary}" for summary in bucket.preview]
            if bucket.remaining:
                lines.append(f"• ... and {bucket.remaining} more")
            blocks.append(
                {
                    "type": "section",
                    "text": {
                        "type": "mrkdwn",
                        "text": f"{bucket.emoji} *{bucket.title} ({bucket.total})*\n"
                        + "\n".join(lines),
                    },
                }
            )

        return {
            "text": f"🚨 IDL Sentinel - Changes detected for {target.name}",
            "blocks": blocks,
        }

    async def deliver(self, subscriber: SubscriberEndpoint, message: dict[str, Any]) -> None:
        await self._post(subscriber.endpoint, message, subscriber)

    async def send_test(self, endpoint: str) -> bool:
        """Post a test message to a webhook URL."""
        title = "🧪 IDL Sentinel Test"
        message = {
            "text": title,
            "blocks": [
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": title, "emoji": True},
                },
                {
                    "type": "section",
                    "text": {
                        "type": "mrkdwn",
                        "text": "This is a test notification to verify your webhook "
                        f"configuration.\n\n*Sent:* {format_timestamp()} UTC",
                    },
                },
            ],
        }
        return await self._try_post(endpoint, message)


# Protocol compliance
_: type[ChannelSender] = WebhookSender  # type: ignore
