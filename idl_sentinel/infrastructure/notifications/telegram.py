"""Telegram channel - Bot API ``sendMessage`` with Markdown text."""

import re

import httpx

from idl_sentinel.application.services.rendering import bucket_by_severity, format_timestamp
from idl_sentinel.config import Settings
from idl_sentinel.domain.entities import ChangeRecord, MonitoredTarget, SubscriberEndpoint
from idl_sentinel.domain.protocols.providers import ChannelSender
from idl_sentinel.infrastructure.notifications.base import HttpChannelSender

_MARKDOWN_SPECIAL = re.compile(r"([_*\[\]()~`>#+=|{}.!-])")


def escape_markdown(text: str) -> str:
    """Backslash-escape Telegram Markdown control characters."""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


class TelegramSender(HttpChannelSender):
    """Sends one chat message per subscriber through a shared bot."""

    channel_name = "telegram"

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        super().__init__(timeout=settings.webhook_timeout_seconds, client=client)
        self.preview_limit = settings.notification_preview_limit
        base_url = settings.telegram_api_base_url.rstrip("/")
        self.send_url = f"{base_url}/bot{settings.telegram_bot_token}/sendMessage"

    def render(self, target: MonitoredTarget, changes: list[ChangeRecord]) -> str:
        name = escape_markdown(target.name)
        if not changes:
            return f"🔍 *IDL Sentinel*\n\nNo changes detected for program *{name}*"

        parts = [
            "🚨 *IDL Sentinel - Changes Detected*\n\n",
            f"📋 *Program:* {name}\n",
            f"🔗 *Address:* `{target.address}`\n",
            f"📊 *Total Changes:* {len(changes)}\n\n",
        ]

        for bucket in bucket_by_severity(changes, self.preview_limit):
            parts.append(f"*{bucket.title} ({bucket.total})*\n")
            parts.extend(f"• {escape_markdown(summary)}\n" for summary in bucket.preview)
            if bucket.remaining:
                parts.append(f"• ... and {bucket.remaining} more\n")
            parts.append("\n")

        parts.append(f"⏰ *Detected:* {format_timestamp()} UTC")
        return "".join(parts)

    def _payload(self, chat_id: str, text: str) -> dict[str, object]:
        return {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True,
        }

    async def deliver(self, subscriber: SubscriberEndpoint, message: str) -> None:
        await self._post(self.send_url, self._payload(subscriber.endpoint, message), subscriber)

    async def send_test(self, endpoint: str) -> bool:
        """Send a test message to a chat id."""
        text = (
            "🧪 *IDL Sentinel Test*\n\nThis is a test notification to verify your "
            f"Telegram bot configuration.\n\n⏰ *Sent:* {format_timestamp()} UTC"
        )
        return await self._try_post(self.send_url, self._payload(endpoint, text))


# Protocol compliance
_: type[ChannelSender] = TelegramSender  # type: ignore
