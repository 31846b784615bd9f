"""Notification channel senders."""

from idl_sentinel.infrastructure.notifications.telegram import TelegramSender, escape_markdown
from idl_sentinel.infrastructure.notifications.webhook import WebhookSender

__all__ = ["WebhookSender", "TelegramSender", "escape_markdown"]
