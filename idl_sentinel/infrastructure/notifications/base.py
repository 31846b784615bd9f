"""Shared HTTP plumbing for notification channel senders."""

from typing import Any

import httpx

from idl_sentinel.domain.entities import SubscriberEndpoint
from idl_sentinel.domain.errors import DeliveryError
from idl_sentinel.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


class HttpChannelSender:
    """Posts JSON to an endpoint and turns failures into DeliveryError."""

    channel_name: str = ""

    def __init__(self, timeout: float, client: httpx.AsyncClient | None = None):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    def channel(self) -> str:
        return self.channel_name

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _post(
        self,
        url: str,
        payload: dict[str, Any],
        subscriber: SubscriberEndpoint | None = None,
    ) -> httpx.Response:
        subscriber_id = str(subscriber.subscriber_id) if subscriber else ""
        try:
            response = await self.client.post(url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise DeliveryError(
                message=f"{self.channel_name} delivery timed out",
                provider=self.channel_name,
                channel=self.channel_name,
                subscriber_id=subscriber_id,
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(
                message=f"{self.channel_name} delivery failed: {e}",
                provider=self.channel_name,
                channel=self.channel_name,
                subscriber_id=subscriber_id,
            ) from e

        if not response.is_success:
            raise DeliveryError(
                message=f"{self.channel_name} endpoint returned {response.status_code}",
                details={"body": response.text[:500]},
                provider=self.channel_name,
                channel=self.channel_name,
                subscriber_id=subscriber_id,
                status_code=response.status_code,
            )
        return response

    async def _try_post(self, url: str, payload: dict[str, Any]) -> bool:
        try:
            await self._post(url, payload)
        except DeliveryError as e:
            logger.warning(
                "Test notification failed",
                extra={"channel": self.channel_name, "error": e.message, "status_code": e.status_code},
            )
            return False
        return True
