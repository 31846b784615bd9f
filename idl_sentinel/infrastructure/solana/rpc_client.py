"""Solana JSON-RPC account lookup over httpx."""

import base64
import binascii
from typing import Any

import httpx

from idl_sentinel.config import Settings
from idl_sentinel.domain.errors import TransientFetchError
from idl_sentinel.domain.protocols.providers import AccountLookupClient
from idl_sentinel.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


class SolanaRpcClient:
    """Read-only ``getAccountInfo`` client.

    The httpx client may be shared with the rest of the app; when none is
    given one is created lazily and owned by this instance.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        self.rpc_url = settings.solana_rpc_url
        self.commitment = settings.rpc_commitment
        self.timeout = settings.rpc_timeout_seconds
        self._client = client
        self._owns_client = client is None
        self._request_id = 0

    @property
    def provider_name(self) -> str:
        return "solana-rpc"

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

    async def get_account_data(self, address: str) -> bytes | None:
        """Return the raw account data, or None if the account does not exist.

        Raises:
            TransientFetchError: On transport errors, non-2xx responses,
                JSON-RPC errors or an undecodable result
        """
        result = await self._call(
            "getAccountInfo",
            [address, {"encoding": "base64", "commitment": self.commitment}],
        )

        if not isinstance(result, dict) or "value" not in result:
            raise TransientFetchError(
                message="Malformed getAccountInfo response",
                details={"address": address, "result": repr(result)[:200]},
                operation="getAccountInfo",
            )

        value = result["value"]
        if value is None:
            return None

        try:
            encoded, encoding = value["data"]
            if encoding != "base64":
                raise ValueError(f"unexpected encoding {encoding!r}")
            return base64.b64decode(encoded)
        except (KeyError, TypeError, ValueError, binascii.Error) as e:
            raise TransientFetchError(
                message="Malformed getAccountInfo response",
                details={"address": address, "error": str(e)},
            ) from e

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": method, "params": params}

        logger.debug("Calling Solana RPC", extra={"method": method})

        try:
            response = await self.client.post(self.rpc_url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise TransientFetchError(
                message="Solana RPC request timed out",
                operation=method,
            ) from e
        except httpx.HTTPError as e:
            raise TransientFetchError(
                message=f"Solana RPC request failed: {e}",
                operation=method,
            ) from e

        if response.status_code >= 400:
            raise TransientFetchError(
                message=f"Solana RPC error: HTTP {response.status_code}",
                details={"status_code": response.status_code},
                operation=method,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise TransientFetchError(
                message="Solana RPC returned invalid JSON",
                operation=method,
            ) from e

        if not isinstance(data, dict):
            raise TransientFetchError(
                message="Solana RPC returned a non-object body",
                details={"body": repr(data)[:200]},
                operation=method,
            )

        error = data.get("error")
        if error:
            reason = error.get("message", error) if isinstance(error, dict) else error
            raise TransientFetchError(
                message=f"Solana RPC error: {reason}",
                details={"rpc_error": error},
                operation=method,
            )

        return data.get("result")


# Protocol compliance
_: type[AccountLookupClient] = SolanaRpcClient  # type: ignore
