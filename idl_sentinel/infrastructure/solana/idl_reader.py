"""Anchor IDL reader - derives, reads and decodes on-chain IDL accounts.

Layout of an IDL account::

    [0:8]    account discriminator
    [8:40]   authority public key
    [40:44]  payload length (u32, little-endian)
    [44:...] zlib-compressed UTF-8 JSON
"""

import asyncio
import json
import zlib
from collections.abc import Awaitable, Callable
from typing import Any

from solders.pubkey import Pubkey

from idl_sentinel.domain.entities import InterfaceDefinition
from idl_sentinel.domain.errors import (
    DefinitionParseError,
    InvalidTargetAddressError,
    TransientFetchError,
)
from idl_sentinel.domain.protocols.providers import AccountLookupClient, DefinitionReader
from idl_sentinel.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)

IDL_SEED = "anchor:idl"
DISCRIMINATOR_SIZE = 8
AUTHORITY_SIZE = 32
LENGTH_OFFSET = DISCRIMINATOR_SIZE + AUTHORITY_SIZE
HEADER_SIZE = LENGTH_OFFSET + 4


def derive_idl_address(program_address: str) -> str:
    """Derive the IDL account address for a program.

    Raises:
        InvalidTargetAddressError: If the address is not a valid public key
    """
    try:
        program_id = Pubkey.from_string(program_address)
    except ValueError as e:
        raise InvalidTargetAddressError(
            message=f"Invalid program address: {program_address}",
            address=program_address,
        ) from e

    base, _ = Pubkey.find_program_address([], program_id)
    return str(Pubkey.create_with_seed(base, IDL_SEED, program_id))


def decode_idl_account(data: bytes) -> dict[str, Any]:
    """Decode raw IDL account bytes into the JSON document."""
    if len(data) < HEADER_SIZE:
        raise DefinitionParseError(
            message="IDL account data too short",
            details={"size": len(data)},
        )

    length = int.from_bytes(data[LENGTH_OFFSET:HEADER_SIZE], "little")
    payload = data[HEADER_SIZE : HEADER_SIZE + length]
    if len(payload) < length:
        raise DefinitionParseError(
            message="IDL payload truncated",
            details={"declared": length, "available": len(payload)},
        )

    try:
        document = json.loads(zlib.decompress(payload).decode("utf-8"))
    except zlib.error as e:
        raise DefinitionParseError(message=f"Failed to decompress IDL: {e}") from e
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DefinitionParseError(message=f"Failed to parse IDL JSON: {e}") from e

    if not isinstance(document, dict):
        raise DefinitionParseError(message="IDL document is not an object")
    return document


def validate_idl(document: dict[str, Any]) -> InterfaceDefinition:
    """Check the IDL shape and build the definition."""
    metadata = document.get("metadata") if isinstance(document.get("metadata"), dict) else {}
    name = document.get("name") or metadata.get("name")
    if not isinstance(name, str) or not name:
        raise DefinitionParseError(message="Invalid IDL structure: missing name")

    instructions = document.get("instructions")
    if not isinstance(instructions, list):
        raise DefinitionParseError(message="Invalid IDL structure: instructions must be a list")

    for index, instruction in enumerate(instructions):
        if (
            not isinstance(instruction, dict)
            or not isinstance(instruction.get("name"), str)
            or not isinstance(instruction.get("accounts"), list)
            or not isinstance(instruction.get("args"), list)
        ):
            raise DefinitionParseError(
                message="Invalid IDL structure: malformed instruction",
                details={"index": index},
            )

    try:
        return InterfaceDefinition.from_dict(document)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DefinitionParseError(message=f"Invalid IDL structure: {e}") from e


def parse_idl_account(data: bytes) -> InterfaceDefinition:
    """Decode and validate IDL account bytes."""
    return validate_idl(decode_idl_account(data))


class SolanaIdlReader:
    """Fetches a program's published Anchor IDL.

    Returns None when no IDL account exists. Transient and parse failures are
    retried with exponential backoff; the last error is raised once attempts
    run out.
    """

    def __init__(
        self,
        lookup: AccountLookupClient,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._lookup = lookup
        self._max_attempts = max(1, max_attempts)
        self._base_delay = base_delay
        self._sleep = sleep

    async def fetch(self, target_address: str) -> InterfaceDefinition | None:
        idl_address = derive_idl_address(target_address)
        attempt = 1
        while True:
            try:
                data = await self._lookup.get_account_data(idl_address)
                if data is None:
                    logger.debug(
                        "No IDL account found",
                        extra={"address": target_address, "idl_address": idl_address},
                    )
                    return None
                return parse_idl_account(data)
            except (TransientFetchError, DefinitionParseError) as e:
                logger.warning(
                    "IDL fetch attempt failed",
                    extra={
                        "address": target_address,
                        "attempt": attempt,
                        "max_attempts": self._max_attempts,
                        "error_code": e.code,
                        "error": e.message,
                    },
                )
                if attempt >= self._max_attempts:
                    e.details.setdefault("attempts", self._max_attempts)
                    raise
                await self._sleep(self._base_delay * 2**attempt)
                attempt += 1


# Protocol compliance
_: type[DefinitionReader] = SolanaIdlReader  # type: ignore
