"""Solana infrastructure - RPC account lookup and Anchor IDL decoding."""

from idl_sentinel.infrastructure.solana.idl_reader import (
    SolanaIdlReader,
    decode_idl_account,
    derive_idl_address,
    parse_idl_account,
    validate_idl,
)
from idl_sentinel.infrastructure.solana.rpc_client import SolanaRpcClient

__all__ = [
    "SolanaRpcClient",
    "SolanaIdlReader",
    "derive_idl_address",
    "decode_idl_account",
    "parse_idl_account",
    "validate_idl",
]
