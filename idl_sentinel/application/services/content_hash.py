"""Deterministic content hashing of interface definitions."""

import hashlib
import json
from typing import Any

from idl_sentinel.domain.entities import InterfaceDefinition


def normalize_definition(definition: InterfaceDefinition) -> dict[str, Any]:
    """Project a definition onto the fields that matter for change detection.

    Docs, metadata and any field not listed here are dropped, so two
    documents that differ only in those (or in key order) normalize equal.
    """
    return {
        "name": definition.name,
        "version": definition.version,
        "instructions": [
            {
                "name": instruction.name,
                "accounts": [
                    {"name": a.name, "mutable": a.mutable, "signer": a.signer}
                    for a in instruction.accounts
                ],
                "args": [{"name": arg.name, "type": arg.type} for arg in instruction.args],
            }
            for instruction in definition.instructions
        ],
        "accounts": [{"name": a.name, "type": a.type} for a in definition.accounts],
        "types": [{"name": t.name, "type": t.type} for t in definition.types],
        "errors": [
            {"code": e.code, "name": e.name, "message": e.message} for e in definition.errors
        ],
    }


def canonical_json(value: Any) -> str:
    """Serialize with sorted keys and no insignificant whitespace."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def content_hash(definition: InterfaceDefinition) -> str:
    """SHA-256 hex digest of the normalized definition."""
    payload = canonical_json(normalize_definition(definition)).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
