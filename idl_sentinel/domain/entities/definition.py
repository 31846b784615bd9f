"""Interface definition (Anchor IDL) value objects.

A definition is parsed once from the decoded JSON document and treated as an
immutable value afterwards. The original document is kept on ``raw`` so a
snapshot can persist exactly what was published.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class InstructionAccount:
    """An account an instruction expects, with its access flags."""

    name: str
    mutable: bool = False
    signer: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstructionAccount":
        # Legacy IDLs use isMut/isSigner, newer ones writable/signer
        mutable = data.get("isMut", data.get("writable", False))
        signer = data.get("isSigner", data.get("signer", False))
        return cls(name=str(data.get("name", "")), mutable=bool(mutable), signer=bool(signer))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "mutable": self.mutable, "signer": self.signer}


@dataclass(frozen=True)
class InstructionArg:
    """A typed instruction argument. ``type`` is the IDL type expression as-is."""

    name: str
    type: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstructionArg":
        return cls(name=str(data.get("name", "")), type=data.get("type"))

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type}


@dataclass(frozen=True)
class Instruction:
    """A callable program instruction."""

    name: str
    accounts: tuple[InstructionAccount, ...] = ()
    args: tuple[InstructionArg, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Instruction":
        return cls(
            name=str(data["name"]),
            accounts=tuple(InstructionAccount.from_dict(a) for a in data.get("accounts") or []),
            args=tuple(InstructionArg.from_dict(a) for a in data.get("args") or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "accounts": [a.to_dict() for a in self.accounts],
            "args": [a.to_dict() for a in self.args],
        }


@dataclass(frozen=True)
class TypeDefinition:
    """A named account layout or custom type."""

    name: str
    type: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TypeDefinition":
        return cls(name=str(data.get("name", "")), type=data.get("type"))

    @property
    def kind(self) -> str:
        if isinstance(self.type, dict):
            return str(self.type.get("kind", "unknown"))
        return "unknown"

    @property
    def field_count(self) -> int:
        if isinstance(self.type, dict):
            return len(self.type.get("fields") or [])
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "type": self.type}


@dataclass(frozen=True)
class ErrorCode:
    """A program error code."""

    code: int
    name: str
    message: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorCode":
        return cls(
            code=int(data["code"]),
            name=str(data.get("name", "")),
            message=str(data.get("msg", data.get("message", "")) or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "name": self.name, "message": self.message}


@dataclass(frozen=True)
class InterfaceDefinition:
    """A program's published interface: instructions, accounts, types, errors."""

    name: str
    version: str = ""
    instructions: tuple[Instruction, ...] = ()
    accounts: tuple[TypeDefinition, ...] = ()
    types: tuple[TypeDefinition, ...] = ()
    errors: tuple[ErrorCode, ...] = ()
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Interface definition name is required")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InterfaceDefinition":
        """Build a definition from a decoded IDL document.

        Newer IDLs carry name/version under ``metadata``; both placements
        are accepted.
        """
        metadata = data.get("metadata") or {}
        name = data.get("name") or metadata.get("name") or ""
        version = data.get("version") or metadata.get("version") or ""
        return cls(
            name=str(name),
            version=str(version),
            instructions=tuple(Instruction.from_dict(i) for i in data.get("instructions") or []),
            accounts=tuple(TypeDefinition.from_dict(a) for a in data.get("accounts") or []),
            types=tuple(TypeDefinition.from_dict(t) for t in data.get("types") or []),
            errors=tuple(ErrorCode.from_dict(e) for e in data.get("errors") or []),
            raw=dict(data),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return the stored document, or a canonical rendering if none was kept."""
        if self.raw:
            return dict(self.raw)
        return {
            "name": self.name,
            "version": self.version,
            "instructions": [i.to_dict() for i in self.instructions],
            "accounts": [a.to_dict() for a in self.accounts],
            "types": [t.to_dict() for t in self.types],
            "errors": [e.to_dict() for e in self.errors],
        }
