"""Typed error hierarchy for IDL Sentinel.

All application errors inherit from AppError and provide:
- code: Machine-readable error code
- message: Human-readable description
- details: Additional context as dict
- retryable: Whether the operation can be retried

Per-target and per-subscriber errors are not raised past the monitoring
and notification services; they are collected into result objects and
serialized with ``to_dict``. Only FatalSetupError aborts a whole run.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error with full context."""

    code: str
    message: str = ""
    details: dict[str, Any] = field(default_factory=dict)
    retryable: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def to_dict(self) -> dict[str, Any]:
        """Serialize error for API responses and logging."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat(),
        }


# --- Validation Errors ---


@dataclass
class ValidationError(AppError):
    """Input validation failed."""

    code: str = "VALIDATION_ERROR"
    retryable: bool = False


@dataclass
class InvalidTargetAddressError(ValidationError):
    """Target address is not a valid program public key."""

    code: str = "INVALID_TARGET_ADDRESS"
    address: str = ""


# --- Auth Errors ---


@dataclass
class AuthError(AppError):
    """Authentication/authorization failed."""

    code: str = "AUTH_ERROR"
    retryable: bool = False


@dataclass
class TriggerUnauthorizedError(AuthError):
    """Scheduler trigger called without the shared secret."""

    code: str = "TRIGGER_UNAUTHORIZED"


# --- Provider Errors ---


@dataclass
class ProviderError(AppError):
    """External provider failed."""

    code: str = "PROVIDER_ERROR"
    provider: str = ""
    operation: str = ""


@dataclass
class TransientFetchError(ProviderError):
    """Reading the remote definition account failed; may succeed on retry."""

    code: str = "TRANSIENT_FETCH_ERROR"
    retryable: bool = True
    provider: str = "solana-rpc"
    operation: str = "getAccountInfo"


@dataclass
class DefinitionParseError(ProviderError):
    """Definition account bytes could not be decoded into a valid IDL."""

    code: str = "DEFINITION_PARSE_ERROR"
    retryable: bool = True
    provider: str = "solana-rpc"
    operation: str = "decode_idl"


@dataclass
class DeliveryError(ProviderError):
    """Delivering a notification to one subscriber endpoint failed."""

    code: str = "DELIVERY_ERROR"
    retryable: bool = False
    operation: str = "deliver"
    channel: str = ""
    subscriber_id: str = ""
    status_code: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "channel": self.channel,
                "subscriber_id": self.subscriber_id,
                "status_code": self.status_code,
            }
        )
        return data


# --- Database Errors ---


@dataclass
class DatabaseError(AppError):
    """Database operation failed."""

    code: str = "DATABASE_ERROR"
    operation: str = ""


@dataclass
class PersistenceError(DatabaseError):
    """A store write failed; the enclosing unit of work was rolled back."""

    code: str = "PERSISTENCE_ERROR"
    retryable: bool = True


# --- Run Errors ---


@dataclass
class FatalSetupError(AppError):
    """The run cannot start at all (e.g. targets cannot be enumerated)."""

    code: str = "FATAL_SETUP_ERROR"
    retryable: bool = True
    run_id: str = ""


def to_app_error(exc: BaseException) -> AppError:
    """Wrap unexpected exceptions so every collected error serializes the same way."""
    if isinstance(exc, AppError):
        return exc
    return AppError(
        code="UNEXPECTED_ERROR",
        message=str(exc) or type(exc).__name__,
        details={"error_type": type(exc).__name__},
    )
