"""Domain entities - pure Python dataclasses representing monitoring objects."""

from idl_sentinel.domain.entities.change import (
    CHANNELS,
    SEVERITIES,
    SEVERITY_ORDER,
    ChangeDetail,
    ChangeRecord,
    ChangeType,
    DetectedChange,
    NotificationChannel,
    Severity,
    max_severity,
)
from idl_sentinel.domain.entities.definition import (
    ErrorCode,
    Instruction,
    InstructionAccount,
    InstructionArg,
    InterfaceDefinition,
    TypeDefinition,
)
from idl_sentinel.domain.entities.monitoring import (
    FanoutResult,
    InitialFetchResult,
    MonitoringLog,
    RunResult,
    TargetError,
    TargetOutcome,
)
from idl_sentinel.domain.entities.snapshot import Snapshot
from idl_sentinel.domain.entities.subscriber import SubscriberEndpoint
from idl_sentinel.domain.entities.target import MonitoredTarget

__all__ = [
    # Definitions
    "InterfaceDefinition",
    "Instruction",
    "InstructionAccount",
    "InstructionArg",
    "TypeDefinition",
    "ErrorCode",
    # Targets & snapshots
    "MonitoredTarget",
    "Snapshot",
    # Changes
    "ChangeRecord",
    "ChangeDetail",
    "DetectedChange",
    "ChangeType",
    "Severity",
    "NotificationChannel",
    "SEVERITIES",
    "SEVERITY_ORDER",
    "CHANNELS",
    "max_severity",
    # Subscribers
    "SubscriberEndpoint",
    # Runs
    "RunResult",
    "TargetError",
    "TargetOutcome",
    "InitialFetchResult",
    "FanoutResult",
    "MonitoringLog",
]
