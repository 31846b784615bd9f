"""Structural diff between two interface definitions.

Four categories are compared independently: instructions (by name), custom
types (by name), account layouts (by name) and error codes (by code). Every
change gets a severity; when several severity rules apply to one change the
most severe one wins.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from idl_sentinel.domain.entities import (
    ChangeDetail,
    DetectedChange,
    ErrorCode,
    Instruction,
    InterfaceDefinition,
    Severity,
    TypeDefinition,
    max_severity,
)

DEFAULT_SENSITIVE_KEYWORDS: tuple[str, ...] = (
    "initialize",
    "close",
    "withdraw",
    "transfer",
    "mint",
    "burn",
)

K = TypeVar("K")
V = TypeVar("V")


def deep_equal(left: Any, right: Any) -> bool:
    """Recursive value equality over JSON-like data.

    Mappings compare by key set then per key, sequences positionally, and
    everything else by value. Booleans never equal numbers.
    """
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if set(left.keys()) != set(right.keys()):
            return False
        return all(deep_equal(left[key], right[key]) for key in left)

    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(deep_equal(a, b) for a, b in zip(left, right))

    if isinstance(left, (Mapping, list, tuple)) or isinstance(right, (Mapping, list, tuple)):
        return False

    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right

    return left == right


def _index(items: Iterable[V], key: Callable[[V], K]) -> dict[K, V]:
    # Later duplicates win, matching a plain name -> item map
    return {key(item): item for item in items}


class DiffEngine:
    """Computes categorized, severity-classified changes between definitions."""

    def __init__(self, sensitive_keywords: Sequence[str] = DEFAULT_SENSITIVE_KEYWORDS):
        self._sensitive_keywords = tuple(k.lower() for k in sensitive_keywords)

    def detect_changes(
        self,
        old: InterfaceDefinition | None,
        new: InterfaceDefinition,
    ) -> list[DetectedChange]:
        """Diff two definitions; a missing ``old`` yields one initial-observation change."""
        if old is None:
            return [self._initial_observation(new)]

        changes: list[DetectedChange] = []
        changes.extend(self._instruction_changes(old, new))
        changes.extend(self._type_changes(old.types, new.types, category="type"))
        changes.extend(self._type_changes(old.accounts, new.accounts, category="account"))
        changes.extend(self._error_changes(old, new))
        return changes

    # --- Initial ---

    def _initial_observation(self, new: InterfaceDefinition) -> DetectedChange:
        return DetectedChange(
            change_type="initial_observation",
            severity="low",
            summary=f"Initial IDL detected for program {new.name}",
            detail=ChangeDetail(
                change_type="initial_observation",
                item_name=new.name,
                description=(
                    f"Initial snapshot with {len(new.instructions)} instructions, "
                    f"{len(new.accounts)} accounts, {len(new.types)} types "
                    f"and {len(new.errors)} errors"
                ),
                new_value=new.to_dict(),
            ),
        )

    # --- Instructions ---

    def _instruction_changes(
        self, old: InterfaceDefinition, new: InterfaceDefinition
    ) -> list[DetectedChange]:
        changes: list[DetectedChange] = []
        old_map = _index(old.instructions, lambda i: i.name)
        new_map = _index(new.instructions, lambda i: i.name)

        for name, instruction in new_map.items():
            if name in old_map:
                continue
            changes.append(
                DetectedChange(
                    change_type="instruction_added",
                    severity=self.added_instruction_severity(instruction),
                    summary=f"New instruction '{name}' added",
                    detail=ChangeDetail(
                        change_type="instruction_added",
                        item_name=name,
                        description=(
                            f"Added new instruction with {len(instruction.accounts)} accounts "
                            f"and {len(instruction.args)} arguments"
                        ),
                        new_value=instruction.to_dict(),
                    ),
                )
            )

        for name, instruction in old_map.items():
            if name in new_map:
                continue
            changes.append(
                DetectedChange(
                    change_type="instruction_removed",
                    severity="critical",
                    summary=f"Instruction '{name}' removed",
                    detail=ChangeDetail(
                        change_type="instruction_removed",
                        item_name=name,
                        description=(
                            f"Removed instruction that had {len(instruction.accounts)} accounts "
                            f"and {len(instruction.args)} arguments"
                        ),
                        old_value=instruction.to_dict(),
                    ),
                )
            )

        for name, new_instruction in new_map.items():
            old_instruction = old_map.get(name)
            if old_instruction is None:
                continue
            if deep_equal(old_instruction.to_dict(), new_instruction.to_dict()):
                continue
            notes, severity = self.instruction_modification(old_instruction, new_instruction)
            summary = ", ".join(notes) if notes else "structure modified"
            changes.append(
                DetectedChange(
                    change_type="instruction_modified",
                    severity=severity,
                    summary=f"Instruction '{name}' modified: {summary}",
                    detail=ChangeDetail(
                        change_type="instruction_modified",
                        item_name=name,
                        description=f"Instruction modification details: {summary}",
                        old_value=old_instruction.to_dict(),
                        new_value=new_instruction.to_dict(),
                    ),
                )
            )

        return changes

    def added_instruction_severity(self, instruction: Instruction) -> Severity:
        """Medium for instructions whose name suggests a sensitive operation, else low."""
        lowered = instruction.name.lower()
        if any(keyword in lowered for keyword in self._sensitive_keywords):
            return "medium"
        return "low"

    def instruction_modification(
        self, old: Instruction, new: Instruction
    ) -> tuple[list[str], Severity]:
        """Describe how an instruction changed and classify it.

        All matching rules are collected and the highest severity is kept.
        Accounts are compared positionally.
        """
        notes: list[str] = []
        matched: list[Severity] = ["low"]

        if len(old.accounts) != len(new.accounts):
            notes.append(
                f"accounts count changed from {len(old.accounts)} to {len(new.accounts)}"
            )
            matched.append("high")

        if len(old.args) != len(new.args):
            notes.append(f"arguments count changed from {len(old.args)} to {len(new.args)}")
            matched.append("medium")

        for old_account, new_account in zip(old.accounts, new.accounts):
            if old_account.mutable != new_account.mutable:
                notes.append(f"account '{new_account.name}' mutability changed")
                matched.append("high")
            if old_account.signer != new_account.signer:
                notes.append(f"account '{new_account.name}' signer requirement changed")
                matched.append("critical")
            if old_account.name != new_account.name:
                notes.append(f"account '{old_account.name}' renamed to '{new_account.name}'")

        for old_arg, new_arg in zip(old.args, new.args):
            if old_arg.name != new_arg.name:
                notes.append(f"argument '{old_arg.name}' renamed to '{new_arg.name}'")
            if not deep_equal(old_arg.type, new_arg.type):
                notes.append(f"argument '{new_arg.name}' type changed")

        return notes, max_severity(*matched)

    # --- Types and account layouts ---

    def _type_changes(
        self,
        old_items: Sequence[TypeDefinition],
        new_items: Sequence[TypeDefinition],
        category: str,
    ) -> list[DetectedChange]:
        changes: list[DetectedChange] = []
        old_map = _index(old_items, lambda t: t.name)
        new_map = _index(new_items, lambda t: t.name)
        label = "type" if category == "type" else "account type"

        for name, item in new_map.items():
            if name in old_map:
                continue
            if category == "type":
                description = f"Added new {item.kind} type"
            else:
                description = f"Added new account type with {item.field_count} fields"
            changes.append(
                DetectedChange(
                    change_type=f"{category}_added",  # type: ignore[arg-type]
                    severity="low",
                    summary=f"New {label} '{name}' added",
                    detail=ChangeDetail(
                        change_type=f"{category}_added",  # type: ignore[arg-type]
                        item_name=name,
                        description=description,
                        new_value=item.to_dict(),
                    ),
                )
            )

        for name, item in old_map.items():
            if name in new_map:
                continue
            if category == "type":
                description = f"Removed {item.kind} type"
            else:
                description = f"Removed account type that had {item.field_count} fields"
            changes.append(
                DetectedChange(
                    change_type=f"{category}_removed",  # type: ignore[arg-type]
                    severity="high",
                    summary=f"{label.capitalize()} '{name}' removed",
                    detail=ChangeDetail(
                        change_type=f"{category}_removed",  # type: ignore[arg-type]
                        item_name=name,
                        description=description,
                        old_value=item.to_dict(),
                    ),
                )
            )

        for name, new_item in new_map.items():
            old_item = old_map.get(name)
            if old_item is None or deep_equal(old_item.to_dict(), new_item.to_dict()):
                continue
            if category == "type":
                description = f"Modified {new_item.kind} type structure"
            else:
                description = "Modified account type structure"
            changes.append(
                DetectedChange(
                    change_type=f"{category}_modified",  # type: ignore[arg-type]
                    severity="medium",
                    summary=f"{label.capitalize()} '{name}' modified",
                    detail=ChangeDetail(
                        change_type=f"{category}_modified",  # type: ignore[arg-type]
                        item_name=name,
                        description=description,
                        old_value=old_item.to_dict(),
                        new_value=new_item.to_dict(),
                    ),
                )
            )

        return changes

    # --- Errors ---

    def _error_changes(
        self, old: InterfaceDefinition, new: InterfaceDefinition
    ) -> list[DetectedChange]:
        changes: list[DetectedChange] = []
        old_map: dict[int, ErrorCode] = _index(old.errors, lambda e: e.code)
        new_map: dict[int, ErrorCode] = _index(new.errors, lambda e: e.code)

        for code, error in new_map.items():
            if code in old_map:
                continue
            changes.append(
                DetectedChange(
                    change_type="error_added",
                    severity="low",
                    summary=f"New error code {code} added: {error.name}",
                    detail=ChangeDetail(
                        change_type="error_added",
                        item_name=error.name,
                        description=f"Added error: {error.message}",
                        new_value=error.to_dict(),
                    ),
                )
            )

        for code, error in old_map.items():
            if code in new_map:
                continue
            changes.append(
                DetectedChange(
                    change_type="error_removed",
                    severity="medium",
                    summary=f"Error code {code} removed: {error.name}",
                    detail=ChangeDetail(
                        change_type="error_removed",
                        item_name=error.name,
                        description=f"Removed error: {error.message}",
                        old_value=error.to_dict(),
                    ),
                )
            )

        for code, new_error in new_map.items():
            old_error = old_map.get(code)
            if old_error is None or deep_equal(old_error.to_dict(), new_error.to_dict()):
                continue
            changes.append(
                DetectedChange(
                    change_type="error_modified",
                    severity="low",
                    summary=f"Error code {code} modified: {new_error.name}",
                    detail=ChangeDetail(
                        change_type="error_modified",
                        item_name=new_error.name,
                        description="Modified error message or name",
                        old_value=old_error.to_dict(),
                        new_value=new_error.to_dict(),
                    ),
                )
            )

        return changes


def detect_changes(
    old: InterfaceDefinition | None,
    new: InterfaceDefinition,
    sensitive_keywords: Sequence[str] = DEFAULT_SENSITIVE_KEYWORDS,
) -> list[DetectedChange]:
    """Module-level shortcut for a one-off diff."""
    return DiffEngine(sensitive_keywords).detect_changes(old, new)
