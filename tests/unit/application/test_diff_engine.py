"""Tests for the structural diff engine."""

from idl_sentinel.application.services.diff_engine import DiffEngine, deep_equal, detect_changes
from idl_sentinel.domain.entities import InterfaceDefinition


def _definition(instructions=None, **sections) -> InterfaceDefinition:
    doc = {"name": "amm", "version": "0.1.0", "instructions": instructions or []}
    doc.update(sections)
    return InterfaceDefinition.from_dict(doc)


def _instruction(name, accounts=(), args=()):
    return {"name": name, "accounts": list(accounts), "args": list(args)}


def _account(name, mut=False, signer=False):
    return {"name": name, "isMut": mut, "isSigner": signer}


def _arg(name, type_="u64"):
    return {"name": name, "type": type_}


class TestDeepEqual:
    """Test recursive value equality."""

    def test_mapping_key_order_ignored(self):
        assert deep_equal({"a": 1, "b": [1, 2]}, {"b": [1, 2], "a": 1})

    def test_arrays_positional(self):
        assert not deep_equal([1, 2], [2, 1])

    def test_key_sets_differ(self):
        assert not deep_equal({"a": 1}, {"a": 1, "b": None})

    def test_bool_is_not_number(self):
        assert not deep_equal(True, 1)
        assert not deep_equal(0, False)

    def test_nested(self):
        left = {"kind": "struct", "fields": [{"name": "x", "type": {"vec": "u8"}}]}
        right = {"fields": [{"type": {"vec": "u8"}, "name": "x"}], "kind": "struct"}
        assert deep_equal(left, right)

    def test_container_vs_scalar(self):
        assert not deep_equal([1], 1)
        assert not deep_equal({"a": 1}, [("a", 1)])


class TestInitialObservation:
    def test_single_low_change_without_old(self):
        new = _definition([_instruction("swap")])

        changes = DiffEngine().detect_changes(None, new)

        assert len(changes) == 1
        assert changes[0].change_type == "initial_observation"
        assert changes[0].severity == "low"
        assert "amm" in changes[0].summary


class TestInstructionChanges:
    """Test instruction severity rules."""

    def test_identical_definitions_have_no_changes(self):
        old = _definition([_instruction("swap", [_account("pool", mut=True)], [_arg("amount")])])
        new = _definition([_instruction("swap", [_account("pool", mut=True)], [_arg("amount")])])

        assert DiffEngine().detect_changes(old, new) == []

    def test_removed_instruction_is_critical(self):
        old = _definition([_instruction("swap"), _instruction("refresh")])
        new = _definition([_instruction("refresh")])

        changes = DiffEngine().detect_changes(old, new)

        assert len(changes) == 1
        assert changes[0].change_type == "instruction_removed"
        assert changes[0].severity == "critical"
        assert changes[0].summary == "Instruction 'swap' removed"

    def test_added_plain_instruction_is_low(self):
        old = _definition([_instruction("swap")])
        new = _definition([_instruction("swap"), _instruction("refresh_price")])

        changes = DiffEngine().detect_changes(old, new)

        assert [(c.change_type, c.severity) for c in changes] == [("instruction_added", "low")]
        assert changes[0].summary == "New instruction 'refresh_price' added"

    def test_added_sensitive_instruction_is_medium(self):
        old = _definition([_instruction("swap")])
        new = _definition([_instruction("swap"), _instruction("emergencyWithdraw")])

        changes = DiffEngine().detect_changes(old, new)

        assert changes[0].severity == "medium"

    def test_custom_sensitive_keywords(self):
        old = _definition([])
        new = _definition([_instruction("pause")])

        changes = DiffEngine(sensitive_keywords=["pause"]).detect_changes(old, new)

        assert changes[0].severity == "medium"

    def test_signer_change_is_critical_even_with_lower_rules(self):
        """Signer flip plus an extra argument still yields critical."""
        old = _definition([_instruction("swap", [_account("pool", mut=True)], [_arg("amount")])])
        new = _definition(
            [
                _instruction(
                    "swap",
                    [_account("pool", mut=True, signer=True)],
                    [_arg("amount"), _arg("min_out")],
                )
            ]
        )

        changes = DiffEngine().detect_changes(old, new)

        assert len(changes) == 1
        change = changes[0]
        assert change.change_type == "instruction_modified"
        assert change.severity == "critical"
        assert "signer requirement changed" in change.summary
        assert "arguments count changed from 1 to 2" in change.summary

    def test_mutability_change_is_high(self):
        old = _definition([_instruction("swap", [_account("pool", mut=True)])])
        new = _definition([_instruction("swap", [_account("pool", mut=False)])])

        changes = DiffEngine().detect_changes(old, new)

        assert changes[0].severity == "high"
        assert "account 'pool' mutability changed" in changes[0].summary

    def test_account_count_change_is_high(self):
        old = _definition([_instruction("swap", [_account("pool")])])
        new = _definition([_instruction("swap", [_account("pool"), _account("oracle")])])

        changes = DiffEngine().detect_changes(old, new)

        assert changes[0].severity == "high"
        assert "accounts count changed from 1 to 2" in changes[0].summary

    def test_arg_count_change_is_medium(self):
        old = _definition([_instruction("swap", args=[_arg("amount")])])
        new = _definition([_instruction("swap", args=[])])

        changes = DiffEngine().detect_changes(old, new)

        assert changes[0].severity == "medium"

    def test_arg_type_change_is_low(self):
        old = _definition([_instruction("swap", args=[_arg("amount", "u64")])])
        new = _definition([_instruction("swap", args=[_arg("amount", "u128")])])

        changes = DiffEngine().detect_changes(old, new)

        assert changes[0].change_type == "instruction_modified"
        assert changes[0].severity == "low"
        assert "argument 'amount' type changed" in changes[0].summary

    def test_swap_replaced_by_swap_v2(self):
        old = _definition(
            [_instruction("swap", [_account("pool", mut=True, signer=False)], [_arg("amount")])]
        )
        new = _definition(
            [_instruction("swap_v2", [_account("authority", mut=False, signer=True)])]
        )

        changes = detect_changes(old, new)

        assert sorted((c.change_type, c.detail.item_name, c.severity) for c in changes) == [
            ("instruction_added", "swap_v2", "low"),
            ("instruction_removed", "swap", "critical"),
        ]


class TestTypeAndAccountChanges:
    """Test custom type and account layout rules."""

    def test_type_lifecycle(self):
        struct = {"kind": "struct", "fields": [{"name": "a", "type": "u8"}]}
        old = _definition(
            types=[{"name": "Config", "type": struct}, {"name": "Legacy", "type": struct}]
        )
        new = _definition(
            types=[
                {"name": "Config", "type": {"kind": "struct", "fields": []}},
                {"name": "Fresh", "type": {"kind": "enum", "variants": []}},
            ]
        )

        changes = DiffEngine().detect_changes(old, new)
        by_type = {c.change_type: c for c in changes}

        assert by_type["type_added"].severity == "low"
        assert by_type["type_added"].detail.description == "Added new enum type"
        assert by_type["type_removed"].severity == "high"
        assert by_type["type_removed"].summary == "Type 'Legacy' removed"
        assert by_type["type_modified"].severity == "medium"

    def test_account_lifecycle(self):
        layout = {"kind": "struct", "fields": [{"name": "owner", "type": "publicKey"}]}
        old = _definition(accounts=[{"name": "Pool", "type": layout}])
        new = _definition(accounts=[{"name": "PoolV2", "type": layout}])

        changes = DiffEngine().detect_changes(old, new)

        assert [(c.change_type, c.severity) for c in changes] == [
            ("account_added", "low"),
            ("account_removed", "high"),
        ]
        assert changes[0].summary == "New account type 'PoolV2' added"
        assert changes[0].detail.description == "Added new account type with 1 fields"


class TestErrorChanges:
    """Test error code rules."""

    def test_error_lifecycle(self):
        old = _definition(
            errors=[
                {"code": 6000, "name": "Slippage", "msg": "Slippage exceeded"},
                {"code": 6001, "name": "Paused", "msg": "Paused"},
            ]
        )
        new = _definition(
            errors=[
                {"code": 6000, "name": "Slippage", "msg": "Slippage tolerance exceeded"},
                {"code": 6002, "name": "Stale", "msg": "Oracle stale"},
            ]
        )

        changes = DiffEngine().detect_changes(old, new)

        assert [(c.change_type, c.severity) for c in changes] == [
            ("error_added", "low"),
            ("error_removed", "medium"),
            ("error_modified", "low"),
        ]
        assert changes[0].summary == "New error code 6002 added: Stale"


class TestCategoryOrder:
    def test_categories_reported_in_order(self):
        old = _definition(
            [_instruction("a")],
            types=[{"name": "T", "type": {"kind": "struct", "fields": []}}],
            accounts=[{"name": "A", "type": {"kind": "struct", "fields": []}}],
            errors=[{"code": 1, "name": "E", "msg": ""}],
        )
        new = _definition([])

        changes = DiffEngine().detect_changes(old, new)

        assert [c.change_type for c in changes] == [
            "instruction_removed",
            "type_removed",
            "account_removed",
            "error_removed",
        ]
