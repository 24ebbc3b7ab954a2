"""Unit tests for validation, error consolidation, save order and apply."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any
from unittest.mock import MagicMock

import pytest
from records import Record

from flat_mapper.blueprint.builder import blueprint
from flat_mapper.blueprint.relations import belongs_to
from flat_mapper.core.transaction import TransactionManager
from flat_mapper.node.base import Node


class Account(Record):
    login = None


class Settings(Record):
    theme = None


class Owner(Record):
    title = None
    code = None
    account = None
    settings = None

    __relations__ = {"account": belongs_to(Account)}


class AccountMapper(Node):
    blueprint = (
        blueprint(Account)
        .map("login")
        .validates_presence("login")
        .validate(lambda n: n.errors.add("base", "account problem") if n.login == "bad" else None)
        .build()
    )


class SettingsMapper(Node):
    blueprint = blueprint(Settings).map("theme").validates_inclusion(("light", "dark"), "theme").build()


class OwnerMapper(Node):
    blueprint = (
        blueprint(Owner)
        .map("title")
        .map("code", writer="assign_code")
        .validates_presence("title")
        .validate(lambda n: n.errors.add("base", "owner problem") if n.title == "bad" else None)
        .mount("account", node_class=AccountMapper)
        .mount("settings", node_class=SettingsMapper)
        .build()
    )

    def assign_code(self, mapping: Any, value: Any) -> None:
        try:
            self.target.code = int(value)
        except ValueError:
            self.errors.preserve(mapping.name, "is malformed")


VALID = {"title": "T", "login": "root", "theme": "dark"}


class TestValidation:
    def test_valid_tree(self) -> None:
        node = OwnerMapper(Owner())
        node.write(dict(VALID))
        assert node.is_valid()
        assert node.errors.is_empty()

    def test_all_children_are_validated(self) -> None:
        node = OwnerMapper(Owner())
        node.write({"title": "", "login": "", "theme": "neon"})
        assert not node.is_valid()
        assert node.errors.to_dict() == {
            "title": ["can't be blank"],
            "login": ["can't be blank"],
            "theme": ["is not included in the list"],
        }
        assert node.mounting("settings").errors.keys() == ["theme"]

    def test_same_key_messages_concatenate(self) -> None:
        node = OwnerMapper(Owner())
        node.write({"title": "bad", "login": "bad", "theme": "dark"})
        assert not node.is_valid()
        assert node.errors["base"] == ["owner problem", "account problem"]

    def test_sibling_messages_concatenate(self) -> None:
        class Audit(Record):
            note = None

        class Ledger(Record):
            account = None
            audit = None

        class AuditMapper(Node):
            blueprint = (
                blueprint(Audit)
                .map("note")
                .validate(lambda n: n.errors.add("base", "audit problem") if n.note == "bad" else None)
                .build()
            )

        class LedgerMapper(Node):
            blueprint = (
                blueprint(Ledger)
                .mount("account", node_class=AccountMapper)
                .mount("audit", node_class=AuditMapper)
                .build()
            )

        node = LedgerMapper(Ledger())
        node.write({"login": "bad", "note": "bad"})
        assert not node.is_valid()
        assert node.errors.to_dict() == {"base": ["account problem", "audit problem"]}

    def test_revalidation_does_not_duplicate(self) -> None:
        node = OwnerMapper(Owner())
        node.write({"title": "", "login": "root", "theme": "dark"})
        node.is_valid()
        node.is_valid()
        assert node.errors.to_dict() == {"title": ["can't be blank"]}

    def test_validate_hooks_wrap_rules(self) -> None:
        calls: list[str] = []

        class HookedMapper(Node):
            blueprint = (
                blueprint(Settings)
                .map("theme")
                .before_validate(lambda n: calls.append("before"))
                .validate(lambda n: calls.append("rule"))
                .after_validate(lambda n: calls.append("after"))
                .build()
            )

        assert HookedMapper(Settings()).is_valid()
        assert calls == ["before", "rule", "after"]

    def test_preserved_writer_error(self) -> None:
        owner = Owner()
        node = OwnerMapper(owner)
        node.write({**VALID, "code": "x1"})
        assert not node.is_valid()
        assert node.errors.to_dict() == {"code": ["is malformed"]}
        assert node.is_valid()

    def test_writer_method_assigns(self) -> None:
        owner = Owner()
        OwnerMapper(owner).write({"code": "42"})
        assert owner.code == 42


class TestSave:
    def test_save_order(self, save_log: list[str]) -> None:
        node = OwnerMapper(Owner())
        node.write(dict(VALID))
        assert node.save() is True
        assert save_log == ["Account", "Owner", "Settings"]
        assert node.persisted
        assert node.mounting("account").persisted

    def test_targets_are_saved_without_validation(self) -> None:
        owner = Owner()
        OwnerMapper(owner).save()
        assert owner.save_validate_flags == [False]

    def test_failures_do_not_short_circuit(self, save_log: list[str]) -> None:
        owner = Owner(account=Account(fail_save=True), settings=Settings(fail_save=True))
        node = OwnerMapper(owner)
        assert node.save() is False
        assert save_log == ["Account", "Owner", "Settings"]

    def test_save_hooks(self, save_log: list[str]) -> None:
        class HookedMapper(Node):
            blueprint = (
                blueprint(Settings)
                .before_save(lambda n: save_log.append("before"))
                .after_save(lambda n: save_log.append("after"))
                .build()
            )

        assert HookedMapper(Settings()).save() is True
        assert save_log == ["before", "Settings", "after"]

    def test_nested_before_mountings(self, save_log: list[str]) -> None:
        class ContractMapper(Node):
            blueprint = blueprint(Settings).mount("owner", node_class=OwnerMapper, save="before").build()

        ContractMapper(Settings()).save()
        assert save_log == ["Account", "Owner", "Settings", "Settings"]


class TestApply:
    def test_apply_valid(self, save_log: list[str]) -> None:
        node = OwnerMapper(Owner())
        assert node.apply(dict(VALID)) is True
        assert save_log == ["Account", "Owner", "Settings"]

    def test_apply_invalid_saves_nothing(self, save_log: list[str]) -> None:
        node = OwnerMapper(Owner())
        assert node.apply({"title": "T"}) is False
        assert save_log == []
        assert "login" in node.errors

    def test_apply_reports_save_failure(self) -> None:
        node = OwnerMapper(Owner(settings=Settings(fail_save=True)))
        assert node.apply(dict(VALID)) is False

    def test_apply_runs_inside_transaction(self) -> None:
        connection = MagicMock()

        class TransactionalMapper(OwnerMapper):
            def transaction(self) -> AbstractContextManager[Any]:
                return TransactionManager(connection)

        assert TransactionalMapper(Owner()).apply(dict(VALID)) is True
        connection.commit.assert_called_once_with()
        connection.rollback.assert_not_called()

    def test_apply_rolls_back_on_exception(self) -> None:
        connection = MagicMock()

        class BrokenMapper(OwnerMapper):
            blueprint = OwnerMapper.blueprint.extend().after_save(lambda n: 1 / 0).build()

            def transaction(self) -> AbstractContextManager[Any]:
                return TransactionManager(connection)

        with pytest.raises(ZeroDivisionError):
            BrokenMapper(Owner()).apply(dict(VALID))
        connection.rollback.assert_called_once_with()
        connection.commit.assert_not_called()
