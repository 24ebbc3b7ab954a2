"""Integration test for nodes over SQLite-backed records.

Covers: apply inside a TransactionManager, host lookups from save hooks,
rollback of already saved rows when a later save fails, and updating a
found record, against a real SQLite in-memory database.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import AbstractContextManager
from typing import Any, ClassVar

import pytest

from flat_mapper import Node, TransactionManager, blueprint

# --- Rows ---


class Row:
    table: ClassVar[str]
    columns: ClassVar[tuple[str, ...]]
    connection: ClassVar[sqlite3.Connection | None] = None

    def __init__(self, **values: Any) -> None:
        self.id: int | None = values.get("id")
        for column in self.columns:
            setattr(self, column, values.get(column))

    @classmethod
    def find(cls, id: int) -> Row | None:
        assert cls.connection is not None
        row = cls.connection.execute(
            f"SELECT id, {', '.join(cls.columns)} FROM {cls.table} WHERE id = ?", (id,)
        ).fetchone()
        if row is None:
            return None
        return cls(**dict(zip(("id", *cls.columns), row)))

    def is_new_record(self) -> bool:
        return self.id is None

    def save(self, validate: bool = True) -> bool:
        assert self.connection is not None
        values = [getattr(self, column) for column in self.columns]
        if self.id is None:
            placeholders = ", ".join("?" for _ in self.columns)
            cursor = self.connection.execute(
                f"INSERT INTO {self.table} ({', '.join(self.columns)}) VALUES ({placeholders})",
                values,
            )
            self.id = cursor.lastrowid
        else:
            assignments = ", ".join(f"{column} = ?" for column in self.columns)
            self.connection.execute(
                f"UPDATE {self.table} SET {assignments} WHERE id = ?", [*values, self.id]
            )
        return True


class PersonRow(Row):
    table = "people"
    columns = ("name",)


class NoteRow(Row):
    table = "notes"
    columns = ("person_id", "body")


# --- Nodes ---


class NoteMapper(Node):
    blueprint = (
        blueprint(NoteRow)
        .map("body")
        .before_save(lambda n: setattr(n.target, "person_id", n.host.target.id))
        .build()
    )


class PersonRowMapper(Node):
    blueprint = (
        blueprint(PersonRow)
        .map("name")
        .validates_presence("name")
        .mount("note", node_class=NoteMapper, target=lambda _: NoteRow())
        .build()
    )

    def transaction(self) -> AbstractContextManager[Any]:
        assert Row.connection is not None
        return TransactionManager(Row.connection)


# --- Fixtures ---


@pytest.fixture
def db(sqlite_conn: sqlite3.Connection, monkeypatch: pytest.MonkeyPatch) -> Iterator[sqlite3.Connection]:
    sqlite_conn.execute(
        "CREATE TABLE notes (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "person_id INTEGER NOT NULL, body TEXT NOT NULL)"
    )
    sqlite_conn.commit()
    monkeypatch.setattr(Row, "connection", sqlite_conn)
    yield sqlite_conn


def count(conn: sqlite3.Connection, table: str) -> int:
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class TestSQLiteWorkflow:
    def test_apply_commits_tree(self, db: sqlite3.Connection) -> None:
        node = PersonRowMapper.build()
        assert node.apply({"name": "Alice", "body": "hello"}) is True

        person_id = node.target.id
        assert db.execute("SELECT name FROM people WHERE id = ?", (person_id,)).fetchone() == ("Alice",)
        assert db.execute("SELECT person_id, body FROM notes").fetchall() == [(person_id, "hello")]

    def test_invalid_params_write_nothing(self, db: sqlite3.Connection) -> None:
        node = PersonRowMapper.build()
        assert node.apply({"body": "hello"}) is False
        assert node.errors.to_dict() == {"name": ["can't be blank"]}
        assert count(db, "people") == 0

    def test_failed_child_rolls_back_parent(self, db: sqlite3.Connection) -> None:
        node = PersonRowMapper.build()
        with pytest.raises(sqlite3.IntegrityError):
            node.apply({"name": "Alice"})
        assert count(db, "people") == 0
        assert count(db, "notes") == 0

    def test_update_found_record(self, db: sqlite3.Connection) -> None:
        PersonRowMapper.build().apply({"name": "Alice", "body": "first"})
        person_id = db.execute("SELECT id FROM people").fetchone()[0]

        node = PersonRowMapper.find(person_id)
        assert node.get_field("name") == "Alice"
        assert node.apply({"name": "Alicia", "body": "second"}) is True
        assert db.execute("SELECT name FROM people").fetchall() == [("Alicia",)]
        assert count(db, "notes") == 2
