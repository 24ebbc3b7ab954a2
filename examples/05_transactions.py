"""
Example 05: Transactions

This example demonstrates running the save phase of apply() inside a
TransactionManager, with automatic rollback when a save raises.
"""

import sqlite3

from flat_mapper import Node, TransactionManager, blueprint

conn = sqlite3.connect(":memory:")


class Account:
    def __init__(self):
        self.id = None
        self.email = None

    def is_new_record(self):
        return self.id is None

    def save(self, validate=True):
        cursor = conn.execute("INSERT INTO accounts (email) VALUES (?)", (self.email,))
        self.id = cursor.lastrowid
        return True


class AccountMapper(Node):
    blueprint = blueprint(Account).map("email").validates_presence("email").build()

    def transaction(self):
        return TransactionManager(conn)


def main():
    conn.execute("CREATE TABLE accounts (id INTEGER PRIMARY KEY, email TEXT NOT NULL UNIQUE)")
    conn.commit()

    print("=== Transactions ===\n")

    # Success: committed
    ok = AccountMapper.build().apply({"email": "alice@example.com"})
    print(f"First apply: {ok}")

    # Failure: the UNIQUE constraint raises and the transaction rolls back
    try:
        AccountMapper.build().apply({"email": "alice@example.com"})
    except sqlite3.IntegrityError as e:
        print(f"Second apply rolled back: {e}")

    count = conn.execute("SELECT COUNT(*) FROM accounts").fetchone()[0]
    print(f"Accounts stored: {count}")
    conn.close()


if __name__ == "__main__":
    main()
