"""
Example 01: Basic Mapping

This example demonstrates flat reading and writing of a dataclass through a node.
"""

from dataclasses import dataclass
from datetime import date

from flat_mapper import Node, blueprint


@dataclass
class User:
    first_name: str
    last_name: str
    email: str
    born: date | None = None


class UserMapper(Node):
    blueprint = (
        blueprint(User)
        .map("first_name", "last_name")
        .map(login="email")
        .map("born", multiparam=date, format="i18n_l")
        .map(full_name="first_name", reader=lambda u: f"{u.first_name} {u.last_name}", writer=False)
        .build()
    )


def main():
    user = User(first_name="Alice", last_name="Smith", email="alice@example.com")
    node = UserMapper(user)

    print("=== Basic Mapping ===\n")
    print(f"Field names: {node.field_names}")
    print(f"read(): {node.read()}\n")

    # Attribute-style and explicit access
    print(f"node.login: {node.login}")
    print(f"node.get_field('full_name'): {node.get_field('full_name')}\n")

    # Write a flat dict; multiparam fragments are composed into a date
    node.write({"last_name": "Jones", "born(1i)": "1990", "born(2i)": "4", "born(3i)": "1"})
    print(f"Target after write: {user}")
    print(f"Formatted born: {node.born}")


if __name__ == "__main__":
    main()
