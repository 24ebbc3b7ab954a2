"""
Example 04: Validation

This example demonstrates validation rules, hooks and flat error collection.
"""

from dataclasses import dataclass

from flat_mapper import Node, blueprint


@dataclass
class Address:
    city: str = ""
    zip: str = ""


@dataclass
class Customer:
    name: str = ""
    age: object = None
    address: Address | None = None


class AddressMapper(Node):
    blueprint = (
        blueprint(Address)
        .map("city", "zip")
        .validates_presence("city")
        .validates_format(r"^\d{4}$", "zip", message="must have four digits")
        .build()
    )


class CustomerMapper(Node):
    blueprint = (
        blueprint(Customer)
        .map("name", "age")
        .validates_presence("name")
        .validates_numericality("age", only_integer=True, greater_than=0)
        .before_validate(lambda n: print("  validating customer"))
        .mount("address", node_class=AddressMapper)
        .build()
    )


def main():
    node = CustomerMapper(Customer())

    print("=== Validation ===\n")
    print("apply() with bad params:")
    ok = node.apply({"name": "", "age": "abc", "zip": "12"})
    print(f"  result: {ok}")
    print(f"  errors: {node.errors.to_dict()}")
    for message in node.errors.full_messages():
        print(f"  - {message}")

    print("\napply() with good params:")
    ok = node.apply({"name": "Bob", "age": "42", "city": "Oslo", "zip": "0150"})
    print(f"  result: {ok}")
    print(f"  read(): {node.read()}")


if __name__ == "__main__":
    main()
