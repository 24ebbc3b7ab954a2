"""
Example 03: Mountings

This example demonstrates composing nodes over related objects, suffixed
mountings, and the save order derived from relations.
"""

from flat_mapper import Node, belongs_to, blueprint


class Model:
    """Tiny in-memory model that prints every save."""

    def __init__(self, **values):
        self.id = None
        for key, value in values.items():
            setattr(self, key, value)

    def is_new_record(self):
        return self.id is None

    def save(self, validate=True):
        self.id = id(self)
        print(f"  saved {type(self).__name__}")
        return True


class Company(Model):
    title = None


class Address(Model):
    city = None


class Employee(Model):
    name = None
    company = None
    __relations__ = {"company": belongs_to(Company)}


class CompanyMapper(Node):
    blueprint = blueprint(Company).map(company="title").build()


class AddressMapper(Node):
    blueprint = blueprint(Address).map("city").build()


class EmployeeMapper(Node):
    blueprint = (
        blueprint(Employee)
        .map("name")
        .mount("company", node_class=CompanyMapper)
        .mount("home", node_class=AddressMapper, suffix="home", target=lambda _: Address())
        .mount("work", node_class=AddressMapper, suffix="work", target=lambda _: Address())
        .build()
    )


def main():
    node = EmployeeMapper.build()

    print("=== Mountings ===\n")
    print(f"Field names: {node.field_names}")
    print(f"Associations: {EmployeeMapper.blueprint.associations()}\n")

    # The company is a belongs_to relation, so it is saved before the employee
    print("apply():")
    node.apply({"name": "Alice", "company": "ACME", "city_home": "Oslo", "city_work": "Bergen"})
    print(f"\nread(): {node.read()}")


if __name__ == "__main__":
    main()
