"""Unit tests for mounted node creation: classes, targets, names and save order."""

from __future__ import annotations

from typing import Any

import pytest
from records import Record

from flat_mapper.blueprint.builder import blueprint
from flat_mapper.blueprint.relations import belongs_to, has_many, has_one
from flat_mapper.core.enums import SaveOrder
from flat_mapper.core.exceptions import (
    NodeClassNotFoundError,
    NoTargetError,
    TargetAccessorError,
)
from flat_mapper.core.registry import NodeRegistry
from flat_mapper.core.target import OpenTarget
from flat_mapper.node.base import EmptyNode, Node


class Company(Record):
    title = None


class Address(Record):
    city = None
    zip = None


class Badge(Record):
    code = None


class Person(Record):
    name = None
    company = None
    address = None

    __relations__ = {
        "company": belongs_to(Company),
        "badges": has_many(Badge),
        "desk": has_one(current=True),
    }

    def __init__(self, **attrs: Any) -> None:
        self.badges: list[Badge] = []
        super().__init__(**attrs)

    def effective_desk(self) -> Address:
        return Address(city="HQ")


class CompanyMapper(Node):
    blueprint = blueprint(Company).map("title").build()


class AddressMapper(Node):
    blueprint = blueprint(Address).map("city", "zip").validates_presence("city").build()


class BadgeMapper(Node):
    blueprint = blueprint(Badge).map("code").build()


class LooseMapper(Node):
    blueprint = blueprint().map("anything").build()


def person_mapper(**builder_mounts: Any) -> type[Node]:
    builder = blueprint(Person).map("name")
    for name, options in builder_mounts.items():
        builder.mount(name, **options)
    return type("PersonMapper", (Node,), {"blueprint": builder.build()})


class TestTargetResolution:
    def test_existing_attribute_is_used(self) -> None:
        address = Address(city="Oslo")
        mapper_class = person_mapper(address={"node_class": AddressMapper})
        node = mapper_class(Person(address=address))
        assert node.mounting("address").target is address
        assert node.get_field("city") == "Oslo"

    def test_attribute_method_is_called(self) -> None:
        class Owner:
            def address(self) -> Address:
                return Address(city="Rome")

        class OwnerMapper(Node):
            blueprint = blueprint().mount("address", node_class=AddressMapper).build()

        assert OwnerMapper(Owner()).get_field("city") == "Rome"

    def test_missing_value_builds_new_target(self) -> None:
        mapper_class = person_mapper(address={"node_class": AddressMapper})
        node = mapper_class(Person())
        target = node.mounting("address").target
        assert isinstance(target, Address)
        assert target.is_new_record()

    def test_no_target_raises(self) -> None:
        class OwnerMapper(Node):
            blueprint = blueprint().mount("loose", node_class=LooseMapper).build()

        with pytest.raises(NoTargetError, match="LooseMapper"):
            OwnerMapper(object()).mountings()

    def test_explicit_target_method_name(self) -> None:
        address = Address(city="Bern")

        class OwnerMapper(Node):
            blueprint = (
                blueprint()
                .mount("address", node_class=AddressMapper, target="home_address")
                .build()
            )

            def home_address(self) -> Address:
                return address

        assert OwnerMapper(object()).mounting("address").target is address

    def test_missing_target_accessor_raises(self) -> None:
        class OwnerMapper(Node):
            blueprint = blueprint().mount("address", node_class=AddressMapper, target="nope").build()

        with pytest.raises(TargetAccessorError, match="'nope' of mounting 'address'"):
            OwnerMapper(object()).mountings()

    def test_field_is_not_a_target_accessor(self) -> None:
        class OwnerMapper(Node):
            blueprint = (
                blueprint(Person)
                .map(nickname="name")
                .mount("address", node_class=AddressMapper, target="nickname")
                .build()
            )

        node = OwnerMapper(Person(name="Ann"))
        with pytest.raises(TargetAccessorError, match="'nickname'"):
            node.mountings()
        with pytest.raises(TargetAccessorError):
            node.get_field("nickname")

    def test_explicit_target_defined_method(self) -> None:
        address = Address(city="Bern")
        plan = (
            blueprint()
            .mount("address", node_class=AddressMapper, target="home_address")
            .define("home_address", lambda node: address)
            .build()
        )
        mapper_class = type("OwnerMapper", (Node,), {"blueprint": plan})
        assert mapper_class(object()).mounting("address").target is address

    def test_explicit_target_function(self) -> None:
        mapper_class = person_mapper(
            work={"node_class": AddressMapper, "target": lambda person: person.office}
        )
        office = Address(city="Lyon")
        node = mapper_class(Person(office=office))
        assert node.mounting("work").target is office

    def test_explicit_literal_target(self) -> None:
        shared = Address(city="Gent")
        mapper_class = person_mapper(address={"node_class": AddressMapper, "target": shared})
        assert mapper_class(Person()).mounting("address").target is shared

    def test_belongs_to_builds_missing_record(self) -> None:
        person = Person()
        mapper_class = person_mapper(company={"node_class": CompanyMapper})
        node = mapper_class(person)
        company = node.mounting("company").target
        assert isinstance(company, Company)
        assert person.company is company

    def test_belongs_to_reuses_existing_record(self) -> None:
        company = Company(title="ACME")
        mapper_class = person_mapper(company={"node_class": CompanyMapper})
        assert mapper_class(Person(company=company)).title == "ACME"

    def test_has_many_builds_new_member(self) -> None:
        person = Person()
        mapper_class = person_mapper(badge={"node_class": BadgeMapper})
        node = mapper_class(person)
        badge = node.mounting("badge").target
        assert person.badges == [badge]

    def test_has_one_current_reads_effective_member(self) -> None:
        mapper_class = person_mapper(desk={"node_class": AddressMapper})
        assert mapper_class(Person()).get_field("city") == "HQ"


class TestSaveOrder:
    def test_default_is_after(self) -> None:
        mapper_class = person_mapper(address={"node_class": AddressMapper})
        assert mapper_class(Person()).mounting("address").save_order is SaveOrder.AFTER

    def test_belongs_to_is_before(self) -> None:
        mapper_class = person_mapper(company={"node_class": CompanyMapper})
        assert mapper_class(Person()).mounting("company").save_order is SaveOrder.BEFORE

    def test_explicit_order_wins(self) -> None:
        mapper_class = person_mapper(
            company={"node_class": CompanyMapper, "save": "after"},
            address={"node_class": AddressMapper, "save": SaveOrder.BEFORE},
        )
        node = mapper_class(Person())
        assert node.mounting("company").save_order is SaveOrder.AFTER
        assert node.mounting("address").save_order is SaveOrder.BEFORE


class TestSuffix:
    def test_suffixed_names(self) -> None:
        mapper_class = person_mapper(
            address={"node_class": AddressMapper, "suffix": "home"},
        )
        node = mapper_class(Person())
        child = node.mounting("address_home")
        assert child.name == "address_home"
        assert child.suffix == "home"
        assert node.field_names == ["name", "city_home", "zip_home"]

    def test_suffix_is_inherited(self) -> None:
        class ZoneMapper(Node):
            blueprint = blueprint(Address).map("zip").build()

        class SiteMapper(Node):
            blueprint = blueprint(Address).map("city").mount("zone", node_class=ZoneMapper).build()

        mapper_class = person_mapper(site={"node_class": SiteMapper, "suffix": "b"})
        node = mapper_class(Person())
        assert node.mounting("zone_b").suffix == "b"
        assert "zip_b" in node.field_names

    def test_suffixed_read_and_write(self) -> None:
        mapper_class = person_mapper(
            home={"node_class": AddressMapper, "suffix": "home", "target": lambda p: p.home},
            work={"node_class": AddressMapper, "suffix": "work", "target": lambda p: p.work},
        )
        person = Person(home=Address(), work=Address())
        node = mapper_class(person)
        node.write({"city_home": "Oslo", "city_work": "Bergen"})
        assert person.home.city == "Oslo"
        assert person.work.city == "Bergen"
        assert node.read()["city_work"] == "Bergen"

    def test_suffixed_errors(self) -> None:
        mapper_class = person_mapper(
            address={"node_class": AddressMapper, "suffix": "home"},
        )
        node = mapper_class(Person(name="Ann"))
        assert not node.is_valid()
        assert node.errors.to_dict() == {"city_home": ["can't be blank"]}


class TestNodeClassResolution:
    def test_registry_lookup_by_default_name(self, registry: NodeRegistry) -> None:
        registry.register(AddressMapper)
        mapper_class = person_mapper(address={"registry": registry})
        assert isinstance(mapper_class(Person()).mounting("address"), AddressMapper)

    def test_registry_lookup_by_class_name(self, registry: NodeRegistry) -> None:
        registry.register(AddressMapper, "Location")
        mapper_class = person_mapper(
            address={"node_class_name": "Location", "registry": registry},
        )
        assert isinstance(mapper_class(Person()).mounting("address"), AddressMapper)

    def test_missing_class_raises_on_first_access(self, registry: NodeRegistry) -> None:
        mapper_class = person_mapper(address={"registry": registry})
        node = mapper_class(Person())
        with pytest.raises(NodeClassNotFoundError, match="AddressMapper"):
            node.mountings()

    def test_traits_are_passed_down(self) -> None:
        class TaggedAddressMapper(Node):
            blueprint = (
                blueprint(Address)
                .map("city")
                .trait("with_zip", lambda t: t.map("zip"))
                .trait("audit", lambda t: t.map(audit_note="city"))
                .build()
            )

        mapper_class = person_mapper(
            address={"node_class": TaggedAddressMapper, "traits": "with_zip"},
        )
        node = mapper_class(Person(), "audit")
        child = node.mounting("address")
        assert child.traits == ("with_zip", "audit")
        assert node.field_names == ["name", "city", "zip", "audit_note"]


class TestOpenMounting:
    def test_open_mounting_uses_open_target(self) -> None:
        mapper_class = person_mapper(
            extra={"open": True, "extension": lambda t: t.map("color").validates_presence("color")},
        )
        node = mapper_class(Person(name="Ann"))
        child = node.mounting("extra")
        assert type(child).__name__ == "ExtraMapper"
        assert isinstance(child.target, OpenTarget)
        assert node.get_field("color") is None
        assert not node.is_valid()

        node.write({"color": "red"})
        assert child.target.color == "red"
        assert node.is_valid()

    def test_open_node_class_is_reused(self) -> None:
        first = person_mapper(extra={"open": True})(Person()).mounting("extra")
        second = person_mapper(extra={"open": True})(Person()).mounting("extra")
        assert type(first) is type(second)


class TestEmptyNode:
    def test_mounts_new_targets(self) -> None:
        class SignupMapper(EmptyNode):
            blueprint = (
                blueprint()
                .mount("company", node_class=CompanyMapper)
                .mount("address", node_class=AddressMapper)
                .build()
            )

        node = SignupMapper()
        assert node.target is None
        assert node.field_names == ["title", "city", "zip"]
        assert isinstance(node.mounting("company").target, Company)

    def test_saves_children(self, save_log: list[str]) -> None:
        class SignupMapper(EmptyNode):
            blueprint = blueprint().mount("company", node_class=CompanyMapper).build()

        node = SignupMapper.build()
        assert node.apply({"title": "ACME"}) is True
        assert save_log == ["Company"]
        assert node.mounting("company").persisted

    def test_explicit_save_order_is_honoured(self, save_log: list[str]) -> None:
        class SignupMapper(EmptyNode):
            blueprint = (
                blueprint()
                .mount("address", node_class=AddressMapper)
                .mount("company", node_class=CompanyMapper, save="before")
                .build()
            )

        node = SignupMapper()
        assert node.mounting("address").save_order is SaveOrder.AFTER
        assert node.mounting("company").save_order is SaveOrder.BEFORE
        assert node.apply({"title": "ACME", "city": "Oslo"}) is True
        assert save_log == ["Company", "Address"]
