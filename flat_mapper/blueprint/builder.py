"""Blueprint DSL builder.

Provides a fluent builder for declaring node types::

    class CustomerMapper(Node):
        blueprint = (
            blueprint(Customer)
            .map("name", "email")
            .map(dob="birth_date", multiparam=date)
            .mount("address", node_class=AddressMapper)
            .trait("with_notes", lambda t: t.map("notes"))
            .validates_presence("name")
            .build()
        )
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from typing import TYPE_CHECKING, Any

from flat_mapper.blueprint.mounting import UNSET, MountingBlueprint
from flat_mapper.blueprint.plan import Blueprint, MappingBlueprint
from flat_mapper.core.enums import HookEvent, SaveOrder
from flat_mapper.core.exceptions import BlueprintError
from flat_mapper.core.target import get_field_names
from flat_mapper.mapping.formats import has_format
from flat_mapper.mapping.mapping import StrategyOption
from flat_mapper.validation.hooks import Hook, HookAction
from flat_mapper.validation.rules import (
    AbsenceRule,
    AcceptanceRule,
    CustomRule,
    FormatRule,
    InclusionRule,
    LengthRule,
    NumericalityRule,
    PresenceRule,
    TypeRule,
    ValidationRule,
)

if TYPE_CHECKING:
    from flat_mapper.core.registry import NodeRegistry
    from flat_mapper.node.base import Node

# A trait body or inline extension: a built fragment, or a function that
# declares the fragment on the builder it receives.
FragmentBody = Blueprint | Callable[["BlueprintBuilder"], Any]


def blueprint(target_class: type | None = None) -> BlueprintBuilder:
    """Entry point for the blueprint DSL.

    Args:
        target_class: Class of the target objects. Used by ``Node.build``
            and to create targets of mounted nodes that have none.

    Returns:
        A builder for chaining declarations.
    """
    return BlueprintBuilder(target_class)


def build_fragment(body: FragmentBody) -> Blueprint:
    """Compile a trait body or inline extension into a blueprint."""
    if isinstance(body, Blueprint):
        return body
    builder = BlueprintBuilder()
    body(builder)
    return builder.build()


def _save_order(value: SaveOrder | str | None) -> SaveOrder | None:
    if value is None or isinstance(value, SaveOrder):
        return value
    try:
        return SaveOrder(value)
    except ValueError:
        raise BlueprintError(
            f"Invalid save order {value!r}: expected 'before' or 'after'"
        ) from None


class BlueprintBuilder:
    """Fluent builder for blueprint definitions."""

    def __init__(self, target_class: type | None = None, *, base: Blueprint | None = None) -> None:
        self._target_class = target_class
        self._mappings: list[MappingBlueprint] = list(base.mappings) if base else []
        self._mountings: list[MountingBlueprint] = list(base.mountings) if base else []
        self._rules: list[ValidationRule] = list(base.rules) if base else []
        self._hooks: list[Hook] = list(base.hooks) if base else []
        self._methods: list[tuple[str, Callable[..., Any]]] = list(base.methods) if base else []
        self._strict_mode = base.strict if base else False
        self._inherited_fields = set(base.mapping_names) if base else set()
        self._auto_fields_enabled = False

    def target(self, target_class: type) -> BlueprintBuilder:
        """Set the target class."""
        self._target_class = target_class
        return self

    # --- Fields ---

    def map(
        self,
        *names: str,
        reader: StrategyOption = None,
        writer: StrategyOption = None,
        format: str | None = None,
        format_args: tuple[Any, ...] = (),
        multiparam: type | None = None,
        **renames: str,
    ) -> BlueprintBuilder:
        """Declare fields.

        Positional names map to target attributes of the same name; keyword
        arguments map a field name to a differently named attribute
        (``map(dob="birth_date")``). Options apply to every declared field.
        """
        if not names and not renames:
            raise BlueprintError("map() requires at least one field name")

        pairs = [(name, name) for name in names] + list(renames.items())
        for name, attribute in pairs:
            if name in self._inherited_fields:
                # Redeclaring an inherited field replaces it
                self._mappings = [m for m in self._mappings if m.name != name]
                self._inherited_fields.discard(name)
            self._mappings.append(
                MappingBlueprint(
                    name=name,
                    target_attribute=attribute,
                    reader=reader,
                    writer=writer,
                    format=format,
                    format_args=tuple(format_args),
                    multiparam=multiparam,
                )
            )
        return self

    def auto_fields(self) -> BlueprintBuilder:
        """Map every field of the target class not declared otherwise, by attribute name."""
        self._auto_fields_enabled = True
        return self

    # --- Mountings ---

    def mount(
        self,
        name: str,
        *,
        node_class: type[Node] | None = None,
        node_class_name: str | None = None,
        target: Any = UNSET,
        traits: Collection[str] | str = (),
        save: SaveOrder | str | None = None,
        suffix: str | None = None,
        open: bool = False,
        extension: FragmentBody | None = None,
        registry: NodeRegistry | None = None,
    ) -> BlueprintBuilder:
        """Declare a mounted node.

        Without ``node_class`` the class is looked up in the registry under
        ``node_class_name`` or ``"<CamelName>Mapper"`` when the node is
        first created.
        """
        if node_class is not None and node_class_name is not None:
            raise BlueprintError(
                f"Mounting '{name}': node_class and node_class_name are mutually exclusive"
            )
        if open and (node_class is not None or node_class_name is not None):
            raise BlueprintError(f"Mounting '{name}': open mountings take no node class")

        self._mountings.append(
            MountingBlueprint(
                identifier=name,
                node_class=node_class,
                node_class_name=node_class_name,
                target=target,
                traits=(traits,) if isinstance(traits, str) else tuple(traits),
                save=_save_order(save),
                suffix=suffix,
                open=open,
                extension=build_fragment(extension) if extension is not None else None,
                registry=registry,
            )
        )
        return self

    def trait(self, name: str, body: FragmentBody) -> BlueprintBuilder:
        """Declare a trait - a fragment activated by name at construction."""
        self._mountings.append(MountingBlueprint.for_trait(name, build_fragment(body)))
        return self

    # --- Validation ---

    def validates_presence(self, *attributes: str, **options: Any) -> BlueprintBuilder:
        return self._rule(PresenceRule, attributes, options)

    def validates_absence(self, *attributes: str, **options: Any) -> BlueprintBuilder:
        return self._rule(AbsenceRule, attributes, options)

    def validates_acceptance(self, *attributes: str, **options: Any) -> BlueprintBuilder:
        return self._rule(AcceptanceRule, attributes, options)

    def validates_numericality(
        self,
        *attributes: str,
        only_integer: bool = False,
        greater_than: float | None = None,
        greater_than_or_equal_to: float | None = None,
        less_than: float | None = None,
        less_than_or_equal_to: float | None = None,
        **options: Any,
    ) -> BlueprintBuilder:
        options.update(
            only_integer=only_integer,
            greater_than=greater_than,
            greater_than_or_equal_to=greater_than_or_equal_to,
            less_than=less_than,
            less_than_or_equal_to=less_than_or_equal_to,
        )
        return self._rule(NumericalityRule, attributes, options)

    def validates_type(self, annotation: Any, *attributes: str, **options: Any) -> BlueprintBuilder:
        """Validate attributes against a type annotation (``int``, ``date``, ...)."""
        return self._rule(TypeRule, attributes, dict(options, annotation=annotation))

    def validates_format(self, pattern: str, *attributes: str, **options: Any) -> BlueprintBuilder:
        return self._rule(FormatRule, attributes, dict(options, pattern=pattern))

    def validates_length(
        self,
        *attributes: str,
        minimum: int | None = None,
        maximum: int | None = None,
        is_: int | None = None,
        **options: Any,
    ) -> BlueprintBuilder:
        if minimum is None and maximum is None and is_ is None:
            raise BlueprintError("validates_length() requires minimum, maximum or is_")
        return self._rule(
            LengthRule, attributes, dict(options, minimum=minimum, maximum=maximum, is_=is_)
        )

    def validates_inclusion(
        self, choices: Collection[Any], *attributes: str, **options: Any
    ) -> BlueprintBuilder:
        return self._rule(InclusionRule, attributes, dict(options, choices=tuple(choices)))

    def validate(self, action: str | Callable[[Node], Any]) -> BlueprintBuilder:
        """Declare a custom validation: a node method name or a function of the node."""
        self._rules.append(CustomRule(attributes=(), action=action))
        return self

    def _rule(
        self,
        rule_class: type[ValidationRule],
        attributes: tuple[str, ...],
        options: dict[str, Any],
    ) -> BlueprintBuilder:
        if not attributes:
            raise BlueprintError(f"{rule_class.__name__} requires at least one attribute")
        try:
            rule = rule_class(attributes=attributes, **options)
        except TypeError as e:
            raise BlueprintError(f"Invalid options for {rule_class.__name__}: {e}") from e
        self._rules.append(rule)
        return self

    # --- Hooks ---

    def before_validate(self, action: HookAction, prepend: bool = False) -> BlueprintBuilder:
        return self._hook(HookEvent.BEFORE_VALIDATE, action, prepend)

    def after_validate(self, action: HookAction, prepend: bool = False) -> BlueprintBuilder:
        return self._hook(HookEvent.AFTER_VALIDATE, action, prepend)

    def before_save(self, action: HookAction, prepend: bool = False) -> BlueprintBuilder:
        return self._hook(HookEvent.BEFORE_SAVE, action, prepend)

    def after_save(self, action: HookAction, prepend: bool = False) -> BlueprintBuilder:
        return self._hook(HookEvent.AFTER_SAVE, action, prepend)

    def _hook(self, event: HookEvent, action: HookAction, prepend: bool) -> BlueprintBuilder:
        hook = Hook(event, action)
        if prepend:
            self._hooks.insert(0, hook)
        else:
            self._hooks.append(hook)
        return self

    # --- Misc ---

    def define(self, name: str, func: Callable[..., Any]) -> BlueprintBuilder:
        """Attach a method to nodes built from this blueprint.

        The function receives the node as its first argument.
        """
        if name.startswith("_"):
            raise BlueprintError(f"Method name '{name}' must not start with an underscore")
        self._methods = [(n, f) for n, f in self._methods if n != name]
        self._methods.append((name, func))
        return self

    def strict(self, enabled: bool = True) -> BlueprintBuilder:
        """Reject unknown keys on write."""
        self._strict_mode = enabled
        return self

    def _auto_mappings(self) -> list[MappingBlueprint]:
        if not self._auto_fields_enabled or self._target_class is None:
            return []
        # Fields populated by mountings are not mapped
        taken = (
            {m.name for m in self._mappings}
            | {m.target_attribute for m in self._mappings}
            | {m.identifier for m in self._mountings if not m.is_trait}
        )
        return [
            MappingBlueprint(name=name, target_attribute=name)
            for name in get_field_names(self._target_class)
            if name not in taken and not name.startswith("_")
        ]

    def build(self) -> Blueprint:
        """Compile and validate the declarations into a Blueprint."""
        mappings = self._mappings + self._auto_mappings()

        # Validate mapping names
        seen: set[str] = set()
        for mapping in mappings:
            if not mapping.name or mapping.name.startswith("_"):
                raise BlueprintError(
                    f"Invalid field name '{mapping.name}': must be non-empty "
                    "and not start with an underscore"
                )
            if mapping.name in seen:
                raise BlueprintError(f"Duplicate field '{mapping.name}'")
            seen.add(mapping.name)
            if mapping.format is not None and not has_format(mapping.format):
                raise BlueprintError(f"Field '{mapping.name}': unknown format '{mapping.format}'")

        # Validate mounting and trait names are unique per kind
        mounting_names: set[str] = set()
        trait_names: set[str] = set()
        for mounting in self._mountings:
            names = trait_names if mounting.is_trait else mounting_names
            kind = "trait" if mounting.is_trait else "mounting"
            if not mounting.identifier:
                raise BlueprintError(f"Empty {kind} name")
            if mounting.identifier in names:
                raise BlueprintError(f"Duplicate {kind} '{mounting.identifier}'")
            names.add(mounting.identifier)

        return Blueprint(
            target_class=self._target_class,
            mappings=tuple(mappings),
            mountings=tuple(self._mountings),
            rules=tuple(self._rules),
            hooks=tuple(self._hooks),
            methods=tuple(self._methods),
            strict=self._strict_mode,
        )
