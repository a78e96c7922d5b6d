"""Tests for tier1_definitions modules."""
from __future__ import annotations

import enum
from typing import Any, ClassVar, List, Optional

import pytest

from schema_sdk.tier0_core.errors import DefinitionError
from schema_sdk.tier1_definitions.model import FieldDefinition, SchemaModel, model_fields
from schema_sdk.tier1_definitions.registry import (
    TypeRegistry,
    default_registry,
    enum_backing_kind,
    enum_values,
    qualified_name,
)
from schema_sdk.tier1_definitions.types import (
    ArrayOf,
    EnumRef,
    ModelRef,
    Primitive,
    TypeResolver,
    Unresolved,
    annotation_to_string,
    parse_hint,
)

SCOPE = __name__


class Color(str, enum.Enum):
    RED = "red"
    GREEN = "green"


class Priority(enum.IntEnum):
    LOW = 1
    HIGH = 2


class Address(SchemaModel):
    street: str
    city: str = "Berlin"


class Int(SchemaModel):
    value: int


class Customer(SchemaModel):
    name: str
    address: Address
    color: Optional[Color] = None
    tags: list[str] = []
    counter: ClassVar[int] = 0

    validation_descriptions = {"name": "Full name"}

    def greeting(self) -> str:
        return f"hello {self.name}"


class VipCustomer(Customer):
    level: int
    name: str = "anonymous"


class Parcel(SchemaModel):
    class Size(str, enum.Enum):
        SMALL = "small"
        LARGE = "large"

    size: Size
    sizes: list[Size] = []


class MixedCode(enum.Enum):
    ONE = 1
    TWO = "two"


class Command(SchemaModel):
    validate: bool
    schema_name: str
    json_schema: str = "{}"


# ── parse_hint ─────────────────────────────────────────────────────────────

class TestParseHint:
    @pytest.mark.parametrize(
        ("raw", "declared", "item"),
        [
            ("str", "str", None),
            ("Optional[Color]", "Color", None),
            ("Color | None", "Color", None),
            ("typing.Union[Address, None]", "Address", None),
            ("list[Address]", "list", "Address"),
            ("List[int]", "List", "int"),
            ("list['Address'] | None", "list", "Address"),
            ("tuple[int, ...]", "tuple", "int"),
            ("list", "list", None),
            ("list[dict[str, int]]", "list", None),
            ("Annotated[list[int], 'meta']", "list", "int"),
            ("dict[str, int]", "dict", None),
        ],
    )
    def test_parse(self, raw, declared, item):
        hint = parse_hint(raw)
        assert hint.declared == declared
        assert hint.item == item

    def test_union_of_containers_is_not_an_array(self):
        hint = parse_hint("list[int] | dict[str, int]")
        assert not hint.is_array

    def test_annotation_objects_render_qualified(self):
        assert annotation_to_string(list[Address]) == f"list[{SCOPE}.Address]"
        assert annotation_to_string(Optional[Color]) == f"{SCOPE}.Color | None"
        assert annotation_to_string(List[int]) == "list[int]"
        assert annotation_to_string(Any) == "Any"


# ── registry ───────────────────────────────────────────────────────────────

class TestRegistry:
    def test_models_self_register(self):
        assert default_registry.lookup(f"{SCOPE}.Address") is Address
        assert default_registry.is_model(f"{SCOPE}.Customer")

    def test_enum_found_through_loaded_module(self, registry):
        assert registry.lookup(f"{SCOPE}.Color") is Color
        assert registry.is_enum(f"{SCOPE}.Color")

    def test_register_as_decorator_with_alias(self, registry):
        registry.register(Priority, name="Priority")
        assert registry.lookup("Priority") is Priority
        assert "Priority" in registry

    def test_register_rejects_plain_classes(self, registry):
        with pytest.raises(TypeError):
            registry.register(dict)

    def test_unknown_names(self, registry):
        assert registry.lookup("Nope") is None
        assert registry.lookup("no.such.module.Thing") is None
        assert registry.lookup(f"{SCOPE}.SCOPE") is None

    def test_enum_helpers(self):
        assert enum_backing_kind(Color) == "string"
        assert enum_values(Color) == ["red", "green"]
        assert enum_backing_kind(Priority) == "integer"
        assert enum_values(Priority) == [1, 2]

    def test_enum_with_mixed_value_kinds_uses_names(self):
        assert enum_backing_kind(MixedCode) == "string"
        assert enum_values(MixedCode) == ["ONE", "TWO"]

    def test_nested_class_found_through_attribute_chain(self, registry):
        assert registry.lookup(f"{SCOPE}.Parcel.Size") is Parcel.Size
        assert registry.lookup(f"{SCOPE}.Parcel.Missing") is None
        assert registry.lookup(f"{SCOPE}.Parcel.size") is None


# ── resolver ───────────────────────────────────────────────────────────────

class TestTypeResolver:
    def test_skip_list_precedes_scope_lookup(self, registry):
        resolver = TypeResolver(registry)
        assert resolver.resolve("Int", SCOPE) == Primitive("int")
        assert resolver.resolve("str", SCOPE) == Primitive("string")

    def test_without_skip_entry_the_model_wins(self, registry):
        resolver = TypeResolver(registry, skip_list=("string",))
        assert resolver.resolve("Int", SCOPE) == ModelRef(f"{SCOPE}.Int", Int)

    def test_scope_qualified_lookup(self, registry):
        resolved = TypeResolver(registry).resolve("Address", SCOPE)
        assert isinstance(resolved, ModelRef)
        assert resolved.model is Address

    def test_unqualified_lookup(self, registry):
        registry.register(Color, name="Color")
        resolved = TypeResolver(registry).resolve("Color", "some.other.scope")
        assert resolved == EnumRef("Color", Color)

    def test_qualified_names_are_taken_as_is(self, registry):
        resolver = TypeResolver(registry)
        assert isinstance(resolver.resolve(f"{SCOPE}.Color"), EnumRef)
        assert resolver.resolve("pkg.Missing") == Unresolved("pkg.Missing")

    def test_unknown_name_is_unresolved(self, registry):
        assert TypeResolver(registry).resolve("Literal", SCOPE) == Unresolved("Literal")

    def test_resolve_field_routes_arrays(self, registry):
        resolver = TypeResolver(registry)
        fields = {f.name: f for f in model_fields(Customer)}
        assert resolver.resolve_field(fields["tags"]) == ArrayOf(Primitive("string"))
        assert resolver.resolve_field(fields["color"]) == EnumRef(f"{SCOPE}.Color", Color)
        assert resolver.resolve_field(fields["address"]).model is Address

    def test_resolve_field_with_runtime_annotation(self, registry):
        definition = FieldDefinition("addresses", list[Address], Customer)
        resolved = TypeResolver(registry).resolve_field(definition)
        assert resolved == ArrayOf(ModelRef(qualified_name(Address), Address))

    def test_bare_names_resolve_in_the_declaring_class_first(self, registry):
        resolver = TypeResolver(registry)
        fields = {f.name: f for f in model_fields(Parcel)}
        assert fields["size"].scopes == (f"{SCOPE}.Parcel", SCOPE)
        assert resolver.resolve_field(fields["size"]) == EnumRef(f"{SCOPE}.Parcel.Size", Parcel.Size)
        assert resolver.resolve_field(fields["sizes"]) == ArrayOf(EnumRef(f"{SCOPE}.Parcel.Size", Parcel.Size))

    def test_runtime_class_annotations_skip_name_lookup(self, registry):
        class Local(str, enum.Enum):
            ON = "on"

        resolver = TypeResolver(registry)
        assert resolver.resolve_field(FieldDefinition("mode", Local, Customer)).enum is Local
        assert resolver.resolve_field(FieldDefinition("mode", Optional[Local], Customer)).enum is Local
        assert resolver.resolve_field(FieldDefinition("modes", list[Local], Customer)).item.enum is Local
        assert resolver.resolve_field(FieldDefinition("owner", Int, Customer)).model is Int

    def test_bare_array_has_no_item(self, registry):
        definition = FieldDefinition("anything", list, Customer)
        assert TypeResolver(registry).resolve_field(definition) == ArrayOf(None)

    def test_untyped_field_is_a_definition_error(self, registry):
        definition = FieldDefinition("legacy", None, Customer, "x")
        with pytest.raises(DefinitionError, match="legacy must have a type declaration"):
            TypeResolver(registry).resolve_field(definition)


# ── model ──────────────────────────────────────────────────────────────────

class TestModelFields:
    def test_declaration_order_and_defaults(self):
        fields = model_fields(Customer)
        assert [f.name for f in fields] == ["name", "address", "color", "tags"]
        required = [f.name for f in fields if not f.has_default]
        assert required == ["name", "address"]

    def test_classvars_methods_and_reserved_are_skipped(self):
        names = Customer.property_names()
        assert "counter" not in names
        assert "greeting" not in names
        assert "validation_descriptions" not in names

    def test_inherited_fields_come_first(self):
        fields = model_fields(VipCustomer)
        assert [f.name for f in fields] == ["name", "address", "color", "tags", "level"]
        by_name = {f.name: f for f in fields}
        assert by_name["name"].has_default
        assert by_name["name"].default == "anonymous"
        assert by_name["level"].owner is VipCustomer

    def test_fields_named_like_base_methods_keep_their_required_state(self):
        by_name = {f.name: f for f in model_fields(Command)}
        assert not by_name["validate"].has_default
        assert not by_name["schema_name"].has_default
        assert by_name["json_schema"].default == "{}"

    def test_unannotated_public_attribute_has_no_type(self):
        class Legacy(SchemaModel, register=False):
            title: str
            legacy = "value"

        by_name = {f.name: f for f in model_fields(Legacy)}
        assert by_name["legacy"].annotation is None
        assert by_name["legacy"].has_default

    def test_register_false_skips_registry(self):
        class Hidden(SchemaModel, register=False):
            value: int

        assert default_registry.lookup(qualified_name(Hidden)) is None

    def test_extend_validation_rules_works_on_a_copy(self):
        class Extended(SchemaModel, register=False):
            code: str

            validation_rules = {"code": str}

            @classmethod
            def extend_validation_rules(cls, rules):
                rules["extra"] = (int, 0)

        assert set(Extended.get_validation_rules()) == {"code", "extra"}
        assert set(Extended.validation_rules) == {"code"}
