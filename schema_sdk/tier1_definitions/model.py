"""
schema_sdk.tier1_definitions.model
───────────────────────────────────
Model Definitions: classes reflected upon, never instantiated for behavior.

A field is a public class annotation. It is required unless the class
assigns it a default. Typed arrays carry their item type in the subscript.

Usage:
    class OrderItem(SchemaModel):
        sku: str
        quantity: int = 1

        validation_rules = {"sku": Annotated[str, Field(min_length=1)]}

    class Order(SchemaModel):
        status: Status
        items: list[OrderItem]
        note: str = ""

        validation_descriptions = {"items": "Ordered line items"}

    Order.json_schema()
    Order.validate({"status": "open", "items": [{"sku": 123}]})
    # → {"items.0.sku": ["Input should be a valid string"]}
"""
from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Mapping

from schema_sdk.tier1_definitions.registry import default_registry, qualified_name
from schema_sdk.tier1_definitions.types import is_classvar

_NO_DEFAULT = object()

# Class attributes with a meaning of their own, never fields.
RESERVED_ATTRIBUTES = frozenset({
    "validation_rules",
    "validation_messages",
    "validation_attributes",
    "validation_descriptions",
    "additional_properties",
})


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    annotation: Any          # None: no type declaration
    owner: type              # class that declares the field
    default: Any = _NO_DEFAULT

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT

    @property
    def scope(self) -> str:
        """Module the declaring class lives in."""
        return self.owner.__module__

    @property
    def scopes(self) -> tuple[str, ...]:
        """
        Namespaces bare type names are resolved against, innermost first:
        the declaring class, its enclosing classes, then its module.
        Function-local classes contribute nothing below ``<locals>``.
        """
        if "<locals>" in self.owner.__qualname__:
            return (self.scope,)
        parts = self.owner.__qualname__.split(".")
        nested = tuple(
            f"{self.scope}.{'.'.join(parts[:end])}" for end in range(len(parts), 0, -1)
        )
        return nested + (self.scope,)


def _declaring_classes(model: type) -> list[type]:
    return [
        klass for klass in reversed(model.__mro__)
        if klass is not object and klass is not SchemaModel
    ]


def _default_for(model: type, name: str) -> Any:
    for klass in reversed(_declaring_classes(model)):
        if name in klass.__dict__:
            return klass.__dict__[name]
    return _NO_DEFAULT


def _is_plain_value(value: Any) -> bool:
    return not (
        callable(value)
        or isinstance(value, (classmethod, staticmethod, property))
        or inspect.isdatadescriptor(value)
    )


def model_fields(model: type) -> list[FieldDefinition]:
    """Public fields of ``model``, base classes first, in declaration order."""
    fields: dict[str, FieldDefinition] = {}
    for klass in _declaring_classes(model):
        annotations = inspect.get_annotations(klass)
        for name, annotation in annotations.items():
            if name.startswith("_") or name in RESERVED_ATTRIBUTES or is_classvar(annotation):
                continue
            fields[name] = FieldDefinition(name, annotation, klass, _default_for(model, name))
        for name, value in klass.__dict__.items():
            if name.startswith("_") or name in RESERVED_ATTRIBUTES or name in annotations:
                continue
            if name in fields or not _is_plain_value(value):
                continue
            fields[name] = FieldDefinition(name, None, klass, value)
    return list(fields.values())


class SchemaModel:
    """
    Base class for Model Definitions.

    Class attributes:
        validation_rules:        field → rule, passed to the rule engine as-is
        validation_messages:     "<field>.<error type>" or "<error type>" → message
        validation_attributes:   field → human label used in messages
        validation_descriptions: field → schema "description"
        additional_properties:   None uses the configured default
    """

    __schema_model__: ClassVar[bool] = False

    validation_rules: ClassVar[Mapping[str, Any]] = {}
    validation_messages: ClassVar[Mapping[str, str]] = {}
    validation_attributes: ClassVar[Mapping[str, str]] = {}
    validation_descriptions: ClassVar[Mapping[str, str]] = {}
    additional_properties: ClassVar[bool | None] = None

    def __init_subclass__(cls, register: bool = True, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__schema_model__ = True
        if register:
            default_registry.register(cls)

    # ── Reflection ────────────────────────────────────────────────────────────

    @classmethod
    def schema_fields(cls) -> list[FieldDefinition]:
        return model_fields(cls)

    @classmethod
    def property_names(cls) -> list[str]:
        return [f.name for f in model_fields(cls)]

    @classmethod
    def schema_name(cls) -> str:
        return qualified_name(cls)

    # ── Validation metadata ───────────────────────────────────────────────────

    @classmethod
    def extend_validation_rules(cls, rules: dict[str, Any]) -> None:
        """Hook: add computed rules to ``rules`` before each validation."""

    @classmethod
    def get_validation_rules(cls) -> dict[str, Any]:
        rules = dict(cls.validation_rules)
        cls.extend_validation_rules(rules)
        return rules

    @classmethod
    def get_validation_messages(cls) -> dict[str, str]:
        return dict(cls.validation_messages)

    @classmethod
    def get_validation_attributes(cls) -> dict[str, str]:
        return dict(cls.validation_attributes)

    @classmethod
    def get_validation_descriptions(cls) -> dict[str, str]:
        return dict(cls.validation_descriptions)

    # ── Conveniences (process-wide defaults) ──────────────────────────────────

    @classmethod
    def json_schema(cls, properties_needed: Iterable[str] = ()) -> dict[str, Any]:
        from schema_sdk.tier2_schema.builder import get_schema_builder
        return get_schema_builder().build_schema(cls, properties_needed)

    @classmethod
    def json_array_schema(
        cls,
        properties_needed: Iterable[str] = (),
        array_field_name: str = "",
        field_description: str = "",
    ) -> dict[str, Any]:
        from schema_sdk.tier2_schema.builder import get_schema_builder
        return get_schema_builder().build_array_schema(
            cls, properties_needed, array_field_name, field_description
        )

    @classmethod
    def validate(cls, data: Mapping[str, Any]) -> dict[str, list[str]]:
        from schema_sdk.tier2_schema.validator import get_validator
        return get_validator().validate(cls, data)

    @classmethod
    def clean_data(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        from schema_sdk.tier2_schema.validator import get_validator
        return get_validator().clean_data(cls, data)


__sdk_export__ = {
    "exports": ["SchemaModel", "FieldDefinition", "model_fields"],
    "description": "Model Definition base class and field reflection",
    "tier": "tier1_definitions",
    "module": "model",
}
