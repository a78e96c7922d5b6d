"""
schema_sdk.tier2_schema.builder
────────────────────────────────
Derives a JSON Schema document from a Model Definition.

Every declared field yields exactly one node or raises DefinitionError.
A field is required iff it has no default. Nested models are embedded
(their body spliced in), never referenced with ``$ref``.

The builder is a pure function of the model's static metadata and the
configuration it was constructed with; it keeps no per-call state and is
safe to share across threads.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Iterable

from schema_sdk.tier0_core.config import SchemaConfig, get_config
from schema_sdk.tier0_core.errors import DefinitionError
from schema_sdk.tier0_core.logging import get_logger
from schema_sdk.tier1_definitions.model import model_fields
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
    ResolvedType,
    TypeResolver,
    canonical_kind,
)

Schema = dict[str, Any]

_PRIMITIVE_TYPES = {
    "string": "string",
    "int": "number",
    "float": "number",
    "bool": "boolean",
}


class SchemaBuilder:
    def __init__(
        self,
        config: SchemaConfig | None = None,
        registry: TypeRegistry | None = None,
    ) -> None:
        self.config = config or get_config()
        self.resolver = TypeResolver(registry or default_registry, self.config.skip_for_type_array)

    def build_schema(self, model: type, properties_needed: Iterable[str] = ()) -> Schema:
        """
        Build the object schema of ``model``.

        ``properties_needed`` restricts the output to the named fields;
        unknown names are ignored.
        """
        schema = self._build(model, frozenset(properties_needed), ())
        get_logger(__name__).debug(
            "schema.built",
            model=qualified_name(model),
            properties=len(schema["properties"]),
            required=len(schema["required"]),
        )
        return schema

    def build_array_schema(
        self,
        model: type,
        properties_needed: Iterable[str] = (),
        array_field_name: str = "",
        field_description: str = "",
    ) -> Schema:
        """Schema of ``{array_field_name: [<model>, ...]}`` payloads."""
        item_schema = self.build_schema(model, properties_needed)
        return {
            "type": "object",
            "properties": {
                array_field_name: {
                    "type": "array",
                    "description": field_description,
                    "items": item_schema,
                },
            },
            "required": [array_field_name],
            "additionalProperties": False,
        }

    # ── Internals ─────────────────────────────────────────────────────────────

    def _build(self, model: type, needed: frozenset[str], chain: tuple[type, ...]) -> Schema:
        if model in chain:
            path = " -> ".join(klass.__qualname__ for klass in chain + (model,))
            raise DefinitionError(
                f"Model {model.__qualname__} references itself ({path}).",
                model=qualified_name(model),
            )
        chain = chain + (model,)

        schema: Schema = {
            "type": "object",
            "properties": {},
            "required": [],
            "additionalProperties": self._additional_properties(model),
        }
        descriptions = model.get_validation_descriptions()

        for definition in model_fields(model):
            if needed and definition.name not in needed:
                continue
            resolved = self.resolver.resolve_field(definition)
            description = descriptions.get(definition.name, "")
            schema["properties"][definition.name] = self._field_node(resolved, description, chain)
            if not definition.has_default:
                schema["required"].append(definition.name)
        return schema

    def _additional_properties(self, model: type) -> bool:
        own = getattr(model, "additional_properties", None)
        return self.config.default_additional_properties if own is None else bool(own)

    def _field_node(self, resolved: ResolvedType, description: str, chain: tuple[type, ...]) -> Schema:
        if isinstance(resolved, ArrayOf):
            return {
                "type": "array",
                "description": description,
                "items": self._item_node(resolved.item, description, chain),
            }
        if isinstance(resolved, ModelRef):
            nested = self._build(resolved.model, frozenset(), chain)
            return {
                "type": "object",
                "properties": nested["properties"],
                "required": nested["required"],
                "additionalProperties": nested.get("additionalProperties", False),
            }
        if isinstance(resolved, EnumRef):
            return self._enum_node(resolved)
        return self._primitive_node(resolved, description)

    def _item_node(self, item: ResolvedType | None, description: str, chain: tuple[type, ...]) -> Schema:
        if item is None:
            return {"type": "string"}
        if isinstance(item, ModelRef):
            return self._build(item.model, frozenset(), chain)
        if isinstance(item, EnumRef):
            return self._enum_node(item)
        return self._primitive_node(item, description)

    @staticmethod
    def _enum_node(ref: EnumRef) -> Schema:
        return {"type": enum_backing_kind(ref.enum), "enum": enum_values(ref.enum)}

    @staticmethod
    def _primitive_node(resolved: ResolvedType, description: str) -> Schema:
        kind = resolved.kind if isinstance(resolved, Primitive) else canonical_kind(resolved.raw)
        if kind == "array":
            return {"type": "array", "items": {"type": "string"}, "description": description}
        return {"type": _PRIMITIVE_TYPES.get(kind, "object"), "description": description}


@lru_cache(maxsize=1)
def get_schema_builder() -> SchemaBuilder:
    """Process-wide builder on get_config() and the default registry."""
    return SchemaBuilder(get_config(), default_registry)


def _reset_schema_builder() -> None:
    """For tests: drop the cached builder."""
    get_schema_builder.cache_clear()


def build_schema(model: type, properties_needed: Iterable[str] = ()) -> Schema:
    return get_schema_builder().build_schema(model, properties_needed)


def build_array_schema(
    model: type,
    properties_needed: Iterable[str] = (),
    array_field_name: str = "",
    field_description: str = "",
) -> Schema:
    return get_schema_builder().build_array_schema(
        model, properties_needed, array_field_name, field_description
    )


__sdk_export__ = {
    "exports": ["SchemaBuilder", "get_schema_builder", "build_schema", "build_array_schema"],
    "description": "JSON Schema builder for Model Definitions",
    "tier": "tier2_schema",
    "module": "builder",
}
