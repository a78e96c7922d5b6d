"""
schema_sdk.tier1_definitions.types
───────────────────────────────────
Type resolution shared by the schema builder and the validator.

A field's annotation is normalized to a raw type string, split into a
primary declared type and an optional item type (``list[OrderItem]``), and
resolved once into a ResolvedType. Both consumers route on the same
ResolvedType, so "the schema says array of OrderItem" and "the validator
recurses into OrderItem" cannot drift apart.

An annotation that is itself a model or enum class (or an array of one)
routes straight to that class. Everything else is resolved by name.

Resolution precedence for a bare name:
  1. qualified (contains ".")  → known model/enum, else Unresolved
  2. lower-cased name in skip-list → Primitive
  3. ``<scope>.<name>`` known  → model/enum, innermost scope first
  4. ``<name>`` known          → model/enum
  5. Unresolved
"""
from __future__ import annotations

import re
import types as _pytypes
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Annotated, Any, ClassVar, ForwardRef, Iterable, Union, get_args, get_origin

from schema_sdk.tier0_core.errors import DefinitionError
from schema_sdk.tier1_definitions.registry import (
    TypeRegistry,
    default_registry,
    is_enum_class,
    is_model_class,
    qualified_name,
)

if TYPE_CHECKING:
    from schema_sdk.tier1_definitions.model import FieldDefinition


# ── ResolvedType ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Primitive:
    kind: str


@dataclass(frozen=True)
class EnumRef:
    name: str
    enum: type = field(compare=False, repr=False)


@dataclass(frozen=True)
class ModelRef:
    name: str
    model: type = field(compare=False, repr=False)


@dataclass(frozen=True)
class ArrayOf:
    item: ResolvedType | None  # None: no (parseable) item annotation


@dataclass(frozen=True)
class Unresolved:
    raw: str


ResolvedType = Union[Primitive, EnumRef, ModelRef, ArrayOf, Unresolved]


PRIMITIVE_KINDS: tuple[str, ...] = ("int", "string", "float", "bool", "array", "object", "mixed")

# Python spellings → canonical primitive kind
PRIMITIVE_ALIASES: dict[str, str] = {
    "int": "int",
    "integer": "int",
    "str": "string",
    "string": "string",
    "float": "float",
    "double": "float",
    "decimal": "float",
    "bool": "bool",
    "boolean": "bool",
    "list": "array",
    "tuple": "array",
    "set": "array",
    "frozenset": "array",
    "sequence": "array",
    "mutablesequence": "array",
    "iterable": "array",
    "collection": "array",
    "array": "array",
    "dict": "object",
    "mapping": "object",
    "mutablemapping": "object",
    "object": "object",
    "any": "mixed",
    "mixed": "mixed",
}


def canonical_kind(name: str) -> str:
    lowered = name.strip().lower()
    return PRIMITIVE_ALIASES.get(lowered, lowered)


# ── Annotation → string ───────────────────────────────────────────────────────

def annotation_to_string(annotation: Any) -> str:
    """Render a runtime annotation the way it would be written as a string."""
    if isinstance(annotation, str):
        return annotation.strip()
    if isinstance(annotation, ForwardRef):
        return annotation.__forward_arg__
    if annotation is None or annotation is type(None):
        return "None"
    if annotation is Ellipsis:
        return "..."
    if annotation is Any:
        return "Any"
    origin = get_origin(annotation)
    if origin is not None:
        args = get_args(annotation)
        if origin is Union or origin is getattr(_pytypes, "UnionType", None):
            return " | ".join(annotation_to_string(a) for a in args)
        if origin is Annotated:
            return annotation_to_string(args[0])
        name = getattr(origin, "__name__", None) or str(origin).replace("typing.", "")
        if not args:
            return name
        return f"{name}[{', '.join(annotation_to_string(a) for a in args)}]"
    if isinstance(annotation, type):
        if annotation.__module__ == "builtins":
            return annotation.__qualname__
        return f"{annotation.__module__}.{annotation.__qualname__}"
    return str(annotation).replace("typing.", "")


def is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return re.match(r"^\s*(?:typing\.)?ClassVar\b", annotation) is not None
    return annotation is ClassVar or get_origin(annotation) is ClassVar


# ── Raw string → TypeHint ─────────────────────────────────────────────────────

_NOISE = re.compile(r"(?<![\w.])(?:typing_extensions|typing|collections\.abc)\.")
_ITEM_NAME = re.compile(r"[A-Za-z_][\w.<>]*")


@dataclass(frozen=True)
class TypeHint:
    """Primary declared type plus the item type of a typed array."""
    declared: str
    item: str | None = None

    @property
    def is_array(self) -> bool:
        return canonical_kind(self.declared) == "array"


def _split_top_level(text: str, sep: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
        if ch == sep and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]


def _strip_quotes(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        return text[1:-1].strip()
    return text


def _split_subscript(text: str) -> tuple[str, list[str]]:
    start = text.find("[")
    if start == -1 or not text.endswith("]"):
        return text, []
    depth = 0
    for pos in range(start, len(text)):
        if text[pos] == "[":
            depth += 1
        elif text[pos] == "]":
            depth -= 1
            if depth == 0 and pos != len(text) - 1:
                # "list[int] | dict[str, int]": the subscript closes early
                return text, []
    return text[:start].strip(), _split_top_level(text[start + 1:-1], ",")


def _unwrap_optional(text: str) -> str:
    text = _strip_quotes(text)
    name, args = _split_subscript(text)
    if name == "Optional" and len(args) == 1:
        return _unwrap_optional(args[0])
    if name == "Union":
        members = args
    else:
        members = _split_top_level(text, "|")
    members = [m for m in members if _strip_quotes(m) not in ("None", "NoneType")]
    if len(members) == 1 and members[0] != text:
        return _unwrap_optional(members[0])
    return text


def parse_hint(raw: str) -> TypeHint:
    """
    Split a type string into declared type and array item type.

        parse_hint("list[OrderItem]")        → TypeHint("list", "OrderItem")
        parse_hint("Optional[Status]")       → TypeHint("Status")
        parse_hint("list[dict[str, int]]")   → TypeHint("list", None)
    """
    text = _unwrap_optional(_NOISE.sub("", _strip_quotes(raw)))
    name, args = _split_subscript(text)
    if name == "Annotated" and args:
        return parse_hint(args[0])
    if canonical_kind(name) != "array":
        return TypeHint(name or text)
    item: str | None = None
    if len(args) == 1 or (len(args) == 2 and args[1] == "..."):
        candidate = _unwrap_optional(args[0])
        if _ITEM_NAME.fullmatch(candidate):
            item = candidate
    return TypeHint(name, item)


# ── Resolver ──────────────────────────────────────────────────────────────────

def _strip_optional(annotation: Any) -> Any:
    """Drop ``Annotated`` metadata and ``None`` members from a runtime annotation."""
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
            continue
        if origin is Union or origin is getattr(_pytypes, "UnionType", None):
            members = [a for a in get_args(annotation) if a is not type(None)]
            if len(members) == 1:
                annotation = members[0]
                continue
        return annotation


class TypeResolver:
    """Resolves raw type names against a registry and a primitive skip-list."""

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        skip_list: Iterable[str] = PRIMITIVE_KINDS,
    ) -> None:
        self.registry = registry or default_registry
        self.skip_list = frozenset(name.lower() for name in skip_list)

    def resolve(self, raw: str, *scopes: str) -> ResolvedType:
        """
        Resolve ``raw``; bare names are looked up in each of ``scopes`` in order
        (innermost first) before the unqualified lookup.
        """
        name = raw.strip().strip(".")
        if "." in name:
            found = self.registry.lookup(name)
            return self._reference(name, found) if found is not None else Unresolved(raw)

        kind = canonical_kind(name)
        if kind in self.skip_list:
            return Primitive(kind)

        for scope in scopes:
            if not scope:
                continue
            qualified = f"{scope}.{name}"
            found = self.registry.lookup(qualified)
            if found is not None:
                return self._reference(qualified, found)

        found = self.registry.lookup(name)
        if found is not None:
            return self._reference(name, found)
        return Unresolved(raw)

    def resolve_field(self, definition: FieldDefinition) -> ResolvedType:
        """The single routing decision for a model field."""
        if definition.annotation is None:
            raise DefinitionError(
                f"Property {definition.name} must have a type declaration.",
                model=definition.owner.__qualname__,
                field=definition.name,
            )
        direct = self._resolve_class_annotation(definition.annotation)
        if direct is not None:
            return direct
        hint = parse_hint(annotation_to_string(definition.annotation))
        if hint.is_array:
            item = self.resolve(hint.item, *definition.scopes) if hint.item else None
            return ArrayOf(item)
        return self.resolve(hint.declared, *definition.scopes)

    def _resolve_class_annotation(self, annotation: Any) -> ResolvedType | None:
        # A class object needs no name lookup; nested and function-local
        # models and enums are only reachable this way.
        annotation = _strip_optional(annotation)
        if isinstance(annotation, type):
            return self._class_reference(annotation)
        origin = get_origin(annotation)
        if origin is None or canonical_kind(getattr(origin, "__name__", "")) != "array":
            return None
        args = get_args(annotation)
        if len(args) == 1 or (len(args) == 2 and args[1] is Ellipsis):
            item = _strip_optional(args[0])
            if isinstance(item, type):
                ref = self._class_reference(item)
                if ref is not None:
                    return ArrayOf(ref)
        return None

    @staticmethod
    def _class_reference(cls: type) -> ResolvedType | None:
        if is_model_class(cls):
            return ModelRef(qualified_name(cls), cls)
        if is_enum_class(cls):
            return EnumRef(qualified_name(cls), cls)
        return None

    @staticmethod
    def _reference(name: str, cls: type) -> ResolvedType:
        if is_model_class(cls):
            return ModelRef(name, cls)
        return EnumRef(name, cls)


__sdk_export__ = {
    "exports": [
        "TypeResolver", "ResolvedType", "Primitive", "EnumRef", "ModelRef",
        "ArrayOf", "Unresolved", "parse_hint",
    ],
    "description": "ResolvedType union and the type resolver",
    "tier": "tier1_definitions",
    "module": "types",
}
