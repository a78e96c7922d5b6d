"""
schema_sdk.tier1_definitions.registry
──────────────────────────────────────
Scope-qualified symbol table of Model Definitions and Enum Definitions,
keyed by ``module.QualName``. Every SchemaModel subclass registers itself
on class creation; enums are found either through explicit registration
or as attributes of already-imported modules.

Lookups never import anything and never mutate the table.
"""
from __future__ import annotations

import enum
import sys
import threading
from typing import Any


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def is_model_class(obj: Any) -> bool:
    return isinstance(obj, type) and bool(getattr(obj, "__schema_model__", False))


def is_enum_class(obj: Any) -> bool:
    return isinstance(obj, type) and issubclass(obj, enum.Enum)


def _shared_value_kind(enum_cls: type[enum.Enum]) -> str | None:
    """``string`` or ``integer`` when every member value has that kind."""
    values = [member.value for member in enum_cls]
    if not values:
        return None
    if all(isinstance(v, str) for v in values):
        return "string"
    if all(isinstance(v, int) and not isinstance(v, bool) for v in values):
        return "integer"
    return None


def enum_backing_kind(enum_cls: type[enum.Enum]) -> str:
    """JSON type of the emitted ``enum`` list: ``string`` or ``integer``."""
    return _shared_value_kind(enum_cls) or "string"


def enum_values(enum_cls: type[enum.Enum]) -> list[Any]:
    """
    Member values in declaration order. Member names are used instead when
    the values do not share one kind (mixed str/int, floats, tuples, ...).
    """
    if _shared_value_kind(enum_cls) is None:
        return [member.name for member in enum_cls]
    return [member.value for member in enum_cls]


class TypeRegistry:
    """Qualified name → model or enum class."""

    def __init__(self) -> None:
        self._types: dict[str, type] = {}
        self._lock = threading.Lock()

    def register(self, cls: type, name: str | None = None) -> type:
        """
        Register a model or enum. Returns the class so it can be used as a
        decorator:

            @default_registry.register
            class Status(str, Enum):
                ACTIVE = "active"
        """
        if not (is_model_class(cls) or is_enum_class(cls)):
            raise TypeError(f"{cls!r} is neither a SchemaModel subclass nor an Enum")
        with self._lock:
            self._types[name or qualified_name(cls)] = cls
        return cls

    def unregister(self, name: str) -> None:
        with self._lock:
            self._types.pop(name, None)

    def lookup(self, name: str) -> type | None:
        found = self._types.get(name)
        if found is not None:
            return found
        # Longest imported module prefix, then the attribute chain below it:
        # "shop.orders.Shipment.Kind" → sys.modules["shop.orders"].Shipment.Kind
        parts = name.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module = sys.modules.get(".".join(parts[:split]))
            if module is None:
                continue
            candidate: Any = module
            for attr in parts[split:]:
                candidate = getattr(candidate, attr, None)
                if candidate is None:
                    return None
            if is_model_class(candidate) or is_enum_class(candidate):
                return candidate
            return None
        return None

    def is_model(self, name: str) -> bool:
        return is_model_class(self.lookup(name))

    def is_enum(self, name: str) -> bool:
        return is_enum_class(self.lookup(name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self._types)


default_registry = TypeRegistry()


__sdk_export__ = {
    "exports": ["TypeRegistry", "default_registry", "qualified_name"],
    "description": "Qualified-name symbol table of model and enum definitions",
    "tier": "tier1_definitions",
    "module": "registry",
}
