"""
schema_sdk.tier2_schema.validator
──────────────────────────────────
Validates data against a Model Definition's rules, recursing into nested
models and typed-model arrays along the same routing the schema builder
uses. Errors are collected into one flat map keyed by dot paths:

    "name"               direct rule failure
    "customer.email"     nested model
    "items.0.sku"        element 0 of a typed-model array
    "items.1._error"     element 1 could not be validated at all

An empty map means valid. Data-shape problems never raise; only
definition errors of the top-level model do.
"""
from __future__ import annotations

import copy
from functools import lru_cache
from typing import Any, Iterator, Mapping

from pydantic import BaseModel

from schema_sdk.tier0_core.config import SchemaConfig, get_config
from schema_sdk.tier0_core.errors import ValidationError
from schema_sdk.tier0_core.logging import get_logger
from schema_sdk.tier1_definitions.model import model_fields
from schema_sdk.tier1_definitions.registry import TypeRegistry, default_registry, qualified_name
from schema_sdk.tier1_definitions.types import ArrayOf, ModelRef, TypeResolver
from schema_sdk.tier2_schema.rules import ErrorMap, PydanticRuleEngine, RuleEngine

ITEM_NOT_OBJECT = "Item must be an object/array."
DATA_NOT_OBJECT = "Data must be an object/array."


def _as_mapping(value: Any) -> dict[str, Any] | None:
    """Coerce an object-like value to a dict; None if it is a scalar."""
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, BaseModel):
        return value.model_dump()
    if isinstance(value, (list, tuple)):
        return {str(index): item for index, item in enumerate(value)}
    if hasattr(value, "__dict__") and not isinstance(value, type):
        return dict(vars(value))
    return None


def _is_array_like(value: Any) -> bool:
    return isinstance(value, (list, tuple, Mapping))


def _elements(value: Any) -> Iterator[tuple[Any, Any]]:
    if isinstance(value, Mapping):
        yield from value.items()
    else:
        yield from enumerate(value)


def merge_errors(target: ErrorMap, source: Mapping[str, list[str]]) -> ErrorMap:
    """Append ``source`` into ``target``; shared keys concatenate their messages."""
    for key, messages in source.items():
        target.setdefault(key, []).extend(messages)
    return target


class Validator:
    def __init__(
        self,
        config: SchemaConfig | None = None,
        registry: TypeRegistry | None = None,
        rule_engine: RuleEngine | None = None,
    ) -> None:
        self.config = config or get_config()
        self.resolver = TypeResolver(registry or default_registry, self.config.skip_for_type_array)
        self.rule_engine = rule_engine or PydanticRuleEngine()

    def validate(self, model: type, data: Any) -> ErrorMap:
        payload = _as_mapping(data)
        if payload is None:
            return {"_error": [DATA_NOT_OBJECT]}

        errors: ErrorMap = {
            key: list(messages)
            for key, messages in self.rule_engine.run(
                payload,
                model.get_validation_rules(),
                model.get_validation_messages(),
                model.get_validation_attributes(),
            ).items()
        }
        merge_errors(errors, self._validate_nested(model, payload))

        if errors:
            get_logger(__name__).debug(
                "validation.failed",
                model=qualified_name(model),
                paths=sorted(errors),
            )
        return errors

    def validate_or_raise(self, model: type, data: Any) -> None:
        """Raise ValidationError carrying the error map when ``data`` is invalid."""
        errors = self.validate(model, data)
        if errors:
            raise ValidationError(
                user_message="Validation failed.",
                fields=errors,
                model=qualified_name(model),
            )

    def clean_data(self, model: type, data: Mapping[str, Any]) -> dict[str, Any]:
        """Copy of ``data`` with every path reported by validate() removed."""
        cleaned = copy.deepcopy(dict(data))
        for path in sorted(self.validate(model, data), key=_path_sort_key, reverse=True):
            forget(cleaned, path)
        return cleaned

    # ── Nested recursion ──────────────────────────────────────────────────────

    def _validate_nested(self, model: type, data: Mapping[str, Any]) -> ErrorMap:
        nested: ErrorMap = {}
        for definition in model_fields(model):
            value = data.get(definition.name)
            if value is None:
                continue
            resolved = self.resolver.resolve_field(definition)

            if isinstance(resolved, ArrayOf):
                if not isinstance(resolved.item, ModelRef) or not _is_array_like(value):
                    continue
                for index, element in _elements(value):
                    path = f"{definition.name}.{index}"
                    element_data = _as_mapping(element)
                    if element_data is None:
                        nested[path] = [ITEM_NOT_OBJECT]
                        continue
                    self._validate_child(nested, path, resolved.item.model, element_data, "item")

            elif isinstance(resolved, ModelRef):
                child_data = _as_mapping(value)
                if child_data is not None:
                    self._validate_child(nested, definition.name, resolved.model, child_data, "object")
        return nested

    def _validate_child(
        self,
        nested: ErrorMap,
        path: str,
        model: type,
        data: dict[str, Any],
        kind: str,
    ) -> None:
        try:
            child_errors = self.validate(model, data)
        except Exception as exc:
            get_logger(__name__).warning(
                "validation.nested_failed",
                model=qualified_name(model),
                path=path,
                error=str(exc),
            )
            nested[f"{path}._error"] = [f"Validation failed for nested {kind}: {exc}"]
            return
        for key, messages in child_errors.items():
            nested[f"{path}.{key}"] = messages


# ── Dot-path removal ──────────────────────────────────────────────────────────

_MISSING = object()


def _path_sort_key(path: str) -> tuple[tuple[int, Any], ...]:
    return tuple((0, int(seg)) if seg.isdigit() else (1, seg) for seg in path.split("."))


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, dict):
        return container.get(segment, _MISSING)
    if isinstance(container, list) and segment.isdigit() and int(segment) < len(container):
        return container[int(segment)]
    return _MISSING


def forget(data: dict[str, Any], path: str) -> None:
    """Remove the value at dot ``path`` from ``data`` in place; missing paths are ignored."""
    *parents, last = path.split(".")
    target: Any = data
    for segment in parents:
        target = _child(target, segment)
        if target is _MISSING:
            return
    if isinstance(target, dict):
        target.pop(last, None)
    elif isinstance(target, list) and last.isdigit() and int(last) < len(target):
        del target[int(last)]


# ── Process-wide default ──────────────────────────────────────────────────────

@lru_cache(maxsize=1)
def get_validator() -> Validator:
    """Process-wide validator on get_config(), the default registry and Pydantic rules."""
    return Validator(get_config(), default_registry)


def _reset_validator() -> None:
    """For tests: drop the cached validator."""
    get_validator.cache_clear()


def validate(model: type, data: Any) -> ErrorMap:
    return get_validator().validate(model, data)


def validate_or_raise(model: type, data: Any) -> None:
    get_validator().validate_or_raise(model, data)


def clean_data(model: type, data: Mapping[str, Any]) -> dict[str, Any]:
    return get_validator().clean_data(model, data)


__sdk_export__ = {
    "exports": ["Validator", "get_validator", "validate", "validate_or_raise", "clean_data"],
    "description": "Recursive validator producing dot-path error maps",
    "tier": "tier2_schema",
    "module": "validator",
}
