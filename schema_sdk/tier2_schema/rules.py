"""
schema_sdk.tier2_schema.rules
──────────────────────────────
Constraint-rule execution. The validator only relies on the contract
``run(data, rules, messages, attributes) -> {field: [message, ...]}``;
the default engine runs the rules through Pydantic v2.

Rule format (PydanticRuleEngine):
    {
        "sku":      Annotated[str, Field(min_length=1)],   # required
        "quantity": (int, 1),                              # optional, default 1
        "note":     (str | None, None),
    }

Messages are looked up as "<path>.<error type>", "<field>.<error type>",
then "<error type>" and formatted with ``{attribute}`` (the field label)
and the error context (``{min_length}``, ``{ge}``, ...).
"""
from __future__ import annotations

from typing import Any, Mapping, Protocol

from pydantic import ConfigDict, ValidationError as PydanticValidationError, create_model

ErrorMap = dict[str, list[str]]


class RuleEngine(Protocol):
    def run(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, str] | None = None,
        attributes: Mapping[str, str] | None = None,
    ) -> ErrorMap: ...


class _Placeholders(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class PydanticRuleEngine:
    """Runs field rules as a throwaway Pydantic model and flattens its errors."""

    _config = ConfigDict(
        extra="ignore",
        arbitrary_types_allowed=True,
        protected_namespaces=(),
    )

    def run(
        self,
        data: Mapping[str, Any],
        rules: Mapping[str, Any],
        messages: Mapping[str, str] | None = None,
        attributes: Mapping[str, str] | None = None,
    ) -> ErrorMap:
        if not rules:
            return {}
        model = self._rules_model(rules)
        try:
            model.model_validate(dict(data))
        except PydanticValidationError as exc:
            return self._error_map(exc, messages or {}, attributes or {})
        return {}

    def _rules_model(self, rules: Mapping[str, Any]) -> type:
        definitions = {
            name: rule if isinstance(rule, tuple) else (rule, ...)
            for name, rule in rules.items()
        }
        return create_model("RuleSet", __config__=self._config, **definitions)

    def _error_map(
        self,
        exc: PydanticValidationError,
        messages: Mapping[str, str],
        attributes: Mapping[str, str],
    ) -> ErrorMap:
        errors: ErrorMap = {}
        for err in exc.errors():
            loc = err["loc"]
            path = ".".join(str(part) for part in loc) or "_error"
            field = str(loc[0]) if loc else path
            template = (
                messages.get(f"{path}.{err['type']}")
                or messages.get(f"{field}.{err['type']}")
                or messages.get(err["type"])
            )
            if template:
                placeholders = _Placeholders(err.get("ctx") or {})
                placeholders["attribute"] = attributes.get(field, field)
                message = template.format_map(placeholders)
            else:
                message = err["msg"]
            errors.setdefault(path, []).append(message)
        return errors


__sdk_export__ = {
    "exports": ["RuleEngine", "PydanticRuleEngine"],
    "description": "Rule-engine contract and its Pydantic v2 implementation",
    "tier": "tier2_schema",
    "module": "rules",
}
