"""
schema_sdk.tier0_core.errors
─────────────────────────────
Error taxonomy for schema building and validation. Every error carries a
stable machine-readable code and a user-safe message so callers can turn
it into an API error body without inspecting the exception type.

Data-shape problems never raise: they come back as entries in the
validation error map. Only definition-level problems are raised.
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class SchemaSDKError(Exception):
    """
    Base class for all schema_sdk errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    """

    code: str = "schema_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected schema error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class DefinitionError(SchemaSDKError):
    """A model definition cannot be reflected (missing type, cyclic reference)."""
    code = "definition_error"

    def __init__(
        self,
        user_message: str = "Invalid model definition.",
        model: str | None = None,
        field: str | None = None,
        **metadata: Any,
    ) -> None:
        self.model = model
        self.field = field
        super().__init__(None, user_message, model=model, field=field, **metadata)


class ConfigurationError(SchemaSDKError):
    """Misconfiguration detected at startup."""
    code = "configuration_error"


class ValidationError(SchemaSDKError):
    """Input data failed validation. ``fields`` is the dot-path error map."""
    code = "validation_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Validation failed.",
        fields: dict[str, list[str]] | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(code, user_message, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


__sdk_export__ = {
    "exports": [
        "SchemaSDKError", "DefinitionError", "ConfigurationError", "ValidationError",
    ],
    "description": "Error taxonomy for schema building and validation",
    "tier": "tier0_core",
    "module": "errors",
}
