"""
schema_sdk.tier0_core.config
─────────────────────────────
Typed, process-wide configuration. Reads from .env → environment
variables. Set once at startup and handed to the schema builder and the
validator explicitly; the recursive algorithms never look it up.

Minimal stack: pydantic-settings
Env prefix:    JSON_SCHEMA_ (list values are JSON, e.g. '["int","string"]')
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SKIP_FOR_TYPE_ARRAY: tuple[str, ...] = (
    "int", "string", "float", "bool", "array", "object", "mixed",
)


class SchemaConfig(BaseSettings):
    """
    Schema builder / validator configuration.

    skip_for_type_array:
        Primitive type names never treated as model references when found
        in a type hint (e.g. ``list[string]`` next to a model called
        ``String``).
    default_additional_properties:
        ``additionalProperties`` of every generated object node unless the
        model overrides it.
    """

    model_config = SettingsConfigDict(
        env_prefix="JSON_SCHEMA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    skip_for_type_array: tuple[str, ...] = DEFAULT_SKIP_FOR_TYPE_ARRAY
    default_additional_properties: bool = False

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("skip_for_type_array")
    @classmethod
    def normalize_skip_list(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for name in v:
            name = name.strip().lower()
            if name:
                seen.setdefault(name, None)
        return tuple(seen)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "console"}
        if v.lower() not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got {v!r}")
        return v.lower()

    @property
    def skip_set(self) -> frozenset[str]:
        return frozenset(self.skip_for_type_array)


@lru_cache(maxsize=1)
def get_config() -> SchemaConfig:
    """
    Return the singleton config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return SchemaConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()


__sdk_export__ = {
    "exports": ["SchemaConfig", "get_config"],
    "description": "pydantic-settings configuration (skip-list, additionalProperties default)",
    "tier": "tier0_core",
    "module": "config",
}
