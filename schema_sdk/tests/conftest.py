"""
schema_sdk test configuration.

All tests run against the process-wide defaults unless they construct a
builder/validator with an explicit SchemaConfig.
"""
from __future__ import annotations

import os

import pytest

# ── Force a quiet, deterministic environment ──────────────────────────────
# These must be set before any schema_sdk modules are imported.

os.environ.setdefault("JSON_SCHEMA_LOG_LEVEL", "WARNING")
os.environ.setdefault("JSON_SCHEMA_LOG_FORMAT", "console")


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset cached config/builder/validator singletons between tests so env
    overrides in one test never leak into the next.
    """
    from schema_sdk.tier0_core.config import _reset_config
    from schema_sdk.tier2_schema.builder import _reset_schema_builder
    from schema_sdk.tier2_schema.validator import _reset_validator

    yield

    _reset_config()
    _reset_schema_builder()
    _reset_validator()


@pytest.fixture
def registry():
    """Return a fresh, empty TypeRegistry."""
    from schema_sdk.tier1_definitions.registry import TypeRegistry
    return TypeRegistry()


@pytest.fixture
def config():
    """Return the default SchemaConfig, ignoring env and .env files."""
    from schema_sdk.tier0_core.config import SchemaConfig
    return SchemaConfig(_env_file=None)
