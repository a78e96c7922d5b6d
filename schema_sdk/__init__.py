"""
schema_sdk
──────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from schema_sdk.tier0_core.logging import get_logger
from schema_sdk.tier0_core.errors import (
    SchemaSDKError,
    DefinitionError,
    ConfigurationError,
    ValidationError,
)
from schema_sdk.tier0_core.config import get_config, SchemaConfig

from schema_sdk.tier1_definitions.registry import TypeRegistry, default_registry
from schema_sdk.tier1_definitions.types import (
    TypeResolver,
    ResolvedType,
    Primitive,
    EnumRef,
    ModelRef,
    ArrayOf,
    Unresolved,
)
from schema_sdk.tier1_definitions.model import SchemaModel, FieldDefinition

from schema_sdk.tier2_schema.rules import RuleEngine, PydanticRuleEngine
from schema_sdk.tier2_schema.builder import SchemaBuilder, build_schema, build_array_schema
from schema_sdk.tier2_schema.validator import Validator, validate, validate_or_raise, clean_data

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger",
    # errors
    "SchemaSDKError", "DefinitionError", "ConfigurationError", "ValidationError",
    # config
    "get_config", "SchemaConfig",
    # definitions
    "TypeRegistry", "default_registry", "SchemaModel", "FieldDefinition",
    # type resolution
    "TypeResolver", "ResolvedType", "Primitive", "EnumRef", "ModelRef",
    "ArrayOf", "Unresolved",
    # rules
    "RuleEngine", "PydanticRuleEngine",
    # schema
    "SchemaBuilder", "build_schema", "build_array_schema",
    # validation
    "Validator", "validate", "validate_or_raise", "clean_data",
]
