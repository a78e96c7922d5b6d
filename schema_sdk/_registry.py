"""
schema_sdk._registry
─────────────────────
Internal module registry: the single source of truth for which modules
exist and what each one exports.

Adding a new module:
  1. Implement it in the right tier
  2. Add ``__sdk_export__`` to the module (exports, description, tier, module)
  3. Add one tuple to TIER_MODULES below
"""
from __future__ import annotations

import importlib
from typing import Any

# ---------------------------------------------------------------------------
# Ordered list of (tier_path, module_name); lower tiers never import higher.
# ---------------------------------------------------------------------------
TIER_MODULES: list[tuple[str, str]] = [
    # tier0_core: ambient stack
    ("tier0_core", "errors"),
    ("tier0_core", "logging"),
    ("tier0_core", "config"),
    # tier1_definitions: model metadata and type resolution
    ("tier1_definitions", "registry"),
    ("tier1_definitions", "types"),
    ("tier1_definitions", "model"),
    # tier2_schema: schema building and validation
    ("tier2_schema", "rules"),
    ("tier2_schema", "builder"),
    ("tier2_schema", "validator"),
]


def collect_exports() -> dict[str, dict[str, Any]]:
    """
    Import every registered module and return its ``__sdk_export__``
    metadata keyed by qualified module name.

    Raises:
        AttributeError if a module declares an export it does not define.
    """
    collected: dict[str, dict[str, Any]] = {}

    for tier_path, module_name in TIER_MODULES:
        qualified = f"schema_sdk.{tier_path}.{module_name}"
        mod = importlib.import_module(qualified)

        export_meta: dict[str, Any] | None = getattr(mod, "__sdk_export__", None)
        if not export_meta:
            continue

        for name in export_meta.get("exports", []):
            if not hasattr(mod, name):
                raise AttributeError(f"{qualified} exports {name!r} but does not define it")
        collected[qualified] = export_meta

    return collected
