"""Inlay hint configuration presets, one per hint category.

Each preset enables a single kind of hint on top of ``DISABLED_CONFIG`` so the
analysis engine reports that category and nothing else.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict

from inlay_markup.models import Category


class LifetimeElisionHints(str, Enum):
    NEVER = "never"
    ALWAYS = "always"
    SKIP_TRIVIAL = "skip_trivial"


class ClosureReturnTypeHints(str, Enum):
    NEVER = "never"
    ALWAYS = "always"
    WITH_BLOCK = "with_block"


class AdjustmentHints(str, Enum):
    NEVER = "never"
    ALWAYS = "always"
    REBORROW = "reborrow"


class DiscriminantHints(str, Enum):
    NEVER = "never"
    ALWAYS = "always"
    FIELDLESS = "fieldless"


# rust-analyzer falls back to this when closing brace hints are off.
_DEFAULT_CLOSING_BRACE_MIN_LINES = 25


class InlayHintsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    render_colons: bool = False
    type_hints: bool = False
    parameter_hints: bool = False
    chaining_hints: bool = False
    lifetime_elision_hints: LifetimeElisionHints = LifetimeElisionHints.NEVER
    closure_return_type_hints: ClosureReturnTypeHints = ClosureReturnTypeHints.NEVER
    adjustment_hints: AdjustmentHints = AdjustmentHints.NEVER
    adjustment_hints_hide_outside_unsafe: bool = False
    binding_mode_hints: bool = False
    hide_named_constructor_hints: bool = False
    hide_closure_initialization_hints: bool = False
    param_names_for_lifetime_elision_hints: bool = False
    max_length: int | None = None
    closing_brace_hints_min_lines: int | None = None
    discriminant_hints: DiscriminantHints = DiscriminantHints.NEVER

    def to_rust_analyzer_settings(self) -> dict[str, Any]:
        """Translate the preset into rust-analyzer's ``inlayHints`` settings tree."""
        closing_brace_min_lines = self.closing_brace_hints_min_lines
        return {
            "inlayHints": {
                "renderColons": self.render_colons,
                "maxLength": self.max_length,
                "typeHints": {
                    "enable": self.type_hints,
                    "hideNamedConstructor": self.hide_named_constructor_hints,
                    "hideClosureInitialization": self.hide_closure_initialization_hints,
                },
                "parameterHints": {"enable": self.parameter_hints},
                "chainingHints": {"enable": self.chaining_hints},
                "bindingModeHints": {"enable": self.binding_mode_hints},
                "lifetimeElisionHints": {
                    "enable": self.lifetime_elision_hints.value,
                    "useParameterNames": self.param_names_for_lifetime_elision_hints,
                },
                "closureReturnTypeHints": {"enable": self.closure_return_type_hints.value},
                "expressionAdjustmentHints": {
                    "enable": self.adjustment_hints.value,
                    "hideOutsideUnsafe": self.adjustment_hints_hide_outside_unsafe,
                },
                "discriminantHints": {"enable": self.discriminant_hints.value},
                "closingBraceHints": {
                    "enable": closing_brace_min_lines is not None,
                    "minLines": closing_brace_min_lines or _DEFAULT_CLOSING_BRACE_MIN_LINES,
                },
                "closureCaptureHints": {"enable": False},
                "implicitDrops": {"enable": False},
                "rangeExclusiveHints": {"enable": False},
            }
        }


DISABLED_CONFIG = InlayHintsConfig()

TYPE_HINTS_CONFIG = DISABLED_CONFIG.model_copy(
    update={
        "type_hints": True,
        "hide_named_constructor_hints": True,
        "hide_closure_initialization_hints": True,
        "closure_return_type_hints": ClosureReturnTypeHints.WITH_BLOCK,
    }
)

CHAINING_HINTS_CONFIG = DISABLED_CONFIG.model_copy(update={"chaining_hints": True})

PARAMETER_HINTS_CONFIG = DISABLED_CONFIG.model_copy(update={"parameter_hints": True})

BINDING_MODE_HINTS_CONFIG = DISABLED_CONFIG.model_copy(update={"binding_mode_hints": True})

CLOSING_BRACE_HINTS_CONFIG = DISABLED_CONFIG.model_copy(update={"closing_brace_hints_min_lines": 2})

LIFETIME_HINTS_CONFIG = DISABLED_CONFIG.model_copy(
    update={"lifetime_elision_hints": LifetimeElisionHints.SKIP_TRIVIAL}
)

PRESETS = MappingProxyType(
    {
        Category.TYPE: TYPE_HINTS_CONFIG,
        Category.CHAINING: CHAINING_HINTS_CONFIG,
        Category.PARAMETER: PARAMETER_HINTS_CONFIG,
        Category.BINDING_MODE: BINDING_MODE_HINTS_CONFIG,
        Category.CLOSING_BRACE: CLOSING_BRACE_HINTS_CONFIG,
        Category.LIFETIME: LIFETIME_HINTS_CONFIG,
    }
)
