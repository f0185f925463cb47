"""Rule engine for garment Cost Breakdown (BCBD) workbooks.

This package contains only domain logic:
- Inputs are in-memory Grids plus optional brand reference data.
- No file, network, or rendering code lives here.
"""

from .config import (
    Anchor,
    PointRule,
    RowCondition,
    SectionBounds,
    SectionRule,
    ValueCheck,
)
from .context import RuleContext
from .driver import evaluate_rules
from .grid import Grid
from .models import (
    FileResult,
    ValidationRunReport,
    Verdict,
    VerdictStatus,
)
from .registry import UnknownRulesetError, registry
from .rule import Ruleset, SheetSelector

# Import built-in rulesets so they self-register with the global registry.
from . import rulesets as _builtin_rulesets  # noqa: F401

__all__ = [
    "Anchor",
    "FileResult",
    "Grid",
    "PointRule",
    "RowCondition",
    "RuleContext",
    "Ruleset",
    "SectionBounds",
    "SectionRule",
    "SheetSelector",
    "UnknownRulesetError",
    "ValidationRunReport",
    "ValueCheck",
    "Verdict",
    "VerdictStatus",
    "evaluate_rules",
    "registry",
]
