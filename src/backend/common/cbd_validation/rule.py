from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel

from .config import PointRule, SectionRule
from .context import RuleContext
from .driver import evaluate_rules
from .grid import Grid
from .models import Verdict


class SheetPick(str, Enum):
    FIRST = "first"
    LAST = "last"
    NAMED = "named"


class SheetSelector(BaseModel):
    pick: SheetPick = SheetPick.FIRST
    name: Optional[str] = None

    def select(self, sheet_names: Sequence[str]) -> Optional[str]:
        if not sheet_names:
            return None
        if self.pick == SheetPick.FIRST:
            return sheet_names[0]
        if self.pick == SheetPick.LAST:
            return sheet_names[-1]
        wanted = (self.name or "").strip().casefold()
        for sheet_name in sheet_names:
            if sheet_name.strip().casefold() == wanted:
                return sheet_name
        return None

    def describe(self) -> str:
        if self.pick == SheetPick.NAMED:
            return self.name or ""
        return f"{self.pick.value} sheet"


class Ruleset(ABC):
    """A brand's rule table plus the quirks needed to fill it in for one grid."""

    brand_id: str
    brand_name: str
    description: str = ""
    sheet: SheetSelector = SheetSelector()
    # Brands whose rules are built from an OB reference file.
    requires_reference: bool = False
    reference_file: str = ""

    def __init__(self):
        if not getattr(self, "brand_id", None):
            raise ValueError("Ruleset must define brand_id")

    def derive(self, grid: Grid) -> Dict[str, str]:
        """Values read once from the grid before the rules are evaluated."""
        return {}

    @abstractmethod
    def rules(self, ctx: RuleContext) -> List[PointRule | SectionRule]:  # pragma: no cover
        raise NotImplementedError

    def evaluate(self, grid: Grid, *, file_name: str = "", reference: Optional[object] = None) -> List[Verdict]:
        ctx = RuleContext(grid=grid, file_name=file_name, derived=self.derive(grid), reference=reference)
        return evaluate_rules(self.rules(ctx), grid)
