from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from ..comparators import parse_number
from ..config import (
    Anchor,
    PercentHeuristic,
    PointRule,
    ValueCheck,
    expect_number,
    expect_range,
    expect_text,
)
from ..context import RuleContext
from ..grid import Grid, column_index, normalize_text
from ..reference import CostBreakdownReference, ReferenceItem
from ..registry import register_ruleset
from ..rule import Ruleset
from ..scanner import find_anchor_row

_CENTS = Decimal("0.01")

OVERHEAD_RANGE = ("0.35", "0.36")
PROFIT_RANGE = ("4", "5")
PROFIT_RANGE_DISPLAY = "4% - 4.99%"


def _with_ob_value(ob_value: str, range_display: str) -> str:
    """Expected text for a fixed-cell range check: the OB figure first, then the accepted range."""
    ob_value = ob_value.strip()
    return f"{ob_value} ({range_display})" if ob_value else range_display


def fixed_cell_rules(reference: CostBreakdownReference) -> List[PointRule]:
    overhead_display = _with_ob_value(reference.overhead, " - ".join(OVERHEAD_RANGE))
    profit_display = _with_ob_value(reference.profit, PROFIT_RANGE_DISPLAY)
    return [
        PointRule(
            rule_id="COLUMBIA-OVERHEAD",
            label="Overhead",
            cell="O21",
            checks=[
                ValueCheck(
                    label="Overhead",
                    offset=0,
                    expect=expect_range(*OVERHEAD_RANGE, display=overhead_display),
                )
            ],
        ),
        PointRule(
            rule_id="COLUMBIA-PROFIT",
            label="Profit",
            cell="M22",
            checks=[
                ValueCheck(
                    label="Profit",
                    offset=0,
                    expect=expect_range(
                        *PROFIT_RANGE,
                        percent=True,
                        max_exclusive=True,
                        heuristic=PercentHeuristic.LT_ONE_IS_FRACTION,
                        display=profit_display,
                    ),
                )
            ],
        ),
    ]


def _number_check(label: str, column: str, raw: str) -> Optional[ValueCheck]:
    value = parse_number(raw)
    if value is None:
        return None
    return ValueCheck(
        label=label,
        column=column,
        expect=expect_number(str(value), quantize=_CENTS, display=raw.strip()),
    )


def _preferred_occurrence(grid: Grid, item: ReferenceItem) -> int:
    """Occurrence of the description whose material cell carries the OB part number.

    Falls back to the first occurrence when no row repeats the part number.
    """
    wanted = normalize_text(item.part_number)
    material_col = column_index("B")
    occurrence, row = 0, -1
    while True:
        row = find_anchor_row(grid, column_index("A"), item.description, start_row=row + 1)
        if row is None:
            return 1
        occurrence += 1
        if wanted and normalize_text(grid.cell(row, material_col)) == wanted:
            return occurrence


def item_rule(grid: Grid, index: int, item: ReferenceItem) -> Optional[PointRule]:
    checks: List[ValueCheck] = []
    if item.part_number:
        checks.append(ValueCheck(label="Material", column="B", expect=expect_text(item.part_number)))
    for label, column, raw in (
        ("FOB Cost", "K", item.unit_price),
        ("Factory Usage", "O", item.quantity),
        ("Wastage", "Y", item.wastage),
    ):
        check = _number_check(label, column, raw)
        if check is not None:
            checks.append(check)
    if not checks:
        return None
    return PointRule(
        rule_id=f"COLUMBIA-ITEM-{index}",
        label=item.description,
        anchor=Anchor(column="A", keyword=item.description, occurrence=_preferred_occurrence(grid, item)),
        checks=checks,
    )


@register_ruleset
class ColumbiaRuleset(Ruleset):
    brand_id = "columbia"
    brand_name = "Columbia"
    description = "Compares buyer CBD items against the OB cost breakdown plus fixed efficiency/overhead/profit cells."
    requires_reference = True
    reference_file = "Columbia_CostBreakdown.csv"

    def rules(self, ctx: RuleContext):
        reference = ctx.reference
        if not isinstance(reference, CostBreakdownReference):
            raise ValueError("Columbia ruleset requires the OB cost breakdown reference")

        rules: List[PointRule] = []
        efficiency = _number_check("Efficiency%", "M", reference.efficiency)
        if efficiency is not None:
            rules.append(PointRule(rule_id="COLUMBIA-EFFICIENCY", label="Efficiency%", cell="M19", checks=[efficiency]))
        rules.extend(fixed_cell_rules(reference))
        for index, item in enumerate(reference.items, start=1):
            rule = item_rule(ctx.grid, index, item)
            if rule is not None:
                rules.append(rule)
        return rules
