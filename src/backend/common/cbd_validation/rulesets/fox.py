from __future__ import annotations

from decimal import Decimal

from ..config import (
    Anchor,
    PercentHeuristic,
    PointRule,
    RowCondition,
    SectionBounds,
    SectionRule,
    ValueCheck,
    expect_contains,
    expect_number,
    expect_percent,
    expect_range,
    expect_text,
)
from ..context import RuleContext
from ..models import MatchMode
from ..registry import register_ruleset
from ..rule import Ruleset

_SLACK = Decimal("0.0001")
# Percent-scale tolerance equivalent to 0.0001 on a fraction.
_PCT_TOLERANCE = Decimal("0.01")

FABRIC_SECTION = SectionBounds(
    start=Anchor(column="A", keyword=["fabric", "upper", "shell"]),
    stop=Anchor(column="H", keyword="subtotal"),
)
LABOR_SECTION = SectionBounds(
    start=Anchor(column="A", keyword="labor cost"),
    max_rows=9,
    include_start=True,
)
SEWING_THREAD = RowCondition(column="B", keywords="sewing thread")


def _labor_item(item: str) -> PointRule:
    return PointRule(
        rule_id=f"FOX-LABOR-{item.upper()}",
        label=f"Labor Cost: {item}",
        anchor=Anchor(column="B", keyword=item.lower()),
        within=LABOR_SECTION,
        checks=[ValueCheck(label=item, offset=0, expect=expect_contains(item))],
    )


RULES = (
    PointRule(
        rule_id="FOX-VENDOR",
        label="Vendor",
        anchor=Anchor(column="C", keyword="vendor", match=MatchMode.EQUALS),
        checks=[ValueCheck(label="Vendor", column="D", expect=expect_text("Madison 88 Ltd."))],
    ),
    PointRule(
        rule_id="FOX-FACTORY",
        label="Factory",
        anchor=Anchor(column="C", keyword="factory", match=MatchMode.EQUALS),
        checks=[ValueCheck(label="Factory", column="D", expect=expect_text("PT UWU Jump"))],
    ),
    PointRule(
        rule_id="FOX-COO",
        label="COO",
        anchor=Anchor(column="C", keyword="coo", match=MatchMode.EQUALS),
        checks=[ValueCheck(label="COO", column="D", expect=expect_text("Indonesia"))],
    ),
    PointRule(
        rule_id="FOX-OVERHEAD",
        label="OVERHEAD",
        anchor=Anchor(column="K", keyword="overhead", match=MatchMode.EQUALS),
        checks=[ValueCheck(label="OVERHEAD", column="L", expect=expect_number("0.40"))],
    ),
    PointRule(
        rule_id="FOX-PROFIT-OTHERS",
        label="PROFIT & OTHERS",
        anchor=Anchor(column="K", keyword="profit & others"),
        checks=[
            ValueCheck(
                label="PROFIT & OTHERS",
                column="L",
                expect=expect_range("0.35", "0.45", range_slack=_SLACK),
            )
        ],
    ),
    SectionRule(
        rule_id="FOX-WASTAGE",
        label="Wastage %",
        section=FABRIC_SECTION,
        exclude=[SEWING_THREAD],
        item_column="B",
        checks=[
            ValueCheck(
                label="Wastage",
                column="E",
                expect=expect_percent(
                    "5",
                    tolerance=_PCT_TOLERANCE,
                    heuristic=PercentHeuristic.NUMERIC_IS_FRACTION,
                ),
            )
        ],
    ),
    SectionRule(
        rule_id="FOX-SEWING-THREAD",
        label="Sewing Thread",
        section=FABRIC_SECTION,
        where=[SEWING_THREAD],
        report_missing=False,
        require_match=True,
        skip_empty=False,
        checks=[
            ValueCheck(label="Usage", column="D", expect=expect_number("1")),
            ValueCheck(label="Wastage", column="E", expect=expect_percent("3", tolerance=_PCT_TOLERANCE)),
            ValueCheck(label="COST CIF", column="H", expect=expect_number("0.01")),
            ValueCheck(label="Extended Cost", column="I", expect=expect_number("0.01")),
            ValueCheck(label="% to Total", column="J", expect=expect_percent("0", tolerance=_PCT_TOLERANCE)),
        ],
    ),
    SectionRule(
        rule_id="FOX-STANDARD-PACKAGING",
        label="Standard Packaging",
        where=[RowCondition(column="A", keywords="standard packaging")],
        require_match=True,
        skip_empty=False,
        checks=[
            ValueCheck(label="Usage", column="D", expect=expect_number("1")),
            ValueCheck(label="Wastage", column="E", expect=expect_percent("3", tolerance=_PCT_TOLERANCE)),
        ],
    ),
    _labor_item("Knitting"),
    _labor_item("Sewing"),
    _labor_item("Finishing"),
    PointRule(
        rule_id="FOX-OVERHEAD-COST",
        label="OVERHEAD COST",
        anchor=Anchor(column="A", keyword="overhead cost"),
        checks=[ValueCheck(label="OVERHEAD COST", column="H", expect=expect_number("0.40"))],
    ),
    PointRule(
        rule_id="FOX-PROFIT-COST",
        label="PROFIT COST",
        anchor=Anchor(column="A", keyword="profit cost"),
        checks=[
            ValueCheck(
                label="PROFIT COST",
                column="H",
                expect=expect_range("0.35", "0.45", range_slack=_SLACK),
            )
        ],
    ),
)


@register_ruleset
class FoxRuleset(Ruleset):
    brand_id = "fox"
    brand_name = "FOX"
    description = "Header text checks, overhead/profit constants and FABRIC / UPPER / SHELL wastage."

    def rules(self, ctx: RuleContext):
        return list(RULES)
