from __future__ import annotations

from decimal import Decimal
from typing import Dict, List

from ..config import (
    Anchor,
    PercentHeuristic,
    PointRule,
    RowCondition,
    SectionBounds,
    SectionRule,
    ValueCheck,
    expect_number,
    expect_one_of,
    expect_percent,
    expect_range,
    expect_text,
)
from ..context import RuleContext, read_labelled_value
from ..grid import Grid, column_index
from ..models import MatchMode
from ..registry import register_ruleset
from ..rule import Ruleset, SheetPick, SheetSelector

PT_UWU = "pt uwu jump indonesia"
HEADS_UP = "heads up"

FABRIC_SECTION = SectionBounds(
    start=Anchor(column="A", keyword="fabric", match=MatchMode.EQUALS),
    stop=Anchor(column="D", keyword="total fabric yardage"),
)
TRIMS_SECTION = SectionBounds(
    start=Anchor(column="A", keyword="trims", match=MatchMode.EQUALS),
    stop=Anchor(column="G", keyword="total trims cost"),
)

HEADER_RULES = (
    PointRule(
        rule_id="COTOPAXI-VENDOR-COO",
        label="Vendor / COO",
        anchor=Anchor(column="D", keyword="vendor / coo"),
        checks=[
            ValueCheck(
                label="Vendor / COO",
                column="E",
                expect=expect_one_of("PT UWU JUMP INDONESIA", "HEADS UP"),
            )
        ],
    ),
    PointRule(
        rule_id="COTOPAXI-SUPPLIER-CONTACT",
        label="Supplier Contact",
        anchor=Anchor(column="D", keyword="supplier contact"),
        checks=[ValueCheck(label="Supplier Contact", column="E", expect=expect_text("Madison 88"))],
    ),
    PointRule(
        rule_id="COTOPAXI-OVERHEAD-MARGIN-PROFIT",
        label="Overhead/Margin/Profit %",
        anchor=Anchor(column="E", keyword="overhead/margin/profit %"),
        checks=[
            ValueCheck(
                label="Overhead/Margin/Profit %",
                column="G",
                expect=expect_range(
                    "15",
                    "20",
                    percent=True,
                    heuristic=PercentHeuristic.GT_ONE_IS_PERCENT,
                ),
            )
        ],
    ),
)


# Rates match within 0.0001 of the fraction, i.e. 0.01 on the percent scale.
_RATE_TOLERANCE = Decimal("0.01")


def _rate(value: str) -> ValueCheck:
    return ValueCheck(
        label="Rate",
        column="I",
        expect=expect_percent(value, tolerance=_RATE_TOLERANCE, heuristic=PercentHeuristic.ALWAYS_FRACTION),
    )


def _section_rule(rule_id: str, label: str, section: SectionBounds, rate: str, **kwargs) -> SectionRule:
    kwargs.setdefault("note_column", "B")
    # Every selected item row is rated; a blank rate is an Empty failure.
    kwargs.setdefault("skip_empty", False)
    return SectionRule(
        rule_id=rule_id,
        label=label,
        section=section,
        checks=[_rate(rate)],
        **kwargs,
    )


LOCAL_SUPPLIER = ["m88", "local"]
LOCAL_OR_FREIGHT = ["local", "freight"]
YARN = RowCondition(column="A", keywords="yarn", match=MatchMode.EQUALS)
HAS_ITEM = RowCondition(column="A")


def _pt_uwu_rules() -> List[PointRule | SectionRule]:
    return [
        _section_rule(
            "COTOPAXI-FABRIC-YARN-LOCAL",
            "Yarn (M88/Local)",
            FABRIC_SECTION,
            "0.15",
            where=[YARN, RowCondition(column="B", keywords=LOCAL_SUPPLIER)],
        ),
        _section_rule(
            "COTOPAXI-FABRIC-YARN",
            "Yarn (Non-M88/Local)",
            FABRIC_SECTION,
            "0.5",
            where=[YARN, RowCondition(column="B", keywords=LOCAL_SUPPLIER, negate=True)],
            report_missing=False,
        ),
        _section_rule(
            "COTOPAXI-FABRIC-FREIGHT",
            "Fabric Freight",
            FABRIC_SECTION,
            "0.4",
            where=[RowCondition(column="A", keywords="fabric freight", match=MatchMode.EQUALS)],
            report_missing=False,
        ),
        _section_rule(
            "COTOPAXI-TRIMS-LOCAL",
            "Trims (Local/Freight)",
            TRIMS_SECTION,
            "0.012",
            where=[HAS_ITEM, RowCondition(column="B", keywords=LOCAL_OR_FREIGHT)],
            item_column="A",
        ),
        _section_rule(
            "COTOPAXI-TRIMS",
            "Trims",
            TRIMS_SECTION,
            "0.015",
            where=[
                HAS_ITEM,
                RowCondition(column="B"),
                RowCondition(column="B", keywords=LOCAL_OR_FREIGHT, negate=True),
            ],
            item_column="A",
            report_missing=False,
        ),
    ]


def _heads_up_rules() -> List[PointRule | SectionRule]:
    return [
        _section_rule(
            "COTOPAXI-FABRIC-ITEM",
            "Fabric Item",
            FABRIC_SECTION,
            "5",
            where=[HAS_ITEM],
            exclude=[RowCondition(column="A", keywords="fabric")],
            item_column="A",
        ),
        _section_rule(
            "COTOPAXI-FABRIC-FREIGHT",
            "Fabric Freight",
            FABRIC_SECTION,
            "5",
            where=[RowCondition(column="A", keywords="fabric freight", match=MatchMode.EQUALS)],
            report_missing=False,
        ),
        _section_rule(
            "COTOPAXI-TRIMS",
            "Trims",
            TRIMS_SECTION,
            "3",
            where=[HAS_ITEM],
            item_column="A",
        ),
    ]


def _general_packaging(vendor: str) -> PointRule:
    checks = [ValueCheck(label="Qty", column="F", expect=expect_number("1"))]
    if PT_UWU in vendor:
        checks.append(_rate("0.01"))
    elif HEADS_UP in vendor:
        checks.append(_rate("3"))
    return PointRule(
        rule_id="COTOPAXI-GENERAL-PACKAGING",
        label="General Packaging",
        anchor=Anchor(column="D", keyword="general packaging"),
        checks=checks,
    )


@register_ruleset
class CotopaxiRuleset(Ruleset):
    brand_id = "cotopaxi"
    brand_name = "Cotopaxi"
    description = "Blank Cost Sheet header checks plus fabric/trims rates that depend on the vendor."
    sheet = SheetSelector(pick=SheetPick.NAMED, name="Blank Cost Sheet")

    def derive(self, grid: Grid) -> Dict[str, str]:
        vendor = read_labelled_value(
            grid,
            label_column=column_index("D"),
            label="vendor / coo",
            value_column=column_index("E"),
        )
        return {"vendor_coo": vendor}

    def rules(self, ctx: RuleContext):
        vendor = ctx.get_derived("vendor_coo").casefold()
        rules: List[PointRule | SectionRule] = list(HEADER_RULES)
        if PT_UWU in vendor:
            rules.extend(_pt_uwu_rules())
        elif HEADS_UP in vendor:
            rules.extend(_heads_up_rules())
        rules.append(_general_packaging(vendor))
        return rules
