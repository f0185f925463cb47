from __future__ import annotations

from ..config import Anchor, PointRule, ValueCheck, expect_number, expect_text
from ..context import RuleContext
from ..registry import register_ruleset
from ..rule import Ruleset

RULES = (
    PointRule(
        rule_id="OR-GENERAL-PACKAGING",
        label="General Packaging",
        anchor=Anchor(column="D", keyword="general packaging"),
        checks=[
            ValueCheck(label="Packing", column="C", expect=expect_text("PACKING")),
            ValueCheck(label="Factory Supplied", column="E", expect=expect_text("FACTORY SUPPLIED")),
            ValueCheck(label="Quantity", column="G", expect=expect_number("1")),
            ValueCheck(label="Unit", column="H", expect=expect_text("PC")),
        ],
    ),
    PointRule(
        rule_id="OR-OTHER-CHARGES",
        label="Other Charges",
        anchor=Anchor(column="D", keyword="other charges"),
        checks=[
            ValueCheck(label="Overhead/Profit", column="F", expect=expect_text("OVERHEAD/PROFIT")),
            ValueCheck(label="Quantity", column="G", expect=expect_number("1")),
            ValueCheck(label="Value", column="I", expect=expect_number("0.5")),
        ],
    ),
)


@register_ruleset
class OutdoorResearchRuleset(Ruleset):
    brand_id = "outdoor_research"
    brand_name = "Outdoor Research"
    description = "General Packaging and Other Charges rows located in column D."

    def rules(self, ctx: RuleContext):
        return list(RULES)
