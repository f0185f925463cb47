import pytest

from common.cbd_validation.models import VerdictStatus
from common.cbd_validation.reference import CostBreakdownReference, ReferenceItem
from common.cbd_validation.registry import UnknownRulesetError, registry
from common.cbd_validation.rule import SheetPick, SheetSelector


def _by_label(verdicts):
    return {v.label: v for v in verdicts}


def test_builtin_rulesets_are_registered():
    assert {"outdoor_research", "fox", "cotopaxi", "columbia"} <= set(registry.ids())
    assert registry.create(" FOX ").brand_name == "FOX"


def test_unknown_ruleset():
    with pytest.raises(UnknownRulesetError):
        registry.get("acme")


def test_sheet_selector():
    names = ["Summary", "Blank Cost Sheet ", "Notes"]
    assert SheetSelector().select(names) == "Summary"
    assert SheetSelector(pick=SheetPick.LAST).select(names) == "Notes"
    assert SheetSelector(pick=SheetPick.NAMED, name="blank cost sheet").select(names) == "Blank Cost Sheet "
    assert SheetSelector(pick=SheetPick.NAMED, name="Costing").select(names) is None
    assert SheetSelector().select([]) is None


def test_outdoor_research(make_grid):
    grid = make_grid(
        {
            "C20": "PACKING",
            "D20": "General Packaging",
            "E20": "Factory Supplied",
            "G20": 1,
            "H20": "PC",
            "D24": "Other Charges",
            "F24": "OVERHEAD/PROFIT",
            "G24": 1,
            "I24": 0.6,
        }
    )
    verdicts = _by_label(registry.create("outdoor_research").evaluate(grid))
    assert len(verdicts) == 7
    assert verdicts["General Packaging - Unit"].is_valid
    assert verdicts["Other Charges - Quantity"].is_valid
    assert verdicts["Other Charges - Value"].status == VerdictStatus.INVALID
    assert verdicts["Other Charges - Value"].expected_display == "0.5"


def _fox_grid(make_grid, **overrides):
    cells = {
        "C3": "Vendor",
        "D3": "Madison 88 Ltd.",
        "C4": "Factory",
        "D4": "PT UWU Jump",
        "C5": "COO",
        "D5": "Indonesia",
        "K3": "OVERHEAD",
        "L3": 0.4,
        "K4": "PROFIT & OTHERS",
        "L4": 0.35,
        "A10": "FABRIC",
        "B11": "Main Body",
        "E11": 0.05,
        "B12": "Sewing Thread",
        "D12": 1,
        "E12": 0.03,
        "H12": 0.01,
        "I12": 0.01,
        "J12": 0,
        "H14": "Subtotal",
        "A16": "Standard Packaging",
        "D16": 1,
        "E16": "3%",
        "A20": "LABOR COST",
        "B21": "Knitting",
        "B22": "Sewing",
        "B23": "Finishing",
        "A26": "OVERHEAD COST",
        "H26": 0.4,
        "A27": "PROFIT COST",
        "H27": 0.44,
    }
    cells.update(overrides)
    return make_grid(cells)


def test_fox_happy_path(make_grid):
    verdicts = registry.create("fox").evaluate(_fox_grid(make_grid))
    failing = [(v.label, v.actual_display) for v in verdicts if not v.is_valid]
    assert failing == []
    labels = [v.label for v in verdicts]
    assert "Wastage % (Main Body)" in labels
    assert "Sewing Thread - % to Total" in labels
    assert "Labor Cost: Finishing" in labels
    assert not any("Sewing Thread" in label for label in labels if label.startswith("Wastage"))


def test_fox_wastage_numeric_cells_are_fractions(make_grid):
    verdicts = _by_label(registry.create("fox").evaluate(_fox_grid(make_grid, E11=5)))
    wastage = verdicts["Wastage % (Main Body)"]
    assert wastage.status == VerdictStatus.INVALID
    assert wastage.actual_display == "500%"

    verdicts = _by_label(registry.create("fox").evaluate(_fox_grid(make_grid, E11="5%")))
    assert verdicts["Wastage % (Main Body)"].is_valid


def test_fox_missing_labor_item(make_grid):
    verdicts = _by_label(registry.create("fox").evaluate(_fox_grid(make_grid, B22="Embroidery")))
    assert verdicts["Labor Cost: Sewing"].status == VerdictStatus.NOT_FOUND


def _cotopaxi_grid(make_grid, vendor, **overrides):
    cells = {
        "D2": "VENDOR / COO",
        "E2": vendor,
        "D3": "Supplier Contact",
        "E3": "Madison 88",
        "E5": "Overhead/Margin/Profit %:",
        "G5": 0.18,
        "A10": "Fabric",
        "A11": "Yarn",
        "B11": "M88 local mill",
        "I11": 0.0015,
        "A12": "Yarn",
        "B12": "Imported",
        "I12": 0.005,
        "A13": "Fabric Freight",
        "I13": 0.004,
        "A14": "Rib",
        "I14": 0.05,
        "D15": "Total Fabric Yardage",
        "A20": "Trims",
        "A21": "Zipper",
        "B21": "Local",
        "I21": 0.00012,
        "A22": "Label",
        "B22": "Avery",
        "I22": 0.00015,
        "A23": "Button",
        "I23": 0.03,
        "G24": "Total Trims Cost",
        "D30": "General Packaging",
        "F30": 1,
        "I30": 0.0001,
    }
    cells.update(overrides)
    return make_grid(cells, name="Blank Cost Sheet")


def test_cotopaxi_pt_uwu_rules(make_grid):
    ruleset = registry.create("cotopaxi")
    grid = _cotopaxi_grid(make_grid, "PT UWU JUMP INDONESIA")
    assert ruleset.derive(grid) == {"vendor_coo": "PT UWU JUMP INDONESIA"}

    verdicts = ruleset.evaluate(grid)
    by_label = _by_label(verdicts)
    assert by_label["Overhead/Margin/Profit %"].is_valid
    assert by_label["Overhead/Margin/Profit %"].actual_display == "18%"
    assert by_label["Yarn (M88/Local)"].is_valid
    assert by_label["Yarn (M88/Local)"].note == "M88 local mill"
    assert by_label["Yarn (Non-M88/Local)"].is_valid
    assert by_label["Fabric Freight"].is_valid
    assert by_label["Trims (Local/Freight) (Zipper)"].is_valid
    assert by_label["Trims (Label)"].is_valid
    assert by_label["General Packaging - Rate"].is_valid
    # Rows without a supplier are not rated for PT UWU.
    assert not any("Button" in v.label for v in verdicts)
    assert all(v.is_valid for v in verdicts)


def test_cotopaxi_heads_up_rules(make_grid):
    verdicts = registry.create("cotopaxi").evaluate(_cotopaxi_grid(make_grid, "Heads Up"))
    by_label = _by_label(verdicts)
    assert by_label["Fabric Item (Rib)"].is_valid
    assert by_label["Fabric Item (Yarn)"].status == VerdictStatus.INVALID
    assert by_label["Fabric Freight"].status == VerdictStatus.INVALID
    assert by_label["Trims (Button)"].is_valid
    assert by_label["General Packaging - Rate"].status == VerdictStatus.INVALID
    assert by_label["General Packaging - Rate"].expected_display == "3%"


def test_cotopaxi_unknown_vendor_only_checks_header(make_grid):
    verdicts = registry.create("cotopaxi").evaluate(_cotopaxi_grid(make_grid, "ACME"))
    by_label = _by_label(verdicts)
    assert by_label["Vendor / COO"].status == VerdictStatus.INVALID
    assert by_label["General Packaging"].is_valid
    assert len(verdicts) == 4


def _columbia_reference():
    return CostBreakdownReference(
        source="Columbia_CostBreakdown.csv",
        efficiency="0.85",
        overhead="0.35",
        profit="0.045",
        items=[
            ReferenceItem(description="Shell Fabric", part_number="CF1234", unit_price="3.25", quantity="1.45", wastage="0.03"),
            ReferenceItem(description="Zipper", part_number="ZP-5", unit_price="0.42", quantity="1", wastage=""),
        ],
    )


def test_columbia_compares_against_reference(make_grid):
    grid = make_grid(
        {
            "M19": 0.853,
            "O21": 0.355,
            "M22": 0.048,
            "A30": "Shell Fabric",
            "B30": "CF9999",
            "A31": "Shell Fabric",
            "B31": "CF1234",
            "K31": 3.249,
            "O31": 1.45,
            "Y31": 0.03,
            "A35": "Zipper #5",
            "B35": "ZP-5",
            "K35": 0.5,
            "O35": 1,
        }
    )
    verdicts = registry.create("columbia").evaluate(grid, reference=_columbia_reference())
    by_label = _by_label(verdicts)
    assert by_label["Efficiency%"].is_valid
    assert by_label["Overhead"].is_valid
    assert by_label["Profit"].is_valid
    # The row carrying the OB part number is preferred over the first description hit.
    assert by_label["Shell Fabric - Material"].row_number == 31
    assert by_label["Shell Fabric - FOB Cost"].is_valid
    assert by_label["Zipper - FOB Cost"].status == VerdictStatus.INVALID
    assert "Zipper - Wastage" not in by_label


def test_columbia_requires_reference(make_grid):
    with pytest.raises(ValueError):
        registry.create("columbia").evaluate(make_grid({"A1": "x"}))


def test_fox_blank_item_rows_are_reported_empty(make_grid):
    grid = _fox_grid(make_grid, D12="", E12="", H12="", I12="", J12="", D16="", E16="")
    verdicts = registry.create("fox").evaluate(grid)

    sewing = [v for v in verdicts if v.rule_id == "FOX-SEWING-THREAD"]
    assert [v.value_ref for v in sewing] == ["D12", "E12", "H12", "I12", "J12"]
    assert {v.status for v in sewing} == {VerdictStatus.EMPTY}

    packaging = [v for v in verdicts if v.rule_id == "FOX-STANDARD-PACKAGING"]
    assert [(v.value_ref, v.actual_display) for v in packaging] == [("D16", "Empty"), ("E16", "Empty")]
    assert sum(1 for v in verdicts if not v.is_valid) == 7


def test_cotopaxi_blank_rates_are_reported_empty(make_grid):
    grid = _cotopaxi_grid(make_grid, "PT UWU JUMP INDONESIA", I11="", I13="", I22="")
    by_rule = {}
    for verdict in registry.create("cotopaxi").evaluate(grid):
        by_rule.setdefault(verdict.rule_id, []).append(verdict)

    [yarn] = by_rule["COTOPAXI-FABRIC-YARN-LOCAL"]
    assert yarn.status == VerdictStatus.EMPTY
    assert yarn.value_ref == "I11"
    [freight] = by_rule["COTOPAXI-FABRIC-FREIGHT"]
    assert freight.status == VerdictStatus.EMPTY
    [label] = by_rule["COTOPAXI-TRIMS"]
    assert label.label == "Trims (Label)"
    assert label.actual_display == "Empty"


def test_cotopaxi_rates_match_within_a_hundredth_of_a_percent(make_grid):
    grid = _cotopaxi_grid(make_grid, "PT UWU JUMP INDONESIA", I21=0.00013, I22=0.00035)
    by_label = _by_label(registry.create("cotopaxi").evaluate(grid))
    assert by_label["Trims (Local/Freight) (Zipper)"].is_valid
    assert by_label["Trims (Label)"].status == VerdictStatus.INVALID
    assert by_label["Trims (Label)"].expected_display == "0.015%"


def test_columbia_overhead_and_profit_show_ob_values(make_grid):
    grid = make_grid({"O21": 0.37, "M22": 0.045, "A30": "Zipper"})
    by_label = _by_label(registry.create("columbia").evaluate(grid, reference=_columbia_reference()))
    assert by_label["Overhead"].status == VerdictStatus.INVALID
    assert by_label["Overhead"].expected_display == "0.35 (0.35 - 0.36)"
    assert by_label["Profit"].expected_display == "0.045 (4% - 4.99%)"

    without_ob = _columbia_reference().model_copy(update={"overhead": "", "profit": ""})
    by_label = _by_label(registry.create("columbia").evaluate(grid, reference=without_ob))
    assert by_label["Overhead"].expected_display == "0.35 - 0.36"
    assert by_label["Profit"].expected_display == "4% - 4.99%"
