from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .grid import Grid, column_index, is_blank, parse_cell_ref
from .models import MatchMode
from .scanner import matches_keyword


class CompareKind(str, Enum):
    TEXT = "text"
    CONTAINS = "contains"
    ONE_OF = "one_of"
    NUMERIC = "numeric"
    PERCENTAGE = "percentage"
    RANGE = "range"


class PercentHeuristic(str, Enum):
    """How a raw cell is brought to percent-scale (5 == 5%).

    Brands disagree on this; each ruleset keeps the one its sheets were built for.
    """

    # "%" -> already percent; <= 1 -> fraction; else already percent.
    LE_ONE_IS_FRACTION = "le_one_is_fraction"
    # "%" stripped first; < 1 -> fraction; else already percent.
    LT_ONE_IS_FRACTION = "lt_one_is_fraction"
    # "%" -> already percent; anything else is a fraction.
    ALWAYS_FRACTION = "always_fraction"
    # "%" and plain numbers > 1 are both percent; a "%" value above 100 is scaled down again.
    GT_ONE_IS_PERCENT = "gt_one_is_percent"
    # Numeric cells are fractions; text > 1 is percent, text <= 1 is a fraction.
    NUMERIC_IS_FRACTION = "numeric_is_fraction"


class Anchor(BaseModel):
    column: str
    keyword: Union[str, List[str]]
    match: MatchMode = MatchMode.CONTAINS
    # 1 = first match; callers resume scanning after each hit for later occurrences.
    occurrence: int = Field(default=1, ge=1)

    @field_validator("column")
    @classmethod
    def _check_column(cls, value: str) -> str:
        column_index(value)
        return value.strip().upper()

    @property
    def col_index(self) -> int:
        return column_index(self.column)

    @property
    def keywords(self) -> List[str]:
        return [self.keyword] if isinstance(self.keyword, str) else list(self.keyword)

    def describe(self) -> str:
        return " / ".join(self.keywords)


class RowCondition(BaseModel):
    column: str
    # Empty keywords means "cell is not blank".
    keywords: List[str] = Field(default_factory=list)
    match: MatchMode = MatchMode.CONTAINS
    negate: bool = False

    @field_validator("keywords", mode="before")
    @classmethod
    def _wrap_keyword(cls, value):
        if isinstance(value, str):
            return [value]
        return value

    def matches(self, grid: Grid, row: int) -> bool:
        value = grid.cell(row, column_index(self.column))
        if self.keywords:
            hit = matches_keyword(value, self.keywords, self.match)
        else:
            hit = not is_blank(value)
        return not hit if self.negate else hit


class Expectation(BaseModel):
    kind: CompareKind
    text: Optional[str] = None
    choices: List[str] = Field(default_factory=list)
    value: Optional[Decimal] = None
    minimum: Optional[Decimal] = None
    maximum: Optional[Decimal] = None
    max_exclusive: bool = False

    # Exclusive: valid iff abs(actual - expected) < tolerance.
    tolerance: Decimal = Decimal("0.0001")
    # Out-of-tolerance values this close to the expectation are reported as warnings.
    warn_within: Optional[Decimal] = None
    # Optional quantization applied to both sides before comparing (e.g. Decimal("0.01")).
    quantize: Optional[Decimal] = None
    # Widens both range bounds (floating-point sheets store 0.35 as 0.34999...).
    range_slack: Decimal = Decimal("0")

    # Range bounds are in percent-scale when set.
    percent: bool = False
    heuristic: PercentHeuristic = PercentHeuristic.LE_ONE_IS_FRACTION
    display: Optional[str] = None

    @model_validator(mode="after")
    def _check_fields(self) -> "Expectation":
        if self.kind in (CompareKind.TEXT, CompareKind.CONTAINS) and self.text is None:
            raise ValueError(f"{self.kind.value} expectation requires 'text'")
        if self.kind == CompareKind.ONE_OF and not self.choices:
            raise ValueError("one_of expectation requires 'choices'")
        if self.kind in (CompareKind.NUMERIC, CompareKind.PERCENTAGE) and self.value is None:
            raise ValueError(f"{self.kind.value} expectation requires 'value'")
        if self.kind == CompareKind.RANGE:
            if self.minimum is None or self.maximum is None:
                raise ValueError("range expectation requires 'minimum' and 'maximum'")
            if self.minimum > self.maximum:
                raise ValueError("range minimum exceeds maximum")
        return self

    @property
    def is_percent(self) -> bool:
        return self.kind == CompareKind.PERCENTAGE or (self.kind == CompareKind.RANGE and self.percent)

    def expected_display(self) -> str:
        if self.display:
            return self.display
        suffix = "%" if self.is_percent else ""
        if self.kind == CompareKind.TEXT:
            return self.text or ""
        if self.kind == CompareKind.CONTAINS:
            return f"contains {self.text}"
        if self.kind == CompareKind.ONE_OF:
            return " or ".join(self.choices)
        if self.kind == CompareKind.RANGE:
            return f"{self.minimum}{suffix} - {self.maximum}{suffix}"
        return f"{self.value}{suffix}"


def expect_text(text: str, **kwargs) -> Expectation:
    return Expectation(kind=CompareKind.TEXT, text=text, **kwargs)


def expect_contains(text: str, **kwargs) -> Expectation:
    return Expectation(kind=CompareKind.CONTAINS, text=text, **kwargs)


def expect_one_of(*choices: str, **kwargs) -> Expectation:
    return Expectation(kind=CompareKind.ONE_OF, choices=list(choices), **kwargs)


def expect_number(value: str, **kwargs) -> Expectation:
    return Expectation(kind=CompareKind.NUMERIC, value=Decimal(value), **kwargs)


def expect_percent(value: str, **kwargs) -> Expectation:
    return Expectation(kind=CompareKind.PERCENTAGE, value=Decimal(value), **kwargs)


def expect_range(minimum: str, maximum: str, **kwargs) -> Expectation:
    return Expectation(kind=CompareKind.RANGE, minimum=Decimal(minimum), maximum=Decimal(maximum), **kwargs)


class ValueCheck(BaseModel):
    label: str
    # Exactly one of: absolute column letter, or offset from the anchor column.
    column: Optional[str] = None
    offset: Optional[int] = None
    expect: Expectation

    @model_validator(mode="after")
    def _check_locator(self) -> "ValueCheck":
        if (self.column is None) == (self.offset is None):
            raise ValueError("value check needs exactly one of 'column' or 'offset'")
        if self.column is not None:
            column_index(self.column)
        return self

    def resolve_column(self, anchor_col: Optional[int]) -> int:
        if self.column is not None:
            return column_index(self.column)
        if anchor_col is None:
            raise ValueError(f"Check '{self.label}' uses an offset but has no anchor column")
        return anchor_col + (self.offset or 0)


class SectionBounds(BaseModel):
    start: Anchor
    # Without a stop anchor the section runs to the end of the grid (or max_rows).
    stop: Optional[Anchor] = None
    max_rows: Optional[int] = Field(default=None, ge=1)
    include_start: bool = False


class PointRule(BaseModel):
    kind: Literal["point"] = "point"
    rule_id: str
    label: str
    anchor: Optional[Anchor] = None
    cell: Optional[str] = None
    within: Optional[SectionBounds] = None
    checks: List[ValueCheck]

    @model_validator(mode="after")
    def _check_locator(self) -> "PointRule":
        if (self.anchor is None) == (self.cell is None):
            raise ValueError(f"{self.rule_id}: point rule needs exactly one of 'anchor' or 'cell'")
        if self.cell is not None:
            parse_cell_ref(self.cell)
        if not self.checks:
            raise ValueError(f"{self.rule_id}: point rule needs at least one check")
        return self


class SectionRule(BaseModel):
    kind: Literal["section"] = "section"
    rule_id: str
    label: str
    # None scans the whole grid.
    section: Optional[SectionBounds] = None
    checks: List[ValueCheck]
    # All must hold for a row to be checked.
    where: List[RowCondition] = Field(default_factory=list)
    # Any match skips the row.
    exclude: List[RowCondition] = Field(default_factory=list)
    item_column: Optional[str] = None
    note_column: Optional[str] = None
    # Sibling rules over the same section set this to False to avoid repeating the "not found" row.
    report_missing: bool = True
    # Emit a single "not found" verdict when no row passes the filters.
    require_match: bool = False
    # Rows whose target cell is blank yield no verdict. Rules that pick named item
    # rows turn this off so a blank value is reported as Empty.
    skip_empty: bool = True

    @model_validator(mode="after")
    def _check_checks(self) -> "SectionRule":
        if not self.checks:
            raise ValueError(f"{self.rule_id}: section rule needs at least one check")
        for check in self.checks:
            if check.column is None:
                raise ValueError(f"{self.rule_id}: section checks must use absolute columns")
        return self
