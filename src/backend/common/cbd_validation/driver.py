"""Rule evaluation driver: turns declarative rules into Verdicts for one grid."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .comparators import compare
from .config import Anchor, PointRule, SectionBounds, SectionRule, ValueCheck
from .grid import Grid, column_index, parse_cell_ref
from .models import Verdict, VerdictStatus
from .scanner import find_anchor_row, matches_keyword, resolve_section_end

logger = logging.getLogger(__name__)

NOT_FOUND_DISPLAY = "Not Found"


def find_occurrence(
    grid: Grid,
    anchor: Anchor,
    *,
    start_row: int = 0,
    end_row: Optional[int] = None,
) -> Optional[int]:
    """Locate the anchor's Nth occurrence by resuming the scanner after each hit."""
    row: Optional[int] = None
    cursor = start_row
    for _ in range(anchor.occurrence):
        row = find_anchor_row(
            grid,
            anchor.col_index,
            anchor.keywords,
            anchor.match,
            start_row=cursor,
            end_row=end_row,
        )
        if row is None:
            return None
        cursor = row + 1
    return row


def section_rows(grid: Grid, bounds: SectionBounds) -> Optional[range]:
    """Rows belonging to a section, or None when the start anchor is absent."""
    start = find_occurrence(grid, bounds.start)
    if start is None:
        return None
    first = start if bounds.include_start else start + 1

    if bounds.stop is None:
        last = grid.last_row_index
        if bounds.max_rows is not None:
            last = min(last, start + bounds.max_rows)
        return range(first, last + 1)

    end = resolve_section_end(
        grid,
        start,
        bounds.stop.col_index,
        bounds.stop.keywords,
        match=bounds.stop.match,
        max_rows=bounds.max_rows,
    )
    stop_found = end > start and matches_keyword(grid.cell(end, bounds.stop.col_index), bounds.stop.keywords, bounds.stop.match)
    if not stop_found:
        logger.debug("Stop marker %r not found after row %d; section runs to row %d", bounds.stop.describe(), start + 1, end + 1)
    return range(first, end if stop_found else end + 1)


def _expected_summary(checks: List[ValueCheck]) -> str:
    if len(checks) == 1:
        return checks[0].expect.expected_display()
    return ", ".join(f"{check.label}={check.expect.expected_display()}" for check in checks)


def _not_found(rule_id: str, label: str, checks: List[ValueCheck], *, anchor_col: Optional[int] = None) -> Verdict:
    return Verdict(
        rule_id=rule_id,
        label=label,
        found=False,
        status=VerdictStatus.NOT_FOUND,
        anchor_col=anchor_col,
        actual_display=NOT_FOUND_DISPLAY,
        expected_display=_expected_summary(checks),
    )


def _check_label(base: str, check: ValueCheck, n_checks: int) -> str:
    return base if n_checks == 1 else f"{base} - {check.label}"


def _verdict_for_cell(
    rule_id: str,
    label: str,
    grid: Grid,
    row: int,
    anchor_col: Optional[int],
    check: ValueCheck,
    note: str = "",
) -> Verdict:
    col = check.resolve_column(anchor_col)
    raw = grid.cell(row, col)
    result = compare(raw, check.expect)
    return Verdict(
        rule_id=rule_id,
        label=label,
        found=True,
        status=result.status,
        row=row,
        anchor_col=anchor_col,
        value_col=col,
        actual_raw=raw,
        actual_number=result.number,
        actual_display=result.display,
        expected_display=check.expect.expected_display(),
        note=note,
    )


def evaluate_point_rule(rule: PointRule, grid: Grid) -> List[Verdict]:
    n_checks = len(rule.checks)
    if rule.cell is not None:
        row, col = parse_cell_ref(rule.cell)
        return [
            _verdict_for_cell(rule.rule_id, _check_label(rule.label, check, n_checks), grid, row, col, check)
            for check in rule.checks
        ]

    if rule.anchor is None:
        raise ValueError(f"{rule.rule_id}: point rule has neither anchor nor cell")
    start_row, end_row = 0, None
    if rule.within is not None:
        rows = section_rows(grid, rule.within)
        if rows is None:
            logger.debug("%s: enclosing section %r not found", rule.rule_id, rule.within.start.describe())
            return [_not_found(rule.rule_id, rule.label, rule.checks)]
        start_row, end_row = rows.start, rows.stop

    row = find_occurrence(grid, rule.anchor, start_row=start_row, end_row=end_row)
    if row is None:
        logger.debug("%s: anchor %r not found in column %s", rule.rule_id, rule.anchor.describe(), rule.anchor.column)
        return [_not_found(rule.rule_id, rule.label, rule.checks, anchor_col=rule.anchor.col_index)]

    logger.debug("%s: anchor found at row %d", rule.rule_id, row + 1)
    return [
        _verdict_for_cell(rule.rule_id, _check_label(rule.label, check, n_checks), grid, row, rule.anchor.col_index, check)
        for check in rule.checks
    ]


def evaluate_section_rule(rule: SectionRule, grid: Grid) -> List[Verdict]:
    if rule.section is None:
        rows = range(len(grid))
    else:
        section = section_rows(grid, rule.section)
        if section is None:
            logger.debug("%s: section start %r not found", rule.rule_id, rule.section.start.describe())
            if not rule.report_missing:
                return []
            return [_not_found(rule.rule_id, rule.label, rule.checks, anchor_col=rule.section.start.col_index)]
        rows = section

    verdicts: List[Verdict] = []
    n_checks = len(rule.checks)
    matched_rows = 0
    item_col = None if rule.item_column is None else column_index(rule.item_column)
    note_col = None if rule.note_column is None else column_index(rule.note_column)

    for row in rows:
        if any(cond.matches(grid, row) for cond in rule.exclude):
            continue
        if not all(cond.matches(grid, row) for cond in rule.where):
            continue
        matched_rows += 1
        label = rule.label
        if item_col is not None and grid.text(row, item_col):
            label = f"{rule.label} ({grid.text(row, item_col)})"
        note = grid.text(row, note_col) if note_col is not None else ""
        for check in rule.checks:
            col = check.resolve_column(None)
            if rule.skip_empty and grid.text(row, col) == "":
                continue
            verdicts.append(
                _verdict_for_cell(
                    rule.rule_id,
                    _check_label(label, check, n_checks),
                    grid,
                    row,
                    item_col,
                    check,
                    note=note,
                )
            )

    if rule.require_match and matched_rows == 0:
        logger.debug("%s: no matching rows in section", rule.rule_id)
        return [_not_found(rule.rule_id, rule.label, rule.checks)]
    return verdicts


def evaluate_rule(rule: PointRule | SectionRule, grid: Grid) -> List[Verdict]:
    if isinstance(rule, SectionRule):
        return evaluate_section_rule(rule, grid)
    return evaluate_point_rule(rule, grid)


def evaluate_rules(rules: Iterable[PointRule | SectionRule], grid: Grid) -> List[Verdict]:
    verdicts: List[Verdict] = []
    for rule in rules:
        verdicts.extend(evaluate_rule(rule, grid))
    return verdicts
