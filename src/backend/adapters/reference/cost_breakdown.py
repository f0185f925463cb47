from __future__ import annotations

import csv
import logging
from pathlib import Path

from common.cbd_validation.comparators import parse_number
from common.cbd_validation.reference import CostBreakdownReference, ReferenceItem

logger = logging.getLogger(__name__)


class ReferenceDataError(ValueError):
    pass


def load_cost_breakdown_csv(csv_path: str | Path) -> CostBreakdownReference:
    """
    Parse an OB cost breakdown CSV.

    Each line is ``Description, PartNumber, UnitPrice, Quantity, Wastage`` except
    the Efficiency / Overhead / Profit lines, which carry a single value in the
    second column.
    """
    path = Path(csv_path)
    if not path.is_file():
        raise ReferenceDataError(f"Failed to load {path.name}: file not found at {path.parent}")
    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            rows = list(csv.reader(handle))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise ReferenceDataError(f"Failed to load {path.name}: {exc}") from exc

    reference = CostBreakdownReference(source=path.name)
    for line_no, row in enumerate(rows, start=1):
        values = [value.strip() for value in row]
        if not any(values):
            continue
        description = values[0]
        key = description.lower()
        if "efficiency" in key:
            reference.efficiency = _single_value(values, path, line_no)
        elif "overhead" in key:
            reference.overhead = _single_value(values, path, line_no)
        elif "profit" in key:
            reference.profit = _single_value(values, path, line_no)
        else:
            padded = values + [""] * (5 - len(values))
            reference.items.append(
                ReferenceItem(
                    description=description,
                    part_number=padded[1],
                    unit_price=padded[2],
                    quantity=padded[3],
                    wastage=padded[4],
                )
            )

    if not reference.items:
        raise ReferenceDataError(f"{path.name} contains no cost items")
    logger.info("Loaded %d reference items from %s", len(reference.items), path.name)
    return reference


def _single_value(values: list[str], path: Path, line_no: int) -> str:
    value = values[1] if len(values) > 1 else ""
    if value and parse_number(value) is None:
        raise ReferenceDataError(f"{path.name} line {line_no}: '{values[0]}' value '{value}' is not a number")
    return value
