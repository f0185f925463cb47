from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ReferenceItem(BaseModel):
    """One OB cost line: the values a buyer CBD row is expected to repeat."""

    description: str
    part_number: str = ""
    unit_price: str = ""
    quantity: str = ""
    wastage: str = ""


class CostBreakdownReference(BaseModel):
    source: str = ""
    efficiency: str = ""
    overhead: str = ""
    profit: str = ""
    items: List[ReferenceItem] = Field(default_factory=list)
