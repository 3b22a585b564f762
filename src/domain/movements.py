from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class MovementType(StrEnum):
    OPENING = "OPENING"
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    WASTE = "WASTE"
    ADJUSTMENT = "ADJUSTMENT"

    @property
    def adds_stock(self) -> bool:
        # Opening stock is seeded through the purchase path.
        return self in (MovementType.OPENING, MovementType.PURCHASE)


class StockMovement(BaseModel):
    """A single append-only stock event for one product.

    `unit_rate` is the acquisition cost per unit and only matters for stock
    increases. `sell_rate` is informational; consumption is always costed at
    the running average.
    """

    model_config = ConfigDict(frozen=True)

    movement_type: MovementType
    occurred_at: datetime
    quantity: Decimal = Field(ge=0, allow_inf_nan=False)
    unit_rate: Decimal | None = Field(default=None, ge=0, allow_inf_nan=False)
    sell_rate: Decimal | None = Field(default=None, ge=0, allow_inf_nan=False)
    sequence: int = Field(default=0, ge=0)
    note: str | None = None
