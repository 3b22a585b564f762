from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable, Iterator

from pydantic import BaseModel, ConfigDict

from .errors import IntegrityWarning
from .movements import StockMovement
from .ordering import ZERO, safe_average, sort_chronologically

DEFAULT_PRECISION = 34


class ValuationSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity_on_hand: Decimal
    total_value: Decimal
    average_unit_cost: Decimal

    @property
    def is_oversold(self) -> bool:
        return self.quantity_on_hand < 0 or self.total_value < 0

    def rounded(self, places: int = 3) -> ValuationSummary:
        exponent = Decimal(1).scaleb(-places)
        return ValuationSummary(
            quantity_on_hand=self.quantity_on_hand.quantize(exponent, rounding=ROUND_HALF_UP),
            total_value=self.total_value.quantize(exponent, rounding=ROUND_HALF_UP),
            average_unit_cost=self.average_unit_cost.quantize(exponent, rounding=ROUND_HALF_UP),
        )


@dataclass(frozen=True)
class ValuationStep:
    movement: StockMovement
    quantity_on_hand: Decimal
    total_value: Decimal
    average_unit_cost: Decimal
    # Value added (positive) or drawn down (negative) by this movement.
    value_change: Decimal


class ValuationEngine:
    """Weighted-average-cost valuation of a single product's movements."""

    def __init__(self, *, precision: int = DEFAULT_PRECISION) -> None:
        self._precision = precision

    def process(self, movements: Iterable[StockMovement]) -> ValuationSummary:
        quantity = ZERO
        value = ZERO
        for step in self.replay(movements):
            quantity = step.quantity_on_hand
            value = step.total_value

        with localcontext() as ctx:
            ctx.prec = self._precision
            average = safe_average(value, quantity)
        return ValuationSummary(quantity_on_hand=quantity, total_value=value, average_unit_cost=average)

    def replay(self, movements: Iterable[StockMovement]) -> Iterator[ValuationStep]:
        """Yield the running position after each movement, oldest first.

        Movements may arrive in any order; they are sorted by time and then by
        creation sequence before replay because the average is path-dependent.
        Quantity and value are not clamped, so an oversold product shows up as
        negative numbers.
        """
        quantity = ZERO
        value = ZERO

        for movement in sort_chronologically(movements):
            with localcontext() as ctx:
                ctx.prec = self._precision
                current_average = safe_average(value, quantity)

                if movement.movement_type.adds_stock:
                    change = movement.quantity * (movement.unit_rate or ZERO)
                    quantity += movement.quantity
                else:
                    change = -(movement.quantity * current_average)
                    quantity -= movement.quantity
                value += change
                average = safe_average(value, quantity)

            yield ValuationStep(
                movement=movement,
                quantity_on_hand=quantity,
                total_value=value,
                average_unit_cost=average,
                value_change=change,
            )


def find_integrity_warnings(product_id: str, summary: ValuationSummary) -> list[IntegrityWarning]:
    warnings: list[IntegrityWarning] = []
    if summary.quantity_on_hand < 0:
        warnings.append(
            IntegrityWarning(
                product_id=product_id,
                quantity_on_hand=summary.quantity_on_hand,
                total_value=summary.total_value,
                message=f"Negative quantity on hand ({summary.quantity_on_hand}), stock oversold",
            )
        )
    if summary.total_value < 0:
        warnings.append(
            IntegrityWarning(
                product_id=product_id,
                quantity_on_hand=summary.quantity_on_hand,
                total_value=summary.total_value,
                message=f"Negative stock value ({summary.total_value})",
            )
        )
    return warnings
