from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


class InvalidInputError(ValueError):
    """Raised when a raw scalar handed to an engine is not a usable amount."""


class OrderingError(Exception):
    def __init__(self, *, index: int, previous: datetime, current: datetime) -> None:
        self.index = index
        self.previous = previous
        self.current = current
        super().__init__(
            f"Input is not chronological at position {index}: "
            f"{current.isoformat()} comes after {previous.isoformat()}"
        )


@dataclass(frozen=True)
class IntegrityWarning:
    product_id: str
    quantity_on_hand: Decimal
    total_value: Decimal
    message: str
