from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Protocol, TypeVar

from .errors import InvalidInputError, OrderingError

ZERO = Decimal(0)


class Chronological(Protocol):
    @property
    def occurred_at(self) -> datetime: ...

    @property
    def sequence(self) -> int: ...


T = TypeVar("T", bound=Chronological)


def chronological_key(item: Chronological) -> tuple[datetime, int]:
    return item.occurred_at, item.sequence


def sort_chronologically(items: Iterable[T]) -> list[T]:
    """Return a new list ordered by time, then creation sequence.

    The sort is stable, so records tied on both keys keep their input order.
    """
    return sorted(items, key=chronological_key)


def ensure_chronological(items: Iterable[Chronological]) -> None:
    """Raise OrderingError if timestamps ever decrease."""
    previous: datetime | None = None
    for index, item in enumerate(items):
        if previous is not None and item.occurred_at < previous:
            raise OrderingError(index=index, previous=previous, current=item.occurred_at)
        previous = item.occurred_at


def require_finite(value: Decimal | int, *, name: str) -> Decimal:
    """Accept exact amounts only: Decimals, or ints converted to Decimal. Floats are rejected."""
    if isinstance(value, int) and not isinstance(value, bool):
        value = Decimal(value)
    if not isinstance(value, Decimal):
        raise InvalidInputError(f"{name} must be a Decimal, got {type(value).__name__}")
    if not value.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return value


def safe_average(total: Decimal, quantity: Decimal) -> Decimal:
    # Average is only defined for a positive quantity on hand.
    if quantity > 0:
        return total / quantity
    return ZERO
