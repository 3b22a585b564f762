from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count
from random import Random
from typing import Any, Callable

from domain.ledger import LedgerTransaction
from domain.movements import MovementType, StockMovement


@dataclass
class TimeGenerator:
    """Deterministic timestamp generator with random-ish gaps."""

    _current: datetime | None = None
    _rng: Random = Random(0)
    _seed: int = 0

    def __call__(self) -> datetime:
        return self.next()

    def next(self) -> datetime:
        if self._current is None:
            self._current = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._current += timedelta(seconds=self._rng.randint(5, 60))
        return self._current

    def reset(self) -> None:
        self._current = None
        self._rng = Random(self._seed)


DEFAULT_TIME_GEN = TimeGenerator()
_SEQUENCE = count()


def _resolve_timestamp(timestamp: datetime | None, ts_gen: Callable[[], datetime] | None) -> datetime:
    if timestamp is not None:
        return timestamp
    if ts_gen is None:
        ts_gen = DEFAULT_TIME_GEN
    return ts_gen()


def make_movement(
    movement_type: MovementType,
    quantity: Decimal | str | int,
    unit_rate: Decimal | str | int | None = None,
    *,
    timestamp: datetime | None = None,
    ts_gen: Callable[[], datetime] | None = None,
    sequence: int | None = None,
) -> StockMovement:
    """Helper to create a StockMovement with an auto-generated timestamp."""
    return StockMovement(
        movement_type=movement_type,
        occurred_at=_resolve_timestamp(timestamp, ts_gen),
        quantity=Decimal(quantity),
        unit_rate=None if unit_rate is None else Decimal(unit_rate),
        sequence=next(_SEQUENCE) if sequence is None else sequence,
    )


def make_transaction(
    *,
    debit: Decimal | str | int = 0,
    credit: Decimal | str | int = 0,
    timestamp: datetime | None = None,
    ts_gen: Callable[[], datetime] | None = None,
    voucher_ref: str | None = None,
    narrative: str | None = None,
    extra: dict[str, Any] | None = None,
    sequence: int | None = None,
) -> LedgerTransaction:
    """Helper to create a LedgerTransaction with an auto-generated timestamp."""
    return LedgerTransaction(
        occurred_at=_resolve_timestamp(timestamp, ts_gen),
        voucher_ref=voucher_ref,
        narrative=narrative,
        debit_amount=Decimal(debit),
        credit_amount=Decimal(credit),
        extra=extra or {},
        sequence=next(_SEQUENCE) if sequence is None else sequence,
    )
