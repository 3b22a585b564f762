from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .ordering import ZERO, ensure_chronological, require_finite


class LedgerTransaction(BaseModel):
    """One posting against an account.

    Debit/credit sign convention:
    - Debits increase the running balance.
    - Credits decrease it.
    """

    model_config = ConfigDict(frozen=True)

    occurred_at: datetime
    voucher_ref: str | None = None
    narrative: str | None = None
    debit_amount: Decimal = Field(default=ZERO, ge=0, allow_inf_nan=False)
    credit_amount: Decimal = Field(default=ZERO, ge=0, allow_inf_nan=False)
    extra: dict[str, Any] = Field(default_factory=dict)
    sequence: int = Field(default=0, ge=0)

    @property
    def net(self) -> Decimal:
        return self.debit_amount - self.credit_amount


class RunningLedgerRow(LedgerTransaction):
    running_balance: Decimal


class AccountOpeningState(BaseModel):
    model_config = ConfigDict(frozen=True)

    opening_balance: Decimal = Field(default=ZERO, ge=0, allow_inf_nan=False)
    opening_is_debit: bool = True

    @property
    def signed_opening(self) -> Decimal:
        return self.opening_balance if self.opening_is_debit else -self.opening_balance


def compose_opening_balance(
    state: AccountOpeningState,
    transactions: Iterable[LedgerTransaction],
    window_start: datetime | None,
) -> Decimal:
    """Balance the account carries into a window starting at `window_start`.

    Every transaction dated strictly before the window start is folded into the
    signed opening balance. Without a window start nothing precedes the window.
    """
    opening = state.signed_opening
    if window_start is None:
        return opening
    for tx in transactions:
        if tx.occurred_at < window_start:
            opening += tx.net
    return opening


def compute_running_balances(
    opening: Decimal | int,
    transactions: Sequence[LedgerTransaction],
    *,
    check_order: bool = False,
) -> list[RunningLedgerRow]:
    """Caller must provide one account's transactions in chronological order."""
    balance = require_finite(opening, name="opening")
    if check_order:
        ensure_chronological(transactions)

    rows: list[RunningLedgerRow] = []
    for tx in transactions:
        balance += tx.debit_amount - tx.credit_amount
        rows.append(RunningLedgerRow(**tx.model_dump(), running_balance=balance))
    return rows
