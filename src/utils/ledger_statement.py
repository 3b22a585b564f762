from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from domain.ledger import (
    AccountOpeningState,
    LedgerTransaction,
    RunningLedgerRow,
    compose_opening_balance,
    compute_running_balances,
)
from domain.ordering import ensure_chronological, sort_chronologically
from domain.periods import Granularity, PeriodTotal, aggregate_periods

from .formatting import format_balance, format_currency, render_table


@dataclass
class LedgerStatement:
    period: Granularity
    opening: Decimal
    rows: list[RunningLedgerRow]
    totals: list[PeriodTotal]

    @property
    def closing(self) -> Decimal:
        if not self.rows:
            return self.opening
        return self.rows[-1].running_balance


def build_ledger_statement(
    state: AccountOpeningState,
    transactions: Iterable[LedgerTransaction],
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    period: Granularity = Granularity.DAY,
    check_order: bool = False,
) -> LedgerStatement:
    """Statement for one account over [start, end], either bound optional.

    Transactions before `start` roll into the opening balance so the window
    starts from the account's cumulative position. With `check_order` the
    caller's order is verified before the rows are sorted.
    """
    received = list(transactions)
    if check_order:
        ensure_chronological(received)
    ordered = sort_chronologically(received)
    opening = compose_opening_balance(state, ordered, start)
    in_window = [
        tx
        for tx in ordered
        if (start is None or tx.occurred_at >= start) and (end is None or tx.occurred_at <= end)
    ]

    rows = compute_running_balances(opening, in_window, check_order=check_order)
    totals = aggregate_periods(rows, period, check_order=check_order)
    return LedgerStatement(period=period, opening=opening, rows=rows, totals=totals)


def render_ledger_statement(statement: LedgerStatement, *, title: str = "Ledger", places: int = 2) -> None:
    print(f"{title}:")
    print(f"Opening balance: {format_balance(statement.opening, places)}")
    if not statement.rows:
        print("  (no transactions in range)")
        return

    rows = [
        [
            row.occurred_at.date().isoformat(),
            row.voucher_ref or "",
            row.narrative or "",
            format_currency(row.debit_amount, places) if row.debit_amount else "",
            format_currency(row.credit_amount, places) if row.credit_amount else "",
            format_balance(row.running_balance, places),
        ]
        for row in statement.rows
    ]
    print(render_table(["Date", "Voucher", "Description", "Debit", "Credit", "Balance"], rows, left_aligned=3))
    print()

    label = "Day" if statement.period is Granularity.DAY else "Month"
    total_rows = [
        [
            total.bucket_key,
            format_currency(total.debit_sum, places),
            format_currency(total.credit_sum, places),
            format_balance(total.closing_balance, places),
        ]
        for total in statement.totals
    ]
    print(render_table([label, "Debit", "Credit", "Closing"], total_rows))
    print(f"Closing balance: {format_balance(statement.closing, places)}")
