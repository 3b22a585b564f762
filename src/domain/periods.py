from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Sequence

from pydantic import BaseModel, ConfigDict

from .ledger import RunningLedgerRow
from .ordering import ZERO, ensure_chronological


class Granularity(StrEnum):
    DAY = "day"
    MONTH = "month"

    def bucket_key(self, moment: datetime) -> str:
        if self is Granularity.DAY:
            return moment.strftime("%Y-%m-%d")
        return moment.strftime("%Y-%m")


class PeriodTotal(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket_key: str
    debit_sum: Decimal
    credit_sum: Decimal
    closing_balance: Decimal


def aggregate_periods(
    rows: Sequence[RunningLedgerRow],
    granularity: Granularity,
    *,
    check_order: bool = False,
) -> list[PeriodTotal]:
    """Per-bucket debit/credit totals and the balance standing at bucket end.

    Buckets come back in first-seen order. The closing balance is the running
    balance of the last row in the bucket, which is only meaningful for
    chronological input.
    """
    if check_order:
        ensure_chronological(rows)

    totals: dict[str, tuple[Decimal, Decimal, Decimal]] = {}
    for row in rows:
        key = granularity.bucket_key(row.occurred_at)
        debit_total, credit_total, _ = totals.get(key, (ZERO, ZERO, ZERO))
        totals[key] = (
            debit_total + row.debit_amount,
            credit_total + row.credit_amount,
            row.running_balance,
        )

    return [
        PeriodTotal(bucket_key=key, debit_sum=debit, credit_sum=credit, closing_balance=closing)
        for key, (debit, credit, closing) in totals.items()
    ]
