from __future__ import annotations

import csv
from typing import Any, TextIO

from .ledger_statement import LedgerStatement
from .stock_summary import StockValuationReport


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _write(handle: TextIO, headers: list[str], rows: list[list[Any]]) -> None:
    writer = csv.writer(handle, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows([_cell(value) for value in row] for row in rows)


def write_ledger_csv(statement: LedgerStatement, handle: TextIO) -> None:
    """Write the statement rows, custom fields included, as fully quoted CSV."""
    extra_keys: list[str] = []
    for row in statement.rows:
        for key in row.extra:
            if key not in extra_keys:
                extra_keys.append(key)

    headers = ["Date", "Voucher", "Description", "Debit", "Credit", "Balance", *extra_keys]
    rows = [
        [
            row.occurred_at.date().isoformat(),
            row.voucher_ref,
            row.narrative,
            row.debit_amount,
            row.credit_amount,
            row.running_balance,
            *(row.extra.get(key) for key in extra_keys),
        ]
        for row in statement.rows
    ]
    _write(handle, headers, rows)


def write_stock_csv(report: StockValuationReport, handle: TextIO) -> None:
    headers = ["Product ID", "Product", "Quantity", "Average cost", "Value"]
    rows = [
        [
            line.product_id,
            line.product_name,
            line.quantity,
            line.summary.average_unit_cost,
            line.value,
        ]
        for line in report.lines
    ]
    _write(handle, headers, rows)
