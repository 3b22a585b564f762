from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from pathlib import Path

from domain.ledger import AccountOpeningState, LedgerTransaction

from .common import parse_bool, parse_decimal, parse_timestamp, read_rows

logger = logging.getLogger(__name__)

TRANSACTION_COLUMNS = {"account_id", "date"}
_KNOWN_TRANSACTION_COLUMNS = TRANSACTION_COLUMNS | {"voucher_no", "description", "debit", "credit"}
ACCOUNT_COLUMNS = {"account_id", "name"}


def load_transactions(csv_path: Path) -> dict[str, list[LedgerTransaction]]:
    """Load ledger transactions grouped by account.

    Each row should contain: account_id,date[,voucher_no][,description][,debit][,credit]
    Any other column is kept on the transaction as a custom field.
    """
    transactions: dict[str, list[LedgerTransaction]] = defaultdict(list)
    for index, row in enumerate(read_rows(csv_path, required=TRANSACTION_COLUMNS, label="Transactions")):
        account_id = row["account_id"]
        if not account_id:
            raise ValueError(f"Transactions CSV {csv_path} row {index + 1} has no account_id")

        extra = {key: value for key, value in row.items() if key and key not in _KNOWN_TRANSACTION_COLUMNS}
        transactions[account_id].append(
            LedgerTransaction(
                occurred_at=parse_timestamp(row["date"]),
                voucher_ref=row.get("voucher_no") or None,
                narrative=row.get("description") or None,
                debit_amount=parse_decimal(row.get("debit", ""), field="debit", default=Decimal(0)),
                credit_amount=parse_decimal(row.get("credit", ""), field="credit", default=Decimal(0)),
                extra=extra,
                sequence=index,
            )
        )

    logger.info(
        "Loaded %d transactions for %d accounts from %s",
        sum(len(items) for items in transactions.values()),
        len(transactions),
        csv_path,
    )
    return dict(transactions)


def load_opening_states(csv_path: Path) -> dict[str, tuple[str, AccountOpeningState]]:
    """Each row should contain: account_id,name[,opening_balance][,opening_is_debit]"""
    accounts: dict[str, tuple[str, AccountOpeningState]] = {}
    for row in read_rows(csv_path, required=ACCOUNT_COLUMNS, label="Accounts"):
        state = AccountOpeningState(
            opening_balance=parse_decimal(row.get("opening_balance", ""), field="opening_balance", default=Decimal(0)),
            opening_is_debit=parse_bool(row.get("opening_is_debit", ""), default=True),
        )
        accounts[row["account_id"]] = (row["name"] or row["account_id"], state)
    return accounts
