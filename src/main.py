from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, time, timezone
from pathlib import Path
from typing import Sequence

from sqlalchemy.orm import Session

from config import AppSettings, config
from db.db import init_db
from db.repositories import (
    AccountRepository,
    LedgerTransactionRepository,
    ProductRepository,
    StockMovementRepository,
)
from domain.errors import OrderingError
from domain.ledger import AccountOpeningState
from domain.periods import Granularity
from domain.valuation import ValuationEngine
from importers.movements_csv import load_movements, load_product_names
from importers.transactions_csv import load_opening_states, load_transactions
from utils.csv_export import write_ledger_csv, write_stock_csv
from utils.ledger_statement import build_ledger_statement, render_ledger_statement
from utils.stock_summary import compute_stock_valuation, render_stock_valuation

logger = logging.getLogger(__name__)


def import_movements(session: Session, csv_path: Path) -> int:
    movements = load_movements(csv_path)
    names = load_product_names(csv_path)
    product_repository = ProductRepository(session)
    movement_repository = StockMovementRepository(session)
    for product_id, product_movements in movements.items():
        product_repository.upsert(product_id, names.get(product_id))
        movement_repository.create_many(product_id, product_movements)
    return sum(len(items) for items in movements.values())


def import_transactions(session: Session, csv_path: Path) -> int:
    transactions = load_transactions(csv_path)
    repository = LedgerTransactionRepository(session)
    for account_id, account_transactions in transactions.items():
        repository.create_many(account_id, account_transactions)
    return sum(len(items) for items in transactions.values())


def import_accounts(session: Session, csv_path: Path) -> int:
    accounts = load_opening_states(csv_path)
    repository = AccountRepository(session)
    for account_id, (name, state) in accounts.items():
        repository.upsert(account_id, name, state)
    return len(accounts)


def run_stock(session: Session, settings: AppSettings, *, csv_out: Path | None) -> None:
    movement_repository = StockMovementRepository(session)
    movements_by_product = {
        product_id: movement_repository.list_for_product(product_id)
        for product_id in movement_repository.product_ids()
    }
    report = compute_stock_valuation(
        movements_by_product,
        ProductRepository(session).names(),
        engine=ValuationEngine(precision=settings.decimal_precision),
    )
    if csv_out is not None:
        with csv_out.open("w", encoding="utf-8", newline="") as handle:
            write_stock_csv(report, handle)
        logger.info("Wrote stock valuation for %d products to %s", len(report.lines), csv_out)
    render_stock_valuation(report, places=settings.display_places)


def run_ledger(
    session: Session,
    settings: AppSettings,
    *,
    account_id: str,
    start: datetime | None,
    end: datetime | None,
    period: Granularity,
    csv_out: Path | None,
) -> None:
    account_repository = AccountRepository(session)
    state = account_repository.get_opening_state(account_id) or AccountOpeningState()
    transactions = LedgerTransactionRepository(session).list_for_account(account_id, end=end)

    statement = build_ledger_statement(
        state,
        transactions,
        start=start,
        end=end,
        period=period,
        check_order=settings.check_ordering,
    )
    if csv_out is not None:
        with csv_out.open("w", encoding="utf-8", newline="") as handle:
            write_ledger_csv(statement, handle)
        logger.info("Wrote %d ledger rows to %s", len(statement.rows), csv_out)
    title = account_repository.get_name(account_id) or account_id
    render_ledger_statement(statement, title=f"Ledger for {title}", places=settings.display_places)


def _parse_day(raw: str, *, end_of_day: bool = False) -> datetime:
    parsed = datetime.fromisoformat(raw)
    if len(raw) == 10 and end_of_day:
        parsed = datetime.combine(parsed.date(), time.max)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stock valuation and ledger statements.")
    parser.add_argument("--database-url", default=None, help="Overrides STOCKBOOK_DATABASE_URL.")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first.")
    commands = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("import-movements", "Import stock movements from CSV."),
        ("import-transactions", "Import ledger transactions from CSV."),
        ("import-accounts", "Import account opening balances from CSV."),
    ):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("csv", type=Path)

    stock = commands.add_parser("stock", help="Print the stock valuation of every product.")
    stock.add_argument("--csv", type=Path, default=None, dest="csv_out")

    ledger = commands.add_parser("ledger", help="Print an account statement.")
    ledger.add_argument("--account", required=True)
    ledger.add_argument("--from", dest="start", default=None, help="YYYY-MM-DD or ISO timestamp.")
    ledger.add_argument("--to", dest="end", default=None, help="YYYY-MM-DD (inclusive) or ISO timestamp.")
    ledger.add_argument("--period", choices=[g.value for g in Granularity], default=None)
    ledger.add_argument("--csv", type=Path, default=None, dest="csv_out")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = config()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    session = init_db(args.database_url or settings.database_url, reset=args.reset)
    try:
        if args.command == "import-movements":
            print(f"Imported {import_movements(session, args.csv)} movements from {args.csv}")
        elif args.command == "import-transactions":
            print(f"Imported {import_transactions(session, args.csv)} transactions from {args.csv}")
        elif args.command == "import-accounts":
            print(f"Imported {import_accounts(session, args.csv)} accounts from {args.csv}")
        elif args.command == "stock":
            run_stock(session, settings, csv_out=args.csv_out)
        elif args.command == "ledger":
            run_ledger(
                session,
                settings,
                account_id=args.account,
                start=_parse_day(args.start) if args.start else None,
                end=_parse_day(args.end, end_of_day=True) if args.end else None,
                period=Granularity(args.period or settings.default_period),
                csv_out=args.csv_out,
            )
    except (ValueError, OrderingError) as err:
        logger.error("Could not compute %s: %s", args.command, err)
        print(f"Could not compute {args.command}: {err}", file=sys.stderr)
        return 1
    finally:
        session.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
