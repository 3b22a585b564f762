from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from pydantic import ValidationError

from domain.movements import MovementType
from domain.valuation import ValuationEngine
from importers.movements_csv import load_movements, load_product_names
from importers.transactions_csv import load_opening_states, load_transactions


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_load_movements_groups_by_product(tmp_path: Path) -> None:
    csv_path = _write(
        tmp_path,
        "movements.csv",
        "product_id,product_name,type,date,qty,rate,sell_rate,note\n"
        "w1,Widget,opening,2025-01-01,100,10,,legacy stock\n"
        "w1,Widget,Purchase,2025-01-05,50,12,,\n"
        "g1,Gadget,purchase,2025-01-05T10:30:00+02:00,5,3,,\n"
        "w1,Widget,SALE,2025-01-06,60,,15,\n",
    )

    movements = load_movements(csv_path)

    assert set(movements) == {"w1", "g1"}
    widget = movements["w1"]
    assert [m.movement_type for m in widget] == [MovementType.OPENING, MovementType.PURCHASE, MovementType.SALE]
    assert widget[0].note == "legacy stock"
    assert widget[0].occurred_at == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert widget[2].unit_rate is None
    assert widget[2].sell_rate == Decimal(15)
    assert [m.sequence for m in widget] == [0, 1, 3]

    gadget = movements["g1"][0]
    assert gadget.occurred_at == datetime(2025, 1, 5, 8, 30, tzinfo=timezone.utc)

    summary = ValuationEngine().process(widget).rounded(3)
    assert summary.total_value == Decimal("960.000")

    assert load_product_names(csv_path) == {"w1": "Widget", "g1": "Gadget"}


def test_opening_sheet_avg_cost_column(tmp_path: Path) -> None:
    csv_path = _write(
        tmp_path,
        "opening.csv",
        "product_id,type,date,qty,avg_cost\n" "w1,opening,2025-01-01,8,2.5\n" "w1,opening,2025-01-01,2,\n",
    )

    widget = load_movements(csv_path)["w1"]

    assert widget[0].unit_rate == Decimal("2.5")
    assert widget[1].unit_rate is None


def test_load_movements_requires_columns(tmp_path: Path) -> None:
    csv_path = _write(tmp_path, "bad.csv", "product_id,qty\nw1,1\n")

    with pytest.raises(ValueError, match="missing required columns: date, type"):
        load_movements(csv_path)


def test_load_movements_rejects_negative_quantity(tmp_path: Path) -> None:
    csv_path = _write(tmp_path, "neg.csv", "product_id,type,date,qty\nw1,sale,2025-01-01,-4\n")

    with pytest.raises(ValidationError):
        load_movements(csv_path)


def test_load_movements_rejects_unknown_type(tmp_path: Path) -> None:
    csv_path = _write(tmp_path, "type.csv", "product_id,type,date,qty\nw1,gift,2025-01-01,1\n")

    with pytest.raises(ValueError):
        load_movements(csv_path)


def test_load_transactions_keeps_custom_columns(tmp_path: Path) -> None:
    csv_path = _write(
        tmp_path,
        "transactions.csv",
        "account_id,date,voucher_no,description,debit,credit,truck\n"
        'cash,2025-01-01,V1,Opening float,"1,500.00",,\n'
        "cash,2025-01-02,,Diesel,,80.25,T-9\n"
        "bank,2025-01-02,B7,Deposit,1500,,\n",
    )

    transactions = load_transactions(csv_path)

    cash = transactions["cash"]
    assert cash[0].debit_amount == Decimal("1500.00")
    assert cash[0].credit_amount == Decimal(0)
    assert cash[0].voucher_ref == "V1"
    assert cash[1].voucher_ref is None
    assert cash[1].credit_amount == Decimal("80.25")
    assert cash[1].extra == {"truck": "T-9"}
    assert [tx.sequence for tx in cash] == [0, 1]
    assert transactions["bank"][0].narrative == "Deposit"


def test_load_transactions_rejects_bad_amount(tmp_path: Path) -> None:
    csv_path = _write(tmp_path, "bad.csv", "account_id,date,debit\ncash,2025-01-01,abc\n")

    with pytest.raises(ValueError, match="Invalid debit value"):
        load_transactions(csv_path)


def test_load_opening_states(tmp_path: Path) -> None:
    csv_path = _write(
        tmp_path,
        "accounts.csv",
        "account_id,name,opening_balance,opening_is_debit\n"
        "cash,Cash in hand,500000,true\n"
        "acme,ACME Supplies,1200,cr\n"
        "bank,,,\n",
    )

    accounts = load_opening_states(csv_path)

    name, cash = accounts["cash"]
    assert name == "Cash in hand"
    assert cash.signed_opening == Decimal(500_000)
    assert accounts["acme"][1].signed_opening == Decimal(-1_200)
    assert accounts["bank"][0] == "bank"
    assert accounts["bank"][1].signed_opening == Decimal(0)
