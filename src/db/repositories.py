from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db import models
from domain.ledger import AccountOpeningState, LedgerTransaction
from domain.movements import MovementType, StockMovement


def _to_utc(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp.astimezone(timezone.utc)


class ProductRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, product_id: str, name: str | None = None) -> None:
        orm_product = self._session.get(models.ProductOrm, product_id)
        if orm_product is None:
            self._session.add(models.ProductOrm(id=product_id, name=name or product_id))
        elif name:
            orm_product.name = name
        self._session.commit()

    def names(self) -> dict[str, str]:
        return {product.id: product.name for product in self._session.scalars(select(models.ProductOrm))}


class StockMovementRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_many(self, product_id: str, movements: Iterable[StockMovement]) -> None:
        """Append movements after everything already stored for the product.

        Incoming sequences are offset past the stored maximum so records from a
        later import sort after earlier ones sharing the same timestamp.
        """
        offset = self._next_sequence(product_id)
        if self._session.get(models.ProductOrm, product_id) is None:
            self._session.add(models.ProductOrm(id=product_id, name=product_id))
        self._session.add_all(
            models.StockMovementOrm(
                product_id=product_id,
                movement_type=movement.movement_type.value,
                occurred_at=_to_utc(movement.occurred_at),
                quantity=movement.quantity,
                unit_rate=movement.unit_rate,
                sell_rate=movement.sell_rate,
                sequence=offset + movement.sequence,
                note=movement.note,
            )
            for movement in movements
        )
        self._session.commit()

    def _next_sequence(self, product_id: str) -> int:
        table = models.StockMovementOrm
        current = self._session.scalar(select(func.max(table.sequence)).where(table.product_id == product_id))
        return 0 if current is None else current + 1

    def list_for_product(self, product_id: str) -> list[StockMovement]:
        stmt = (
            select(models.StockMovementOrm)
            .where(models.StockMovementOrm.product_id == product_id)
            .order_by(
                models.StockMovementOrm.occurred_at.asc(),
                models.StockMovementOrm.sequence.asc(),
                models.StockMovementOrm.id.asc(),
            )
        )
        return [self._to_domain(movement) for movement in self._session.scalars(stmt)]

    def product_ids(self) -> list[str]:
        stmt = select(models.StockMovementOrm.product_id).distinct().order_by(models.StockMovementOrm.product_id)
        return list(self._session.scalars(stmt))

    @staticmethod
    def _to_domain(orm_movement: models.StockMovementOrm) -> StockMovement:
        return StockMovement(
            movement_type=MovementType(orm_movement.movement_type),
            occurred_at=_to_utc(orm_movement.occurred_at),
            quantity=orm_movement.quantity,
            unit_rate=orm_movement.unit_rate,
            sell_rate=orm_movement.sell_rate,
            sequence=orm_movement.sequence,
            note=orm_movement.note,
        )


class AccountRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def upsert(self, account_id: str, name: str, state: AccountOpeningState) -> None:
        orm_account = self._session.get(models.AccountOrm, account_id)
        if orm_account is None:
            orm_account = models.AccountOrm(id=account_id)
            self._session.add(orm_account)
        orm_account.name = name
        orm_account.opening_balance = state.opening_balance
        orm_account.opening_is_debit = state.opening_is_debit
        self._session.commit()

    def get_opening_state(self, account_id: str) -> AccountOpeningState | None:
        orm_account = self._session.get(models.AccountOrm, account_id)
        if orm_account is None:
            return None
        return AccountOpeningState(
            opening_balance=orm_account.opening_balance,
            opening_is_debit=orm_account.opening_is_debit,
        )

    def get_name(self, account_id: str) -> str | None:
        orm_account = self._session.get(models.AccountOrm, account_id)
        return None if orm_account is None else orm_account.name


class LedgerTransactionRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_many(self, account_id: str, transactions: Iterable[LedgerTransaction]) -> None:
        """Append transactions after everything already stored for the account."""
        offset = self._next_sequence(account_id)
        if self._session.get(models.AccountOrm, account_id) is None:
            self._session.add(models.AccountOrm(id=account_id, name=account_id))
        self._session.add_all(
            models.LedgerTransactionOrm(
                account_id=account_id,
                occurred_at=_to_utc(tx.occurred_at),
                voucher_ref=tx.voucher_ref,
                narrative=tx.narrative,
                debit_amount=tx.debit_amount,
                credit_amount=tx.credit_amount,
                extra=dict(tx.extra),
                sequence=offset + tx.sequence,
            )
            for tx in transactions
        )
        self._session.commit()

    def list_for_account(
        self,
        account_id: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[LedgerTransaction]:
        """Transactions with start <= occurred_at <= end, oldest first."""
        table = models.LedgerTransactionOrm
        stmt = select(table).where(table.account_id == account_id)
        if start is not None:
            stmt = stmt.where(table.occurred_at >= _to_utc(start))
        if end is not None:
            stmt = stmt.where(table.occurred_at <= _to_utc(end))
        stmt = stmt.order_by(table.occurred_at.asc(), table.sequence.asc(), table.id.asc())
        return [self._to_domain(tx) for tx in self._session.scalars(stmt)]

    def _next_sequence(self, account_id: str) -> int:
        table = models.LedgerTransactionOrm
        current = self._session.scalar(select(func.max(table.sequence)).where(table.account_id == account_id))
        return 0 if current is None else current + 1

    @staticmethod
    def _to_domain(orm_tx: models.LedgerTransactionOrm) -> LedgerTransaction:
        return LedgerTransaction(
            occurred_at=_to_utc(orm_tx.occurred_at),
            voucher_ref=orm_tx.voucher_ref,
            narrative=orm_tx.narrative,
            debit_amount=orm_tx.debit_amount,
            credit_amount=orm_tx.credit_amount,
            extra=dict(orm_tx.extra or {}),
            sequence=orm_tx.sequence,
        )
