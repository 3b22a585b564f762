from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


class DecimalAsString(TypeDecorator):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: object) -> str | None:
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value: str | None, dialect: object) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)


class Base(DeclarativeBase):
    pass


class ProductOrm(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)

    movements: Mapped[list["StockMovementOrm"]] = relationship(
        cascade="all, delete-orphan", back_populates="product"
    )


class StockMovementOrm(Base):
    __tablename__ = "stock_movements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[str] = mapped_column(String, ForeignKey("products.id"), nullable=False, index=True)
    movement_type: Mapped[str] = mapped_column(String, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    unit_rate: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    sell_rate: Mapped[Decimal | None] = mapped_column(DecimalAsString, nullable=True)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    note: Mapped[str | None] = mapped_column(String, nullable=True)

    product: Mapped[ProductOrm] = relationship(back_populates="movements")


class AccountOrm(Base):
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    opening_balance: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False, default=Decimal(0))
    opening_is_debit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    transactions: Mapped[list["LedgerTransactionOrm"]] = relationship(
        cascade="all, delete-orphan", back_populates="account"
    )


class LedgerTransactionOrm(Base):
    __tablename__ = "ledger_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(String, ForeignKey("accounts.id"), nullable=False, index=True)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    voucher_ref: Mapped[str | None] = mapped_column(String, nullable=True)
    narrative: Mapped[str | None] = mapped_column(String, nullable=True)
    debit_amount: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    credit_amount: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    extra: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    account: Mapped[AccountOrm] = relationship(back_populates="transactions")
