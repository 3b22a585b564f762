from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping

from domain.errors import IntegrityWarning
from domain.movements import StockMovement
from domain.valuation import ValuationEngine, ValuationSummary, find_integrity_warnings

from .formatting import format_currency, format_decimal, render_table

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown"


@dataclass
class StockValuationLine:
    product_id: str
    product_name: str
    summary: ValuationSummary

    @property
    def quantity(self) -> Decimal:
        return self.summary.quantity_on_hand

    @property
    def value(self) -> Decimal:
        return self.summary.total_value


@dataclass
class StockValuationReport:
    lines: list[StockValuationLine] = field(default_factory=list)
    warnings: list[IntegrityWarning] = field(default_factory=list)

    @property
    def total_value(self) -> Decimal:
        return sum((line.value for line in self.lines), start=Decimal(0))


def compute_stock_valuation(
    movements_by_product: Mapping[str, Iterable[StockMovement]],
    product_names: Mapping[str, str],
    *,
    engine: ValuationEngine,
) -> StockValuationReport:
    """Value every product that has movements, sorted by product name."""
    report = StockValuationReport()
    for product_id, movements in movements_by_product.items():
        movement_list = list(movements)
        if not movement_list:
            continue

        summary = engine.process(movement_list)
        warnings = find_integrity_warnings(product_id, summary)
        for warning in warnings:
            logger.warning("Product %s: %s", product_id, warning.message)
        report.warnings.extend(warnings)
        report.lines.append(
            StockValuationLine(
                product_id=product_id,
                product_name=product_names.get(product_id, UNKNOWN_PRODUCT),
                summary=summary,
            )
        )

    report.lines.sort(key=lambda line: (line.product_name.casefold(), line.product_id))
    return report


def render_stock_valuation(report: StockValuationReport, *, places: int = 2) -> None:
    print("Stock valuation (weighted average cost):")
    if not report.lines:
        print("  (no stock movements)")
        return

    rows = [
        [
            line.product_name,
            format_decimal(line.quantity),
            format_currency(line.summary.average_unit_cost, places),
            format_currency(line.value, places),
        ]
        for line in report.lines
    ]
    table = render_table(["Product", "Quantity", "Avg cost", "Value"], rows)
    print(table)
    print("-" * len(table.splitlines()[0]))
    print(f"Total stock value: {format_currency(report.total_value, places)}")
    for warning in report.warnings:
        print(f"  ! {warning.product_id}: {warning.message}")
