from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from pathlib import Path

from domain.movements import MovementType, StockMovement

from .common import parse_decimal, parse_timestamp, read_rows

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"product_id", "type", "date"}


def load_movements(csv_path: Path) -> dict[str, list[StockMovement]]:
    """Load stock movements grouped by product.

    Each row should contain: product_id,type,date[,qty][,rate][,sell_rate][,note][,product_name]
    `avg_cost` is accepted in place of `rate` (opening stock sheets use it).
    The row position becomes the movement sequence so same-day rows keep file order.
    """
    movements: dict[str, list[StockMovement]] = defaultdict(list)
    for index, row in enumerate(read_rows(csv_path, required=REQUIRED_COLUMNS, label="Movements")):
        product_id = row["product_id"]
        if not product_id:
            raise ValueError(f"Movements CSV {csv_path} row {index + 1} has no product_id")

        rate_raw = row.get("rate") or row.get("avg_cost") or ""
        movements[product_id].append(
            StockMovement(
                movement_type=MovementType(row["type"].upper()),
                occurred_at=parse_timestamp(row["date"]),
                quantity=parse_decimal(row.get("qty", ""), field="qty", default=Decimal(0)),
                unit_rate=parse_decimal(rate_raw, field="rate"),
                sell_rate=parse_decimal(row.get("sell_rate", ""), field="sell_rate"),
                sequence=index,
                note=row.get("note") or None,
            )
        )

    logger.info(
        "Loaded %d movements for %d products from %s",
        sum(len(items) for items in movements.values()),
        len(movements),
        csv_path,
    )
    return dict(movements)


def load_product_names(csv_path: Path) -> dict[str, str]:
    names: dict[str, str] = {}
    for row in read_rows(csv_path, required=REQUIRED_COLUMNS, label="Movements"):
        name = row.get("product_name", "")
        if name:
            names[row["product_id"]] = name
    return names
