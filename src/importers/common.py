from __future__ import annotations

import csv
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterator


def read_rows(csv_path: Path, *, required: set[str], label: str) -> Iterator[dict[str, str]]:
    with csv_path.open(encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"{label} CSV {csv_path} is empty or missing headers")

        fieldnames = {name.strip() for name in reader.fieldnames}
        missing = required - fieldnames
        if missing:
            raise ValueError(f"{label} CSV {csv_path} missing required columns: {', '.join(sorted(missing))}")

        for row in reader:
            yield {(key or "").strip(): (value or "").strip() for key, value in row.items()}


def parse_timestamp(raw: str) -> datetime:
    """Parse `YYYY-MM-DD` or a full ISO 8601 timestamp; naive values are UTC."""
    if not raw:
        raise ValueError("Missing date")
    ts = datetime.fromisoformat(raw)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def parse_decimal(raw: str, *, field: str, default: Decimal | None = None) -> Decimal | None:
    if raw == "":
        return default
    try:
        return Decimal(raw.replace(",", ""))
    except InvalidOperation as err:
        raise ValueError(f"Invalid {field} value: {raw!r}") from err


def parse_bool(raw: str, *, default: bool) -> bool:
    if raw == "":
        return default
    value = raw.lower()
    if value in {"1", "true", "yes", "y", "dr", "debit"}:
        return True
    if value in {"0", "false", "no", "n", "cr", "credit"}:
        return False
    raise ValueError(f"Invalid boolean value: {raw!r}")
