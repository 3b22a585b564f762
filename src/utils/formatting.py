from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def format_decimal(value: Decimal) -> str:
    quantized = value.normalize()
    # Avoid scientific notation for integers.
    if quantized == quantized.to_integral():
        return f"{quantized:.0f}"
    return format(quantized, "f")


def format_currency(value: Decimal, places: int = 2) -> str:
    quantized = value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    return f"{quantized:,.{places}f}"


def format_balance(value: Decimal, places: int = 2) -> str:
    """Render a signed balance the way ledgers print it: `1,250.00 Dr` / `80.00 Cr`."""
    side = "Cr" if value < 0 else "Dr"
    return f"{format_currency(abs(value), places)} {side}"


def render_table(headers: list[str], rows: list[list[str]], *, left_aligned: int = 1) -> str:
    """Lay out a text table; the first `left_aligned` columns are left-justified."""
    widths = [len(header) for header in headers]
    for row in rows:
        for idx, cell in enumerate(row):
            widths[idx] = max(widths[idx], len(cell))

    def _line(cells: list[str]) -> str:
        return " ".join(
            f"{cell:<{widths[idx]}}" if idx < left_aligned else f"{cell:>{widths[idx]}}"
            for idx, cell in enumerate(cells)
        )

    header = _line(headers)
    lines = [header, "-" * len(header)]
    lines.extend(_line(row) for row in rows)
    return "\n".join(lines)
