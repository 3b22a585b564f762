"""Domain models and compute engines for stockbook.

This package holds the in-memory (Pydantic) models for stock movements and
ledger transactions together with the engines that value stock and run ledger
balances. They are independent from persistence models so that the math can be
tested without DB coupling.
"""

__all__ = [
    "errors",
    "ledger",
    "movements",
    "ordering",
    "periods",
    "valuation",
]
