"""Presentation helpers — the only place amounts are rounded."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

CENT = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Two-decimal amount with no grouping: Decimal("1234.5") → "1234.50"."""
    return f"{round_money(value):f}"


def format_money(value: Decimal, symbol: str = "€") -> str:
    return f"{symbol}{format_amount(value)}"


def format_date(value: Optional[date]) -> str:
    return value.isoformat() if value is not None else "Never"
