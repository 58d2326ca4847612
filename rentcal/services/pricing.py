"""Invoice arithmetic: days x daily rate, plus a fixed tax."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta

from rentcal.models.interval import DateRange, length_in_days
from rentcal.utils.constants import TAX_RATE


@dataclass(frozen=True)
class PriceBreakdown:
    days: int
    subtotal: float
    tax: float
    total: float


def round2(x: float) -> float:
    return round(float(x), 2)


def _is_valid_amount(x) -> bool:
    """Finite, non-negative number (bools are not amounts)."""
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        return False
    return math.isfinite(x) and x >= 0


def _fallback_amount(daily_rate) -> float:
    return float(daily_rate) if _is_valid_amount(daily_rate) else 0.0


def price(r: DateRange, daily_rate, tax_rate: float = TAX_RATE) -> PriceBreakdown:
    """
    Price a range at a flat daily rate.

    When the rate is unusable (NaN, infinite, negative, not a number) or the
    result is not finite, the invoice degrades to a flat one-time charge:
    subtotal == total == the rate itself when it is a valid amount, else 0,
    and no tax. A finite negative rate is charged 0.0, so the price is never
    negative. The invoice never shows NaN.

    Subtotal and tax are rounded to cents first and the total is their sum,
    so total == subtotal + tax holds on the rounded figures.
    """
    days = length_in_days(r)
    if _is_valid_amount(daily_rate):
        subtotal = days * float(daily_rate)
        tax = subtotal * tax_rate
        total = subtotal + tax
        if all(math.isfinite(v) for v in (subtotal, tax, total)):
            subtotal, tax = round2(subtotal), round2(tax)
            return PriceBreakdown(days, subtotal, tax, round2(subtotal + tax))

    flat = _fallback_amount(daily_rate)
    return PriceBreakdown(days, flat, 0.0, flat)


def split_total(r: DateRange, total, tax_rate: float = TAX_RATE, tax=None) -> PriceBreakdown:
    """
    Break a stored tax-inclusive total back into subtotal and tax.
    When the stored tax share is known it is used as is (a flat charge has
    none); otherwise the total is assumed to include tax at ``tax_rate``.
    """
    days = length_in_days(r)
    if not _is_valid_amount(total):
        return PriceBreakdown(days, 0.0, 0.0, 0.0)
    if _is_valid_amount(tax) and tax <= total:
        return PriceBreakdown(days, round2(total - tax), round2(tax), round2(total))
    subtotal = round2(total / (1 + tax_rate))
    return PriceBreakdown(days, subtotal, round2(total - subtotal), round2(total))


def quote_for_days(today: date, days: int, daily_rate, tax_rate: float = TAX_RATE):
    """
    Quote a rental that starts today and runs ``days`` days.
    Returns (range, breakdown).
    """
    days = max(1, int(days))
    r = DateRange(today, today + timedelta(days=days))
    return r, price(r, daily_rate, tax_rate)


def format_invoice_id(reservation_id: str) -> str:
    """Ids that already carry a dash (uuid) are shown as is; others get INV-."""
    if "-" in reservation_id:
        return reservation_id.upper()
    return f"INV-{reservation_id}".upper()
