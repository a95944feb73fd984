"""Rupee amounts in Indian-English words, for the 'Amount in Words' line."""
from __future__ import annotations
from decimal import Decimal, ROUND_FLOOR

ONES = [
    "Zero", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

# (divisor, name), largest first
SCALES = [
    (10_000_000, "Crore"),
    (100_000, "Lakh"),
    (1_000, "Thousand"),
]


def _words(n: int) -> str:
    if n < 20:
        return ONES[n]
    if n < 100:
        return TENS[n // 10] + (" " + ONES[n % 10] if n % 10 else "")
    if n < 1000:
        rest = n % 100
        return ONES[n // 100] + " Hundred" + (" and " + _words(rest) if rest else "")
    for divisor, name in SCALES:
        if n >= divisor:
            rest = n % divisor
            return _words(n // divisor) + " " + name + (" " + _words(rest) if rest else "")
    raise AssertionError("unreachable")


def amount_in_words(amount: Decimal | int) -> str:
    """
    Whole rupees of a non-negative amount in words; paise are dropped.

    >>> amount_in_words(1770)
    'One Thousand Seven Hundred and Seventy Rupees only'
    """
    value = Decimal(amount)
    if not value.is_finite() or value < 0:
        raise ValueError(f"Cannot spell amount {amount!r}")
    return _words(int(value.to_integral_value(rounding=ROUND_FLOOR))) + " Rupees only"
