"""Display formatting for money, percentages and exchange rates."""

import math

CURRENCY_CODE = "INR"


def _group_indian(digits: str) -> str:
    # last three digits, then groups of two: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_inr(amount: float) -> str:
    """Format an amount as rupees with Indian digit grouping and two decimals.

    format_inr(123456.789) == "₹1,23,456.79"
    format_inr(-50) == "-₹50.00"
    format_inr(float("inf")) == "₹∞"
    """
    if math.isnan(amount):
        return "₹NaN"
    if math.isinf(amount):
        return "-₹∞" if amount < 0 else "₹∞"
    sign = "-" if amount < 0 and round(abs(amount), 2) != 0 else ""
    whole, frac = f"{abs(amount):.2f}".split(".")
    return f"{sign}₹{_group_indian(whole)}.{frac}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def format_rate(rate: float) -> str:
    """Show at least two decimals and up to six, so 83.1 -> "83.10" and 0.012 -> "0.012"."""
    text = f"{rate:.6f}".rstrip("0")
    whole, _, frac = text.partition(".")
    return f"{whole}.{frac.ljust(2, '0')}"
