from datetime import date

import pytest

from spendwise.dates import month_label, parse_expense_date, previous_month
from spendwise.domain import Category
from spendwise.config import settings
from spendwise.formatting import CURRENCY_CODE, format_inr, format_percent


@pytest.mark.parametrize("amount, expected", [
    (0, "₹0.00"),
    (5, "₹5.00"),
    (999.999, "₹1,000.00"),
    (123456.789, "₹1,23,456.79"),
    (1234567, "₹12,34,567.00"),
    (-50, "-₹50.00"),
    (float("inf"), "₹∞"),
    (float("-inf"), "-₹∞"),
    (float("nan"), "₹NaN"),
])
def test_format_inr(amount, expected):
    assert format_inr(amount) == expected


def test_format_percent():
    assert format_percent(25) == "25.0%"
    assert format_percent(33.333) == "33.3%"


def test_parse_expense_date_formats():
    assert parse_expense_date("2026-10-19") == date(2026, 10, 19)
    assert parse_expense_date("3/7/2026") == date(2026, 3, 7)
    assert parse_expense_date("19.10.2026") is None
    assert parse_expense_date("") is None


def test_previous_month_rollover():
    assert previous_month(2026, 1) == (2025, 12)
    assert previous_month(2026, 10) == (2026, 9)
    assert month_label(2026, 3) == "2026-03"


def test_category_labels():
    assert Category.FOOD.label == "🍽️ Food"
    assert Category("Bills").icon == "📃"
    assert [c.value for c in Category] == [
        "Food", "Transport", "Entertainment", "Shopping", "Bills", "Other",
    ]


def test_amounts_are_always_rupees():
    assert CURRENCY_CODE == "INR"
    assert format_inr(1).startswith("₹")
    assert not hasattr(settings, "DISPLAY_CURRENCY")
