from datetime import date

from spendwise.dates import parse_expense_date
from spendwise.domain import Category, Expense


def by_category(category: Category):
    def _filter(e: Expense) -> bool:
        return e.category == category

    return _filter


def by_month(year: int, month: int):
    """Match expenses dated in the given calendar month; unreadable dates never match."""
    def _filter(e: Expense) -> bool:
        d = parse_expense_date(e.date)
        return d is not None and d.year == year and d.month == month

    return _filter


def by_date_range(start: date, end: date):
    def _filter(e: Expense) -> bool:
        d = parse_expense_date(e.date)
        return d is not None and start <= d <= end

    return _filter

