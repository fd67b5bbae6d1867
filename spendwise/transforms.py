from collections import defaultdict
from datetime import date
from functools import reduce
from typing import Dict, Iterable, Optional, Tuple

from spendwise.dates import month_key, month_label, parse_expense_date, previous_month
from spendwise.domain import Category, Expense
from spendwise.filters import by_month


def add_expense(
    expenses: Tuple[Expense, ...], e: Expense
) -> Tuple[Expense, ...]:
    return expenses + (e,)


def delete_expense(
    expenses: Tuple[Expense, ...], expense_id: int
) -> Tuple[Expense, ...]:
    return tuple(filter(lambda e: e.id != expense_id, expenses))


def next_expense_id(expenses: Tuple[Expense, ...], now_ms: int) -> int:
    """Creation timestamp, bumped past the newest id when the clock hasn't moved on."""
    last = max((e.id for e in expenses), default=0)
    return max(now_ms, last + 1)


def total_spent(expenses: Iterable[Expense]) -> float:
    return reduce(lambda acc, e: acc + e.amount, expenses, 0.0)


def month_total(expenses: Iterable[Expense], year: int, month: int) -> float:
    return total_spent(filter(by_month(year, month), expenses))


def current_month_total(expenses: Iterable[Expense], today: date) -> float:
    return month_total(expenses, today.year, today.month)


def previous_month_total(expenses: Iterable[Expense], today: date) -> float:
    year, month = previous_month(*month_key(today))
    return month_total(expenses, year, month)


def category_totals(expenses: Iterable[Expense]) -> Dict[Category, float]:
    totals: Dict[Category, float] = defaultdict(float)
    for e in expenses:
        totals[e.category] += e.amount
    return dict(totals)


def highest_expense(expenses: Tuple[Expense, ...]) -> Optional[Expense]:
    # max() keeps the first of equal amounts, i.e. the earliest inserted
    return max(expenses, key=lambda e: e.amount, default=None)


def distinct_spending_days(expenses: Iterable[Expense]) -> int:
    return len({e.date for e in expenses})


def average_per_spending_day(expenses: Tuple[Expense, ...]) -> Optional[float]:
    days = distinct_spending_days(expenses)
    if days == 0:
        return None
    return total_spent(expenses) / days


def totals_by_month(expenses: Iterable[Expense]) -> Dict[str, float]:
    """Spend per "YYYY-MM", oldest first. Expenses with unreadable dates are left out."""
    monthly: Dict[str, float] = defaultdict(float)
    for e in expenses:
        d = parse_expense_date(e.date)
        if d is None:
            continue
        monthly[month_label(d.year, d.month)] += e.amount
    return dict(sorted(monthly.items()))
