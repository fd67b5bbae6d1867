import logging
from datetime import date
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from spendwise.domain import Expense, LedgerSummary
from spendwise.insights import budget_warning, generate_insights
from spendwise.lazy import top_category
from spendwise.transforms import (
    average_per_spending_day,
    category_totals,
    current_month_total,
    highest_expense,
    previous_month_total,
    total_spent,
)

logger = logging.getLogger(__name__)

Calculator = Callable[[Tuple[Expense, ...], date, Dict[str, Any]], Dict[str, Any]]


def calc_totals(expenses, today, acc):
    return {
        "total": total_spent(expenses),
        "monthly_total": current_month_total(expenses, today),
        "expense_count": len(expenses),
    }


def calc_previous_month(expenses, today, acc):
    return {"previous_month_total": previous_month_total(expenses, today)}


def calc_categories(expenses, today, acc):
    totals = category_totals(expenses)
    top = top_category(totals)
    share = None
    if top is not None and acc["total"] > 0:
        share = round(totals[top] / acc["total"] * 100, 1)
    return {"category_totals": totals, "top_category": top, "top_category_share": share}


def calc_highest(expenses, today, acc):
    return {"highest_expense": highest_expense(expenses)}


def calc_daily_average(expenses, today, acc):
    return {"average_per_day": average_per_spending_day(expenses)}


def calc_income_position(expenses, today, acc):
    income = acc.get("income", 0.0)
    if income <= 0:
        return {}
    monthly_total = acc["monthly_total"]
    return {
        "remaining": income - monthly_total,
        "savings_rate": round((income - monthly_total) / income * 100, 1),
        "spending_ratio": round(monthly_total / income * 100, 1),
    }


def calc_insights(expenses, today, acc):
    return {"insights": tuple(generate_insights(acc))}


DEFAULT_CALCULATORS: Sequence[Calculator] = (
    calc_totals,
    calc_previous_month,
    calc_categories,
    calc_highest,
    calc_daily_average,
    calc_income_position,
    calc_insights,
)


class SummaryService:
    """Recomputes every ledger aggregate from scratch.

    calculators: sequence of functions taking (expenses, today, acc) -> dict (partial results).
    Each calculator sees what the earlier ones produced through ``acc``; the
    merged result becomes a LedgerSummary.
    """

    def __init__(self, calculators: Sequence[Calculator] = DEFAULT_CALCULATORS, budget_ratio: float = 0.8):
        self.calculators = calculators
        self.budget_ratio = budget_ratio

    def report(self, expenses: Tuple[Expense, ...], income: float, today: Optional[date] = None) -> Dict[str, Any]:
        """Run the calculators and return the aggregates along with each intermediate step."""
        today = today or date.today()
        report = {"today": today, "steps": [], "result": {}}

        acc: Dict[str, Any] = {"income": income}
        for calc in self.calculators:
            out = calc(expenses, today, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        acc["budget_warning"] = budget_warning(acc.get("monthly_total", 0.0), income, self.budget_ratio)
        report["result"] = acc
        return report

    def summarize(self, expenses: Tuple[Expense, ...], income: float, today: Optional[date] = None) -> LedgerSummary:
        result = dict(self.report(expenses, income, today)["result"])
        result.pop("income", None)
        logger.debug(
            "Recomputed summary: %d expenses, total=%.2f, monthly=%.2f",
            result.get("expense_count", 0), result.get("total", 0.0), result.get("monthly_total", 0.0),
        )
        return LedgerSummary(**result)
