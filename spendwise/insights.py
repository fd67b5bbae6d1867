"""Rule-based spending insights.

Each rule looks at the aggregates gathered so far (a plain dict, see
``spendwise.services``) and returns zero or more messages. ``generate_insights``
runs the rules in a fixed order and concatenates what they say.
"""

from typing import Callable, Dict, List, Optional, Sequence

from spendwise.formatting import format_inr, format_percent

Rule = Callable[[Dict], List[str]]


def income_rule(acc: Dict) -> List[str]:
    income = acc.get("income", 0.0)
    if income <= 0:
        return []

    monthly_total = acc["monthly_total"]
    savings_rate = round((income - monthly_total) / income * 100, 1)
    spending_ratio = monthly_total / income * 100

    messages = []
    if monthly_total > income:
        messages.append("⚠️ Warning: You're spending more than your income this month!")
    elif savings_rate > 20:
        messages.append(f"🎯 Great job! You're saving {format_percent(savings_rate)} of your income.")
    messages.append(f"💰 You've spent {format_percent(spending_ratio)} of your monthly income.")
    return messages


def trend_rule(acc: Dict) -> List[str]:
    previous = acc.get("previous_month_total", 0.0)
    if previous <= 0:
        return []

    change = round((acc["monthly_total"] - previous) / previous * 100, 1)
    if change > 0:
        return [f"📈 Your spending this month is up {format_percent(change)} compared to last month."]
    if change < 0:
        return [f"📉 Your spending this month is down {format_percent(abs(change))} compared to last month."]
    return []


def top_category_rule(acc: Dict) -> List[str]:
    totals = acc.get("category_totals", {})
    top = acc.get("top_category")
    if len(totals) <= 1 or top is None:
        return []
    return [f"💡 Your highest spending category is {top.label} at {format_inr(totals[top])}."]


def daily_average_rule(acc: Dict) -> List[str]:
    average = acc.get("average_per_day")
    if average is None:
        return []
    return [f"📊 On average, you spend {format_inr(average)} per day of spending."]


INSIGHT_RULES: Sequence[Rule] = (
    income_rule,
    trend_rule,
    top_category_rule,
    daily_average_rule,
)


def generate_insights(acc: Dict, rules: Sequence[Rule] = INSIGHT_RULES) -> List[str]:
    insights: List[str] = []
    for rule in rules:
        insights.extend(rule(acc))
    return insights


def budget_warning(monthly_total: float, income: float, ratio: float = 0.8) -> Optional[str]:
    """Warning shown while this month's spend is above ``ratio`` of income; None clears it."""
    if income <= 0:
        return None
    limit = income * ratio
    if monthly_total > limit:
        return (
            f"⚠️ You've exceeded the recommended spending limit of {format_inr(limit)} "
            f"({ratio * 100:.0f}% of income)!"
        )
    return None
