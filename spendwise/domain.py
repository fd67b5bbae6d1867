import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from spendwise.formatting import format_rate


class Category(str, Enum):
    FOOD = "Food"
    TRANSPORT = "Transport"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    OTHER = "Other"

    @property
    def icon(self) -> str:
        return CATEGORY_ICONS[self]

    @property
    def label(self) -> str:
        return f"{self.icon} {self.value}"


CATEGORY_ICONS = {
    Category.FOOD: "🍽️",
    Category.TRANSPORT: "🚗",
    Category.ENTERTAINMENT: "🎮",
    Category.SHOPPING: "🛍️",
    Category.BILLS: "📃",
    Category.OTHER: "📌",
}


@dataclass(frozen=True)
class Expense:
    id: int          # creation timestamp in ms
    name: str
    amount: float    # always > 0
    category: Category
    date: str        # ISO "YYYY-MM-DD"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "amount": self.amount,
            "category": self.category.value,
            "date": self.date,
        }

    @staticmethod
    def from_dict(d: dict) -> "Expense":
        amount = float(d["amount"])
        if not math.isfinite(amount):
            raise ValueError(f"amount {d['amount']!r} is not finite")
        return Expense(
            id=int(d["id"]),
            name=str(d["name"]),
            amount=amount,
            category=Category(d["category"]),
            date=str(d["date"]),
        )


@dataclass(frozen=True)
class LedgerSummary:
    """Every derived value of one recomputation over the ledger."""

    total: float = 0.0
    monthly_total: float = 0.0
    previous_month_total: float = 0.0
    category_totals: Dict[Category, float] = field(default_factory=dict)
    highest_expense: Optional[Expense] = None
    top_category: Optional[Category] = None
    top_category_share: Optional[float] = None   # percent of total
    remaining: Optional[float] = None            # None when no income is set
    savings_rate: Optional[float] = None
    spending_ratio: Optional[float] = None
    average_per_day: Optional[float] = None
    insights: Tuple[str, ...] = ()
    budget_warning: Optional[str] = None
    expense_count: int = 0


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    amount: float
    rate: float
    converted: float  # rounded to 2 places

    @property
    def rate_text(self) -> str:
        return f"1 {self.from_currency} = {format_rate(self.rate)} {self.to_currency}"

    @property
    def converted_text(self) -> str:
        return f"{self.converted:.2f}"


@dataclass(frozen=True)
class ConverterState:
    from_currency: str
    to_currency: str
    amount: str = ""  # raw text from the amount field
