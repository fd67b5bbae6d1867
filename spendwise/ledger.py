import logging
import math
import time
from datetime import date
from typing import Any, Callable, List, Optional, Tuple

from spendwise.domain import Expense, LedgerSummary
from spendwise.events import (
    EXPENSE_ADDED,
    EXPENSE_DELETED,
    INCOME_UPDATED,
    LEDGER_RESET,
    EventBus,
    register_default_handlers,
)
from spendwise.formatting import CURRENCY_CODE
from spendwise.functional import (
    INVALID_AMOUNT_MESSAGE,
    Either,
    Left,
    Right,
    validate_expense_input,
    validate_income,
)
from spendwise.services import SummaryService
from spendwise.store import (
    KeyValueStore,
    clear_ledger,
    load_expenses,
    load_income,
    save_expenses,
    save_income,
    stash_amount_to_convert,
)
from spendwise.transforms import add_expense, delete_expense, next_expense_id, total_spent

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class LedgerService:
    """Owns the expense ledger and the monthly income.

    State is loaded from the store once, and every mutation writes the full
    snapshot back, publishes an event and returns the freshly recomputed
    summary.
    """

    def __init__(
        self,
        store: KeyValueStore,
        summary_service: Optional[SummaryService] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], int] = _now_ms,
        today: Callable[[], date] = date.today,
        handoff_currency: str = CURRENCY_CODE,
    ):
        self.store = store
        self.summary_service = summary_service or SummaryService()
        self.bus = bus if bus is not None else register_default_handlers(EventBus())
        self._clock = clock
        self._today = today
        self.handoff_currency = handoff_currency

        self.expenses: Tuple[Expense, ...] = load_expenses(store)
        self.income: float = load_income(store)
        self.notices: List[dict] = []
        logger.info("Loaded %d expenses, monthly income %.2f", len(self.expenses), self.income)

    def summary(self, today: Optional[date] = None) -> LedgerSummary:
        return self.summary_service.summarize(self.expenses, self.income, today or self._today())

    def expenses_newest_first(self) -> Tuple[Expense, ...]:
        return tuple(reversed(self.expenses))

    def _changed(self, event: str, **payload: Any) -> LedgerSummary:
        summary = self.summary()
        results = self.bus.publish(event, {"summary": summary, **payload})
        self.notices = [r for r in results if r]
        return summary

    def add_expense(self, name: Any, amount: Any, category: Any, on: Optional[date] = None) -> Either[dict, LedgerSummary]:
        checked = validate_expense_input(name, amount, category)
        if checked.is_left():
            logger.info("Rejected expense: %s", checked.get_error()["error"])
            return Left(checked.get_error())

        clean_name, value, cat = checked.get_or_else(None)
        if not math.isfinite(total_spent(self.expenses) + value):
            logger.info("Rejected expense: total would overflow")
            return Left({"error": "invalid_amount", "message": INVALID_AMOUNT_MESSAGE, "amount": amount})

        expense = Expense(
            id=next_expense_id(self.expenses, self._clock()),
            name=clean_name,
            amount=value,
            category=cat,
            date=(on or self._today()).isoformat(),
        )
        self.expenses = add_expense(self.expenses, expense)
        save_expenses(self.store, self.expenses)
        logger.debug("Added expense %s (%s %.2f)", expense.id, cat.value, value)
        return Right(self._changed(EXPENSE_ADDED, expense=expense))

    def delete_expense(self, expense_id: int) -> LedgerSummary:
        remaining = delete_expense(self.expenses, expense_id)
        if len(remaining) == len(self.expenses):
            logger.debug("No expense with id %s, nothing deleted", expense_id)
            return self.summary()
        self.expenses = remaining
        save_expenses(self.store, self.expenses)
        return self._changed(EXPENSE_DELETED, expense_id=expense_id)

    def set_income(self, raw: Any) -> Either[dict, LedgerSummary]:
        checked = validate_income(raw)
        if checked.is_left():
            return Left(checked.get_error())
        self.income = checked.get_or_else(0.0)
        save_income(self.store, self.income)
        return Right(self._changed(INCOME_UPDATED, income=self.income))

    def reset(self) -> LedgerSummary:
        """Wipe the ledger and the income, in memory and in the store."""
        self.expenses = ()
        self.income = 0.0
        clear_ledger(self.store)
        logger.info("Ledger reset")
        return self._changed(LEDGER_RESET)

    def prepare_conversion_handoff(self) -> Tuple[float, str]:
        """Leave the current total for the converter page; returns (amount, source currency)."""
        total = total_spent(self.expenses)
        stash_amount_to_convert(self.store, total)
        return total, self.handoff_currency
