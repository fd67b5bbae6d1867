from datetime import date
from itertools import count

import pytest

from spendwise.domain import Category
from spendwise.events import RESET_NOTICE
from spendwise.formatting import CURRENCY_CODE
from spendwise.ledger import LedgerService
from spendwise.store import (
    EXPENSES_KEY,
    INCOME_KEY,
    JsonFileStore,
    MemoryStore,
    consume_amount_to_convert,
)

TODAY = date(2026, 10, 19)


def make_service(store=None):
    ticks = count(1_700_000_000_000)
    return LedgerService(
        store if store is not None else MemoryStore(),
        clock=lambda: next(ticks),
        today=lambda: TODAY,
    )


def test_add_expense_returns_summary_and_persists():
    svc = make_service()
    result = svc.add_expense("Lunch", "100", "Food")

    assert result.is_right()
    summary = result.get_or_else(None)
    assert summary.total == 100.0
    assert svc.expenses[0].name == "Lunch"
    assert svc.expenses[0].category == Category.FOOD
    assert svc.expenses[0].date == "2026-10-19"
    assert svc.store.get(EXPENSES_KEY) is not None


@pytest.mark.parametrize("bad_amount", [-5, "abc", "", 0, "nan", "inf", None])
def test_invalid_amount_is_rejected_without_mutation(bad_amount):
    svc = make_service()
    svc.add_expense("Coffee", 3.5, "Food")
    before = svc.expenses

    result = svc.add_expense("Bad", bad_amount, "Food")

    assert result.is_left()
    assert result.get_error()["error"] == "invalid_amount"
    assert result.get_error()["message"] == "Please enter a valid amount."
    assert svc.expenses == before


def test_expense_that_overflows_the_total_is_rejected():
    svc = make_service()
    assert svc.add_expense("Yacht", "1e308", "Shopping").is_right()

    result = svc.add_expense("Another yacht", "1e308", "Shopping")

    assert result.get_error()["error"] == "invalid_amount"
    assert len(svc.expenses) == 1
    assert svc.summary().total == 1e308


def test_invalid_name_and_category_are_rejected():
    svc = make_service()
    assert svc.add_expense("   ", 10, "Food").get_error()["error"] == "invalid_name"
    assert svc.add_expense("Gift", 10, "Travel").get_error()["error"] == "invalid_category"
    assert svc.expenses == ()


def test_ids_are_unique_and_ordered():
    svc = LedgerService(MemoryStore(), clock=lambda: 5, today=lambda: TODAY)
    for i in range(3):
        svc.add_expense(f"e{i}", 1, "Other")

    ids = [e.id for e in svc.expenses]
    assert ids == sorted(ids)
    assert len(set(ids)) == 3


def test_delete_expense_by_id():
    svc = make_service()
    svc.add_expense("A", 10, "Food")
    svc.add_expense("B", 20, "Bills")
    svc.add_expense("C", 30, "Shopping")
    target = svc.expenses[1].id

    summary = svc.delete_expense(target)

    assert [e.name for e in svc.expenses] == ["A", "C"]
    assert summary.total == 40.0
    assert Category.BILLS not in summary.category_totals


def test_delete_unknown_id_leaves_ledger_alone():
    svc = make_service()
    svc.add_expense("A", 10, "Food")
    before = svc.expenses

    summary = svc.delete_expense(12345)

    assert svc.expenses == before
    assert summary.total == 10.0


def test_expenses_newest_first():
    svc = make_service()
    svc.add_expense("first", 1, "Food")
    svc.add_expense("second", 2, "Food")
    assert [e.name for e in svc.expenses_newest_first()] == ["second", "first"]


def test_set_income_drives_income_insights():
    svc = make_service()
    svc.add_expense("Groceries", 100, "Food")
    svc.add_expense("Bus", 50, "Transport")

    result = svc.set_income("200")

    summary = result.get_or_else(None)
    assert svc.income == 200.0
    assert svc.store.get(INCOME_KEY) == "200.0"
    assert summary.remaining == 50.0
    assert "🎯 Great job! You're saving 25.0% of your income." in summary.insights
    assert summary.budget_warning is None


def test_set_income_rejects_non_positive_values():
    svc = make_service()
    assert svc.set_income("0").get_error()["error"] == "invalid_income"
    assert svc.set_income("lots").is_left()
    assert svc.income == 0.0


def test_budget_alert_notice_after_mutation():
    svc = make_service()
    svc.set_income(100)
    svc.add_expense("Rent", 90, "Bills")

    assert svc.notices == [{
        "level": "warning",
        "message": "⚠️ You've exceeded the recommended spending limit of ₹80.00 (80% of income)!",
    }]

    svc.delete_expense(svc.expenses[0].id)
    assert svc.notices == []


def test_reset_clears_everything():
    svc = make_service()
    svc.set_income(500)
    svc.add_expense("Movie", 15, "Entertainment")

    summary = svc.reset()

    assert svc.expenses == ()
    assert svc.income == 0.0
    assert svc.store.get(EXPENSES_KEY) is None
    assert svc.store.get(INCOME_KEY) is None
    assert summary.total == 0.0
    assert summary.category_totals == {}
    assert summary.insights == ()
    assert summary.budget_warning is None
    assert svc.notices == [{"level": "success", "message": RESET_NOTICE}]


def test_state_survives_reload_from_store(tmp_path):
    store = JsonFileStore(tmp_path / "data.json")
    svc = make_service(store)
    svc.add_expense("Taxi", 12.5, "Transport")
    svc.add_expense("Books", 40, "Shopping")
    svc.set_income(1000)

    reloaded = make_service(JsonFileStore(tmp_path / "data.json"))

    assert reloaded.expenses == svc.expenses
    assert reloaded.income == 1000.0


def test_conversion_handoff_is_consumed_once():
    svc = make_service()
    svc.add_expense("A", 100, "Food")
    svc.add_expense("B", 50.5, "Food")

    amount, currency = svc.prepare_conversion_handoff()

    assert (amount, currency) == (150.5, CURRENCY_CODE)
    assert consume_amount_to_convert(svc.store) == 150.5
    assert consume_amount_to_convert(svc.store) is None
