from datetime import datetime

from spendwise.domain import LedgerSummary
from spendwise.events import (
    EXPENSE_ADDED,
    EXPENSE_DELETED,
    LEDGER_RESET,
    RESET_NOTICE,
    Event,
    EventBus,
    budget_alert_handler,
    register_default_handlers,
    reset_notice_handler,
)


def make_event(name, payload):
    return Event(name=name, ts=datetime.now().isoformat(), payload=payload)


def test_event_bus_subscribe_and_publish():
    bus = EventBus()
    received = []

    def handler(event: Event, payload: dict) -> dict:
        received.append(event.name)
        return {"seen": payload["n"]}

    bus.subscribe(EXPENSE_ADDED, handler)

    assert bus.publish(EXPENSE_ADDED, {"n": 1}) == [{"seen": 1}]
    assert bus.publish(EXPENSE_DELETED, {"n": 2}) == []
    assert received == [EXPENSE_ADDED]


def test_multiple_subscribers_run_in_order():
    bus = EventBus()
    bus.subscribe(EXPENSE_ADDED, lambda e, p: {"handler": 1})
    bus.subscribe(EXPENSE_ADDED, lambda e, p: {"handler": 2})

    assert bus.publish(EXPENSE_ADDED, {}) == [{"handler": 1}, {"handler": 2}]


def test_unsubscribe():
    bus = EventBus()

    def handler(event, payload):
        return {"called": True}

    bus.subscribe(EXPENSE_ADDED, handler)
    bus.unsubscribe(EXPENSE_ADDED, handler)
    bus.unsubscribe(LEDGER_RESET, handler)

    assert bus.publish(EXPENSE_ADDED, {}) == []


def test_budget_alert_handler():
    warned = LedgerSummary(budget_warning="too much")
    calm = LedgerSummary()

    assert budget_alert_handler(make_event(EXPENSE_ADDED, {}), {"summary": warned}) == {
        "level": "warning", "message": "too much",
    }
    assert budget_alert_handler(make_event(EXPENSE_ADDED, {}), {"summary": calm}) == {}


def test_default_handlers():
    bus = register_default_handlers(EventBus())

    assert bus.publish(LEDGER_RESET, {"summary": LedgerSummary()}) == [
        {"level": "success", "message": RESET_NOTICE}
    ]
    assert reset_notice_handler(make_event(LEDGER_RESET, {}), {})["message"] == RESET_NOTICE
