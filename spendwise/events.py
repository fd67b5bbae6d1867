from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from spendwise.domain import LedgerSummary

__all__ = [
    'EXPENSE_ADDED', 'EXPENSE_DELETED', 'INCOME_UPDATED', 'LEDGER_RESET', 'LEDGER_EVENTS',
    'Event', 'EventBus', 'budget_alert_handler', 'reset_notice_handler', 'register_default_handlers',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in list(handlers)]

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


EXPENSE_ADDED = "EXPENSE_ADDED"
EXPENSE_DELETED = "EXPENSE_DELETED"
INCOME_UPDATED = "INCOME_UPDATED"
LEDGER_RESET = "LEDGER_RESET"
LEDGER_EVENTS = (EXPENSE_ADDED, EXPENSE_DELETED, INCOME_UPDATED, LEDGER_RESET)

RESET_NOTICE = "✅ All data has been successfully reset!"


def budget_alert_handler(event: Event, payload: dict) -> dict:
    summary: LedgerSummary = payload["summary"]
    if summary.budget_warning:
        return {"level": "warning", "message": summary.budget_warning}
    return {}


def reset_notice_handler(event: Event, payload: dict) -> dict:
    return {"level": "success", "message": RESET_NOTICE}


def register_default_handlers(bus: EventBus) -> EventBus:
    for name in (EXPENSE_ADDED, EXPENSE_DELETED, INCOME_UPDATED):
        bus.subscribe(name, budget_alert_handler)
    bus.subscribe(LEDGER_RESET, reset_notice_handler)
    return bus
