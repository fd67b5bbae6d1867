"""Persistent key/value storage for the ledger, the income and the converter handoff."""

import json
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from spendwise.domain import Expense

logger = logging.getLogger(__name__)

EXPENSES_KEY = "expenses"
INCOME_KEY = "monthlyIncome"
HANDOFF_KEY = "amountToConvert"


class KeyValueStore:
    """String values under string keys, in the spirit of browser localStorage."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """All keys kept in one JSON document; every write replaces the file atomically."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Storage file %s is corrupted (%s), starting empty", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Storage file %s does not hold an object, starting empty", self.path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", delete=False, dir=self.path.parent, encoding="utf-8"
        ) as tmp:
            json.dump(data, tmp, indent=2, sort_keys=True)
            tmp.flush()
        os.replace(tmp.name, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


# --- Ledger snapshot ---

def dump_expenses(expenses: Tuple[Expense, ...]) -> str:
    return json.dumps([e.to_dict() for e in expenses], ensure_ascii=False)


def parse_expenses(raw: Optional[str]) -> Tuple[Expense, ...]:
    """Rebuild the ledger from its serialized form.

    Missing or corrupt data yields an empty ledger; rows that can't be read
    are dropped one by one.
    """
    if not raw:
        return ()
    try:
        rows = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored expenses are not valid JSON, falling back to an empty ledger")
        return ()
    if not isinstance(rows, list):
        logger.warning("Stored expenses are not a list, falling back to an empty ledger")
        return ()

    expenses: List[Expense] = []
    for row in rows:
        try:
            expenses.append(Expense.from_dict(row))
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            logger.warning("Skipping unreadable expense row %r: %s", row, exc)
    return tuple(expenses)


def load_expenses(store: KeyValueStore) -> Tuple[Expense, ...]:
    return parse_expenses(store.get(EXPENSES_KEY))


def save_expenses(store: KeyValueStore, expenses: Tuple[Expense, ...]) -> None:
    store.set(EXPENSES_KEY, dump_expenses(expenses))


# --- Monthly income ---

def load_income(store: KeyValueStore) -> float:
    raw = store.get(INCOME_KEY)
    if raw is None:
        return 0.0
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Stored income %r is not a number, using 0", raw)
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def save_income(store: KeyValueStore, income: float) -> None:
    store.set(INCOME_KEY, repr(float(income)))


def clear_ledger(store: KeyValueStore) -> None:
    store.remove(EXPENSES_KEY)
    store.remove(INCOME_KEY)


# --- Cross-page handoff ---

def stash_amount_to_convert(store: KeyValueStore, amount: float) -> None:
    store.set(HANDOFF_KEY, repr(float(amount)))


def consume_amount_to_convert(store: KeyValueStore) -> Optional[float]:
    """Read the amount handed over from the tracker and clear it, so it's used once."""
    raw = store.get(HANDOFF_KEY)
    if raw is None:
        return None
    store.remove(HANDOFF_KEY)
    try:
        return float(raw)
    except ValueError:
        logger.warning("Discarding unreadable handoff amount %r", raw)
        return None
