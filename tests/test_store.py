import json

from spendwise.domain import Category, Expense
from spendwise.store import (
    EXPENSES_KEY,
    HANDOFF_KEY,
    INCOME_KEY,
    JsonFileStore,
    MemoryStore,
    consume_amount_to_convert,
    dump_expenses,
    load_expenses,
    load_income,
    parse_expenses,
    save_expenses,
    save_income,
    stash_amount_to_convert,
)


def make_ledger():
    return (
        Expense(id=1, name="Chai", amount=20.0, category=Category.FOOD, date="2026-10-01"),
        Expense(id=2, name="Metro", amount=45.5, category=Category.TRANSPORT, date="2026-10-02"),
        Expense(id=3, name="Electricity", amount=1200.0, category=Category.BILLS, date="2026-09-28"),
    )


def test_serialize_and_reload_keeps_records_and_order():
    ledger = make_ledger()
    assert parse_expenses(dump_expenses(ledger)) == ledger


def test_save_and_load_through_store():
    store = MemoryStore()
    save_expenses(store, make_ledger())
    assert load_expenses(store) == make_ledger()


def test_missing_or_corrupt_expenses_fall_back_to_empty():
    assert load_expenses(MemoryStore()) == ()
    assert load_expenses(MemoryStore({EXPENSES_KEY: "{not json"})) == ()
    assert load_expenses(MemoryStore({EXPENSES_KEY: '{"id": 1}'})) == ()


def test_unreadable_rows_are_skipped():
    rows = [e.to_dict() for e in make_ledger()]
    rows.insert(1, {"id": 9, "name": "broken"})
    rows.append({"id": 10, "name": "x", "amount": 1, "category": "Travel", "date": "2026-10-01"})
    rows.append({"id": float("inf"), "name": "x", "amount": 1, "category": "Food", "date": "2026-10-01"})
    rows.append({"id": 11, "name": "x", "amount": float("inf"), "category": "Food", "date": "2026-10-01"})

    loaded = parse_expenses(json.dumps(rows))

    assert [e.id for e in loaded] == [1, 2, 3]


def test_overflowing_ids_do_not_break_startup():
    raw = (
        '[{"id": 1e400, "name": "a", "amount": 5, "category": "Food", "date": "2026-10-01"},'
        ' {"id": 2, "name": "b", "amount": 7, "category": "Food", "date": "2026-10-01"}]'
    )
    assert [e.id for e in parse_expenses(raw)] == [2]

    store = MemoryStore({EXPENSES_KEY: raw.replace("1e400", "Infinity")})
    assert [e.id for e in load_expenses(store)] == [2]


def test_records_from_the_browser_widget_load():
    raw = '[{"id": 1729300000000, "name": "Pizza", "amount": 350, "category": "Food", "date": "10/19/2024"}]'
    loaded = parse_expenses(raw)

    assert loaded[0].amount == 350.0
    assert loaded[0].date == "10/19/2024"


def test_income_defaults_and_round_trip():
    store = MemoryStore()
    assert load_income(store) == 0.0

    save_income(store, 45000.5)
    assert load_income(store) == 45000.5

    assert load_income(MemoryStore({INCOME_KEY: "abc"})) == 0.0
    assert load_income(MemoryStore({INCOME_KEY: "-10"})) == 0.0


def test_handoff_amount_is_read_once():
    store = MemoryStore()
    stash_amount_to_convert(store, 999.99)

    assert consume_amount_to_convert(store) == 999.99
    assert store.get(HANDOFF_KEY) is None
    assert consume_amount_to_convert(store) is None


def test_json_file_store_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    JsonFileStore(path).set("greeting", "hello")

    store = JsonFileStore(path)
    assert store.get("greeting") == "hello"

    store.remove("greeting")
    assert JsonFileStore(path).get("greeting") is None


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("][", encoding="utf-8")

    store = JsonFileStore(path)
    assert store.get(EXPENSES_KEY) is None

    store.set(INCOME_KEY, "100.0")
    assert json.loads(path.read_text(encoding="utf-8")) == {INCOME_KEY: "100.0"}
