import json
import logging
from datetime import date

from tracker.domain import Budget, Transaction, TransactionKind
from tracker.persistence import (
    BUDGETS_KEY,
    EXPENSES_KEY,
    JsonFilePersistence,
    MemoryPersistence,
    load_state,
    save_budgets,
    save_transactions,
)


def sample():
    return (
        Transaction("a1", 1500.0, "Freelance", "Logo design", date(2025, 2, 1), TransactionKind.INCOME),
        Transaction("a2", 19.99, "Entertainment", "Movie night", date(2025, 2, 3), TransactionKind.EXPENSE),
    )


def test_file_round_trip(tmp_path):
    storage = JsonFilePersistence(tmp_path / "data")
    budgets = (Budget("Entertainment", 50.0, 19.99),)

    save_transactions(storage, sample())
    save_budgets(storage, budgets)

    assert (tmp_path / "data" / "expenses.json").exists()
    assert load_state(storage) == (sample(), budgets)


def test_missing_directory_loads_empty(tmp_path):
    storage = JsonFilePersistence(tmp_path / "nowhere")

    assert load_state(storage) == ((), ())


def test_corrupt_file_loads_empty_and_logs(tmp_path, caplog):
    (tmp_path / "expenses.json").write_text("{not json", encoding="utf-8")
    (tmp_path / "budgets.json").write_text('[{"category": "Rent", "limit": 10}]', encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="tracker.persistence"):
        transactions, budgets = load_state(JsonFilePersistence(tmp_path))

    assert transactions == ()
    assert budgets == (Budget("Rent", 10.0, 0.0),)
    assert "Discarding unreadable transactions" in caplog.text
    assert (tmp_path / "expenses.bak.json").read_text(encoding="utf-8") == "{not json"
    assert not (tmp_path / "budgets.bak.json").exists()


def test_bad_record_is_skipped_and_the_rest_kept(tmp_path, caplog):
    storage = JsonFilePersistence(tmp_path)
    save_transactions(storage, sample())
    good = json.loads(storage.get_item(EXPENSES_KEY))
    broken = json.dumps([good[0], {"id": "x9", "amount": "12", "date": "yesterday"}, good[1]])
    storage.set_item(EXPENSES_KEY, broken)

    with caplog.at_level(logging.WARNING, logger="tracker.persistence"):
        transactions, _ = load_state(storage)

    assert transactions == sample()
    assert "Skipping unreadable transactions record 1" in caplog.text
    assert storage.get_item("expenses.bak") == broken

    save_transactions(storage, transactions)
    assert load_state(storage)[0] == sample()
    assert storage.get_item("expenses.bak") == broken


def test_failed_write_is_logged_not_raised(tmp_path, caplog):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    storage = JsonFilePersistence(blocker / "data")

    with caplog.at_level(logging.ERROR, logger="tracker.persistence"):
        save_transactions(storage, sample())

    assert "Could not save" in caplog.text


def test_overwrite_leaves_no_temp_file(tmp_path):
    storage = JsonFilePersistence(tmp_path)
    save_transactions(storage, sample())
    save_transactions(storage, sample()[:1])

    assert sorted(p.name for p in tmp_path.iterdir()) == ["expenses.json"]
    assert load_state(storage)[0] == sample()[:1]


def test_memory_persistence_keys():
    storage = MemoryPersistence()
    save_transactions(storage, sample())
    save_budgets(storage, ())

    assert set(storage.items) == {EXPENSES_KEY, BUDGETS_KEY}
    assert storage.writes == 2
    assert load_state(storage) == (sample(), ())
