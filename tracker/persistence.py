"""Durable key-value storage for the transaction and budget collections.

Two keys are stored: ``expenses`` (the transaction log) and ``budgets``.
A missing key is a legal initial state and loads as an empty collection.
Writes are best effort: a failed save is logged and never reaches the
caller, so the in-memory state stays authoritative.
"""
import logging
import os
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol, Tuple

from tracker.domain import Budget, Transaction
from tracker.transforms import (
    budget_from_record,
    dump_budgets,
    dump_transactions,
    load_records,
    transaction_from_record,
)

logger = logging.getLogger(__name__)

EXPENSES_KEY = "expenses"
BUDGETS_KEY = "budgets"


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...


class MemoryPersistence:
    """Keeps serialized payloads in a dict; used by tests and scratch sessions."""

    def __init__(self, items: Optional[dict] = None):
        self.items: dict[str, str] = dict(items or {})
        self.writes = 0

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value
        self.writes += 1


class JsonFilePersistence:
    """One ``<key>.json`` file per key inside a data directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

    def set_item(self, key: str, value: str) -> None:
        """Atomic write via .tmp + os.replace()."""
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, path)
        except OSError as e:
            logger.error("Could not save %s: %s", path, e)
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                logger.debug("Could not remove temp file %s", tmp)


def _keep_backup(storage: KeyValueStorage, key: str, payload: str) -> None:
    backup = f"{key}.bak"
    storage.set_item(backup, payload)
    logger.warning("Kept the original %s payload as %s", key, backup)


def _load_collection(
    storage: KeyValueStorage, key: str, from_record: Callable[[Mapping[str, Any]], Any], label: str
) -> tuple:
    payload = storage.get_item(key)
    try:
        items, skipped = load_records(payload, from_record)
    except ValueError as e:
        logger.warning("Discarding unreadable %s: %s", label, e)
        _keep_backup(storage, key, payload)
        return ()
    for reason in skipped:
        logger.warning("Skipping unreadable %s %s", label, reason)
    if skipped:
        _keep_backup(storage, key, payload)
    return items


def load_state(storage: KeyValueStorage) -> Tuple[Tuple[Transaction, ...], Tuple[Budget, ...]]:
    """Read both collections.

    Records that do not parse are skipped and an unreadable payload loads as
    empty. Either way the original payload is first copied to ``<key>.bak``.
    """
    transactions = _load_collection(storage, EXPENSES_KEY, transaction_from_record, "transactions")
    budgets = _load_collection(storage, BUDGETS_KEY, budget_from_record, "budgets")
    logger.info("Loaded %d transactions and %d budgets", len(transactions), len(budgets))
    return transactions, budgets


def save_transactions(storage: KeyValueStorage, transactions: Iterable[Transaction]) -> None:
    storage.set_item(EXPENSES_KEY, dump_transactions(transactions))


def save_budgets(storage: KeyValueStorage, budgets: Iterable[Budget]) -> None:
    storage.set_item(BUDGETS_KEY, dump_budgets(budgets))
