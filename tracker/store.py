from typing import Callable, Optional, Tuple
from uuid import uuid4

from tracker.budgets import derive_spent, find_budget, income_headroom_check, set_limit
from tracker.domain import (
    Budget,
    BudgetChange,
    InvalidLimit,
    NotFound,
    Transaction,
    TransactionInput,
    ValidationFailed,
)
from tracker.events import (
    BUDGET_SET,
    TRANSACTION_ADDED,
    TRANSACTION_DELETED,
    TRANSACTION_UPDATED,
    EventBus,
)
from tracker.functional import Either, Maybe, Nothing, Right, Some
from tracker.persistence import KeyValueStorage, load_state, save_budgets, save_transactions
from tracker.transforms import add_transaction, remove_transaction, replace_transaction


def new_transaction_id() -> str:
    return uuid4().hex


class TransactionStore:
    """Owner of the transaction log and the budgets derived from it.

    Every mutation runs to completion before returning: the log is replaced,
    budget spent values are re-derived, state is handed to persistence and a
    domain event is published. Handler results of the last event are kept in
    ``last_alerts``.
    """

    def __init__(
        self,
        persistence: Optional[KeyValueStorage] = None,
        bus: Optional[EventBus] = None,
        id_factory: Callable[[], str] = new_transaction_id,
    ):
        self._persistence = persistence
        self.bus = bus if bus is not None else EventBus()
        self._new_id = id_factory
        self._transactions: Tuple[Transaction, ...] = ()
        self._budgets: Tuple[Budget, ...] = ()
        self.last_alerts: list[dict] = []

    # ── Reads ────────────────────────────────────────────────────────────────

    def list(self) -> Tuple[Transaction, ...]:
        return self._transactions

    def budgets(self) -> Tuple[Budget, ...]:
        return self._budgets

    def find(self, tx_id: str) -> Maybe[Transaction]:
        for t in self._transactions:
            if t.id == tx_id:
                return Some(t)
        return Nothing()

    def __len__(self) -> int:
        return len(self._transactions)

    # ── Lifecycle ────────────────────────────────────────────────────────────

    def load(self) -> "TransactionStore":
        """Replace in-memory state with what persistence holds."""
        if self._persistence is None:
            return self
        self._transactions, self._budgets = load_state(self._persistence)
        if self._rederive():
            save_budgets(self._persistence, self._budgets)
        return self

    # ── Mutations ────────────────────────────────────────────────────────────

    def add(self, data: TransactionInput) -> Transaction:
        tx = Transaction.from_input(self._new_id(), data)
        self._transactions = add_transaction(self._transactions, tx)
        self._after_transactions_changed(TRANSACTION_ADDED, tx)
        return tx

    def update(self, tx_id: str, data: TransactionInput) -> Either[NotFound, Transaction]:
        tx = Transaction.from_input(tx_id, data)
        result = replace_transaction(self._transactions, tx)
        if result.is_left():
            return result
        self._transactions = result.get_or_else(self._transactions)
        self._after_transactions_changed(TRANSACTION_UPDATED, tx)
        return Right(tx)

    def delete(self, tx_id: str) -> Either[NotFound, Transaction]:
        removed = self.find(tx_id).get_or_else(None)
        result = remove_transaction(self._transactions, tx_id)
        if result.is_left():
            return result
        self._transactions = result.get_or_else(self._transactions)
        self._after_transactions_changed(TRANSACTION_DELETED, removed)
        return Right(removed)

    def set_budget(
        self, category: str, limit: float
    ) -> Either[InvalidLimit | ValidationFailed, BudgetChange]:
        """Set the limit for a category.

        A warning is attached when total limits would exceed recorded income;
        the limit is applied either way.
        """
        warning = income_headroom_check(self._transactions, self._budgets, category, limit)
        result = set_limit(self._budgets, category, limit)
        if result.is_left():
            return result

        change = result.get_or_else(None)
        self._budgets = change.budgets
        _, self._budgets = derive_spent(self._transactions, self._budgets)
        if self._persistence is not None:
            save_budgets(self._persistence, self._budgets)

        budget = find_budget(self._budgets, category).get_or_else(change.budget)
        change = BudgetChange(
            budgets=self._budgets,
            budget=budget,
            created=change.created,
            warning=warning.get_or_else(None),
        )
        self.last_alerts = self.bus.publish(BUDGET_SET, {
            "category": category,
            "limit": limit,
            "created": change.created,
            "warning": change.warning,
        })
        return Right(change)

    # ── Internals ────────────────────────────────────────────────────────────

    def _rederive(self) -> bool:
        changed, self._budgets = derive_spent(self._transactions, self._budgets)
        return changed

    def _after_transactions_changed(self, event_name: str, tx: Transaction) -> None:
        budgets_changed = self._rederive()
        if self._persistence is not None:
            save_transactions(self._persistence, self._transactions)
            if budgets_changed:
                save_budgets(self._persistence, self._budgets)
        self.last_alerts = self.bus.publish(event_name, self._event_payload(tx, event_name))

    def _event_payload(self, tx: Transaction, event_name: str) -> dict:
        payload = {
            "id": tx.id,
            "amount": tx.amount,
            "category": tx.category,
            "type": tx.kind.value,
        }
        budget = find_budget(self._budgets, tx.category).get_or_else(None)
        if budget is not None and tx.is_expense and event_name != TRANSACTION_DELETED:
            payload["budget_limit"] = budget.limit
            # spend without this transaction, for the alert handlers
            payload["current_spent"] = budget.spent - tx.amount
        return payload
