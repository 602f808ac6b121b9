from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = [
    'Event', 'EventBus',
    'TRANSACTION_ADDED', 'TRANSACTION_UPDATED', 'TRANSACTION_DELETED', 'BUDGET_SET',
    'budget_alert_handler', 'income_warning_handler', 'register_default_handlers',
]

Handler = Callable[['Event', dict], dict]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        results = []
        for handler in self._subscribers[name]:
            result = handler(event, payload)
            results.append(result)
        return results

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)


TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
TRANSACTION_DELETED = "TRANSACTION_DELETED"
BUDGET_SET = "BUDGET_SET"


def budget_alert_handler(event: Event, payload: dict) -> dict:
    """Flag an expense that takes its category past the budget limit.

    current_spent is the category's spend without this transaction.
    """
    if payload.get("type") != "expense":
        return {}
    budget_limit = payload.get("budget_limit")
    if not budget_limit:
        return {}

    amount = payload.get("amount", 0)
    category = payload.get("category", "")
    new_spent = payload.get("current_spent", 0) + amount
    if new_spent > budget_limit:
        over_by = new_spent - budget_limit
        return {
            "alert": f"This expense exceeds your {category} budget by {over_by:.2f}",
            "category": category,
            "spent": new_spent,
            "limit": budget_limit,
            "over_by": over_by,
        }
    return {"spent": new_spent}


def income_warning_handler(event: Event, payload: dict) -> dict:
    warning = payload.get("warning")
    if warning is None:
        return {}
    return {
        "alert": f"Budget Alert! {warning.message}",
        "category": payload.get("category", ""),
        "over_by": warning.over_by,
    }


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(TRANSACTION_ADDED, budget_alert_handler)
    bus.subscribe(TRANSACTION_UPDATED, budget_alert_handler)
    bus.subscribe(BUDGET_SET, income_warning_handler)
    return bus
