import json
from functools import reduce
from typing import Any, Callable, Iterable, Mapping, Tuple, TypeVar

from tracker.domain import Budget, NotFound, Transaction, TransactionKind
from tracker.functional import Either, Left, Right, parse_iso_date

T = TypeVar("T")


# --- reducers over the transaction log; each returns a new tuple


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)


def replace_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Either[NotFound, Tuple[Transaction, ...]]:
    if not any(old.id == t.id for old in trans):
        return Left(NotFound(t.id))
    return Right(tuple(t if old.id == t.id else old for old in trans))


def remove_transaction(
    trans: Tuple[Transaction, ...], tx_id: str
) -> Either[NotFound, Tuple[Transaction, ...]]:
    if not any(t.id == tx_id for t in trans):
        return Left(NotFound(tx_id))
    return Right(tuple(t for t in trans if t.id != tx_id))


def income_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.kind == TransactionKind.INCOME, trans))


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.kind == TransactionKind.EXPENSE, trans))


def total_amount(trans: Iterable[Transaction]) -> float:
    return reduce(lambda acc, t: acc + t.amount, trans, 0.0)


def total_income(trans: Iterable[Transaction]) -> float:
    return total_amount(income_transactions(trans))


def total_expense(trans: Iterable[Transaction]) -> float:
    return total_amount(expense_transactions(trans))


# --- persisted layout: field names follow the stored records


def transaction_to_record(t: Transaction) -> dict:
    return {
        "id": t.id,
        "amount": t.amount,
        "category": t.category,
        "description": t.description,
        "date": t.date.isoformat(),
        "type": t.kind.value,
    }


def transaction_from_record(record: Mapping[str, Any]) -> Transaction:
    when = parse_iso_date(record["date"]).get_or_else(None)
    if when is None:
        raise ValueError(f"Invalid date in stored transaction {record.get('id')!r}: {record['date']!r}")
    return Transaction(
        id=str(record["id"]),
        amount=float(record["amount"]),
        category=record["category"],
        description=record["description"],
        date=when,
        kind=TransactionKind(record["type"]),
    )


def budget_to_record(b: Budget) -> dict:
    return {"category": b.category, "limit": b.limit, "spent": b.spent}


def budget_from_record(record: Mapping[str, Any]) -> Budget:
    return Budget(
        category=record["category"],
        limit=float(record["limit"]),
        spent=float(record.get("spent", 0.0)),
    )


def dump_transactions(trans: Iterable[Transaction]) -> str:
    return json.dumps([transaction_to_record(t) for t in trans])


def dump_budgets(budgets: Iterable[Budget]) -> str:
    return json.dumps([budget_to_record(b) for b in budgets])


def load_records(
    payload: str | None, from_record: Callable[[Mapping[str, Any]], T]
) -> Tuple[Tuple[T, ...], Tuple[str, ...]]:
    """Decode a stored list, skipping records that do not parse.

    Returns the decoded items and one reason per skipped record. A payload
    that is not a JSON list raises ValueError.
    """
    if not payload:
        return (), ()
    records = json.loads(payload)
    if not isinstance(records, list):
        raise ValueError(f"expected a list of records, got {type(records).__name__}")
    items, skipped = [], []
    for i, record in enumerate(records):
        try:
            items.append(from_record(record))
        except (ValueError, KeyError, TypeError) as e:
            skipped.append(f"record {i}: {e}")
    return tuple(items), tuple(skipped)
