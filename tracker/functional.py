import math
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Callable, Generic, Mapping, TypeVar

from tracker.domain import (
    MIN_DESCRIPTION_LENGTH,
    TransactionInput,
    TransactionKind,
    ValidationFailed,
    categories_for,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):
    """Result of a core operation: Right(value) on success, Left(error) otherwise."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Left(self._error)

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def parse_iso_date(value: Any) -> Maybe[date]:
    if isinstance(value, datetime):
        return Some(value.date())
    if isinstance(value, date):
        return Some(value)
    if not value:
        return Nothing()
    try:
        return Some(date.fromisoformat(str(value).strip()[:10]))
    except ValueError:
        return Nothing()


def parse_kind(value: Any) -> Maybe[TransactionKind]:
    try:
        return Some(TransactionKind(value))
    except ValueError:
        return Nothing()


def validate_transaction_input(raw: Mapping[str, Any]) -> Either[ValidationFailed, TransactionInput]:
    """Check a form submission and build a TransactionInput from it.

    Every failing field is reported at once, keyed by field name, the way the
    entry form shows them.
    """
    errors: dict[str, str] = {}

    amount = None
    try:
        amount = float(raw.get("amount"))
    except (TypeError, ValueError):
        pass
    if amount is None or not math.isfinite(amount) or amount <= 0:
        errors["amount"] = "Please enter a valid amount greater than 0"

    kind = parse_kind(raw.get("type", raw.get("kind"))).get_or_else(None)
    if kind is None:
        errors["type"] = "Type must be 'income' or 'expense'"

    category = str(raw.get("category") or "").strip()
    if not category:
        errors["category"] = "Please select a category"
    elif kind is not None and category not in categories_for(kind):
        errors["category"] = f"'{category}' is not a valid {kind.value} category"

    description = str(raw.get("description") or "").strip()
    if not description:
        errors["description"] = "Please enter a description"
    elif len(description) < MIN_DESCRIPTION_LENGTH:
        errors["description"] = f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"

    when = parse_iso_date(raw.get("date")).get_or_else(None)
    if when is None:
        errors["date"] = "Please select a date"

    if errors:
        return Left(ValidationFailed(errors))

    return Right(TransactionInput(
        amount=amount,
        category=category,
        description=description,
        date=when,
        kind=kind,
    ))
