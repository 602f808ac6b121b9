from datetime import date, timedelta
from typing import Callable, Iterable, Optional

from tracker.dates import subtract_months
from tracker.domain import Transaction, TransactionKind

Predicate = Callable[[Transaction], bool]

LIST_PRESETS = ("all", "today", "week", "month", "3months")
EXPORT_PRESETS = ("all", "30days", "90days", "365days")

_EXPORT_DAYS = {"30days": 30, "90days": 90, "365days": 365}


def by_category(category: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.category == category

    return _filter


def by_kind(kind: TransactionKind) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.kind == kind

    return _filter


def by_date_range(start: date, end: date) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter


def since(cutoff: date) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.date >= cutoff

    return _filter


def by_search(term: str) -> Predicate:
    """Case-insensitive match on description or category."""
    needle = term.strip().lower()

    def _filter(t: Transaction) -> bool:
        return needle in t.description.lower() or needle in t.category.lower()

    return _filter


def list_preset_cutoff(preset: str, today: date) -> Optional[date]:
    """Earliest date shown by a transaction-list preset, None for 'all'."""
    if preset == "all":
        return None
    if preset == "today":
        return today
    if preset == "week":
        return today - timedelta(days=7)
    if preset == "month":
        return subtract_months(today, 1)
    if preset == "3months":
        return subtract_months(today, 3)
    raise ValueError(f"Unknown list preset: {preset}")


def export_preset_cutoff(preset: str, today: date) -> Optional[date]:
    if preset == "all":
        return None
    if preset not in _EXPORT_DAYS:
        raise ValueError(f"Unknown export preset: {preset}")
    return today - timedelta(days=_EXPORT_DAYS[preset])


def build_predicates(
    search: str = "",
    category: Optional[str] = None,
    kind: Optional[TransactionKind] = None,
    cutoff: Optional[date] = None,
) -> list[Predicate]:
    preds: list[Predicate] = []
    if search.strip():
        preds.append(by_search(search))
    if category:
        preds.append(by_category(category))
    if kind is not None:
        preds.append(by_kind(kind))
    if cutoff is not None:
        preds.append(since(cutoff))
    return preds


def apply_filters(trans: Iterable[Transaction], *preds: Predicate) -> tuple[Transaction, ...]:
    """Keep transactions matching every predicate, newest first."""
    matched = [t for t in trans if all(p(t) for p in preds)]
    return tuple(sorted(matched, key=lambda t: t.date, reverse=True))


def used_categories(trans: Iterable[Transaction]) -> list[str]:
    return sorted({t.category for t in trans})
