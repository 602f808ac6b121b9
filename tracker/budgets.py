"""Budget derivation: the spent projection, limit changes and status.

Every function here is pure. ``spent`` is never set directly; it is always
recomputed from the full transaction log by ``derive_spent``.
"""
from collections import defaultdict
from typing import Iterable, Tuple

from tracker.domain import (
    EXPENSE_CATEGORIES,
    Budget,
    BudgetChange,
    BudgetProgress,
    BudgetStatus,
    InvalidLimit,
    Transaction,
    TransactionKind,
    ValidationFailed,
    WouldExceedIncome,
)
from tracker.functional import Either, Left, Maybe, Nothing, Right, Some
from tracker.transforms import total_income

OVER_RATIO = 1.0
WARNING_RATIO = 0.8


def spent_by_category(trans: Iterable[Transaction]) -> dict[str, float]:
    totals: dict[str, float] = defaultdict(float)
    for t in trans:
        if t.kind == TransactionKind.EXPENSE:
            totals[t.category] += t.amount
    return totals


def derive_spent(
    trans: Iterable[Transaction], budgets: Tuple[Budget, ...]
) -> Tuple[bool, Tuple[Budget, ...]]:
    """Recompute every budget's spent from scratch.

    Returns (changed, budgets). When nothing changed the input tuple itself
    is returned so callers can skip a redundant save.
    """
    totals = spent_by_category(trans)
    derived = tuple(
        Budget(category=b.category, limit=b.limit, spent=totals.get(b.category, 0.0))
        for b in budgets
    )
    if derived == budgets:
        return False, budgets
    return True, derived


def find_budget(budgets: Iterable[Budget], category: str) -> Maybe[Budget]:
    for b in budgets:
        if b.category == category:
            return Some(b)
    return Nothing()


def set_limit(
    budgets: Tuple[Budget, ...], category: str, limit: float
) -> Either[InvalidLimit | ValidationFailed, BudgetChange]:
    """Create the budget for category or replace its limit.

    A new budget starts at spent=0 and an existing one keeps its spent;
    the next derive_spent pass corrects both.
    """
    if not limit > 0:
        return Left(InvalidLimit(limit))
    if category not in EXPENSE_CATEGORIES:
        return Left(ValidationFailed({"category": f"'{category}' is not an expense category"}))

    existing = find_budget(budgets, category).get_or_else(None)
    if existing is None:
        created = Budget(category=category, limit=limit, spent=0.0)
        return Right(BudgetChange(budgets=budgets + (created,), budget=created, created=True))

    updated = Budget(category=category, limit=limit, spent=existing.spent)
    new_budgets = tuple(updated if b.category == category else b for b in budgets)
    return Right(BudgetChange(budgets=new_budgets, budget=updated, created=False))


def income_headroom_check(
    trans: Iterable[Transaction],
    budgets: Iterable[Budget],
    category: str,
    limit: float,
) -> Maybe[WouldExceedIncome]:
    """Warn when the total of all limits would exceed all income recorded.

    The budget being set replaces any existing limit for its category.
    Income is counted over the whole log, not a window.
    """
    other_limits = sum(b.limit for b in budgets if b.category != category)
    total_budgets = other_limits + limit
    income = total_income(trans)
    if total_budgets > income:
        return Some(WouldExceedIncome(
            over_by=total_budgets - income,
            total_budgets=total_budgets,
            total_income=income,
        ))
    return Nothing()


def budget_status(spent: float, limit: float) -> BudgetStatus:
    if limit <= 0:
        raise ValueError(f"Budget limit must be positive, got {limit}")
    ratio = spent / limit
    if ratio >= OVER_RATIO:
        return BudgetStatus.OVER
    if ratio >= WARNING_RATIO:
        return BudgetStatus.WARNING
    return BudgetStatus.GOOD


def budget_progress(b: Budget) -> BudgetProgress:
    status = budget_status(b.spent, b.limit)
    return BudgetProgress(
        budget=b,
        status=status,
        percentage=min(b.spent / b.limit * 100, 100.0),
        remaining=max(b.limit - b.spent, 0.0),
        over_by=max(b.spent - b.limit, 0.0) if status == BudgetStatus.OVER else 0.0,
    )


def unbudgeted_categories(budgets: Iterable[Budget]) -> tuple[str, ...]:
    taken = {b.category for b in budgets}
    return tuple(c for c in EXPENSE_CATEGORIES if c not in taken)
