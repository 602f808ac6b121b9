"""Time-windowed rollups over the transaction log.

All functions are pure and recompute from the transactions they are given;
nothing is cached between calls.
"""
from collections import defaultdict
from datetime import date
from enum import Enum
from typing import Iterable, Mapping, Tuple

from tracker.dates import month_end, month_start, month_starts, subtract_months
from tracker.domain import (
    INVESTMENT_CATEGORY,
    AggregationWindow,
    AnalyticsReport,
    InvestmentBucket,
    InvestmentMetrics,
    MonthBucket,
    SummaryTotals,
    Transaction,
    TransactionKind,
)
from tracker.filters import by_date_range
from tracker.lazy import iter_transactions, lazy_top_categories, newest_first
from tracker.transforms import total_amount, total_expense, total_income

DEFAULT_TOP_N = 5


class WindowPreset(str, Enum):
    ONE_MONTH = "1month"
    THREE_MONTHS = "3months"
    SIX_MONTHS = "6months"
    TWELVE_MONTHS = "12months"
    ALL = "all"


_PRESET_MONTHS = {
    WindowPreset.ONE_MONTH: 1,
    WindowPreset.THREE_MONTHS: 3,
    WindowPreset.SIX_MONTHS: 6,
    WindowPreset.TWELVE_MONTHS: 12,
}


def resolve_window(
    trans: Iterable[Transaction], preset: WindowPreset | str, now: date
) -> AggregationWindow:
    preset = WindowPreset(preset)
    if preset == WindowPreset.ALL:
        dates = [t.date for t in trans]
        # future-dated entries must not push the start past now
        start = min(min(dates), now) if dates else now
        return AggregationWindow(start=start, end=now)
    return AggregationWindow(start=subtract_months(now, _PRESET_MONTHS[preset]), end=now)


def filter_window(
    trans: Iterable[Transaction], window: AggregationWindow
) -> Tuple[Transaction, ...]:
    return tuple(iter_transactions(trans, by_date_range(window.start, window.end)))


def _bucket_sums(
    trans: Iterable[Transaction], start: date, end: date
) -> dict[date, dict[TransactionKind, float]]:
    sums: dict[date, dict[TransactionKind, float]] = defaultdict(lambda: defaultdict(float))
    for t in trans:
        if month_start(start) <= t.date <= month_end(end):
            sums[month_start(t.date)][t.kind] += t.amount
    return sums


def monthly_rollup(
    filtered: Iterable[Transaction], start: date, end: date
) -> Tuple[MonthBucket, ...]:
    """One bucket per calendar month from start to end, empty months included."""
    sums = _bucket_sums(filtered, start, end)
    buckets = []
    for month in month_starts(start, end):
        income = sums[month][TransactionKind.INCOME] if month in sums else 0.0
        expense = sums[month][TransactionKind.EXPENSE] if month in sums else 0.0
        buckets.append(MonthBucket(month=month, income=income, expense=expense, net=income - expense))
    return tuple(buckets)


def category_totals(filtered: Iterable[Transaction]) -> dict[str, float]:
    """Expense total per category, in first-seen order."""
    totals: dict[str, float] = {}
    for t in filtered:
        if t.kind == TransactionKind.EXPENSE:
            totals[t.category] = totals.get(t.category, 0.0) + t.amount
    return totals


def top_categories(
    totals: Mapping[str, float], n: int = DEFAULT_TOP_N
) -> Tuple[Tuple[str, float], ...]:
    return tuple(lazy_top_categories(totals, n))


def _is_investment(kind: TransactionKind):
    def _filter(t: Transaction) -> bool:
        return t.category == INVESTMENT_CATEGORY and t.kind == kind

    return _filter


def investment_metrics(filtered: Iterable[Transaction]) -> InvestmentMetrics:
    """Invested vs returned on the Investment category.

    ROI is defined as 0 when nothing was invested, whatever the returns.
    """
    filtered = tuple(filtered)
    invested_tx = tuple(iter_transactions(filtered, _is_investment(TransactionKind.EXPENSE)))
    returns_tx = tuple(iter_transactions(filtered, _is_investment(TransactionKind.INCOME)))
    invested = total_amount(invested_tx)
    returns = total_amount(returns_tx)
    net = returns - invested
    roi = net / invested * 100 if invested > 0 else 0.0
    return InvestmentMetrics(
        invested=invested,
        returns=returns,
        net=net,
        roi=roi,
        has_activity=bool(invested_tx or returns_tx),
    )


def summary_totals(filtered: Iterable[Transaction], bucket_count: int) -> SummaryTotals:
    filtered = tuple(filtered)
    income = total_income(filtered)
    expense = total_expense(filtered)
    months = max(bucket_count, 1)
    return SummaryTotals(
        total_income=income,
        total_expense=expense,
        net=income - expense,
        avg_monthly_income=income / months,
        avg_monthly_expense=expense / months,
    )


def analytics_report(
    trans: Iterable[Transaction],
    preset: WindowPreset | str,
    now: date,
    top_n: int = DEFAULT_TOP_N,
) -> AnalyticsReport:
    trans = tuple(trans)
    window = resolve_window(trans, preset, now)
    filtered = filter_window(trans, window)
    monthly = monthly_rollup(filtered, window.start, window.end)
    totals = category_totals(filtered)
    return AnalyticsReport(
        window=window,
        monthly=monthly,
        category_totals=totals,
        top_categories=top_categories(totals, top_n),
        investments=investment_metrics(filtered),
        summary=summary_totals(filtered, len(monthly)),
    )


def investment_rollup(
    trans: Iterable[Transaction], now: date, months: int = 6
) -> Tuple[InvestmentBucket, ...]:
    """Monthly invested/returns over the last `months` months up to now."""
    start = subtract_months(now, months)
    relevant = tuple(t for t in trans if t.category == INVESTMENT_CATEGORY)
    sums = _bucket_sums(relevant, start, now)
    buckets = []
    for month in month_starts(start, now):
        invested = sums[month][TransactionKind.EXPENSE] if month in sums else 0.0
        returns = sums[month][TransactionKind.INCOME] if month in sums else 0.0
        buckets.append(InvestmentBucket(month=month, invested=invested, returns=returns, net=returns - invested))
    return tuple(buckets)


def recent_investments(trans: Iterable[Transaction], limit: int = 5) -> Tuple[Transaction, ...]:
    relevant = (t for t in trans if t.category == INVESTMENT_CATEGORY)
    return tuple(newest_first(relevant, limit))
