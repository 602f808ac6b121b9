from datetime import date

import pytest

from tracker.analytics import (
    WindowPreset,
    analytics_report,
    category_totals,
    filter_window,
    investment_metrics,
    investment_rollup,
    monthly_rollup,
    recent_investments,
    resolve_window,
    summary_totals,
    top_categories,
)
from tracker.domain import AggregationWindow, Transaction, TransactionKind

INCOME = TransactionKind.INCOME
EXPENSE = TransactionKind.EXPENSE
NOW = date(2025, 6, 15)


def make_tx(id, amount, category, kind, when):
    return Transaction(id=id, amount=amount, category=category, description="entry", date=when, kind=kind)


def sample():
    return (
        make_tx("t1", 3000.0, "Salary", INCOME, date(2025, 4, 1)),
        make_tx("t2", 200.0, "Groceries", EXPENSE, date(2025, 4, 5)),
        make_tx("t3", 3000.0, "Salary", INCOME, date(2025, 6, 1)),
        make_tx("t4", 900.0, "Rent", EXPENSE, date(2025, 6, 2)),
        make_tx("t5", 50.0, "Groceries", EXPENSE, date(2025, 6, 14)),
        make_tx("t6", 75.0, "Groceries", EXPENSE, date(2024, 12, 20)),
    )


@pytest.mark.parametrize(
    "preset,start",
    [
        ("1month", date(2025, 5, 15)),
        ("3months", date(2025, 3, 15)),
        ("6months", date(2024, 12, 15)),
        ("12months", date(2024, 6, 15)),
    ],
)
def test_resolve_window_month_presets(preset, start):
    assert resolve_window(sample(), preset, NOW) == AggregationWindow(start=start, end=NOW)


def test_resolve_window_clamps_month_end():
    window = resolve_window((), WindowPreset.ONE_MONTH, date(2025, 3, 31))

    assert window.start == date(2025, 2, 28)


def test_resolve_window_all_uses_earliest_transaction():
    assert resolve_window(sample(), "all", NOW).start == date(2024, 12, 20)


def test_resolve_window_all_empty_is_now():
    assert resolve_window((), "all", NOW) == AggregationWindow(start=NOW, end=NOW)


def test_resolve_window_unknown_preset():
    with pytest.raises(ValueError):
        resolve_window((), "2weeks", NOW)


def test_filter_window_is_inclusive():
    trans = (
        make_tx("a", 1.0, "Other", EXPENSE, date(2025, 3, 14)),
        make_tx("b", 1.0, "Other", EXPENSE, date(2025, 3, 15)),
        make_tx("c", 1.0, "Other", EXPENSE, NOW),
        make_tx("d", 1.0, "Other", EXPENSE, date(2025, 6, 16)),
    )

    filtered = filter_window(trans, AggregationWindow(date(2025, 3, 15), NOW))

    assert [t.id for t in filtered] == ["b", "c"]


def test_monthly_rollup_three_months_has_three_buckets():
    trans = (
        make_tx("a", 100.0, "Salary", INCOME, date(2025, 4, 10)),
        make_tx("b", 40.0, "Rent", EXPENSE, date(2025, 6, 30)),
    )

    buckets = monthly_rollup(trans, date(2025, 4, 1), date(2025, 6, 30))

    assert [b.month for b in buckets] == [date(2025, 4, 1), date(2025, 5, 1), date(2025, 6, 1)]
    assert [(b.income, b.expense, b.net) for b in buckets] == [
        (100.0, 0.0, 100.0),
        (0.0, 0.0, 0.0),
        (0.0, 40.0, -40.0),
    ]
    assert buckets[0].label == "Apr 2025"


def test_monthly_rollup_single_month_window():
    buckets = monthly_rollup((), NOW, NOW)

    assert len(buckets) == 1
    assert buckets[0].month == date(2025, 6, 1)


def test_monthly_rollup_crosses_year_boundary():
    buckets = monthly_rollup((), date(2024, 11, 20), date(2025, 2, 3))

    assert [b.month for b in buckets] == [date(2024, 11, 1), date(2024, 12, 1), date(2025, 1, 1), date(2025, 2, 1)]


def test_category_totals_only_expenses():
    totals = category_totals(sample())

    assert totals == {"Groceries": 325.0, "Rent": 900.0}
    assert list(totals) == ["Groceries", "Rent"]


def test_top_categories_sorted_and_truncated():
    totals = {"A": 100.0, "B": 300.0, "C": 200.0}

    assert top_categories(totals, 2) == (("B", 300.0), ("C", 200.0))
    assert len(top_categories(totals)) == 3


def test_top_categories_ties_keep_mapping_order():
    totals = {"X": 50.0, "Y": 80.0, "Z": 50.0, "W": 50.0}

    assert top_categories(totals, 3) == (("Y", 80.0), ("X", 50.0), ("Z", 50.0))


def test_investment_metrics_roi():
    trans = (
        make_tx("a", 1000.0, "Investment", EXPENSE, date(2025, 1, 1)),
        make_tx("b", 1250.0, "Investment", INCOME, date(2025, 2, 1)),
        make_tx("c", 500.0, "Salary", INCOME, date(2025, 2, 1)),
    )

    m = investment_metrics(trans)

    assert m.invested == 1000.0
    assert m.returns == 1250.0
    assert m.net == 250.0
    assert m.roi == 25.0
    assert m.has_activity is True


def test_investment_roi_is_zero_without_investment():
    trans = (make_tx("b", 700.0, "Investment", INCOME, date(2025, 2, 1)),)

    m = investment_metrics(trans)

    assert m.invested == 0.0
    assert m.returns == 700.0
    assert m.roi == 0
    assert investment_metrics(()).roi == 0
    assert investment_metrics(()).has_activity is False


def test_summary_totals_guards_zero_buckets():
    trans = (make_tx("a", 300.0, "Salary", INCOME, NOW), make_tx("b", 120.0, "Rent", EXPENSE, NOW))

    s = summary_totals(trans, 0)

    assert s.total_income == 300.0
    assert s.total_expense == 120.0
    assert s.net == 180.0
    assert s.avg_monthly_income == 300.0
    assert summary_totals(trans, 3).avg_monthly_expense == 40.0


def test_analytics_report_three_months():
    report = analytics_report(sample(), "3months", NOW)

    assert report.window.start == date(2025, 3, 15)
    assert [b.label for b in report.monthly] == ["Mar 2025", "Apr 2025", "May 2025", "Jun 2025"]
    assert report.category_totals == {"Groceries": 250.0, "Rent": 900.0}
    assert report.top_categories[0] == ("Rent", 900.0)
    assert report.summary.total_income == 6000.0
    assert report.summary.avg_monthly_income == 1500.0
    assert report.investments.roi == 0


def test_analytics_report_all_includes_oldest():
    report = analytics_report(sample(), WindowPreset.ALL, NOW)

    assert report.monthly[0].month == date(2024, 12, 1)
    assert report.monthly[0].expense == 75.0
    assert len(report.monthly) == 7


def test_investment_rollup_and_recent():
    trans = (
        make_tx("a", 100.0, "Investment", EXPENSE, date(2025, 5, 3)),
        make_tx("b", 30.0, "Investment", INCOME, date(2025, 6, 1)),
        make_tx("c", 20.0, "Groceries", EXPENSE, date(2025, 6, 2)),
        make_tx("d", 10.0, "Investment", EXPENSE, date(2024, 1, 1)),
    )

    buckets = investment_rollup(trans, NOW, months=2)

    assert [b.label for b in buckets] == ["Apr 2025", "May 2025", "Jun 2025"]
    assert [(b.invested, b.returns, b.net) for b in buckets] == [(0.0, 0.0, 0.0), (100.0, 0.0, -100.0), (0.0, 30.0, 30.0)]
    assert [t.id for t in recent_investments(trans, 2)] == ["b", "a"]
