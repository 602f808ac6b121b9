from datetime import date
from typing import Any, Callable, Dict, Iterable, Sequence

from tracker.analytics import (
    WindowPreset,
    category_totals,
    filter_window,
    investment_metrics,
    monthly_rollup,
    resolve_window,
    summary_totals,
    top_categories,
)
from tracker.domain import AggregationWindow, Transaction

Aggregator = Callable[..., Dict[str, Any]]


class ReportService:
    """Facade for windowed reports built from injected aggregators.

    aggregators: sequence of functions taking (transactions, window, acc) -> dict.
    acc holds the merged outputs of the aggregators that ran before, so a
    later step can build on an earlier one.
    """

    def __init__(self, aggregators: Sequence[Aggregator]):
        self.aggregators = aggregators

    def window_report(
        self, transactions: Iterable[Transaction], preset: WindowPreset | str, now: date
    ) -> Dict[str, Any]:
        """Resolve the window, filter to it and run every aggregator in order."""
        transactions = tuple(transactions)
        window = resolve_window(transactions, preset, now)
        filtered = filter_window(transactions, window)
        report = {
            "preset": WindowPreset(preset).value,
            "window": window,
            "count": len(filtered),
            "steps": [],
            "result": {},
        }

        acc: Dict[str, Any] = {}
        for agg in self.aggregators:
            out = agg(filtered, window, acc)
            report["steps"].append({"aggregator": getattr(agg, "__name__", str(agg)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report


def agg_monthly(transactions, window: AggregationWindow, acc) -> Dict[str, Any]:
    return {"monthly": monthly_rollup(transactions, window.start, window.end)}


def agg_categories(transactions, window: AggregationWindow, acc) -> Dict[str, Any]:
    return {"category_totals": category_totals(transactions)}


def agg_top_categories(transactions, window: AggregationWindow, acc) -> Dict[str, Any]:
    totals = acc.get("category_totals")
    if totals is None:
        totals = category_totals(transactions)
    return {"top_categories": top_categories(totals)}


def agg_investments(transactions, window: AggregationWindow, acc) -> Dict[str, Any]:
    return {"investments": investment_metrics(transactions)}


def agg_summary(transactions, window: AggregationWindow, acc) -> Dict[str, Any]:
    bucket_count = len(acc.get("monthly") or monthly_rollup(transactions, window.start, window.end))
    return {"summary": summary_totals(transactions, bucket_count)}


def default_aggregators() -> list[Aggregator]:
    return [agg_monthly, agg_categories, agg_top_categories, agg_investments, agg_summary]
