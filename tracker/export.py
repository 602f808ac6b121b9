"""CSV text for the ledger and summary downloads.

Rows are built as lists of already-formatted strings, then joined with
commas and newlines. Descriptions are always quoted with embedded quotes
doubled; no other field is quoted.
"""
from datetime import date
from typing import Iterable

from tracker.analytics import category_totals
from tracker.domain import Transaction
from tracker.transforms import total_expense, total_income

LEDGER_HEADER = ["Date", "Type", "Category", "Description", "Amount"]


def quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def money(amount: float) -> str:
    return f"{amount:.2f}"


def ledger_rows(transactions: Iterable[Transaction]) -> list[list[str]]:
    rows = [list(LEDGER_HEADER)]
    for t in transactions:
        rows.append([
            t.date.isoformat(),
            t.kind.value,
            t.category,
            quote(t.description),
            money(t.amount),
        ])
    return rows


def summary_rows(transactions: Iterable[Transaction]) -> list[list[str]]:
    transactions = tuple(transactions)
    income = total_income(transactions)
    expenses = total_expense(transactions)
    rows = [
        ["Summary"],
        ["Total Income", money(income)],
        ["Total Expenses", money(expenses)],
        ["Net Worth", money(income - expenses)],
        [""],
        ["Category Breakdown"],
    ]
    rows.extend([category, money(amount)] for category, amount in category_totals(transactions).items())
    return rows


def to_csv(rows: Iterable[list[str]]) -> str:
    return "\n".join(",".join(row) for row in rows)


def ledger_csv(transactions: Iterable[Transaction]) -> str:
    return to_csv(ledger_rows(transactions))


def summary_csv(transactions: Iterable[Transaction]) -> str:
    return to_csv(summary_rows(transactions))


def export_filename(prefix: str, today: date) -> str:
    return f"{prefix}_{today.isoformat()}.csv"
