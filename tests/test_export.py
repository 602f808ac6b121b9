from datetime import date

from tracker.domain import Transaction, TransactionKind
from tracker.export import export_filename, ledger_csv, ledger_rows, summary_csv, summary_rows

INCOME = TransactionKind.INCOME
EXPENSE = TransactionKind.EXPENSE


def sample():
    return (
        Transaction("t1", 2500.0, "Salary", "March salary", date(2025, 3, 1), INCOME),
        Transaction("t2", 12.5, "Food & Dining", 'Lunch at "Joe\'s"', date(2025, 3, 2), EXPENSE),
        Transaction("t3", 800.0, "Rent", "March rent", date(2025, 3, 3), EXPENSE),
        Transaction("t4", 7.25, "Food & Dining", "Coffee, large", date(2025, 3, 4), EXPENSE),
    )


def test_ledger_rows():
    rows = ledger_rows(sample())

    assert rows[0] == ["Date", "Type", "Category", "Description", "Amount"]
    assert rows[1] == ["2025-03-01", "income", "Salary", '"March salary"', "2500.00"]
    assert rows[2][3] == '"Lunch at ""Joe\'s"""'
    assert len(rows) == 5


def test_ledger_csv_text():
    text = ledger_csv(sample()[2:])

    assert text == (
        "Date,Type,Category,Description,Amount\n"
        '2025-03-03,expense,Rent,"March rent",800.00\n'
        '2025-03-04,expense,Food & Dining,"Coffee, large",7.25'
    )


def test_ledger_csv_empty_is_header_only():
    assert ledger_csv(()) == "Date,Type,Category,Description,Amount"


def test_summary_rows():
    rows = summary_rows(sample())

    assert rows == [
        ["Summary"],
        ["Total Income", "2500.00"],
        ["Total Expenses", "819.75"],
        ["Net Worth", "1680.25"],
        [""],
        ["Category Breakdown"],
        ["Food & Dining", "19.75"],
        ["Rent", "800.00"],
    ]


def test_summary_csv_text():
    text = summary_csv(sample()[:1])

    assert text == "Summary\nTotal Income,2500.00\nTotal Expenses,0.00\nNet Worth,2500.00\n\nCategory Breakdown"


def test_export_filename():
    assert export_filename("expenses", date(2025, 3, 9)) == "expenses_2025-03-09.csv"
