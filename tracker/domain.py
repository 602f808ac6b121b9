from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Optional


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class BudgetStatus(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    OVER = "over"


EXPENSE_CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Rent",
    "Healthcare",
    "Travel",
    "Education",
    "Groceries",
    "Investment",
    "Other",
)

INCOME_CATEGORIES = (
    "Salary",
    "Freelance",
    "Business",
    "Investment",
    "Gift",
    "Other",
)

# "Investment" appears in both sets: spending on it is money invested,
# income on it is a return.
INVESTMENT_CATEGORY = "Investment"

MIN_DESCRIPTION_LENGTH = 3


def categories_for(kind: TransactionKind) -> tuple[str, ...]:
    if kind == TransactionKind.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


@dataclass(frozen=True)
class TransactionInput:
    amount: float         # always > 0, the kind carries the sign
    category: str
    description: str
    date: date
    kind: TransactionKind


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float
    category: str
    description: str
    date: date
    kind: TransactionKind

    @property
    def signed_amount(self) -> float:
        return self.amount if self.kind == TransactionKind.INCOME else -self.amount

    @property
    def is_expense(self) -> bool:
        return self.kind == TransactionKind.EXPENSE

    @property
    def is_income(self) -> bool:
        return self.kind == TransactionKind.INCOME

    @classmethod
    def from_input(cls, id: str, data: TransactionInput) -> "Transaction":
        return cls(
            id=id,
            amount=data.amount,
            category=data.category,
            description=data.description,
            date=data.date,
            kind=data.kind,
        )


# A spending limit for one expense category; spent is derived
@dataclass(frozen=True)
class Budget:
    category: str
    limit: float
    spent: float = 0.0


@dataclass(frozen=True)
class BudgetProgress:
    budget: Budget
    status: BudgetStatus
    percentage: float     # capped at 100 for progress bars
    remaining: float      # floored at 0
    over_by: float        # 0 unless status is OVER


@dataclass(frozen=True)
class BudgetChange:
    budgets: tuple[Budget, ...]
    budget: Budget
    created: bool
    warning: Optional["WouldExceedIncome"] = None


@dataclass(frozen=True)
class AggregationWindow:
    start: date
    end: date


@dataclass(frozen=True)
class MonthBucket:
    month: date           # first day of the month
    income: float
    expense: float
    net: float

    @property
    def label(self) -> str:
        return self.month.strftime("%b %Y")


@dataclass(frozen=True)
class InvestmentMetrics:
    invested: float
    returns: float
    net: float
    roi: float
    has_activity: bool


@dataclass(frozen=True)
class InvestmentBucket:
    month: date
    invested: float
    returns: float
    net: float

    @property
    def label(self) -> str:
        return self.month.strftime("%b %Y")


@dataclass(frozen=True)
class SummaryTotals:
    total_income: float
    total_expense: float
    net: float
    avg_monthly_income: float
    avg_monthly_expense: float


@dataclass(frozen=True)
class AnalyticsReport:
    window: AggregationWindow
    monthly: tuple[MonthBucket, ...]
    category_totals: Dict[str, float]
    top_categories: tuple[tuple[str, float], ...]
    investments: InvestmentMetrics
    summary: SummaryTotals


# --- error values, returned through Either / Maybe rather than raised


@dataclass(frozen=True)
class NotFound:
    id: str

    @property
    def message(self) -> str:
        return f"Transaction with ID {self.id} does not exist"


@dataclass(frozen=True)
class InvalidLimit:
    limit: float

    @property
    def message(self) -> str:
        return f"Budget limit must be greater than 0, got {self.limit}"


@dataclass(frozen=True)
class WouldExceedIncome:
    over_by: float
    total_budgets: float
    total_income: float

    @property
    def message(self) -> str:
        return (
            f"Total budgets ({self.total_budgets:.2f}) exceed your income "
            f"({self.total_income:.2f}) by {self.over_by:.2f}"
        )


@dataclass(frozen=True)
class ValidationFailed:
    errors: Dict[str, str]

    @property
    def message(self) -> str:
        return "; ".join(f"{field}: {msg}" for field, msg in self.errors.items())
