import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional


class TxType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class IncomeCategory(str, Enum):
    SALARY = "Salary"
    INTEREST = "Interest"
    INVESTMENTS = "Investments"
    BUSINESS = "Business"
    FREELANCE = "Freelance"
    OTHER = "Other"


class ExpenseCategory(str, Enum):
    HOUSING = "Housing"
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    UTILITIES = "Utilities"
    ENTERTAINMENT = "Entertainment"
    HEALTHCARE = "Healthcare"
    PERSONAL = "Personal"
    EDUCATION = "Education"
    DEBT = "Debt"
    OTHER = "Other"


CATEGORIES = {
    TxType.INCOME: tuple(c.value for c in IncomeCategory),
    TxType.EXPENSE: tuple(c.value for c in ExpenseCategory),
}


class Band(str, Enum):
    NONE = "none"
    APPROACHING = "approaching"
    ACHIEVED = "achieved"
    EXCEEDED = "exceeded"


def parse_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # backend sends either "2025-03-01" or a full ISO timestamp
    return parse_datetime(value).date()


def parse_datetime(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_number(value) -> float:
    """Backend numbers may arrive as strings ("12.50"); anything unparseable is 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


@dataclass(frozen=True)
class TransactionDraft:
    type: str
    amount: float
    category: str
    date: date
    description: str = ""


@dataclass(frozen=True)
class Transaction:
    id: str
    type: TxType
    amount: float
    category: str
    date: date
    month: int       # 0..11, denormalized from date
    year: int
    user_id: str
    description: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "Transaction":
        tx_date = parse_date(d.get("date"))
        month = d.get("month")
        year = d.get("year")
        if tx_date is not None:
            month, year = tx_date.month - 1, tx_date.year
        return cls(
            id=str(d["id"]),
            type=TxType(d["type"]),
            amount=to_number(d.get("amount")),
            category=d.get("category", ""),
            date=tx_date,
            month=int(month),
            year=int(year),
            user_id=str(d.get("userId", "")),
            description=d.get("description") or "",
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "amount": self.amount,
            "category": self.category,
            "date": _iso(self.date),
            "month": self.month,
            "year": self.year,
            "userId": self.user_id,
            "description": self.description,
        }


@dataclass(frozen=True)
class TargetDraft:
    type: str
    category: str
    target_amount: float


@dataclass(frozen=True)
class Target:
    id: str
    type: TxType
    category: str
    target_amount: float
    current_amount: float = 0
    user_id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, d: dict) -> "Target":
        return cls(
            id=str(d["id"]),
            type=TxType(d["type"]),
            category=d.get("category", ""),
            target_amount=to_number(d.get("targetAmount")),
            current_amount=to_number(d.get("currentAmount")),
            user_id=str(d.get("userId", "")),
            created_at=parse_datetime(d.get("createdAt")),
            updated_at=parse_datetime(d.get("updatedAt")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "category": self.category,
            "targetAmount": self.target_amount,
            "currentAmount": self.current_amount,
            "userId": self.user_id,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class DashboardSummary:
    total_income: float = 0
    total_expenses: float = 0
    available_balance: float = 0
    net_worth: float = 0

    @classmethod
    def from_dict(cls, d: dict) -> "DashboardSummary":
        return cls(
            total_income=to_number(d.get("totalIncome")),
            total_expenses=to_number(d.get("totalExpenses")),
            available_balance=to_number(d.get("availableBalance")),
            net_worth=to_number(d.get("netWorth")),
        )

    def to_dict(self) -> dict:
        return {
            "totalIncome": self.total_income,
            "totalExpenses": self.total_expenses,
            "availableBalance": self.available_balance,
            "netWorth": self.net_worth,
        }


EMPTY_SUMMARY = DashboardSummary()


@dataclass(frozen=True)
class MonthData:
    transactions: tuple = ()
    targets: tuple = ()
    summary: DashboardSummary = field(default_factory=DashboardSummary)

    @classmethod
    def from_dict(cls, d: dict) -> "MonthData":
        return cls(
            transactions=tuple(Transaction.from_dict(t) for t in d.get("transactions", [])),
            targets=tuple(Target.from_dict(t) for t in d.get("targets", [])),
            summary=DashboardSummary.from_dict(d.get("summary") or {}),
        )

    def to_dict(self) -> dict:
        return {
            "transactions": [t.to_dict() for t in self.transactions],
            "targets": [t.to_dict() for t in self.targets],
            "summary": self.summary.to_dict(),
        }

    def with_changes(self, **changes) -> "MonthData":
        return replace(self, **changes)


@dataclass(frozen=True)
class Notification:
    id: str
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    is_read: bool = False
    created_at: Optional[datetime] = None
    user_id: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> "Notification":
        return cls(
            id=str(d["id"]),
            title=d.get("title", ""),
            message=d.get("message", ""),
            type=NotificationType(d.get("type", "info")),
            is_read=bool(d.get("isRead", d.get("read", False))),
            created_at=parse_datetime(d.get("createdAt")),
            user_id=str(d.get("userId", "")),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "isRead": self.is_read,
            "createdAt": _iso(self.created_at),
            "userId": self.user_id,
        }


# Outgoing notification body; the server assigns id/createdAt.
@dataclass(frozen=True)
class NotificationRequest:
    title: str
    message: str
    type: NotificationType
    target_id: str
    band: Band

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "isRead": False,
        }
