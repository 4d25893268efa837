from datetime import date, datetime
from functools import reduce
from typing import Iterable, Optional

from finsync.domain import DashboardSummary, Target, Transaction, TxType, to_number


def safe_amount(value) -> float:
    """Coerce an amount to a non-negative finite float; anything else counts as 0."""
    amount = to_number(value)
    return amount if amount > 0 else 0.0


def make_summary(total_income: float, total_expenses: float) -> DashboardSummary:
    balance = total_income - total_expenses
    # no external asset data, so net worth is the balance
    return DashboardSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        available_balance=balance,
        net_worth=balance,
    )


def _fold(acc: tuple, t: Transaction) -> tuple:
    income, expenses = acc
    if t.type == TxType.INCOME:
        return income + safe_amount(t.amount), expenses
    if t.type == TxType.EXPENSE:
        return income, expenses + safe_amount(t.amount)
    return acc


def summarize(trans: Iterable[Transaction]) -> DashboardSummary:
    income, expenses = reduce(_fold, trans, (0.0, 0.0))
    return make_summary(income, expenses)


def combine(a: DashboardSummary, b: DashboardSummary) -> DashboardSummary:
    return make_summary(a.total_income + b.total_income, a.total_expenses + b.total_expenses)


def add_to_summary(s: DashboardSummary, t: Transaction) -> DashboardSummary:
    return combine(s, summarize((t,)))


def positive_only(trans: Iterable[Transaction]) -> tuple:
    return tuple(filter(lambda t: safe_amount(t.amount) > 0, trans))


def progress(target: Target) -> float:
    """Completion percentage of a target, clamped to [0, 100]."""
    target_amount = safe_amount(target.target_amount)
    if target_amount <= 0:
        return 0.0
    pct = safe_amount(target.current_amount) / target_amount * 100
    return min(max(pct, 0.0), 100.0)


def _day(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    return value


def accrued_amount(target: Target, trans: Iterable[Transaction]) -> float:
    """Running total for a target: same type and category, dated on/after createdAt.

    Transactions dated before the target existed never count toward it.
    """
    since = _day(target.created_at)
    return sum(
        safe_amount(t.amount)
        for t in trans
        if t.type == target.type
        and t.category == target.category
        and (since is None or t.date >= since)
    )


def expenses_by_category(trans: Iterable[Transaction]) -> dict:
    totals: dict = {}
    for t in trans:
        if t.type == TxType.EXPENSE:
            totals[t.category] = totals.get(t.category, 0.0) + safe_amount(t.amount)
    return totals


__all__ = [
    "accrued_amount",
    "add_to_summary",
    "combine",
    "expenses_by_category",
    "make_summary",
    "positive_only",
    "progress",
    "safe_amount",
    "summarize",
]
