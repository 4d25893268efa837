from datetime import date

from finsync.domain import Transaction, TransactionDraft, TxType
from finsync.functional import (
    Left, Nothing, Right, Some, find_transaction, validate_target_fields, validate_transaction_draft,
)


def never_locked(month, year):
    return False


def make_draft(**overrides):
    fields = dict(type="expense", amount=25.0, category="Food", date=date(2025, 3, 4), description="Lunch")
    fields.update(overrides)
    return TransactionDraft(**fields)


def test_maybe_map_and_default():
    assert Some(5).map(lambda x: x * 2) == Some(10)
    assert Nothing().map(lambda x: x * 2).is_none()
    assert Nothing().get_or_else(7) == 7


def test_either_bind_short_circuits():
    assert Right(2).bind(lambda x: Right(x + 1)) == Right(3)
    left = Left({"error": "boom"})
    assert left.bind(lambda x: Right(x + 1)) == left
    assert left.get_or_else(None) is None


def test_find_transaction():
    t = Transaction("t1", TxType.INCOME, 10, "Salary", date(2025, 3, 1), 2, 2025, "u1")
    assert find_transaction([t], "t1") == Some(t)
    assert find_transaction([t], "t2").is_none()


def test_valid_draft_passes():
    draft = make_draft()
    result = validate_transaction_draft(draft, "u1", never_locked)
    assert result.is_right()
    assert result.get_or_else(None) is draft


def test_draft_requires_user():
    result = validate_transaction_draft(make_draft(), None, never_locked)
    assert result.get_error()["error"] == "not_authenticated"


def test_draft_rejects_unknown_type():
    result = validate_transaction_draft(make_draft(type="transfer"), "u1", never_locked)
    assert result.get_error()["error"] == "invalid_type"


def test_draft_rejects_non_positive_amount():
    for amount in (0, -10, "abc", None, float("nan")):
        result = validate_transaction_draft(make_draft(amount=amount), "u1", never_locked)
        assert result.is_left()
        assert result.get_error()["error"] == "invalid_amount"


def test_draft_category_must_match_type():
    result = validate_transaction_draft(make_draft(type="income", category="Housing"), "u1", never_locked)
    assert result.get_error()["error"] == "invalid_category"
    assert "Housing" in result.get_error()["message"]


def test_draft_in_locked_month_rejected():
    result = validate_transaction_draft(make_draft(date=date(2025, 5, 1)), "u1", lambda m, y: (y, m) > (2025, 2))
    assert result.get_error()["error"] == "month_locked"


def test_draft_without_date_rejected():
    result = validate_transaction_draft(make_draft(date=None), "u1", never_locked)
    assert result.get_error()["error"] == "invalid_date"


def test_target_fields():
    ok = {"type": "income", "category": "Salary", "targetAmount": 1000}
    assert validate_target_fields(ok) == Right(ok)

    bad_amount = validate_target_fields({"type": "income", "category": "Salary", "targetAmount": 0})
    assert bad_amount.get_error()["error"] == "invalid_amount"

    bad_type = validate_target_fields({"type": "savings", "category": "Salary", "targetAmount": 10})
    assert bad_type.get_error()["error"] == "invalid_type"

    bad_category = validate_target_fields({"type": TxType.EXPENSE, "category": "Salary", "targetAmount": 10})
    assert bad_category.get_error()["error"] == "invalid_category"
