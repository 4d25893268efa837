from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Generic, Iterable, Optional, TypeVar

from finsync.domain import CATEGORIES, Target, Transaction, TransactionDraft, TxType
from finsync.money import safe_amount

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def find_transaction(trans: Iterable[Transaction], tx_id: str) -> Maybe[Transaction]:
    for t in trans:
        if t.id == tx_id:
            return Some(t)
    return Nothing()


def find_target(targets: Iterable[Target], target_id: str) -> Maybe[Target]:
    for t in targets:
        if t.id == target_id:
            return Some(t)
    return Nothing()


def _check_type(value) -> Either[dict, TxType]:
    try:
        return Right(TxType(value))
    except ValueError:
        return Left({
            "error": "invalid_type",
            "message": f"Type must be 'income' or 'expense', got {value!r}",
            "type": value,
        })


def _check_amount(value, field: str = "amount") -> Either[dict, float]:
    if isinstance(value, bool):
        value = None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        amount = None
    if amount is None or safe_amount(amount) <= 0:
        return Left({
            "error": "invalid_amount",
            "message": f"Please enter a valid {field} greater than zero",
            field: value,
        })
    return Right(amount)


def _check_category(tx_type: TxType, category: str) -> Either[dict, str]:
    if category not in CATEGORIES[tx_type]:
        return Left({
            "error": "invalid_category",
            "message": f"Category {category!r} is not a valid {tx_type.value} category",
            "category": category,
        })
    return Right(category)


def validate_transaction_draft(
    draft: TransactionDraft,
    user_id: Optional[str],
    locked: Callable[[int, int], bool],
) -> Either[dict, TransactionDraft]:
    if not user_id:
        return Left({"error": "not_authenticated", "message": "You must be logged in"})

    def check_date(_) -> Either[dict, TransactionDraft]:
        if not isinstance(draft.date, date):
            return Left({"error": "invalid_date", "message": "A transaction date is required"})
        if locked(draft.date.month - 1, draft.date.year):
            return Left({
                "error": "month_locked",
                "message": "Future months are locked",
                "date": draft.date.isoformat(),
            })
        return Right(draft)

    return (
        _check_type(draft.type)
        .bind(lambda tx_type: _check_category(tx_type, draft.category))
        .bind(lambda _: _check_amount(draft.amount))
        .bind(check_date)
    )


def validate_target_fields(fields: dict) -> Either[dict, dict]:
    """Validate a full or partial target body (wire names)."""
    result: Either[dict, dict] = Right(fields)
    if "type" in fields:
        result = result.bind(lambda _: _check_type(fields["type"]))
        if result.is_right() and fields.get("category") is not None:
            result = result.bind(lambda tx_type: _check_category(tx_type, fields["category"]))
    if "targetAmount" in fields:
        result = result.bind(lambda _: _check_amount(fields["targetAmount"], "targetAmount"))
    return result.bind(lambda _: Right(fields))
