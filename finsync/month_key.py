from datetime import date
from typing import Callable, Optional, Tuple

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _check_month(month: int) -> None:
    if not 0 <= month <= 11:
        raise ValueError(f"month index must be in 0..11, got {month}")


def key(month: int, year: int) -> str:
    """Cache key for a (0-based month, year) pair, e.g. (2, 2025) -> '2025-3'."""
    _check_month(month)
    return f"{year}-{month + 1}"


def decode(month_key: str) -> Tuple[int, int]:
    # rsplit keeps negative years intact
    year_part, month_part = month_key.rsplit("-", 1)
    month = int(month_part) - 1
    _check_month(month)
    return month, int(year_part)


def key_for_date(d: date) -> str:
    return key(d.month - 1, d.year)


def is_locked(month: int, year: int, today: Optional[date] = None) -> bool:
    """True iff (year, month) lies strictly after the current calendar month."""
    today = today or date.today()
    return (year, month) > (today.year, today.month - 1)


def shift(month: int, year: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + month + delta
    return index % 12, index // 12


def current(clock: Callable[[], date] = date.today) -> Tuple[int, int]:
    today = clock()
    return today.month - 1, today.year
