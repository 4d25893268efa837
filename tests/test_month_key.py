from datetime import date

import pytest

from finsync.month_key import MONTH_NAMES, current, decode, is_locked, key, key_for_date, shift


def test_key_format():
    assert key(0, 2025) == "2025-1"
    assert key(11, 2024) == "2024-12"


def test_decode_inverts_key():
    for year in (-3, 0, 1999, 2025, 10000):
        for month in range(12):
            assert decode(key(month, year)) == (month, year)


def test_keys_are_unique():
    keys = {key(m, y) for y in range(2000, 2030) for m in range(12)}
    assert len(keys) == 30 * 12


def test_bad_month_rejected():
    with pytest.raises(ValueError):
        key(12, 2025)
    with pytest.raises(ValueError):
        decode("2025-13")


def test_key_for_date():
    assert key_for_date(date(2025, 3, 31)) == "2025-3"


def test_future_months_are_locked():
    today = date(2025, 3, 15)
    assert is_locked(4, 2025, today) is True
    assert is_locked(3, 2025, today) is True
    assert is_locked(0, 2026, today) is True


def test_present_and_past_are_open():
    today = date(2025, 3, 15)
    assert is_locked(2, 2025, today) is False
    assert is_locked(1, 2025, today) is False
    assert is_locked(11, 2024, today) is False


def test_lock_across_year_boundary():
    today = date(2025, 12, 1)
    assert is_locked(11, 2025, today) is False
    assert is_locked(0, 2026, today) is True


def test_lock_check_is_repeatable():
    today = date(2025, 3, 15)
    for month in range(12):
        assert is_locked(month, 2025, today) == is_locked(month, 2025, today)


def test_shift_wraps_years():
    assert shift(11, 2025, 1) == (0, 2026)
    assert shift(0, 2025, -1) == (11, 2024)
    assert shift(5, 2025, 0) == (5, 2025)


def test_current_uses_clock():
    assert current(lambda: date(2025, 3, 15)) == (2, 2025)
    assert MONTH_NAMES[2] == "March"
