from datetime import date

from finsync.cache import MonthCache
from finsync.domain import DashboardSummary, MonthData, Target, Transaction, TxType


def make_tx(id, kind, amount, day=date(2025, 3, 1)):
    category = "Salary" if kind == "income" else "Food"
    return Transaction(id, TxType(kind), amount, category, day, day.month - 1, day.year, "u1")


def test_miss_returns_none():
    assert MonthCache().get(2, 2025) is None


def test_put_then_get():
    cache = MonthCache()
    data = MonthData(transactions=(make_tx("t1", "income", 10),))
    cache.put("2025-3", data)
    assert cache.get(2, 2025) is data
    assert "2025-3" in cache
    assert cache.is_fresh("2025-3")


def test_set_transactions_recomputes_summary():
    cache = MonthCache()
    cache.put("2025-3", MonthData())
    assert cache.set_transactions("2025-3", [make_tx("t1", "income", 100), make_tx("t2", "expense", 30),
                                             make_tx("t3", "expense", 0)])
    entry = cache.get(2, 2025)
    assert [t.id for t in entry.transactions] == ["t1", "t2"]
    assert entry.summary == DashboardSummary(100, 30, 70, 70)


def test_unvisited_month_is_not_created():
    cache = MonthCache()
    assert cache.set_transactions("2025-3", [make_tx("t1", "income", 100)]) is False
    assert cache.set_targets("2025-3", []) is False
    assert len(cache) == 0


def test_set_targets_keeps_transactions():
    cache = MonthCache()
    tx = make_tx("t1", "income", 100)
    cache.put("2025-3", MonthData(transactions=(tx,)))
    target = Target("g1", TxType.INCOME, "Salary", 1000)
    cache.set_targets("2025-3", [target])
    entry = cache.get(2, 2025)
    assert entry.targets == (target,)
    assert entry.transactions == (tx,)


def test_seeded_entries_are_stale_until_refetched():
    cache = MonthCache({"2025-3": MonthData()})
    assert cache.get(2, 2025) is not None
    assert not cache.is_fresh("2025-3")
    cache.put("2025-3", MonthData())
    assert cache.is_fresh("2025-3")


def test_find_transaction_across_months():
    cache = MonthCache()
    cache.put("2025-2", MonthData(transactions=(make_tx("t9", "expense", 5, date(2025, 2, 3)),)))
    assert cache.find_transaction("t9").month == 1
    assert cache.find_transaction("nope") is None


def test_drop():
    cache = MonthCache()
    cache.put("2025-3", MonthData())
    cache.drop("2025-3")
    assert cache.get(2, 2025) is None
