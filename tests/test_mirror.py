from datetime import date

from finsync.domain import DashboardSummary, MonthData, Transaction, TxType
from finsync.mirror import LocalMirror


def make_month():
    t = Transaction("t1", TxType.INCOME, 1000.0, "Salary", date(2025, 3, 1), 2, 2025, "u1")
    return MonthData(transactions=(t,), targets=(), summary=DashboardSummary(1000.0, 0.0, 1000.0, 1000.0))


def test_zero_balance_summary_is_not_written(tmp_path):
    mirror = LocalMirror(str(tmp_path / "mirror.json"))
    assert mirror.save_summary(DashboardSummary()) is False
    assert not (tmp_path / "mirror.json").exists()


def test_zero_balance_does_not_overwrite_real_value(tmp_path):
    mirror = LocalMirror(str(tmp_path / "mirror.json"))
    mirror.save_summary(DashboardSummary(500, 100, 400, 400))
    mirror.save_summary(DashboardSummary(0, 0, 0, 0))
    summary, _ = mirror.load()
    assert summary.available_balance == 400


def test_empty_month_map_is_not_written(tmp_path):
    mirror = LocalMirror(str(tmp_path / "mirror.json"))
    assert mirror.save_monthly_data({}) is False


def test_state_survives_restart(tmp_path):
    path = str(tmp_path / "nested" / "mirror.json")
    LocalMirror(path).save_summary(DashboardSummary(1000, 400, 600, 600))
    LocalMirror(path).save_monthly_data({"2025-3": make_month()})

    summary, months = LocalMirror(path).load()
    assert summary == DashboardSummary(1000, 400, 600, 600)
    assert months == {"2025-3": make_month()}


def test_missing_or_corrupt_file_loads_empty(tmp_path):
    path = tmp_path / "mirror.json"
    assert LocalMirror(str(path)).load() == (None, {})
    path.write_text("{not json", encoding="utf-8")
    assert LocalMirror(str(path)).load() == (None, {})


def test_clear(tmp_path):
    mirror = LocalMirror(str(tmp_path / "mirror.json"))
    mirror.save_summary(DashboardSummary(1, 0, 1, 1))
    mirror.clear()
    assert mirror.load() == (None, {})


def test_zero_balance_sent_as_string_is_not_written(tmp_path):
    mirror = LocalMirror(str(tmp_path / "mirror.json"))
    mirror.save_summary(DashboardSummary(1000, 400, 600, 600))
    zeroed = DashboardSummary.from_dict({"totalIncome": "0.00", "totalExpenses": "0.00",
                                         "availableBalance": "0.00", "netWorth": "0.00"})
    assert mirror.save_summary(zeroed) is False
    summary, _ = mirror.load()
    assert summary.available_balance == 600
