from datetime import date, datetime

import pytest

from finsync.domain import Transaction, TxType
from finsync.memory_remote import InMemoryRemote
from finsync.session import SessionContext

TODAY = date(2025, 3, 15)


def make_tx(id, kind, amount, category, day):
    return Transaction(id, TxType(kind), amount, category, day, day.month - 1, day.year, "u1")


def seed_transactions():
    return [
        make_tx("t1", "income", 1000.0, "Salary", date(2025, 3, 1)),
        make_tx("t2", "expense", 400.0, "Food", date(2025, 3, 2)),
        make_tx("t3", "expense", 200.0, "Housing", date(2025, 2, 10)),
    ]


def make_remote(**kwargs):
    return InMemoryRemote(
        user_id="u1",
        transactions=seed_transactions(),
        clock=lambda: datetime(2025, 1, 1),
        **kwargs,
    )


def make_session(remote, user_id="u1", **kwargs):
    return SessionContext(remote, user_id, clock=lambda: TODAY, **kwargs)


@pytest.fixture
def remote():
    return make_remote()


@pytest.fixture
def session(remote):
    return make_session(remote)
