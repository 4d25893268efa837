from typing import Dict, Iterable, Optional

from finsync import month_key
from finsync.domain import MonthData, Target, Transaction
from finsync.money import positive_only, summarize


class MonthCache:
    """Month key -> MonthData for every month visited this session.

    No TTL: an entry is replaced only by a later write to the same key.
    Entries seeded from the local mirror are served but marked stale, so the
    first visit of the session still fetches them once.
    """

    def __init__(self, seed: Optional[Dict[str, MonthData]] = None):
        self._months: Dict[str, MonthData] = dict(seed or {})
        self._stale = set(self._months)

    def get(self, month: int, year: int) -> Optional[MonthData]:
        return self._months.get(month_key.key(month, year))

    def get_by_key(self, key: str) -> Optional[MonthData]:
        return self._months.get(key)

    def is_fresh(self, key: str) -> bool:
        return key in self._months and key not in self._stale

    def put(self, key: str, data: MonthData) -> None:
        self._months[key] = data
        self._stale.discard(key)

    def drop(self, key: str) -> None:
        self._months.pop(key, None)
        self._stale.discard(key)

    def set_transactions(self, key: str, trans: Iterable[Transaction]) -> bool:
        """Replace a cached month's transactions and recompute its summary.

        Months never fetched stay absent so a later visit still loads them whole.
        """
        entry = self._months.get(key)
        if entry is None:
            return False
        kept = positive_only(trans)
        self._months[key] = entry.with_changes(transactions=kept, summary=summarize(kept))
        return True

    def set_targets(self, key: str, targets: Iterable[Target]) -> bool:
        entry = self._months.get(key)
        if entry is None:
            return False
        self._months[key] = entry.with_changes(targets=tuple(targets))
        return True

    def find_transaction(self, tx_id: str) -> Optional[Transaction]:
        for entry in self._months.values():
            for t in entry.transactions:
                if t.id == tx_id:
                    return t
        return None

    def snapshot(self) -> Dict[str, MonthData]:
        return dict(self._months)

    def __contains__(self, key: str) -> bool:
        return key in self._months

    def __len__(self) -> int:
        return len(self._months)
