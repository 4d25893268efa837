import asyncio
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple
from uuid import uuid4

from finsync.domain import DashboardSummary, Notification, Target, Transaction
from finsync.errors import RemoteCallError
from finsync.money import accrued_amount, summarize


class InMemoryRemote:
    """Backend stand-in with the same coroutine interface as RemoteService.

    Used for mock-data mode and in tests. ``fail_on`` holds method names that
    should raise RemoteCallError; ``calls`` records every method invoked.
    """

    def __init__(
        self,
        user_id: str = "u1",
        transactions: Iterable[Transaction] = (),
        targets: Iterable[Target] = (),
        notifications: Iterable[Notification] = (),
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.user_id = user_id
        self.clock = clock
        self.transactions: Dict[str, Transaction] = {t.id: t for t in transactions}
        self.targets: Dict[str, Target] = {t.id: t for t in targets}
        self.notifications: Dict[str, Notification] = {n.id: n for n in notifications}
        self.fail_on: Set[str] = set()
        self.calls: List[str] = []
        self.closed = False

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        await asyncio.sleep(0)
        if name in self.fail_on:
            raise RemoteCallError(f"Simulated failure in {name}", 503, name)

    def _missing(self, kind: str, item_id: str) -> RemoteCallError:
        return RemoteCallError(f"{kind} {item_id} not found", 404, item_id)

    def _with_progress(self, target: Target) -> Target:
        d = target.to_dict()
        d["currentAmount"] = accrued_amount(target, self.transactions.values())
        return Target.from_dict(d)

    # transactions

    async def list_transactions(self, month: int, year: int) -> List[Transaction]:
        await self._enter("list_transactions")
        return [t for t in self.transactions.values() if t.month == month and t.year == year]

    async def create_transaction(self, body: dict) -> Transaction:
        await self._enter("create_transaction")
        tx = Transaction.from_dict({**body, "id": uuid4().hex, "userId": self.user_id})
        self.transactions[tx.id] = tx
        return tx

    async def update_transaction(self, tx_id: str, patch: dict) -> Transaction:
        await self._enter("update_transaction")
        if tx_id not in self.transactions:
            raise self._missing("Transaction", tx_id)
        tx = Transaction.from_dict({**self.transactions[tx_id].to_dict(), **patch, "id": tx_id})
        self.transactions[tx_id] = tx
        return tx

    async def delete_transaction(self, tx_id: str) -> None:
        await self._enter("delete_transaction")
        if self.transactions.pop(tx_id, None) is None:
            raise self._missing("Transaction", tx_id)

    # targets

    async def list_targets(self) -> List[Target]:
        await self._enter("list_targets")
        return [self._with_progress(t) for t in self.targets.values()]

    async def create_target(self, body: dict) -> Target:
        await self._enter("create_target")
        now = self.clock().isoformat()
        target = Target.from_dict({
            **body, "id": uuid4().hex, "userId": self.user_id, "createdAt": now, "updatedAt": now,
        })
        self.targets[target.id] = target
        return self._with_progress(target)

    async def update_target(self, target_id: str, patch: dict) -> Target:
        await self._enter("update_target")
        if target_id not in self.targets:
            raise self._missing("Target", target_id)
        merged = {**self.targets[target_id].to_dict(), **patch, "id": target_id}
        merged["updatedAt"] = self.clock().isoformat()
        target = Target.from_dict(merged)
        self.targets[target_id] = target
        return self._with_progress(target)

    async def delete_target(self, target_id: str) -> None:
        await self._enter("delete_target")
        if self.targets.pop(target_id, None) is None:
            raise self._missing("Target", target_id)

    # monthly data

    async def month_summary(self, month: int, year: int) -> DashboardSummary:
        await self._enter("month_summary")
        return summarize(t for t in self.transactions.values() if t.month == month and t.year == year)

    async def available_months(self) -> List[Tuple[int, int]]:
        await self._enter("available_months")
        return sorted({(t.month, t.year) for t in self.transactions.values()}, key=lambda m: (m[1], m[0]))

    # notifications

    async def list_notifications(self) -> List[Notification]:
        await self._enter("list_notifications")
        return sorted(self.notifications.values(), key=lambda n: n.created_at or datetime.min, reverse=True)

    async def create_notification(self, body: dict) -> Optional[Notification]:
        await self._enter("create_notification")
        n = Notification.from_dict({
            **body, "id": uuid4().hex, "userId": self.user_id, "createdAt": self.clock().isoformat(),
        })
        self.notifications[n.id] = n
        return n

    async def mark_notification_read(self, notification_id: str) -> None:
        await self._enter("mark_notification_read")
        n = self.notifications.get(notification_id)
        if n is None:
            raise self._missing("Notification", notification_id)
        self.notifications[notification_id] = Notification.from_dict({**n.to_dict(), "isRead": True})

    async def delete_notification(self, notification_id: str) -> None:
        await self._enter("delete_notification")
        if self.notifications.pop(notification_id, None) is None:
            raise self._missing("Notification", notification_id)

    async def clear_read_notifications(self) -> None:
        await self._enter("clear_read_notifications")
        self.notifications = {k: n for k, n in self.notifications.items() if not n.is_read}

    def close(self) -> None:
        self.closed = True

    @classmethod
    def demo(cls, user_id: str = "u1", today: Optional[date] = None) -> "InMemoryRemote":
        """Sample data for the current and previous month."""
        today = today or date.today()
        first = today.replace(day=1)
        prev = (first - timedelta(days=1)).replace(day=1)
        rows = [
            ("income", 13000, "Salary", first, "Monthly salary"),
            ("income", 2100, "Business", first + timedelta(days=2), "E-commerce revenue"),
            ("income", 950, "Interest", prev + timedelta(days=19), "Savings account interest"),
            ("expense", 3452, "Housing", first, "Rent payment"),
            ("expense", 2190, "Transportation", first + timedelta(days=4), "Car payment and fuel"),
            ("expense", 950, "Food", first + timedelta(days=9), "Groceries"),
            ("expense", 3452, "Housing", prev, "Rent payment"),
        ]
        trans = [
            Transaction.from_dict({
                "id": uuid4().hex, "type": kind, "amount": amount, "category": category,
                "date": day.isoformat(), "userId": user_id, "description": note,
            })
            for kind, amount, category, day, note in rows
        ]
        start = datetime(prev.year, prev.month, 1).isoformat()
        targets = [
            Target.from_dict({"id": uuid4().hex, "type": "income", "category": "Salary",
                              "targetAmount": 15000, "userId": user_id, "createdAt": start}),
            Target.from_dict({"id": uuid4().hex, "type": "expense", "category": "Housing",
                              "targetAmount": 8000, "userId": user_id, "createdAt": start}),
        ]
        return cls(user_id=user_id, transactions=trans, targets=targets)
