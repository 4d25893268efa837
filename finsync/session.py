import asyncio
import logging
from datetime import date
from typing import Callable, Dict, List, Optional, Tuple

from finsync import config, month_key
from finsync.cache import MonthCache
from finsync.coordinator import MutationCoordinator
from finsync.domain import DashboardSummary, MonthData, Target, TargetDraft, Transaction, TransactionDraft
from finsync.evaluator import TargetEvaluator
from finsync.events import EventBus, Handler, MONTHLY_DATA_CHANGED, SUMMARY_CHANGED
from finsync.mirror import LocalMirror
from finsync.state import FinanceState

logger = logging.getLogger(__name__)


class SessionContext:
    """Read-only view of the finance state plus the mutation entry points.

    Consumers never assign to the collections; every change goes through the
    coroutine methods, which delegate to MutationCoordinator.
    """

    def __init__(
        self,
        remote,
        user_id: Optional[str],
        mirror: Optional[LocalMirror] = None,
        clock: Callable[[], date] = date.today,
        dedupe_notifications: bool = config.DEDUPE_NOTIFICATIONS,
        currency_symbol: str = config.CURRENCY_SYMBOL,
    ):
        month, year = month_key.current(clock)
        self._state = FinanceState(current_month=month, current_year=year, user_id=user_id)
        self._bus = EventBus()

        seeded: Dict[str, MonthData] = {}
        if mirror is not None:
            summary, seeded = mirror.load()
            if summary is not None:
                self._state.summary = summary
            current = seeded.get(self._state.month_key)
            if current is not None:
                self._state.transactions = current.transactions
                self._state.targets = current.targets
                self._state.summary = current.summary
            self._bus.subscribe(SUMMARY_CHANGED, lambda e: mirror.save_summary(e.payload))
            self._bus.subscribe(MONTHLY_DATA_CHANGED, lambda e: mirror.save_monthly_data(e.payload))

        self._remote = remote
        self._cache = MonthCache(seeded)
        self._coordinator = MutationCoordinator(
            state=self._state,
            remote=remote,
            cache=self._cache,
            bus=self._bus,
            evaluator=TargetEvaluator(dedupe=dedupe_notifications, currency=currency_symbol),
            clock=clock,
        )

    @classmethod
    def from_config(
        cls,
        user_id: Optional[str],
        token: Optional[str] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ) -> "SessionContext":
        if config.USE_MOCK_DATA:
            from finsync.memory_remote import InMemoryRemote
            remote = InMemoryRemote.demo(user_id or "demo")
        else:
            from finsync.remote import RemoteService
            remote = RemoteService(token=token or config.API_TOKEN, on_unauthorized=on_unauthorized)
        return cls(remote, user_id, mirror=LocalMirror(config.MIRROR_PATH))

    # read side

    @property
    def current_month(self) -> int:
        return self._state.current_month

    @property
    def current_year(self) -> int:
        return self._state.current_year

    @property
    def current_month_name(self) -> str:
        return month_key.MONTH_NAMES[self._state.current_month]

    @property
    def month_key(self) -> str:
        return self._state.month_key

    @property
    def user_id(self) -> Optional[str]:
        return self._state.user_id

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> Optional[str]:
        return self._state.error

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._state.transactions

    @property
    def targets(self) -> Tuple[Target, ...]:
        return self._state.targets

    @property
    def notifications(self) -> tuple:
        return self._state.notifications

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._state.notifications if not n.is_read)

    @property
    def summary(self) -> DashboardSummary:
        return self._state.summary

    @property
    def monthly_data(self) -> Dict[str, MonthData]:
        return self._cache.snapshot()

    def is_month_locked(self, month: int, year: int) -> bool:
        return self._coordinator.is_locked(month, year)

    def subscribe(self, name: str, handler: Handler) -> Callable[[], None]:
        return self._bus.subscribe(name, handler)

    def clear_error(self) -> None:
        self._state.error = None

    def close(self) -> None:
        """Release the backend connection; the session is unusable afterwards."""
        self._remote.close()

    # navigation

    async def initialize(self) -> None:
        """Load the displayed month and the notification list concurrently."""
        await asyncio.gather(
            self._coordinator.load_month(self.current_month, self.current_year),
            self._coordinator.refresh_notifications(),
        )

    async def set_month(self, month: int, year: int) -> MonthData:
        changed = (month, year) != (self.current_month, self.current_year)
        self._state.current_month = month
        self._state.current_year = year
        logger.debug("Displaying %s", self.month_key)
        return await self._coordinator.load_month(month, year, clear_display=changed)

    async def next_month(self) -> Optional[MonthData]:
        month, year = month_key.shift(self.current_month, self.current_year, 1)
        if self.is_month_locked(month, year):
            return None
        return await self.set_month(month, year)

    async def previous_month(self) -> MonthData:
        month, year = month_key.shift(self.current_month, self.current_year, -1)
        return await self.set_month(month, year)

    async def reload(self) -> MonthData:
        data = await self._coordinator.reload_month(self.current_month, self.current_year)
        await self._coordinator.refresh_notifications()
        return data

    async def available_months(self) -> List[Tuple[int, int]]:
        return await self._coordinator.available_months()

    # mutations

    async def add_transaction(self, draft: TransactionDraft) -> Transaction:
        return await self._coordinator.add_transaction(draft)

    async def update_transaction(self, tx_id: str, patch: dict) -> Transaction:
        return await self._coordinator.update_transaction(tx_id, patch)

    async def delete_transaction(self, tx_id: str) -> None:
        await self._coordinator.delete_transaction(tx_id)

    async def add_target(self, draft: TargetDraft) -> Target:
        return await self._coordinator.add_target(draft)

    async def update_target(self, target_id: str, patch: dict) -> Target:
        return await self._coordinator.update_target(target_id, patch)

    async def delete_target(self, target_id: str) -> None:
        await self._coordinator.delete_target(target_id)

    async def mark_notification_as_read(self, notification_id: str) -> None:
        await self._coordinator.mark_notification_as_read(notification_id)

    async def delete_notification(self, notification_id: str) -> None:
        await self._coordinator.delete_notification(notification_id)

    async def clear_read_notifications(self) -> None:
        await self._coordinator.clear_read_notifications()
