import asyncio
import logging
from dataclasses import replace
from datetime import date
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from finsync import month_key
from finsync.cache import MonthCache
from finsync.domain import (
    EMPTY_SUMMARY, DashboardSummary, MonthData, Target, TargetDraft, Transaction,
    TransactionDraft, TxType, parse_date,
)
from finsync.errors import NotFoundError, RemoteCallError, ValidationError
from finsync.evaluator import TargetEvaluator
from finsync.events import (
    EventBus, MONTHLY_DATA_CHANGED, NOTIFICATIONS_CHANGED, STATE_CHANGED, SUMMARY_CHANGED,
)
from finsync.functional import (
    Either, find_target, find_transaction, validate_target_fields, validate_transaction_draft,
)
from finsync.money import positive_only, summarize
from finsync.state import FinanceState

logger = logging.getLogger(__name__)

R = TypeVar('R')


def _unwrap(result: Either):
    if result.is_left():
        raise ValidationError.from_left(result.get_error())
    return result.get_or_else(None)


def _wire_body(draft: TransactionDraft, user_id: str) -> dict:
    return {
        "type": TxType(draft.type).value,
        "amount": float(draft.amount),
        "category": draft.category,
        "date": draft.date.isoformat(),
        "month": draft.date.month - 1,
        "year": draft.date.year,
        "description": draft.description or "",
        "userId": user_id,
    }


class MutationCoordinator:
    """The only writer of session state, the month cache and (via events) the mirror.

    Every operation is validate -> remote call -> local update. Local state is
    touched only after the remote call succeeded, so a failure leaves it as it
    was; the error message is recorded and the exception re-raised.
    """

    def __init__(
        self,
        state: FinanceState,
        remote,
        cache: MonthCache,
        bus: EventBus,
        evaluator: TargetEvaluator,
        clock: Callable[[], date] = date.today,
    ):
        self.state = state
        self.remote = remote
        self.cache = cache
        self.bus = bus
        self.evaluator = evaluator
        self.clock = clock

    # plumbing

    def is_locked(self, month: int, year: int) -> bool:
        return month_key.is_locked(month, year, self.clock())

    def _set_summary(self, summary: DashboardSummary) -> None:
        self.state.summary = summary
        self.bus.publish(SUMMARY_CHANGED, summary)

    def _months_changed(self) -> None:
        self.bus.publish(MONTHLY_DATA_CHANGED, self.cache.snapshot())

    def _set_notifications(self, notifications) -> None:
        self.state.notifications = tuple(notifications)
        self.bus.publish(NOTIFICATIONS_CHANGED, self.state.notifications)

    async def _run(self, failure: str, operation: Callable[[], Awaitable[R]]) -> R:
        self.state.in_flight += 1
        self.state.error = None
        self.bus.publish(STATE_CHANGED, self.state)
        try:
            return await operation()
        except ValidationError as e:
            self.state.error = e.message
            raise
        except RemoteCallError as e:
            logger.error("%s: %s", failure, e.message)
            self.state.error = failure
            raise
        finally:
            self.state.in_flight -= 1
            self.bus.publish(STATE_CHANGED, self.state)

    def _show_month(self, key: str, data: MonthData) -> None:
        # a response for a month the user already left must not touch the display
        if key != self.state.month_key:
            return
        self.state.transactions = data.transactions
        self.state.targets = data.targets
        self._set_summary(data.summary)

    def _replace_displayed(self, trans) -> None:
        self.state.transactions = positive_only(trans)
        self._set_summary(summarize(self.state.transactions))

    # month loading

    async def _summary_or_none(self, month: int, year: int) -> Optional[DashboardSummary]:
        try:
            return await self.remote.month_summary(month, year)
        except RemoteCallError:
            logger.debug("No server summary for %s, computing locally", month_key.key(month, year))
            return None

    async def _fetch_month(self, month: int, year: int) -> MonthData:
        trans, targets, summary = await asyncio.gather(
            self.remote.list_transactions(month, year),
            self.remote.list_targets(),
            self._summary_or_none(month, year),
        )
        kept = positive_only(trans)
        return MonthData(
            transactions=kept,
            targets=tuple(targets),
            summary=summary if summary is not None else summarize(kept),
        )

    async def load_month(self, month: int, year: int, clear_display: bool = False) -> MonthData:
        """Get-or-fetch a month; a fresh cache hit costs no network call."""
        key = month_key.key(month, year)
        cached = self.cache.get(month, year)
        if cached is not None:
            self._show_month(key, cached)
            if self.cache.is_fresh(key):
                return cached
        elif clear_display and key == self.state.month_key:
            self.state.transactions = ()
            self._set_summary(EMPTY_SUMMARY)

        async def fetch() -> MonthData:
            data = await self._fetch_month(month, year)
            self.cache.put(key, data)
            self._months_changed()
            self._show_month(key, data)
            return data

        return await self._run("Failed to fetch data", fetch)

    async def reload_month(self, month: int, year: int) -> MonthData:
        self.cache.drop(month_key.key(month, year))
        return await self.load_month(month, year)

    async def available_months(self) -> List[Tuple[int, int]]:
        return await self._run("Failed to fetch available months", self.remote.available_months)

    # follow-ups after a committed write

    async def _refresh_targets(self) -> None:
        try:
            targets = await self.remote.list_targets()
        except RemoteCallError as e:
            logger.warning("Target refresh failed: %s", e.message)
            self.state.error = "Failed to refresh targets"
            return
        self.state.targets = tuple(targets)
        if self.cache.set_targets(self.state.month_key, self.state.targets):
            self._months_changed()

    async def evaluate_targets(self) -> None:
        requests = self.evaluator.evaluate(self.state.targets)
        if not requests:
            return
        persisted = 0
        for req in requests:
            try:
                await self.remote.create_notification(req.to_dict())
                persisted += 1
            except RemoteCallError as e:
                logger.warning("Could not persist notification for target %s: %s", req.target_id, e.message)
                self.evaluator.forget(req)
        if persisted:
            await self._refresh_notifications_quietly()

    async def _refresh_notifications_quietly(self) -> None:
        try:
            self._set_notifications(await self.remote.list_notifications())
        except RemoteCallError as e:
            logger.warning("Notification refresh failed: %s", e.message)

    # transactions

    async def add_transaction(self, draft: TransactionDraft) -> Transaction:
        async def op() -> Transaction:
            _unwrap(validate_transaction_draft(draft, self.state.user_id, self.is_locked))
            created = await self.remote.create_transaction(_wire_body(draft, self.state.user_id))
            key = month_key.key(created.month, created.year)
            logger.info("Added %s transaction %s in %s", created.type.value, created.id, key)

            if key == self.state.month_key:
                self._replace_displayed(self.state.transactions + (created,))
            # only months already fetched are updated; an unvisited month is loaded
            # whole on its first visit instead of starting from a one-row entry
            entry = self.cache.get_by_key(key)
            if entry is not None and self.cache.set_transactions(key, entry.transactions + (created,)):
                self._months_changed()

            await self._refresh_targets()
            await self.evaluate_targets()
            return created

        return await self._run("Failed to add transaction", op)

    def _lookup_transaction(self, tx_id: str) -> Transaction:
        tx = find_transaction(self.state.transactions, tx_id).get_or_else(self.cache.find_transaction(tx_id))
        if tx is None:
            raise NotFoundError("transaction_not_found", f"Transaction {tx_id} does not exist", {"id": tx_id})
        return tx

    def _drop_from_month(self, key: str, tx_id: str) -> bool:
        entry = self.cache.get_by_key(key)
        if entry is None:
            return False
        return self.cache.set_transactions(key, [t for t in entry.transactions if t.id != tx_id])

    async def delete_transaction(self, tx_id: str) -> None:
        async def op() -> None:
            tx = self._lookup_transaction(tx_id)
            await self.remote.delete_transaction(tx_id)
            key = month_key.key(tx.month, tx.year)
            logger.info("Deleted transaction %s from %s", tx_id, key)

            if key == self.state.month_key:
                self._replace_displayed(t for t in self.state.transactions if t.id != tx_id)
            if self._drop_from_month(key, tx_id):
                self._months_changed()

            await self._refresh_targets()
            await self.evaluate_targets()

        await self._run("Failed to delete transaction", op)

    async def update_transaction(self, tx_id: str, patch: dict) -> Transaction:
        async def op() -> Transaction:
            old = self._lookup_transaction(tx_id)
            merged = {**old.to_dict(), **patch}
            new_date = parse_date(merged.get("date"))
            draft = TransactionDraft(
                type=merged.get("type"),
                amount=merged.get("amount"),
                category=merged.get("category"),
                date=new_date,
                description=merged.get("description") or "",
            )
            _unwrap(validate_transaction_draft(draft, self.state.user_id, self.is_locked))
            body = dict(patch)
            if "type" in body:
                body["type"] = TxType(body["type"]).value
            if "date" in patch:
                body.update(date=new_date.isoformat(), month=new_date.month - 1, year=new_date.year)

            updated = await self.remote.update_transaction(tx_id, body)
            old_key = month_key.key(old.month, old.year)
            new_key = month_key.key(updated.month, updated.year)

            if self.state.month_key in (old_key, new_key):
                kept = [t for t in self.state.transactions if t.id != tx_id]
                if new_key == self.state.month_key:
                    kept.append(updated)
                self._replace_displayed(kept)
            changed = self._drop_from_month(old_key, tx_id)
            entry = self.cache.get_by_key(new_key)
            if entry is not None:
                changed = self.cache.set_transactions(new_key, entry.transactions + (updated,)) or changed
            if changed:
                self._months_changed()

            await self._refresh_targets()
            await self.evaluate_targets()
            return updated

        return await self._run("Failed to update transaction", op)

    # targets

    def _splice_targets(self, targets) -> None:
        self.state.targets = tuple(targets)
        # targets are not month-partitioned; they live under the displayed month
        if self.cache.set_targets(self.state.month_key, self.state.targets):
            self._months_changed()

    def _lookup_target(self, target_id: str) -> Target:
        target = find_target(self.state.targets, target_id).get_or_else(None)
        if target is None:
            raise NotFoundError("target_not_found", f"Target {target_id} does not exist", {"id": target_id})
        return target

    async def add_target(self, draft: TargetDraft) -> Target:
        async def op() -> Target:
            body = {"type": draft.type, "category": draft.category, "targetAmount": draft.target_amount}
            _unwrap(validate_target_fields(body))
            created = await self.remote.create_target(
                {**body, "type": TxType(draft.type).value, "targetAmount": float(draft.target_amount)}
            )
            logger.info("Added target %s (%s/%s)", created.id, created.type.value, created.category)
            self._splice_targets(self.state.targets + (created,))
            await self.evaluate_targets()
            return created

        return await self._run("Failed to add target", op)

    async def update_target(self, target_id: str, patch: dict) -> Target:
        async def op() -> Target:
            old = self._lookup_target(target_id)
            merged = {**old.to_dict(), **patch}
            _unwrap(validate_target_fields({
                "type": merged.get("type"),
                "category": merged.get("category"),
                "targetAmount": merged.get("targetAmount"),
            }))
            body = dict(patch)
            if "type" in body:
                body["type"] = TxType(body["type"]).value
            updated = await self.remote.update_target(target_id, body)
            self._splice_targets(updated if t.id == target_id else t for t in self.state.targets)
            await self.evaluate_targets()
            return updated

        return await self._run("Failed to update target", op)

    async def delete_target(self, target_id: str) -> None:
        async def op() -> None:
            self._lookup_target(target_id)
            await self.remote.delete_target(target_id)
            self._splice_targets(t for t in self.state.targets if t.id != target_id)
            await self.evaluate_targets()

        await self._run("Failed to delete target", op)

    # notifications

    async def refresh_notifications(self) -> None:
        async def op() -> None:
            self._set_notifications(await self.remote.list_notifications())

        await self._run("Failed to fetch notifications", op)

    async def mark_notification_as_read(self, notification_id: str) -> None:
        async def op() -> None:
            await self.remote.mark_notification_read(notification_id)
            self._set_notifications(
                replace(n, is_read=True) if n.id == notification_id else n
                for n in self.state.notifications
            )

        await self._run("Failed to mark notification as read", op)

    async def delete_notification(self, notification_id: str) -> None:
        async def op() -> None:
            await self.remote.delete_notification(notification_id)
            self._set_notifications(n for n in self.state.notifications if n.id != notification_id)

        await self._run("Failed to delete notification", op)

    async def clear_read_notifications(self) -> None:
        async def op() -> None:
            await self.remote.clear_read_notifications()
            self._set_notifications(n for n in self.state.notifications if not n.is_read)

        await self._run("Failed to clear notifications", op)
