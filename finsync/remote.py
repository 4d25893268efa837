import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

from finsync import config
from finsync.domain import DashboardSummary, Notification, Target, Transaction
from finsync.errors import RemoteCallError, UnauthorizedError

logger = logging.getLogger(__name__)


def _many(parse: Callable[[dict], Any]) -> Callable[[Any], list]:
    return lambda rows: [parse(d) for d in rows or []]


class RemoteService:
    """Async facade over the finance REST API.

    Every call carries the bearer token; a 401 fires ``on_unauthorized`` (the
    auth layer invalidates the session there) and raises UnauthorizedError.
    """

    def __init__(
        self,
        base_url: str = config.API_URL,
        token: Optional[str] = config.API_TOKEN,
        on_unauthorized: Optional[Callable[[], None]] = None,
        session: Optional[requests.Session] = None,
        timeout: Tuple[int, int] = (config.CONNECT_TIMEOUT, config.READ_TIMEOUT),
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.on_unauthorized = on_unauthorized
        self.timeout = timeout
        self.http = session or requests.Session()
        self.http.headers.update({"Content-Type": "application/json"})

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _send(self, method: str, path: str, params: Optional[dict] = None, body: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.http.request(
                method, url, params=params, json=body, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.exception("%s %s failed", method, url)
            raise RemoteCallError(f"Network error: {e}", url=url) from e

        if resp.status_code == 401:
            logger.warning("%s %s rejected with 401", method, url)
            if self.on_unauthorized is not None:
                self.on_unauthorized()
            raise UnauthorizedError("Your session has expired, please log in again", 401, url)

        try:
            resp.raise_for_status()
        except requests.HTTPError as e:
            logger.error("%s %s returned %s", method, url, resp.status_code)
            raise RemoteCallError(
                f"Request failed with status {resp.status_code}", resp.status_code, url
            ) from e

        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteCallError("Malformed response from server", resp.status_code, url) from e

    async def _call(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Any = None,
        parse: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        data = await asyncio.to_thread(self._send, method, path, params, body)
        if parse is None:
            return data
        try:
            return parse(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("%s %s returned an unexpected payload: %r", method, path, e)
            raise RemoteCallError("Malformed response from server", url=f"{self.base_url}{path}") from e

    # transactions

    async def list_transactions(self, month: int, year: int) -> List[Transaction]:
        return await self._call(
            "GET", "/transactions", params={"month": month, "year": year}, parse=_many(Transaction.from_dict)
        )

    async def create_transaction(self, body: dict) -> Transaction:
        return await self._call("POST", "/transactions", body=body, parse=Transaction.from_dict)

    async def update_transaction(self, tx_id: str, patch: dict) -> Transaction:
        return await self._call("PUT", f"/transactions/{tx_id}", body=patch, parse=Transaction.from_dict)

    async def delete_transaction(self, tx_id: str) -> None:
        await self._call("DELETE", f"/transactions/{tx_id}")

    # targets

    async def list_targets(self) -> List[Target]:
        return await self._call("GET", "/targets", parse=_many(Target.from_dict))

    async def create_target(self, body: dict) -> Target:
        return await self._call("POST", "/targets", body=body, parse=Target.from_dict)

    async def update_target(self, target_id: str, patch: dict) -> Target:
        return await self._call("PUT", f"/targets/{target_id}", body=patch, parse=Target.from_dict)

    async def delete_target(self, target_id: str) -> None:
        await self._call("DELETE", f"/targets/{target_id}")

    # monthly data

    async def month_summary(self, month: int, year: int) -> DashboardSummary:
        return await self._call(
            "GET", f"/monthly-data/{year}/{month + 1}/summary",
            parse=lambda data: DashboardSummary.from_dict(data or {}),
        )

    async def available_months(self) -> List[Tuple[int, int]]:
        return await self._call(
            "GET", "/monthly-data/available",
            parse=lambda data: [(int(d["month"]), int(d["year"])) for d in data or []],
        )

    # notifications

    async def list_notifications(self) -> List[Notification]:
        return await self._call("GET", "/notifications", parse=_many(Notification.from_dict))

    async def create_notification(self, body: dict) -> Optional[Notification]:
        return await self._call(
            "POST", "/notifications", body=body,
            parse=lambda data: Notification.from_dict(data) if data else None,
        )

    async def mark_notification_read(self, notification_id: str) -> None:
        await self._call("PATCH", f"/notifications/{notification_id}/read")

    async def delete_notification(self, notification_id: str) -> None:
        await self._call("DELETE", f"/notifications/{notification_id}")

    async def clear_read_notifications(self) -> None:
        await self._call("DELETE", "/notifications/read")

    def close(self) -> None:
        self.http.close()
