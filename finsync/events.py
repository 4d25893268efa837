import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple

__all__ = [
    'Event', 'EventBus',
    'SUMMARY_CHANGED', 'MONTHLY_DATA_CHANGED', 'NOTIFICATIONS_CHANGED', 'STATE_CHANGED',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: Any


Handler = Callable[[Event], Any]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> Callable[[], None]:
        self._subscribers.setdefault(name, []).append(handler)
        return lambda: self.unsubscribe(name, handler)

    def publish(self, name: str, payload: Any = None) -> List[Any]:
        handlers = list(self._subscribers.get(name, ()))
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)

        results = []
        for handler in handlers:
            # an observer failing must not abort the mutation that published
            try:
                results.append(handler(event))
            except Exception:
                logger.exception("Handler %r failed for %s", handler, name)
        return results

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, ()):
            self._subscribers[name].remove(handler)


SUMMARY_CHANGED = "SUMMARY_CHANGED"
MONTHLY_DATA_CHANGED = "MONTHLY_DATA_CHANGED"
NOTIFICATIONS_CHANGED = "NOTIFICATIONS_CHANGED"
STATE_CHANGED = "STATE_CHANGED"
