import hashlib
import logging
from typing import Iterable, List, Optional, Set

from finsync.domain import Band, NotificationRequest, NotificationType, Target, TxType
from finsync.money import progress, safe_amount

logger = logging.getLogger(__name__)

APPROACHING_PCT = 80.0
COMPLETE_PCT = 100.0


def classify(target: Target) -> Band:
    pct = progress(target)
    if pct >= COMPLETE_PCT:
        return Band.ACHIEVED if target.type == TxType.INCOME else Band.EXCEEDED
    if pct >= APPROACHING_PCT:
        return Band.APPROACHING
    return Band.NONE


def severity(target: Target, band: Band) -> Optional[NotificationType]:
    if band == Band.ACHIEVED:
        return NotificationType.SUCCESS
    if band == Band.EXCEEDED:
        return NotificationType.WARNING
    if band == Band.APPROACHING:
        return NotificationType.SUCCESS if target.type == TxType.INCOME else NotificationType.WARNING
    return None


def _money(value, currency: str) -> str:
    return f"{currency}{safe_amount(value):,.2f}"


def build_request(target: Target, band: Band, currency: str = "£") -> Optional[NotificationRequest]:
    kind = severity(target, band)
    if kind is None:
        return None

    current = _money(target.current_amount, currency)
    goal = _money(target.target_amount, currency)
    pct = progress(target)
    if band == Band.ACHIEVED:
        title = "Goal achieved"
        message = f"{target.category} income ({current}) has reached your target of {goal}"
    elif band == Band.EXCEEDED:
        title = "Limit exceeded"
        message = f"{target.category} spending ({current}) has exceeded your limit of {goal}"
    elif target.type == TxType.INCOME:
        title = "Almost there"
        message = f"{target.category} income is at {pct:.0f}% of your target of {goal}"
    else:
        title = "Approaching limit"
        message = f"{target.category} spending is at {pct:.0f}% of your limit of {goal}"

    return NotificationRequest(title=title, message=message, type=kind, target_id=target.id, band=band)


def fingerprint(req: NotificationRequest) -> str:
    raw = f"{req.title}|{req.message}|{req.target_id}|{req.band.value}"
    return hashlib.sha256(raw.encode()).hexdigest()


class TargetEvaluator:
    """Turns the loaded targets into notification requests.

    Without dedupe every evaluation re-emits a request for each target in a
    notifiable band (at-least-once). With dedupe a request whose fingerprint
    was already emitted this session is dropped.
    """

    def __init__(self, dedupe: bool = False, currency: str = "£"):
        self.dedupe = dedupe
        self.currency = currency
        self._seen: Set[str] = set()

    def evaluate(self, targets: Iterable[Target]) -> List[NotificationRequest]:
        requests = []
        for target in targets:
            req = build_request(target, classify(target), self.currency)
            if req is None:
                continue
            if self.dedupe:
                digest = fingerprint(req)
                if digest in self._seen:
                    logger.debug("Skipping duplicate notification for target %s", target.id)
                    continue
                self._seen.add(digest)
            requests.append(req)
        return requests

    def forget(self, req: NotificationRequest) -> None:
        """Allow a request to be emitted again, e.g. after its create call failed."""
        self._seen.discard(fingerprint(req))
