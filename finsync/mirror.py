import json
import logging
import os
from typing import Dict, Optional, Tuple

from finsync.domain import DashboardSummary, MonthData

logger = logging.getLogger(__name__)

SUMMARY_KEY = "summary"
MONTHLY_DATA_KEY = "monthly_data"


class LocalMirror:
    """Best-effort JSON shadow of the derived state.

    Only used to seed the session before the first network round-trip; the
    backend stays authoritative.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable mirror file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, name: str, value) -> None:
        data = self._read()
        data[name] = value
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp = self.path + ".tmp"
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp, self.path)
        except OSError:
            logger.warning("Could not write %s to mirror %s", name, self.path, exc_info=True)

    def save_summary(self, summary: DashboardSummary) -> bool:
        # a zero balance is the initial state; don't clobber a real cached value with it
        if summary.available_balance == 0:
            return False
        self._write(SUMMARY_KEY, summary.to_dict())
        return True

    def save_monthly_data(self, months: Dict[str, MonthData]) -> bool:
        if not months:
            return False
        self._write(MONTHLY_DATA_KEY, {k: v.to_dict() for k, v in months.items()})
        return True

    def load(self) -> Tuple[Optional[DashboardSummary], Dict[str, MonthData]]:
        data = self._read()
        summary = None
        months: Dict[str, MonthData] = {}
        try:
            if isinstance(data.get(SUMMARY_KEY), dict):
                summary = DashboardSummary.from_dict(data[SUMMARY_KEY])
            for month_key, raw in (data.get(MONTHLY_DATA_KEY) or {}).items():
                months[month_key] = MonthData.from_dict(raw)
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed mirror contents in %s", self.path)
            return None, {}
        return summary, months

    def clear(self) -> None:
        if os.path.exists(self.path):
            os.remove(self.path)
