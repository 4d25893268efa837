from dataclasses import dataclass
from typing import Optional

from finsync import month_key
from finsync.domain import DashboardSummary, EMPTY_SUMMARY


@dataclass
class FinanceState:
    """Mutable session state. Written only by MutationCoordinator."""
    current_month: int
    current_year: int
    user_id: Optional[str] = None
    transactions: tuple = ()
    targets: tuple = ()
    notifications: tuple = ()
    summary: DashboardSummary = EMPTY_SUMMARY
    in_flight: int = 0
    error: Optional[str] = None

    @property
    def month_key(self) -> str:
        return month_key.key(self.current_month, self.current_year)

    @property
    def loading(self) -> bool:
        return self.in_flight > 0
