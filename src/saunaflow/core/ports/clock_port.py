from abc import ABC, abstractmethod
from datetime import date, datetime


class ClockPort(ABC):
    """Source of 'now' for log timestamps and 'today' for streaks."""

    @abstractmethod
    def now(self) -> datetime:
        pass

    def today(self) -> date:
        return self.now().date()

    def timestamp(self) -> str:
        """Current time as an ISO-8601 string."""
        return self.now().isoformat()
