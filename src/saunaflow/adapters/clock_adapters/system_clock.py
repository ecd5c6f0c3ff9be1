from datetime import datetime, timedelta

from saunaflow.core.ports.clock_port import ClockPort


class SystemClock(ClockPort):
    """Wall clock in the machine's local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock(ClockPort):
    """A clock that only moves when told to."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def now(self) -> datetime:
        return self.moment

    def advance(self, **delta) -> datetime:
        self.moment = self.moment + timedelta(**delta)
        return self.moment
