from datetime import datetime

from saunaflow.adapters.clock_adapters.system_clock import FixedClock
from saunaflow.adapters.storage_adapters.memory_storage_adapter import InMemoryStorageAdapter
from saunaflow.core.protocol import Protocol, Stage
from saunaflow.core.session_log import SessionLog
from saunaflow.core.status import Goal, StageType
from saunaflow.utils import custom_exception as ce

NOW = datetime(2026, 10, 18, 9, 30, 0)


def make_clock(moment: datetime = NOW) -> FixedClock:
    return FixedClock(moment)


def three_stage_protocol(cycles: int = 2, seconds: int = 60, goal: Goal = Goal.RELAX) -> Protocol:
    return Protocol(
        id="test",
        name="protocol_test_name",
        description="three stages",
        cycles=cycles,
        goal=goal,
        stages=(
            Stage(StageType.SAUNA, seconds),
            Stage(StageType.COLD, seconds),
            Stage(StageType.REST, seconds),
        ),
    )


def log_on(date: str, total_time: int = 600, goal: Goal = Goal.RELAX) -> SessionLog:
    return SessionLog(protocol_name="Relax", total_time=total_time, cycles_completed=2, date=date, goal=goal)


def run_stage(timer):
    """Play the current stage to its natural end."""
    timer.play()
    while timer.tick():
        pass


class FlakyStorage(InMemoryStorageAdapter):
    """Reads work; writes fail while `failing` is set."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.failing = False

    def set(self, key, value):
        if self.failing:
            raise ce.StorageError("disk full")
        super().set(key, value)
