from dataclasses import dataclass, field, replace
from typing import Optional

from saunaflow.core.status import Goal, StageType
from saunaflow.utils import custom_exception as ce
from saunaflow.utils.time_conversions import convert_to_seconds


@dataclass(frozen=True)
class Stage:
    type: StageType
    duration: int  # seconds

    def __post_init__(self):
        if not isinstance(self.type, StageType):
            raise ce.ProtocolValidationError(f"Unknown stage type: {self.type!r}")
        if isinstance(self.duration, bool) or not isinstance(self.duration, int) or self.duration <= 0:
            raise ce.ProtocolValidationError(f"Stage duration must be a positive number of seconds, got {self.duration!r}")

    def with_duration(self, duration: int) -> "Stage":
        return replace(self, duration=duration)

    def to_dict(self) -> dict:
        return {"type": self.type.value, "duration": self.duration}


@dataclass(frozen=True)
class Protocol:
    """
    A named ritual: the ordered stages of one cycle, repeated `cycles` times.
    Protocols are values; adjusting one builds a new Protocol.
    """
    id: str
    name: str
    description: str
    cycles: int
    stages: tuple = field(default_factory=tuple)
    goal: Goal = Goal.RELAX

    def __post_init__(self):
        object.__setattr__(self, "stages", tuple(self.stages))
        if isinstance(self.cycles, bool) or not isinstance(self.cycles, int) or self.cycles < 1:
            raise ce.ProtocolValidationError(f"Protocol '{self.id}' needs at least one cycle, got {self.cycles!r}")
        if not self.stages:
            raise ce.ProtocolValidationError(f"Protocol '{self.id}' has no stages.")
        if not all(isinstance(stage, Stage) for stage in self.stages):
            raise ce.ProtocolValidationError(f"Protocol '{self.id}' stages must be Stage instances.")
        if not isinstance(self.goal, Goal):
            raise ce.ProtocolValidationError(f"Unknown goal: {self.goal!r}")

    def with_stages(self, stages) -> "Protocol":
        return replace(self, stages=tuple(stages))

    def total_duration(self) -> int:
        """Seconds needed to run every stage of every cycle."""
        return sum(stage.duration for stage in self.stages) * self.cycles

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "cycles": self.cycles,
            "stages": [stage.to_dict() for stage in self.stages],
            "goal": self.goal.value,
        }


def _minutes(value: int) -> int:
    return convert_to_seconds(minutes=value)


PROTOCOLS = (
    Protocol(
        id="relax_1",
        name="protocol_relax_1_name",
        description="protocol_relax_1_desc",
        cycles=2,
        goal=Goal.RELAX,
        stages=(
            Stage(StageType.SAUNA, _minutes(10)),
            Stage(StageType.COLD, _minutes(1)),
            Stage(StageType.REST, _minutes(10)),
        ),
    ),
    Protocol(
        id="relax_2",
        name="protocol_relax_2_name",
        description="protocol_relax_2_desc",
        cycles=3,
        goal=Goal.RELAX,
        stages=(
            Stage(StageType.SAUNA, _minutes(15)),
            Stage(StageType.COLD, _minutes(2)),
            Stage(StageType.REST, _minutes(15)),
        ),
    ),
    Protocol(
        id="perf_1",
        name="protocol_perf_1_name",
        description="protocol_perf_1_desc",
        cycles=3,
        goal=Goal.PERFORMANCE,
        stages=(
            Stage(StageType.SAUNA, _minutes(12)),
            Stage(StageType.COLD, _minutes(3)),
            Stage(StageType.REST, _minutes(8)),
        ),
    ),
    Protocol(
        id="perf_2",
        name="protocol_perf_2_name",
        description="protocol_perf_2_desc",
        cycles=4,
        goal=Goal.PERFORMANCE,
        stages=(
            Stage(StageType.SAUNA, _minutes(15)),
            Stage(StageType.COLD, _minutes(4)),
            Stage(StageType.REST, _minutes(10)),
        ),
    ),
)


def get_protocol(protocol_id: str) -> Protocol:
    for protocol in PROTOCOLS:
        if protocol.id == protocol_id:
            return protocol
    raise ce.ProtocolNotFoundError(f"Protocol '{protocol_id}' not found.")


def protocols_for_goal(goal: Optional[Goal]) -> list:
    """Built-in protocols matching the user's goal, or all of them when no goal is set."""
    if goal is None:
        return list(PROTOCOLS)
    return [protocol for protocol in PROTOCOLS if protocol.goal is goal]
