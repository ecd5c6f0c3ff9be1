import json
from dataclasses import dataclass
from typing import Optional

from saunaflow.core.status import Goal
from saunaflow.utils.time_conversions import parse_iso_timestamp

REQUIRED_FIELDS = ("protocolName", "totalTime", "cyclesCompleted", "date")


@dataclass(frozen=True)
class SessionLog:
    """Record of one fully completed session. Written once, never edited."""
    protocol_name: str
    total_time: int  # seconds
    cycles_completed: int
    date: str  # ISO-8601
    goal: Optional[Goal] = None

    @property
    def total_minutes(self) -> float:
        return self.total_time / 60

    def to_dict(self) -> dict:
        return {
            "protocolName": self.protocol_name,
            "totalTime": self.total_time,
            "cyclesCompleted": self.cycles_completed,
            "date": self.date,
            "goal": self.goal.value if self.goal else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionLog":
        """
        Build a log from its stored form.

        Raises:
            ValueError: If a required field is missing or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Session log must be an object, got {type(data).__name__}")
        missing = [key for key in REQUIRED_FIELDS if key not in data]
        if missing:
            raise ValueError(f"Session log is missing {', '.join(missing)}")

        name = data["protocolName"]
        total_time = data["totalTime"]
        cycles = data["cyclesCompleted"]
        date = data["date"]
        if not isinstance(name, str):
            raise ValueError("protocolName must be a string")
        for key, value in (("totalTime", total_time), ("cyclesCompleted", cycles)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{key} must be an integer")
        parse_iso_timestamp(date)

        raw_goal = data.get("goal")
        goal = Goal(raw_goal) if raw_goal is not None else None
        return cls(protocol_name=name, total_time=total_time, cycles_completed=cycles, date=date, goal=goal)


def dumps_history(history) -> str:
    return json.dumps([log.to_dict() for log in history], ensure_ascii=False)


def loads_history(raw: str) -> list:
    """
    Decode a stored history strictly.

    Raises:
        ValueError: If the text is not a JSON array of valid session logs.
    """
    data = json.loads(raw)
    if not isinstance(data, list):
        raise ValueError("Stored history must be a JSON array")
    return [SessionLog.from_dict(item) for item in data]
