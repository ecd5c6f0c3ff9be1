from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Optional

from saunaflow.utils.time_conversions import parse_iso_timestamp


@dataclass(frozen=True)
class Aggregates:
    total_minutes: float
    total_sessions: int


def _local(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    """Naive wall-clock time in `tz` (system local when None). Naive input is taken as-is."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(tz).replace(tzinfo=None)


def compute_streak(history, today: date, tz: Optional[tzinfo] = None) -> int:
    """
    Count consecutive calendar days with a session, ending today or yesterday.

    Sessions are sorted newest first and reduced to their calendar day. If the
    newest day is older than yesterday the streak is 0. Otherwise each entry is
    compared with the last counted day: one day earlier extends the streak, the
    same day is skipped, and any bigger gap ends the walk.
    """
    if not history:
        return 0

    moments = sorted((_local(parse_iso_timestamp(log.date), tz) for log in history), reverse=True)
    days = [moment.date() for moment in moments]

    if (today - days[0]).days > 1:
        return 0

    streak = 1
    last_day = days[0]
    for day in days[1:]:
        gap = (last_day - day).days
        if gap == 1:
            streak += 1
            last_day = day
        elif gap > 1:
            break
    return streak


def compute_aggregates(history) -> Aggregates:
    return Aggregates(
        total_minutes=sum(log.total_time for log in history) / 60,
        total_sessions=len(history),
    )
