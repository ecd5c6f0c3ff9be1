from dataclasses import dataclass
from typing import Callable

from saunaflow.core.stats import compute_aggregates
from saunaflow.core.status import Goal


@dataclass(frozen=True)
class Achievement:
    id: str
    title: str
    description: str
    is_unlocked: Callable  # (history, streak) -> bool


def _sessions_with_goal(history, goal: Goal) -> int:
    return sum(1 for log in history if log.goal is goal)


ALL_ACHIEVEMENTS = (
    Achievement(
        id="first_session",
        title="achievement_first_session_title",
        description="achievement_first_session_desc",
        is_unlocked=lambda history, streak: len(history) >= 1,
    ),
    Achievement(
        id="streak_3",
        title="achievement_streak_3_title",
        description="achievement_streak_3_desc",
        is_unlocked=lambda history, streak: streak >= 3,
    ),
    Achievement(
        id="streak_7",
        title="achievement_streak_7_title",
        description="achievement_streak_7_desc",
        is_unlocked=lambda history, streak: streak >= 7,
    ),
    Achievement(
        id="ten_sessions",
        title="achievement_ten_sessions_title",
        description="achievement_ten_sessions_desc",
        is_unlocked=lambda history, streak: len(history) >= 10,
    ),
    Achievement(
        id="hundred_minutes",
        title="achievement_hundred_minutes_title",
        description="achievement_hundred_minutes_desc",
        is_unlocked=lambda history, streak: compute_aggregates(history).total_minutes >= 100,
    ),
    Achievement(
        id="marathon",
        title="achievement_marathon_title",
        description="achievement_marathon_desc",
        is_unlocked=lambda history, streak: any(log.total_time >= 60 * 60 for log in history),
    ),
    Achievement(
        id="relax_devotee",
        title="achievement_relax_devotee_title",
        description="achievement_relax_devotee_desc",
        is_unlocked=lambda history, streak: _sessions_with_goal(history, Goal.RELAX) >= 5,
    ),
    Achievement(
        id="performance_pro",
        title="achievement_performance_pro_title",
        description="achievement_performance_pro_desc",
        is_unlocked=lambda history, streak: _sessions_with_goal(history, Goal.PERFORMANCE) >= 5,
    ),
)


def evaluate_achievements(history, streak: int) -> list:
    """Every achievement with its unlocked flag, recomputed from scratch on each call."""
    return [
        {
            "id": achievement.id,
            "title": achievement.title,
            "description": achievement.description,
            "unlocked": bool(achievement.is_unlocked(history, streak)),
        }
        for achievement in ALL_ACHIEVEMENTS
    ]


def unlocked_ids(history, streak: int) -> set:
    return {achievement.id for achievement in ALL_ACHIEVEMENTS if achievement.is_unlocked(history, streak)}
