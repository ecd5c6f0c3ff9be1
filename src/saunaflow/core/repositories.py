import json
from typing import Optional

from saunaflow.core.ports.storage_port import StoragePort
from saunaflow.core.session_log import SessionLog, dumps_history
from saunaflow.core.status import Goal
from saunaflow.utils import setup_logger

logger = setup_logger(__name__)

HEALTH_CHECK_KEY = "saunaflow_health_check_accepted"
GOAL_KEY = "saunaflow_goal"
USERNAME_KEY = "saunaflow_username"
HISTORY_KEY = "saunaflow_history"


class SessionHistoryRepository:
    """Append-only session history kept as one JSON array under HISTORY_KEY."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def load(self) -> list:
        """
        Read the stored history. Anything unreadable is dropped, never raised:
        broken JSON yields [], and individual broken entries are skipped.
        """
        raw = self.storage.get(HISTORY_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable session history: {e}")
            return []
        if not isinstance(data, list):
            logger.warning("Discarding session history that is not a list.")
            return []

        history = []
        for index, item in enumerate(data):
            try:
                history.append(SessionLog.from_dict(item))
            except ValueError as e:
                logger.warning(f"Skipping malformed session log #{index}: {e}")
        return history

    def save(self, history) -> None:
        self.storage.set(HISTORY_KEY, dumps_history(history))

    def append(self, log: SessionLog) -> list:
        history = self.load()
        history.append(log)
        self.save(history)
        logger.info(f"Session '{log.protocol_name}' saved; {len(history)} session(s) in history.")
        return history

    def clear(self) -> None:
        self.storage.remove(HISTORY_KEY)


class UserProfileRepository:
    """Health check consent, goal and name."""

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def health_check_accepted(self) -> bool:
        return self.storage.get(HEALTH_CHECK_KEY) == "true"

    def accept_health_check(self) -> None:
        self.storage.set(HEALTH_CHECK_KEY, "true")

    def revoke_health_check(self) -> None:
        self.storage.remove(HEALTH_CHECK_KEY)

    def goal(self) -> Optional[Goal]:
        raw = self.storage.get(GOAL_KEY)
        if not raw:
            return None
        try:
            return Goal(raw)
        except ValueError:
            logger.warning(f"Ignoring unknown stored goal {raw!r}.")
            return None

    def user_name(self) -> Optional[str]:
        return self.storage.get(USERNAME_KEY) or None

    def save_profile(self, name: str, goal: Goal) -> None:
        self.storage.set(USERNAME_KEY, name)
        self.storage.set(GOAL_KEY, goal.value)

    def clear_profile(self) -> None:
        self.storage.remove(GOAL_KEY)
        self.storage.remove(USERNAME_KEY)
