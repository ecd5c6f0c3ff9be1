import json
import unittest

from saunaflow.adapters.storage_adapters.memory_storage_adapter import InMemoryStorageAdapter
from saunaflow.core.repositories import (
    GOAL_KEY,
    HEALTH_CHECK_KEY,
    HISTORY_KEY,
    USERNAME_KEY,
    SessionHistoryRepository,
    UserProfileRepository,
)
from saunaflow.core.session_log import SessionLog, dumps_history, loads_history
from saunaflow.core.status import Goal
from saunaflow.utils.time_conversions import parse_iso_timestamp


class TestSessionLogCodec(unittest.TestCase):
    def test_round_trip_keeps_every_field(self) -> None:
        log = SessionLog(
            protocol_name="Entspannung für Einsteiger",
            total_time=2461,
            cycles_completed=3,
            date="2026-10-18T09:30:12.345000+02:00",
            goal=Goal.PERFORMANCE,
        )
        restored = loads_history(dumps_history([log]))[0]
        self.assertEqual(restored, log)
        self.assertEqual(parse_iso_timestamp(restored.date), parse_iso_timestamp(log.date))

    def test_stored_form_uses_camel_case_keys(self) -> None:
        log = SessionLog("Relax", 60, 1, "2026-10-18T09:30:00.000Z", None)
        stored = json.loads(dumps_history([log]))[0]
        self.assertEqual(stored, {
            "protocolName": "Relax",
            "totalTime": 60,
            "cyclesCompleted": 1,
            "date": "2026-10-18T09:30:00.000Z",
            "goal": None,
        })

    def test_browser_timestamps_are_accepted(self) -> None:
        log = SessionLog.from_dict({
            "protocolName": "x", "totalTime": 1, "cyclesCompleted": 1,
            "date": "2026-10-18T07:00:00.000Z", "goal": "Relax",
        })
        self.assertEqual(log.goal, Goal.RELAX)

    def test_strict_decoding_rejects_bad_input(self) -> None:
        for raw in ("not json", "{}", '[{"protocolName": "x"}]',
                    '[{"protocolName": "x", "totalTime": "60", "cyclesCompleted": 1, "date": "2026-10-18"}]',
                    '[{"protocolName": "x", "totalTime": 60, "cyclesCompleted": 1, "date": "yesterday"}]'):
            with self.assertRaises(ValueError, msg=raw):
                loads_history(raw)


class TestSessionHistoryRepository(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = InMemoryStorageAdapter()
        self.repo = SessionHistoryRepository(self.storage)

    def test_missing_history_is_empty(self) -> None:
        self.assertEqual(self.repo.load(), [])

    def test_append_persists(self) -> None:
        first = SessionLog("A", 60, 1, "2026-10-17T09:00:00", Goal.RELAX)
        second = SessionLog("B", 120, 2, "2026-10-18T09:00:00", None)
        self.repo.append(first)
        history = self.repo.append(second)
        self.assertEqual(history, [first, second])
        self.assertEqual(SessionHistoryRepository(self.storage).load(), [first, second])

    def test_unreadable_history_falls_back_to_empty(self) -> None:
        self.storage.set(HISTORY_KEY, "{broken")
        self.assertEqual(self.repo.load(), [])
        self.storage.set(HISTORY_KEY, '{"not": "a list"}')
        self.assertEqual(self.repo.load(), [])

    def test_malformed_entries_are_skipped(self) -> None:
        good = {"protocolName": "A", "totalTime": 60, "cyclesCompleted": 1, "date": "2026-10-18T09:00:00", "goal": None}
        self.storage.set(HISTORY_KEY, json.dumps([good, {"protocolName": "B"}, "junk", dict(good, goal="Sleepy")]))
        history = self.repo.load()
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].protocol_name, "A")

    def test_clear(self) -> None:
        self.repo.append(SessionLog("A", 60, 1, "2026-10-18T09:00:00", None))
        self.repo.clear()
        self.assertIsNone(self.storage.get(HISTORY_KEY))


class TestUserProfileRepository(unittest.TestCase):
    def setUp(self) -> None:
        self.storage = InMemoryStorageAdapter()
        self.profile = UserProfileRepository(self.storage)

    def test_profile_round_trip(self) -> None:
        self.assertFalse(self.profile.health_check_accepted())
        self.profile.accept_health_check()
        self.profile.save_profile("Ana", Goal.PERFORMANCE)
        self.assertEqual(self.storage.get(HEALTH_CHECK_KEY), "true")
        self.assertEqual(self.storage.get(GOAL_KEY), "Performance")
        self.assertEqual(self.storage.get(USERNAME_KEY), "Ana")
        self.assertTrue(self.profile.health_check_accepted())
        self.assertEqual(self.profile.goal(), Goal.PERFORMANCE)
        self.assertEqual(self.profile.user_name(), "Ana")

    def test_unknown_goal_is_ignored(self) -> None:
        self.storage.set(GOAL_KEY, "Sleepy")
        self.assertIsNone(self.profile.goal())

    def test_clear_profile_keeps_consent(self) -> None:
        self.profile.accept_health_check()
        self.profile.save_profile("Ana", Goal.RELAX)
        self.profile.clear_profile()
        self.assertIsNone(self.profile.goal())
        self.assertIsNone(self.profile.user_name())
        self.assertTrue(self.profile.health_check_accepted())


if __name__ == "__main__":
    unittest.main()
