import time
import unittest

from saunaflow.core.session_timer import SessionTimer
from saunaflow.core.status import TimerStatus
from saunaflow.tools.time_tools.session_ticker import SessionTicker

from tests.helpers import make_clock, three_stage_protocol


def wait_for(predicate, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestSessionTicker(unittest.TestCase):
    def setUp(self) -> None:
        self.timer = SessionTimer(three_stage_protocol(cycles=1, seconds=3), make_clock())
        self.ticker = SessionTicker(self.timer, interval=0.01)
        self.timer.start()

    def tearDown(self) -> None:
        self.ticker.stop()

    def test_nothing_ticks_before_play(self) -> None:
        time.sleep(0.05)
        self.assertFalse(self.ticker.is_ticking)
        self.assertEqual(self.timer.total_elapsed, 0)

    def test_runs_stage_to_completion_then_stops(self) -> None:
        self.timer.play()
        self.assertTrue(wait_for(lambda: self.timer.status is TimerStatus.COMPLETED))
        self.assertTrue(wait_for(lambda: not self.ticker.is_ticking))
        self.assertEqual(self.timer.total_elapsed, 3)
        self.assertEqual(self.timer.time_left, 0)

    def test_pause_freezes_the_count(self) -> None:
        self.timer.play()
        self.timer.pause()
        frozen = (self.timer.time_left, self.timer.total_elapsed)
        time.sleep(0.1)
        self.assertEqual((self.timer.time_left, self.timer.total_elapsed), frozen)
        self.assertTrue(wait_for(lambda: not self.ticker.is_ticking))

        self.timer.play()
        self.assertTrue(wait_for(lambda: self.timer.status is TimerStatus.COMPLETED))
        self.assertEqual(self.timer.total_elapsed, 3)

    def test_play_twice_keeps_one_thread(self) -> None:
        self.timer.play()
        self.assertFalse(self.ticker.start())
        self.assertTrue(wait_for(lambda: self.timer.status is TimerStatus.COMPLETED))
        self.assertEqual(self.timer.total_elapsed, 3)

    def test_exit_stops_ticking(self) -> None:
        self.timer.play()
        self.timer.exit()
        self.assertTrue(wait_for(lambda: not self.ticker.is_ticking))
        elapsed = self.timer.total_elapsed
        time.sleep(0.05)
        self.assertEqual(self.timer.total_elapsed, elapsed)
        self.assertFalse(self.ticker.start())


if __name__ == "__main__":
    unittest.main()
