import threading

from saunaflow.core.session_timer import SessionTimer
from saunaflow.core.status import TimerStatus
from saunaflow.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


class SessionTicker:
    """
    The once-per-second tick source for a SessionTimer.

    A daemon thread is started when the timer starts playing and ends by itself
    when the timer leaves RUNNING (pause, stage complete). At most one thread is
    alive at a time. stop() ends ticking for good.
    """

    def __init__(self, timer: SessionTimer, interval: float = 1.0):
        self.timer = timer
        self.interval = interval
        self._thread = None
        self._lock = threading.Lock()
        self._stop_event = threading.Event()

        timer.on_play.add_listener(self._on_play)
        timer.on_exit.add_listener(self._on_finished)
        timer.on_session_complete.add_listener(self._on_finished)

    @property
    def is_ticking(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def _on_play(self, **_):
        self.start()

    def _on_finished(self, *args, **kwargs):
        self.stop(join=False)

    def start(self) -> bool:
        """Start the tick thread unless one is already alive. Returns True if a thread was started."""
        with self._lock:
            if self._stop_event.is_set():
                logger.warning("Ticker already stopped; not restarting.")
                return False
            if self._thread is not None:
                return False
            self._thread = threading.Thread(target=self._run, name="session_ticker")
            self._thread.daemon = True
            self._thread.start()
        logger.debug("Ticker thread started.")
        return True

    def stop(self, join: bool = True):
        self._stop_event.set()
        thread = self._thread
        if join and thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval * 2)
        logger.debug("Ticker stopped.")

    def _run(self):
        while not self._stop_event.wait(self.interval):
            with self._lock:
                # status is read without the timer lock; emissions happen outside it
                if self.timer.is_finished or self.timer.status is not TimerStatus.RUNNING:
                    self._thread = None
                    return
            self.timer.tick()
        with self._lock:
            self._thread = None
