import threading
from typing import Callable, Optional

from saunaflow.core.ports.clock_port import ClockPort
from saunaflow.core.protocol import Protocol, Stage
from saunaflow.core.session_log import SessionLog
from saunaflow.core.status import TimerStatus
from saunaflow.utils import Event, setup_logger
from saunaflow.utils import custom_exception as ce
from saunaflow.utils.time_conversions import format_seconds_to_hms, format_seconds_to_ms

logger = setup_logger(__name__)


class SessionTimer:
    """
    Drives one session through every stage of every cycle of a protocol.

    Each stage goes INITIAL -> RUNNING <-> PAUSED -> COMPLETED, and `advance()`
    moves a COMPLETED stage on to the next one (back to INITIAL) or, after the
    last stage of the last cycle, emits the SessionLog and finishes the session.
    `tick()` is called once per real second by an outside source and is ignored
    unless the stage is RUNNING. `exit()` abandons the session without a log.

    Events are emitted after the internal lock is released, so listeners may
    call back into the timer.
    """

    def __init__(self, protocol: Protocol, clock: ClockPort, translate: Optional[Callable[[str], str]] = None):
        self.protocol = protocol
        self.clock = clock
        self._translate = translate or (lambda key: key)
        self._lock = threading.RLock()

        self._started = False
        self._finished = False
        self._exited = False
        self._current_cycle = 1
        self._current_stage_index = 0
        self._time_left = protocol.stages[0].duration
        self._total_elapsed = 0
        self._status = TimerStatus.INITIAL
        self.session_log: Optional[SessionLog] = None

        self.on_start = Event("on_start")
        self.on_play = Event("on_play")
        self.on_pause = Event("on_pause")
        self.on_tick = Event("on_tick")
        self.on_stage_complete = Event("on_stage_complete")
        self.on_stage_change = Event("on_stage_change")
        self.on_session_complete = Event("on_session_complete")
        self.on_exit = Event("on_exit")

    @property
    def status(self) -> TimerStatus:
        return self._status

    @property
    def current_cycle(self) -> int:
        return self._current_cycle

    @property
    def current_stage_index(self) -> int:
        return self._current_stage_index

    @property
    def current_stage(self) -> Stage:
        return self.protocol.stages[self._current_stage_index]

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def total_elapsed(self) -> int:
        return self._total_elapsed

    @property
    def is_running(self) -> bool:
        return self._status is TimerStatus.RUNNING and not self._finished

    @property
    def is_finished(self) -> bool:
        """True once the log was emitted or the session was exited."""
        return self._finished

    @property
    def was_exited(self) -> bool:
        return self._exited

    @property
    def progress(self) -> float:
        """Fraction of the current stage already done, in [0, 1]."""
        duration = self.current_stage.duration
        return (duration - self._time_left) / duration

    @property
    def is_last_stage(self) -> bool:
        return (self._current_stage_index == len(self.protocol.stages) - 1
                and self._current_cycle == self.protocol.cycles)

    def _require_active(self, action: str):
        if self._finished:
            raise ce.SessionFinishedError(f"Cannot {action}: the session is over.")
        if not self._started:
            raise ce.InvalidTransitionError(f"Cannot {action}: the session has not been started.")

    def start(self):
        """Put the first stage of the first cycle on the clock, waiting for play()."""
        with self._lock:
            if self._finished:
                raise ce.SessionFinishedError("Cannot start: the session is over.")
            if self._started:
                raise ce.InvalidTransitionError("Session already started.")
            self._started = True
            self._status = TimerStatus.INITIAL
            self._time_left = self.current_stage.duration
            stage = self.current_stage
        logger.info(f"Session started: '{self.protocol.name}', {self.protocol.cycles} cycle(s), "
                    f"{len(self.protocol.stages)} stage(s) per cycle.")
        self.on_start.emit(stage=stage.type.value, cycle=1, time_left=stage.duration)

    def play(self) -> bool:
        """Start or resume the countdown. Returns False if it was already running."""
        with self._lock:
            self._require_active("play")
            if self._status is TimerStatus.RUNNING:
                logger.warning("Session timer is already running.")
                return False
            if self._status is TimerStatus.COMPLETED:
                raise ce.InvalidTransitionError("Cannot play a completed stage; advance() first.")
            resumed = self._status is TimerStatus.PAUSED
            self._status = TimerStatus.RUNNING
            time_left = self._time_left
        logger.info(f"{'Resumed' if resumed else 'Playing'} {self.current_stage.type.value} "
                    f"(cycle {self._current_cycle}), {format_seconds_to_ms(time_left)} left.")
        self.on_play.emit(resumed=resumed, time_left=time_left)
        return True

    def pause(self) -> bool:
        """Freeze the countdown. Returns False if it was already paused."""
        with self._lock:
            self._require_active("pause")
            if self._status is TimerStatus.PAUSED:
                logger.warning("Session timer is already paused.")
                return False
            if self._status is not TimerStatus.RUNNING:
                raise ce.InvalidTransitionError(f"Cannot pause from {self._status.name}.")
            self._status = TimerStatus.PAUSED
            time_left = self._time_left
        logger.info(f"Session paused with {format_seconds_to_ms(time_left)} left in stage.")
        self.on_pause.emit(time_left=time_left)
        return True

    def tick(self) -> bool:
        """
        Account for one elapsed second. Ticks outside RUNNING are dropped.

        Returns:
            bool: True if the tick was counted.
        """
        with self._lock:
            if self._finished or self._status is not TimerStatus.RUNNING:
                return False
            self._time_left -= 1
            self._total_elapsed += 1
            stage_done = self._time_left <= 0
            if stage_done:
                self._time_left = 0
                self._status = TimerStatus.COMPLETED
            time_left = self._time_left
            total_elapsed = self._total_elapsed
            stage = self.current_stage
            cycle = self._current_cycle

        self.on_tick.emit(
            time_left=time_left,
            time_left_formatted=format_seconds_to_ms(time_left),
            total_elapsed=total_elapsed,
            stage=stage.type.value,
        )
        if stage_done:
            logger.info(f"{stage.type.value} stage finished (cycle {cycle}).")
            self.on_stage_complete.emit(stage=stage.type.value, cycle=cycle, early=False)
        return True

    def end_stage_early(self):
        """Mark the current stage done now. Skipped seconds are not credited."""
        with self._lock:
            self._require_active("end the stage")
            if self._status not in (TimerStatus.RUNNING, TimerStatus.PAUSED):
                raise ce.InvalidTransitionError(f"Cannot end the stage from {self._status.name}.")
            self._status = TimerStatus.COMPLETED
            stage = self.current_stage
            cycle = self._current_cycle
            time_left = self._time_left
        logger.info(f"{stage.type.value} stage ended early with {format_seconds_to_ms(time_left)} left.")
        self.on_stage_complete.emit(stage=stage.type.value, cycle=cycle, early=True)

    def advance(self) -> Optional[SessionLog]:
        """
        Move past a completed stage.

        Returns:
            SessionLog | None: The log when the last stage of the last cycle was
            completed, otherwise None.
        """
        with self._lock:
            self._require_active("advance")
            if self._status is not TimerStatus.COMPLETED:
                raise ce.InvalidTransitionError(f"Cannot advance from {self._status.name}; the stage is not complete.")

            if self.is_last_stage:
                log = SessionLog(
                    protocol_name=self._translate(self.protocol.name),
                    total_time=self._total_elapsed,
                    cycles_completed=self.protocol.cycles,
                    date=self.clock.timestamp(),
                    goal=self.protocol.goal,
                )
                self.session_log = log
                self._finished = True
            else:
                log = None
                next_index = (self._current_stage_index + 1) % len(self.protocol.stages)
                if next_index == 0:
                    self._current_cycle += 1
                self._current_stage_index = next_index
                self._time_left = self.current_stage.duration
                self._status = TimerStatus.INITIAL
                stage = self.current_stage
                cycle = self._current_cycle

        if log is not None:
            logger.info(f"Session complete: '{log.protocol_name}' in {format_seconds_to_hms(log.total_time)}.")
            self.on_session_complete.emit(log)
            return log

        logger.info(f"Next stage: {stage.type.value} (cycle {cycle}/{self.protocol.cycles}).")
        self.on_stage_change.emit(stage=stage.type.value, cycle=cycle, time_left=stage.duration)
        return None

    def exit(self):
        """Abandon the session. Nothing is logged."""
        with self._lock:
            if self._finished:
                logger.warning("Exit requested for a session that is already over.")
                return
            self._finished = True
            self._exited = True
            elapsed = self._total_elapsed
        logger.info(f"Session abandoned after {format_seconds_to_hms(elapsed)}.")
        self.on_exit.emit(total_elapsed=elapsed)

    def snapshot(self) -> dict:
        with self._lock:
            stage = self.current_stage
            return {
                "protocol_id": self.protocol.id,
                "protocol_name": self.protocol.name,
                "stage": stage.type.value,
                "stage_index": self._current_stage_index,
                "stage_duration": stage.duration,
                "cycle": self._current_cycle,
                "cycles": self.protocol.cycles,
                "time_left": self._time_left,
                "time_left_formatted": format_seconds_to_ms(self._time_left),
                "total_elapsed": self._total_elapsed,
                "status": self._status.value,
                "progress": self.progress,
                "is_finished": self._finished,
            }
