from typing import Callable, Optional

from saunaflow.core.achievements import evaluate_achievements
from saunaflow.core.adjustment import adjust_protocol, has_changes
from saunaflow.core.custom_protocol import AI_ERROR, CustomProtocolDraft
from saunaflow.core.ports.clock_port import ClockPort
from saunaflow.core.ports.storage_port import StoragePort
from saunaflow.core.ports.suggestion_port import SuggestionProvider
from saunaflow.core.protocol import Protocol, get_protocol, protocols_for_goal
from saunaflow.core.repositories import SessionHistoryRepository, UserProfileRepository
from saunaflow.core.session_log import SessionLog
from saunaflow.core.session_timer import SessionTimer
from saunaflow.core.stage_content import StageContentPicker
from saunaflow.core.stats import compute_aggregates, compute_streak
from saunaflow.core.status import AppState, ExperienceLevel, Goal
from saunaflow.utils import Event, setup_logger
from saunaflow.utils import custom_exception as ce
from saunaflow.utils.time_conversions import round_half_up

logger = setup_logger(__name__)


class AppFlow:
    """
    The screen-level state machine of the app: consent, onboarding, dashboard,
    protocol choice, temperature settings, the running session and its summary.

    Transitions are guarded and raise InvalidTransitionError when called from the
    wrong screen. Storage is only touched here, never by the timer or the
    evaluators.
    """

    def __init__(
        self,
        storage: StoragePort,
        clock: ClockPort,
        suggestions: Optional[SuggestionProvider] = None,
        translate: Optional[Callable[[str], str]] = None,
        content_picker: Optional[StageContentPicker] = None,
    ):
        self.clock = clock
        self.suggestions = suggestions
        self.translate = translate or (lambda key: key)
        self.content_picker = content_picker or StageContentPicker()
        self.profile = UserProfileRepository(storage)
        self.history_repo = SessionHistoryRepository(storage)
        self.storage = storage

        self.state = AppState.LOADING
        self.goal: Optional[Goal] = None
        self.user_name: Optional[str] = None
        self.selected_protocol: Optional[Protocol] = None
        self.session: Optional[SessionTimer] = None
        self.session_history: list = []
        self.last_completed_session: Optional[SessionLog] = None
        self.custom_draft: Optional[CustomProtocolDraft] = None
        self.stage_content: Optional[dict] = None
        self.history_unsaved = False

        self.on_state_change = Event("on_state_change")
        self.on_session_started = Event("on_session_started")
        self.on_session_finished = Event("on_session_finished")

    # ---- state plumbing ----

    def _set_state(self, new_state: AppState):
        previous = self.state
        self.state = new_state
        self.heal()
        if self.state is not previous:
            logger.info(f"View: {previous.name} -> {self.state.name}")
            self.on_state_change.emit(previous=previous, current=self.state)

    def _require_state(self, action: str, *allowed: AppState):
        if self.state not in allowed:
            names = ", ".join(state.name for state in allowed)
            raise ce.InvalidTransitionError(f"Cannot {action} from {self.state.name} (allowed: {names}).")

    def heal(self) -> bool:
        """Fall back to the dashboard if a screen lacks what it needs. Returns True if it did."""
        if self.state is AppState.SESSION_SETTINGS and self.selected_protocol is None:
            logger.warning("Inconsistent state: SESSION_SETTINGS with no protocol. Returning to dashboard.")
        elif self.state is AppState.IN_SESSION and (self.selected_protocol is None or self.session is None):
            logger.warning("Inconsistent state: IN_SESSION with no protocol. Returning to dashboard.")
        elif self.state is AppState.SUMMARY and self.last_completed_session is None:
            logger.warning("Inconsistent state: SUMMARY with no session log. Returning to dashboard.")
        else:
            return False
        self.state = AppState.DASHBOARD
        return True

    # ---- start-up, consent, onboarding ----

    def load(self) -> AppState:
        try:
            if not self.profile.health_check_accepted():
                self._set_state(AppState.HEALTH_CHECK)
                return self.state
            self.goal = self.profile.goal()
            self.user_name = self.profile.user_name()
            self.session_history = self.history_repo.load()
            self._set_state(AppState.DASHBOARD if self.goal and self.user_name else AppState.ONBOARDING)
        except ce.StorageError as e:
            logger.exception(f"Error reading from storage: {e}")
            try:
                self.profile.revoke_health_check()
            except ce.StorageError:
                logger.exception("Could not clear the health check flag.")
            self._set_state(AppState.HEALTH_CHECK)
        return self.state

    def accept_health_check(self) -> AppState:
        self._require_state("accept the health check", AppState.HEALTH_CHECK)
        self.profile.accept_health_check()
        self.goal = self.profile.goal()
        self.user_name = self.profile.user_name()
        self._set_state(AppState.DASHBOARD if self.goal and self.user_name else AppState.ONBOARDING)
        return self.state

    def complete_onboarding(self, name: str, goal: Goal) -> AppState:
        self._require_state("complete onboarding", AppState.ONBOARDING)
        name = (name or "").strip()
        if not name:
            raise ce.OnboardingError("A name is required.")
        if not isinstance(goal, Goal):
            raise ce.OnboardingError(f"Unknown goal: {goal!r}")
        self.profile.save_profile(name, goal)
        self.user_name = name
        self.goal = goal
        self._set_state(AppState.DASHBOARD)
        return self.state

    def change_goal(self) -> AppState:
        self._require_state("change the goal", AppState.DASHBOARD)
        self.profile.clear_profile()
        self.goal = None
        self.user_name = None
        self._set_state(AppState.ONBOARDING)
        return self.state

    def reset_app(self) -> AppState:
        """Wipe storage and every in-memory value, back to the health check."""
        if self.session is not None and not self.session.is_finished:
            self.session.exit()
        self.storage.clear()
        self.goal = None
        self.user_name = None
        self.selected_protocol = None
        self.session = None
        self.session_history = []
        self.last_completed_session = None
        self.history_unsaved = False
        self.custom_draft = None
        self.stage_content = None
        logger.info("App reset.")
        self._set_state(AppState.HEALTH_CHECK)
        return self.state

    # ---- choosing a protocol ----

    def start_ritual(self) -> AppState:
        self._require_state("start a ritual", AppState.DASHBOARD)
        self._set_state(AppState.PROTOCOL_SELECTION)
        return self.state

    def available_protocols(self) -> list:
        return protocols_for_goal(self.goal)

    def create_custom_ritual(self) -> CustomProtocolDraft:
        self._require_state("create a custom ritual", AppState.PROTOCOL_SELECTION)
        self.custom_draft = CustomProtocolDraft()
        self._set_state(AppState.CUSTOM_PROTOCOL)
        return self.custom_draft

    def suggest_custom(self, level: ExperienceLevel) -> bool:
        """Fill the custom draft from the suggestion provider; failures only set `ai_error`."""
        self._require_state("ask for a suggestion", AppState.CUSTOM_PROTOCOL)
        if self.suggestions is None:
            logger.warning("No suggestion provider configured.")
            self.custom_draft.experience = level
            self.custom_draft.ai_error = AI_ERROR
            return False
        return self.custom_draft.apply_suggestion(self.suggestions, level)

    def build_custom(self) -> Protocol:
        self._require_state("start the custom ritual", AppState.CUSTOM_PROTOCOL)
        protocol = self.custom_draft.build(self.goal, self.clock)
        self.select_protocol(protocol)
        return protocol

    def select_protocol(self, protocol: Protocol) -> AppState:
        self._require_state("select a protocol", AppState.PROTOCOL_SELECTION, AppState.CUSTOM_PROTOCOL)
        self.selected_protocol = protocol
        self._set_state(AppState.SESSION_SETTINGS)
        return self.state

    def select_protocol_by_id(self, protocol_id: str) -> AppState:
        return self.select_protocol(get_protocol(protocol_id))

    def back_to_protocol_selection(self) -> AppState:
        self._require_state("go back to protocol selection", AppState.CUSTOM_PROTOCOL, AppState.SESSION_SETTINGS)
        self.selected_protocol = None
        self._set_state(AppState.PROTOCOL_SELECTION)
        return self.state

    def back_to_dashboard(self) -> AppState:
        self._require_state("go back to the dashboard", AppState.PROTOCOL_SELECTION, AppState.SUMMARY)
        self.selected_protocol = None
        self.last_completed_session = None
        self._set_state(AppState.DASHBOARD)
        return self.state

    # ---- temperature settings ----

    def preview_adjustment(self, sauna_temp: int, cold_temp: int) -> dict:
        self._require_state("preview the adjustment", AppState.SESSION_SETTINGS)
        adjusted = adjust_protocol(self.selected_protocol, sauna_temp, cold_temp)
        return {
            "original": self.selected_protocol,
            "adjusted": adjusted,
            "has_changes": has_changes(self.selected_protocol, adjusted),
        }

    # ---- the session ----

    def start_session(self, protocol: Optional[Protocol] = None) -> SessionTimer:
        """Open the session screen for `protocol` (the adjusted one) or the selected protocol."""
        self._require_state("start the session", AppState.SESSION_SETTINGS)
        if protocol is not None:
            self.selected_protocol = protocol
        self.session = SessionTimer(self.selected_protocol, self.clock, translate=self.translate)
        self.session.on_stage_change.add_listener(self._refresh_stage_content)
        self.session.start()
        self._refresh_stage_content()
        self._set_state(AppState.IN_SESSION)
        self.on_session_started.emit(self.session)
        return self.session

    def _refresh_stage_content(self, **_):
        if self.session is not None:
            self.stage_content = self.content_picker.pick(self.session.current_stage.type)

    def _active_session(self, action: str) -> SessionTimer:
        self._require_state(action, AppState.IN_SESSION)
        return self.session

    def play(self) -> bool:
        return self._active_session("play").play()

    def pause(self) -> bool:
        return self._active_session("pause").pause()

    def toggle_play_pause(self) -> bool:
        session = self._active_session("toggle play/pause")
        if session.is_running:
            return session.pause()
        return session.play()

    def end_stage(self):
        self._active_session("end the stage").end_stage_early()

    def next_step(self) -> Optional[SessionLog]:
        """Advance a completed stage; after the last one, save the log and show the summary."""
        log = self._active_session("advance").advance()
        if log is not None:
            self._complete_session(log)
        return log

    def _complete_session(self, log: SessionLog):
        self.session_history = self.session_history + [log]
        self.last_completed_session = log
        self.session = None
        self.stage_content = None
        self._set_state(AppState.SUMMARY)
        self.save_history()
        self.on_session_finished.emit(log)

    def save_history(self) -> bool:
        """
        Write the in-memory history to storage.

        A failed write is logged and leaves `history_unsaved` set; the history
        stays in memory so the write can be retried.
        """
        try:
            self.history_repo.save(self.session_history)
        except ce.StorageError as e:
            logger.exception(f"Could not save session history: {e}")
            self.history_unsaved = True
            return False
        self.history_unsaved = False
        logger.info(f"History saved; {len(self.session_history)} session(s).")
        return True

    def exit_session(self) -> AppState:
        session = self._active_session("exit the session")
        session.exit()
        self.session = None
        self.selected_protocol = None
        self.stage_content = None
        self._set_state(AppState.DASHBOARD)
        return self.state

    # ---- read models ----

    def streak(self) -> int:
        now = self.clock.now()
        return compute_streak(self.session_history, now.date(), tz=now.tzinfo)

    def dashboard(self) -> dict:
        streak = self.streak()
        aggregates = compute_aggregates(self.session_history)
        return {
            "user_name": self.user_name,
            "goal": self.goal.value if self.goal else None,
            "streak": streak,
            "total_minutes": round_half_up(aggregates.total_minutes),
            "total_sessions": aggregates.total_sessions,
            "history": [log.to_dict() for log in reversed(self.session_history)],
            "achievements": evaluate_achievements(self.session_history, streak),
        }

    def snapshot(self) -> dict:
        return {
            "state": self.state.value,
            "goal": self.goal.value if self.goal else None,
            "user_name": self.user_name,
            "selected_protocol": self.selected_protocol.to_dict() if self.selected_protocol else None,
            "session": self.session.snapshot() if self.session else None,
            "stage_content": self.stage_content,
            "custom_draft": self.custom_draft.to_dict() if self.custom_draft else None,
            "last_completed_session": self.last_completed_session.to_dict() if self.last_completed_session else None,
            "history_unsaved": self.history_unsaved,
        }
