import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from saunaflow.adapters.fastapi_adapters.schemas import (
    CustomDraftEdit,
    OnboardingRequest,
    StartSessionRequest,
    SuggestionRequest,
    TemperatureRequest,
)
from saunaflow.core.app_flow import AppFlow
from saunaflow.core.ports.clock_port import ClockPort
from saunaflow.core.ports.storage_port import StoragePort
from saunaflow.core.ports.suggestion_port import SuggestionProvider
from saunaflow.core.session_timer import SessionTimer
from saunaflow.core.status import AppState
from saunaflow.tools.time_tools.session_ticker import SessionTicker
from saunaflow.utils import custom_exception as ce
from saunaflow.utils.logging_handler import setup_logger

logger = setup_logger(__name__)


@dataclass
class Args:
    host: str = "127.0.0.1"
    port: int = 8000
    db_path: Optional[str] = None
    no_ai: bool = False
    tick_interval: float = 1.0


def _protocol_view(protocol) -> dict:
    data = protocol.to_dict()
    data["total_duration"] = protocol.total_duration()
    return data


def create_app(
    args: Args,
    storage: StoragePort,
    clock: ClockPort,
    suggestions: Optional[SuggestionProvider] = None,
) -> FastAPI:
    flow = AppFlow(storage=storage, clock=clock, suggestions=suggestions)
    # sync endpoints run on the thread pool; one request drives the flow at a time
    flow_lock = threading.Lock()

    def attach_ticker(session: SessionTimer):
        previous = getattr(app.state, "ticker", None)
        if previous is not None:
            previous.stop(join=False)
        app.state.ticker = SessionTicker(session, interval=args.tick_interval)

    flow.on_session_started.add_listener(attach_ticker)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        with flow_lock:
            flow.load()
        logger.info(f"SaunaFlow ready on view {flow.state.name}.")
        yield
        ticker = getattr(app.state, "ticker", None)
        if ticker is not None:
            ticker.stop()

    app = FastAPI(title="SaunaFlow", lifespan=lifespan)
    app.state.flow = flow
    app.state.flow_lock = flow_lock
    app.state.ticker = None

    @app.exception_handler(ce.InvalidTransitionError)
    async def invalid_transition(request: Request, exc: ce.InvalidTransitionError):
        return JSONResponse(status_code=409, content={"error": str(exc)})

    @app.exception_handler(ce.ProtocolNotFoundError)
    async def not_found(request: Request, exc: ce.ProtocolNotFoundError):
        return JSONResponse(status_code=404, content={"error": exc.args[0] if exc.args else "not found"})

    @app.exception_handler(ce.ProtocolValidationError)
    async def invalid_protocol(request: Request, exc: ce.ProtocolValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(ce.OnboardingError)
    async def invalid_onboarding(request: Request, exc: ce.OnboardingError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(ce.StorageError)
    async def storage_failure(request: Request, exc: ce.StorageError):
        return JSONResponse(status_code=503, content={"error": str(exc)})

    @app.get("/api/state")
    def state():
        with flow_lock:
            return flow.snapshot()

    @app.post("/api/health-check/accept")
    def accept_health_check():
        with flow_lock:
            flow.accept_health_check()
            return flow.snapshot()

    @app.post("/api/onboarding")
    def onboarding(body: OnboardingRequest):
        with flow_lock:
            flow.complete_onboarding(body.name, body.goal)
            return flow.snapshot()

    @app.post("/api/goal/change")
    def change_goal():
        with flow_lock:
            flow.change_goal()
            return flow.snapshot()

    @app.post("/api/reset")
    def reset():
        with flow_lock:
            flow.reset_app()
            return flow.snapshot()

    @app.get("/api/dashboard")
    def dashboard():
        with flow_lock:
            return flow.dashboard()

    @app.post("/api/history/save")
    def save_history():
        with flow_lock:
            if not flow.save_history():
                raise ce.StorageError("Session history could not be saved.")
            return flow.snapshot()

    @app.post("/api/ritual/start")
    def start_ritual():
        with flow_lock:
            flow.start_ritual()
            return flow.snapshot()

    @app.post("/api/ritual/back")
    def back():
        with flow_lock:
            if flow.state in (AppState.CUSTOM_PROTOCOL, AppState.SESSION_SETTINGS):
                flow.back_to_protocol_selection()
            else:
                flow.back_to_dashboard()
            return flow.snapshot()

    @app.get("/api/protocols")
    def protocols():
        with flow_lock:
            return [_protocol_view(protocol) for protocol in flow.available_protocols()]

    @app.post("/api/protocols/{protocol_id}/select")
    def select_protocol(protocol_id: str):
        with flow_lock:
            flow.select_protocol_by_id(protocol_id)
            return flow.snapshot()

    @app.post("/api/custom")
    def create_custom():
        with flow_lock:
            return flow.create_custom_ritual().to_dict()

    @app.patch("/api/custom")
    def edit_custom(body: CustomDraftEdit):
        with flow_lock:
            if flow.custom_draft is None or flow.state is not AppState.CUSTOM_PROTOCOL:
                raise ce.InvalidTransitionError("No custom ritual is being edited.")
            draft = flow.custom_draft
            if body.name is not None:
                draft.set_name(body.name)
            if body.cycles is not None:
                draft.set_cycles(body.cycles)
            for stage_type, edit in body.stages.items():
                if edit.enabled is not None:
                    draft.set_enabled(stage_type, edit.enabled)
                if edit.duration is not None:
                    draft.set_duration(stage_type, edit.duration)
            return draft.to_dict()

    @app.post("/api/custom/suggest")
    def suggest_custom(body: SuggestionRequest):
        with flow_lock:
            applied = flow.suggest_custom(body.level)
            return {"applied": applied, "draft": flow.custom_draft.to_dict()}

    @app.post("/api/custom/start")
    def start_custom():
        with flow_lock:
            return _protocol_view(flow.build_custom())

    @app.post("/api/settings/preview")
    def preview(body: TemperatureRequest):
        with flow_lock:
            result = flow.preview_adjustment(body.sauna_temp, body.cold_temp)
        return {
            "original": _protocol_view(result["original"]),
            "adjusted": _protocol_view(result["adjusted"]),
            "has_changes": result["has_changes"],
        }

    @app.post("/api/session/start")
    def start_session(body: StartSessionRequest):
        with flow_lock:
            protocol = None
            if body.use_adjusted:
                protocol = flow.preview_adjustment(body.sauna_temp, body.cold_temp)["adjusted"]
            flow.start_session(protocol)
            return flow.snapshot()

    @app.get("/api/session")
    def session():
        with flow_lock:
            return flow.snapshot()

    actions = {
        "play": flow.play,
        "pause": flow.pause,
        "toggle": flow.toggle_play_pause,
        "end-stage": flow.end_stage,
        "next": flow.next_step,
        "exit": flow.exit_session,
    }

    @app.post("/api/session/{action}")
    def session_action(action: str):
        handler = actions.get(action)
        if handler is None:
            return JSONResponse(status_code=404, content={"error": f"Unknown session action '{action}'."})
        with flow_lock:
            handler()
            return flow.snapshot()

    @app.post("/api/summary/done")
    def summary_done():
        with flow_lock:
            flow.back_to_dashboard()
            return flow.snapshot()

    return app
