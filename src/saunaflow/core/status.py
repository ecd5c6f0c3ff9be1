# saunaflow/core/status.py
from enum import Enum


class Goal(Enum):
    RELAX = "Relax"
    PERFORMANCE = "Performance"


class StageType(Enum):
    SAUNA = "SAUNA"
    COLD = "COLD"
    REST = "REST"


class TimerStatus(Enum):
    INITIAL = "initial"
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"


class ExperienceLevel(Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class AppState(Enum):
    LOADING = "loading"
    HEALTH_CHECK = "health_check"
    ONBOARDING = "onboarding"
    DASHBOARD = "dashboard"
    PROTOCOL_SELECTION = "protocol_selection"
    CUSTOM_PROTOCOL = "custom_protocol"
    SESSION_SETTINGS = "session_settings"
    IN_SESSION = "in_session"
    SUMMARY = "summary"
