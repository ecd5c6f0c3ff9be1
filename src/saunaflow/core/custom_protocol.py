from dataclasses import dataclass, field
from typing import Optional

from saunaflow.core.ports.clock_port import ClockPort
from saunaflow.core.ports.suggestion_port import Suggestion, SuggestionProvider
from saunaflow.core.protocol import Protocol, Stage
from saunaflow.core.status import ExperienceLevel, Goal, StageType
from saunaflow.utils import setup_logger
from saunaflow.utils import custom_exception as ce
from saunaflow.utils.time_conversions import convert_to_seconds

logger = setup_logger(__name__)

DEFAULT_NAME = "custom_ritual_default_name"
DEFAULT_DESCRIPTION = "A personalized sauna ritual."
AI_ERROR = "ai_error"

STAGE_MINUTES_RANGE = (1, 30)
CYCLES_RANGE = (1, 10)

# Stage order inside every custom cycle.
STAGE_ORDER = (StageType.SAUNA, StageType.COLD, StageType.REST)


@dataclass
class StageConfig:
    enabled: bool
    duration: int  # minutes


def _default_stages() -> dict:
    return {
        StageType.SAUNA: StageConfig(enabled=True, duration=15),
        StageType.COLD: StageConfig(enabled=True, duration=2),
        StageType.REST: StageConfig(enabled=True, duration=10),
    }


def _check_range(label: str, value, bounds: tuple) -> int:
    lo, hi = bounds
    if isinstance(value, bool) or not isinstance(value, int) or not lo <= value <= hi:
        raise ce.ProtocolValidationError(f"{label} must be a whole number between {lo} and {hi}, got {value!r}")
    return value


@dataclass
class CustomProtocolDraft:
    """The editable form behind 'create your own ritual'."""
    name: str = DEFAULT_NAME
    cycles: int = 3
    stages: dict = field(default_factory=_default_stages)
    experience: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    ai_error: Optional[str] = None

    def set_name(self, name: str):
        self.name = name

    def set_cycles(self, cycles: int):
        self.cycles = _check_range("Cycles", cycles, CYCLES_RANGE)

    def set_duration(self, stage_type: StageType, minutes: int):
        self.stages[stage_type].duration = _check_range(f"{stage_type.value} duration", minutes, STAGE_MINUTES_RANGE)

    def toggle(self, stage_type: StageType) -> bool:
        config = self.stages[stage_type]
        config.enabled = not config.enabled
        return config.enabled

    def set_enabled(self, stage_type: StageType, enabled: bool):
        self.stages[stage_type].enabled = bool(enabled)

    def apply_suggestion(self, provider: SuggestionProvider, level: ExperienceLevel) -> bool:
        """
        Ask the provider for a ritual and copy it into the draft.

        On failure nothing in the draft changes except `ai_error`.

        Returns:
            bool: True if the suggestion was applied.
        """
        self.experience = level
        self.ai_error = None
        try:
            suggestion = provider.suggest(level)
            self._validate(suggestion)
        except Exception as e:
            logger.exception(f"AI suggestion failed for {level.value}: {e}")
            self.ai_error = AI_ERROR
            return False

        self.cycles = suggestion.cycles
        self.stages[StageType.SAUNA].duration = suggestion.sauna_duration
        self.stages[StageType.COLD] = StageConfig(enabled=suggestion.is_cold_enabled,
                                                  duration=suggestion.cold_duration)
        self.stages[StageType.REST].duration = suggestion.rest_duration
        logger.info(f"Applied {level.value} suggestion: {suggestion}")
        return True

    @staticmethod
    def _validate(suggestion: Suggestion):
        _check_range("Suggested cycles", suggestion.cycles, CYCLES_RANGE)
        for stage_type, minutes in ((StageType.SAUNA, suggestion.sauna_duration),
                                    (StageType.COLD, suggestion.cold_duration),
                                    (StageType.REST, suggestion.rest_duration)):
            _check_range(f"Suggested {stage_type.value} duration", minutes, STAGE_MINUTES_RANGE)

    def build(self, goal: Optional[Goal], clock: ClockPort) -> Protocol:
        """
        Turn the draft into a Protocol.

        Raises:
            NoStagesEnabledError: If every stage is switched off.
        """
        stages = [
            Stage(stage_type, convert_to_seconds(minutes=self.stages[stage_type].duration))
            for stage_type in STAGE_ORDER
            if self.stages[stage_type].enabled
        ]
        if not stages:
            raise ce.NoStagesEnabledError("Enable at least one stage to start a custom ritual.")

        millis = int(clock.now().timestamp() * 1000)
        return Protocol(
            id=f"custom-{millis}",
            name=self.name.strip() or DEFAULT_NAME,
            description=DEFAULT_DESCRIPTION,
            cycles=self.cycles,
            stages=stages,
            goal=goal or Goal.RELAX,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "cycles": self.cycles,
            "stages": {
                stage_type.value: {"enabled": config.enabled, "duration": config.duration}
                for stage_type, config in self.stages.items()
            },
            "experience": self.experience.value,
            "ai_error": self.ai_error,
        }
