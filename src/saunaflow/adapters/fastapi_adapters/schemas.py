from typing import Optional

from pydantic import BaseModel

from saunaflow.core.status import ExperienceLevel, Goal, StageType


class OnboardingRequest(BaseModel):
    name: str
    goal: Goal


class TemperatureRequest(BaseModel):
    sauna_temp: int = 85
    cold_temp: int = 10


class StartSessionRequest(TemperatureRequest):
    use_adjusted: bool = True


class StageEdit(BaseModel):
    enabled: Optional[bool] = None
    duration: Optional[int] = None


class CustomDraftEdit(BaseModel):
    name: Optional[str] = None
    cycles: Optional[int] = None
    stages: dict[StageType, StageEdit] = {}


class SuggestionRequest(BaseModel):
    level: ExperienceLevel
