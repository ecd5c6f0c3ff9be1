from abc import ABC, abstractmethod
from dataclasses import dataclass

from saunaflow.core.status import ExperienceLevel


@dataclass(frozen=True)
class Suggestion:
    cycles: int
    sauna_duration: int  # minutes
    cold_duration: int  # minutes
    rest_duration: int  # minutes
    is_cold_enabled: bool


class SuggestionProvider(ABC):
    """Proposes a custom ritual for an experience level."""

    @abstractmethod
    def suggest(self, level: ExperienceLevel) -> Suggestion:
        """
        Raises:
            SuggestionError: If no usable suggestion could be produced.
        """
        pass
