import json
from typing import Optional

from langchain_ollama import ChatOllama

from saunaflow.core.ports.suggestion_port import Suggestion, SuggestionProvider
from saunaflow.core.status import ExperienceLevel
from saunaflow.utils import custom_exception as ce
from saunaflow.utils.logging_handler import setup_logger

logger = setup_logger(__name__)

PROMPT_TEMPLATE = (
    "You are a sauna and cold exposure coach. Suggest a contrast therapy ritual for a "
    "{level} practitioner. Answer with a single JSON object and nothing else, using exactly "
    "these keys: \"cycles\" (integer, number of cycles), \"saunaDuration\" (integer, sauna "
    "minutes per cycle), \"coldDuration\" (integer, cold plunge minutes per cycle), "
    "\"restDuration\" (integer, rest minutes per cycle), \"isColdEnabled\" (boolean, whether "
    "the cold stage should be included)."
)

_INT_FIELDS = {
    "cycles": "cycles",
    "saunaDuration": "sauna_duration",
    "coldDuration": "cold_duration",
    "restDuration": "rest_duration",
}


def parse_suggestion(text: str) -> Suggestion:
    """
    Decode the model's JSON answer.

    Raises:
        SuggestionError: If the answer is not the expected object.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ce.SuggestionError(f"Suggestion is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ce.SuggestionError("Suggestion must be a JSON object.")

    values = {}
    for key, attr in _INT_FIELDS.items():
        value = data.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ce.SuggestionError(f"Suggestion field '{key}' must be an integer, got {value!r}")
        values[attr] = value
    cold_enabled = data.get("isColdEnabled")
    if not isinstance(cold_enabled, bool):
        raise ce.SuggestionError(f"Suggestion field 'isColdEnabled' must be a boolean, got {cold_enabled!r}")
    return Suggestion(is_cold_enabled=cold_enabled, **values)


class OllamaSuggestionAdapter(SuggestionProvider):
    def __init__(
        self,
        model: str = "smollm2:latest",
        base_url: Optional[str] = None,
        timeout: int = 10,
        llm=None,
    ):
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.llm = llm or self._init_llm()

    def _init_llm(self):
        kwargs = {
            "model": self.model,
            "temperature": 0,
            "format": "json",
            "client_kwargs": {"timeout": self.timeout},
        }
        if self.base_url:
            kwargs["base_url"] = self.base_url
        logger.info(f"Suggestions from Ollama model '{self.model}' at {self.base_url or 'local host'}")
        return ChatOllama(**kwargs)

    def suggest(self, level: ExperienceLevel) -> Suggestion:
        prompt = PROMPT_TEMPLATE.format(level=level.value.lower())
        try:
            result = self.llm.invoke(prompt)
        except Exception as e:
            raise ce.SuggestionError(f"Ollama request failed: {e}") from e
        suggestion = parse_suggestion(result.content)
        logger.debug(f"Suggestion for {level.value}: {suggestion}")
        return suggestion
