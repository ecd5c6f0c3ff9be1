import json
import unittest
from types import SimpleNamespace

from saunaflow.adapters.llm_adapters.ollama_suggestion_adapter import OllamaSuggestionAdapter, parse_suggestion
from saunaflow.core.ports.suggestion_port import Suggestion
from saunaflow.core.status import ExperienceLevel
from saunaflow.utils import custom_exception as ce

ANSWER = {"cycles": 3, "saunaDuration": 12, "coldDuration": 2, "restDuration": 10, "isColdEnabled": True}


class FakeLLM:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.prompts = []

    def invoke(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return SimpleNamespace(content=self.content)


class TestParseSuggestion(unittest.TestCase):
    def test_valid_answer(self) -> None:
        self.assertEqual(parse_suggestion(json.dumps(ANSWER)), Suggestion(
            cycles=3, sauna_duration=12, cold_duration=2, rest_duration=10, is_cold_enabled=True,
        ))

    def test_invalid_answers(self) -> None:
        bad = [
            "Sure! Here is a plan",
            json.dumps([ANSWER]),
            json.dumps({k: v for k, v in ANSWER.items() if k != "restDuration"}),
            json.dumps(dict(ANSWER, cycles="3")),
            json.dumps(dict(ANSWER, cycles=True)),
            json.dumps(dict(ANSWER, isColdEnabled="yes")),
        ]
        for text in bad:
            with self.assertRaises(ce.SuggestionError, msg=text):
                parse_suggestion(text)


class TestOllamaSuggestionAdapter(unittest.TestCase):
    def test_prompt_names_level_and_answer_is_parsed(self) -> None:
        llm = FakeLLM(content=json.dumps(ANSWER))
        adapter = OllamaSuggestionAdapter(llm=llm)
        suggestion = adapter.suggest(ExperienceLevel.ADVANCED)
        self.assertEqual(suggestion.sauna_duration, 12)
        self.assertIn("advanced", llm.prompts[0])
        self.assertIn("isColdEnabled", llm.prompts[0])

    def test_transport_errors_become_suggestion_errors(self) -> None:
        adapter = OllamaSuggestionAdapter(llm=FakeLLM(error=ConnectionError("refused")))
        with self.assertRaises(ce.SuggestionError):
            adapter.suggest(ExperienceLevel.BEGINNER)


if __name__ == "__main__":
    unittest.main()
