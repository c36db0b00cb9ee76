"""Tests for the LLM client helpers"""

import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from matchday.prompts import COMMENTATOR_SYSTEM_PROMPT
from matchday.utils.llm import LLMClient, detect_provider


class TestDetectProvider:
    """Provider inference from model names"""

    @pytest.mark.parametrize("model,provider", [
        ("gpt-4o-mini", "openai"),
        ("o3-mini", "openai"),
        ("gemini-2.0-flash", "gemini"),
        ("claude-3-5-haiku-latest", "anthropic"),
        ("mystery-model", "openai"),
    ])
    def test_detect(self, model, provider):
        assert detect_provider(model) == provider


class TestLLMClient:
    """Client construction and response handling"""

    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            LLMClient(model="claude-3-5-haiku-latest")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            LLMClient(api_key="key", model="command-r", provider="cohere")

    def test_generate_uses_commentator_prompt(self):
        """Anthropic responses are joined from text blocks and parsed as JSON"""
        with patch("matchday.utils.llm.anthropic.Anthropic") as anthropic_cls:
            client = LLMClient(api_key="key", model="claude-3-5-haiku-latest")
            anthropic_cls.return_value.messages.create.return_value = SimpleNamespace(
                content=[SimpleNamespace(type="text", text='{"homeTeamWinPercentage": 55}')],
                usage=SimpleNamespace(input_tokens=120, output_tokens=30),
            )

            result = client.generate("Analyze this match")

        assert result == {"homeTeamWinPercentage": 55}
        kwargs = anthropic_cls.return_value.messages.create.call_args.kwargs
        assert kwargs["system"] == COMMENTATOR_SYSTEM_PROMPT
        assert kwargs["messages"] == [{"role": "user", "content": "Analyze this match"}]

    def test_openai_requests_json_object(self):
        with patch("matchday.utils.llm.openai.OpenAI") as openai_cls:
            client = LLMClient(api_key="key", model="gpt-4o-mini")
            message = SimpleNamespace(content='{"briefComment": "Tight match."}')
            openai_cls.return_value.chat.completions.create.return_value = SimpleNamespace(
                choices=[SimpleNamespace(message=message)],
                usage=None,
            )

            result = client.generate("prompt")

        assert result == {"briefComment": "Tight match."}
        kwargs = openai_cls.return_value.chat.completions.create.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["max_tokens"] == 1024

    def test_provider_errors_propagate(self):
        with patch("matchday.utils.llm.openai.OpenAI") as openai_cls:
            client = LLMClient(api_key="key", model="gpt-4o-mini")
            openai_cls.return_value.chat.completions.create.side_effect = RuntimeError("quota exceeded")

            with pytest.raises(RuntimeError):
                client.generate("prompt")

    def _client(self):
        with patch("matchday.utils.llm.openai.OpenAI", MagicMock()):
            return LLMClient(api_key="key", model="gpt-4o-mini")

    def test_parse_json_repairs_code_fence(self):
        client = self._client()
        assert client._parse_json('```json\n{"a": 1,}\n```') == {"a": 1}

    def test_parse_json_unrepairable(self):
        client = self._client()
        result = client._parse_json("not json at all")
        assert result["raw_response"] == "not json at all"
        assert "parse_error" in result

    def test_empty_response_is_returned_raw(self):
        """A model that returns nothing is not sent through the JSON parser"""
        with patch("matchday.utils.llm.anthropic.Anthropic") as anthropic_cls:
            client = LLMClient(api_key="key", model="claude-3-5-haiku-latest")
            anthropic_cls.return_value.messages.create.return_value = SimpleNamespace(content=[], usage=None)

            assert client.generate("prompt") == {"raw_response": ""}
