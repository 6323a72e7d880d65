"""
Tests for provider selection, JSON parsing and structured completions.
"""

from types import SimpleNamespace

import pytest

from conftest import FakeAIService
from resumechat.config import AISettings, Settings
from resumechat.exceptions import AIServiceError
from resumechat.models import ChatDecision
from resumechat.services import ai_service
from resumechat.services.ai_service import AIService


@pytest.mark.parametrize("model, provider", [
    ("llama3.1", "ollama"),
    ("mistral", "ollama"),
    ("claude-3-5-sonnet-latest", "anthropic"),
    ("gpt-4o-mini", "openai"),
    ("o3-mini", "ollama"),
])
def test_determine_provider(model, provider):
    assert AIService._determine_provider(model) == provider


def test_missing_api_key_falls_back_to_ollama(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

    service = AIService(Settings(ai_settings=AISettings(model="claude-3-5-sonnet-latest")))

    assert service.provider == "ollama"
    assert service.model == "llama3.1"


def test_ollama_request(monkeypatch, settings):
    captured = {}

    def fake_chat(**kwargs):
        captured.update(kwargs)
        return {"message": {"content": '  {"reply": "hi"}\n'}}

    monkeypatch.setattr(ai_service.ollama, "chat", fake_chat)

    answer = AIService(settings).generate_completion("hello", system_prompt="be nice", temperature=0.2, json_mode=True)

    assert answer == '{"reply": "hi"}'
    assert captured["model"] == "llama3.1"
    assert captured["format"] == "json"
    assert captured["options"] == {"temperature": 0.2}
    assert captured["messages"] == [
        {"role": "system", "content": "be nice"},
        {"role": "user", "content": "hello"},
    ]


def test_provider_errors_are_wrapped(settings):
    service = FakeAIService(settings)
    service.queue(RuntimeError("model not found"))

    with pytest.raises(AIServiceError):
        service.generate_completion("hello")


@pytest.mark.parametrize("raw", [
    '{"reply": "ok"}',
    '```json\n{"reply": "ok"}\n```',
    'Sure! Here you go: {"reply": "ok"} Hope that helps.',
])
def test_parse_json_response(raw):
    assert AIService.parse_json_response(raw) == {"reply": "ok"}


def test_generate_structured_validates(settings):
    service = FakeAIService(settings)
    service.queue('{"reply": "ok", "tool_calls": [{"name": "updateUserProfile", "arguments": {"skills": "Go"}}]}')

    decision = service.generate_structured("hi", ChatDecision, system_prompt="You are helpful.")

    assert decision.reply == "ok"
    assert decision.tool_calls[0].arguments == {"skills": "Go"}
    system_prompt = service.calls[0]["system_prompt"]
    assert system_prompt.startswith("You are helpful.")
    assert '"tool_calls"' in system_prompt


def test_generate_structured_rejects_wrong_shape(settings):
    service = FakeAIService(settings)
    service.queue('{"tool_calls": "nope"}')

    with pytest.raises(AIServiceError):
        service.generate_structured("hi", ChatDecision)


def test_clean_ai_commentary():
    assert AIService.clean_ai_commentary("Here is the tailored resume:\nBody") == "Body"
    assert AIService.clean_ai_commentary("Plain text") == "Plain text"


class _StubCompletions:
    def __init__(self, content):
        self.content = content
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_openai_request(settings):
    completions = _StubCompletions(' {"reply": "hi"} ')
    service = AIService(settings)
    service.provider = "openai"
    service.model = "gpt-4o-mini"
    service.openai_client = SimpleNamespace(chat=SimpleNamespace(completions=completions))

    answer = service.generate_completion("hello", system_prompt="be nice", temperature=0.2, max_tokens=256, json_mode=True)

    assert answer == '{"reply": "hi"}'
    assert completions.kwargs == {
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "hello"},
        ],
        "temperature": 0.2,
        "max_tokens": 256,
        "response_format": {"type": "json_object"},
    }
