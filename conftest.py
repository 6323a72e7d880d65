"""
Shared fixtures: settings, in-memory store, and fakes for the LLM and the PDF compiler.
"""

import json

import pytest

from main import app, init_app
from resumechat.config import Settings, StorageSettings
from resumechat.services import (
    AIService,
    ChatService,
    InMemoryStore,
    PdfService,
    ProfileService,
    ResumeService,
)

SAMPLE_LATEX = r"""\documentclass{article}
\usepackage[margin=0.5in]{geometry}
\begin{document}
\resumeheader{Jane Smith}
\resumecontact{jane@example.com $|$ 555-000-1111}
\section{Experience}
\entry{Acme Corp}{2019 -- 2023}{Built payment APIs}{0pt}
\end{document}"""

FAKE_PDF = b"%PDF-1.4 fake resume"


class FakeAIService(AIService):
    """AIService whose provider call returns queued answers instead of calling ollama."""

    def __init__(self, settings):
        super().__init__(settings)
        self.responses = []
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def queue_json(self, payload):
        self.queue(json.dumps(payload))

    def _generate_ollama(self, messages, system_prompt=None, temperature=0.7, json_mode=False):
        self.calls.append({
            "messages": messages,
            "system_prompt": system_prompt,
            "temperature": temperature,
            "json_mode": json_mode,
        })
        if not self.responses:
            raise RuntimeError("No fake response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakePdfService(PdfService):
    """PdfService whose remote compile returns a canned PDF (or fails on demand)."""

    def __init__(self, settings):
        super().__init__(settings)
        self.fail = False
        self.compiled = []

    def _compile_remote(self, latex):
        self.compiled.append(latex)
        if self.fail:
            raise RuntimeError("compile service unavailable")
        return FAKE_PDF


@pytest.fixture
def sample_latex():
    return SAMPLE_LATEX


@pytest.fixture
def settings():
    return Settings(storage=StorageSettings(backend="memory"))


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def ai(settings):
    return FakeAIService(settings)


@pytest.fixture
def pdf(settings):
    return FakePdfService(settings)


@pytest.fixture
def profile_service(settings, store):
    return ProfileService(settings, store)


@pytest.fixture
def resume_service(settings, ai, pdf, profile_service, store):
    return ResumeService(settings, ai, pdf, profile_service, store)


@pytest.fixture
def chat_service(settings, ai, profile_service, resume_service):
    return ChatService(settings, ai, profile_service, resume_service)


@pytest.fixture
def client(settings, ai, pdf, store):
    init_app(settings, ai_service=ai, store=store, pdf_service=pdf)
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
