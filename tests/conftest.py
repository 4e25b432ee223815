"""
Shared test fixtures.

Provides pytest fixtures for common test resources including:
- An application bound to a temporary SQLite database and translation store
- A Flask test client and an authenticated user
- Fake OpenAI-compatible clients and fake HTTP responses
"""

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from vocaboo import create_app
from vocaboo.config import config
from vocaboo.services.ai_service import ai_service
from vocaboo.services.cache_service import cache_service


API_KEYS = (
    "AI_GATEWAY_API_KEY",
    "OPENAI_API_KEY",
    "TMDB_API_KEY",
    "PEXELS_API_KEY",
    "YOUTUBE_API_KEY",
)


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Application with every store redirected under tmp_path and no API keys."""
    monkeypatch.setattr(config, "DATABASE_PATH", str(tmp_path / "vocaboo.db"))
    monkeypatch.setattr(config, "TRANSLATIONS_STORE_PATH", str(tmp_path / "translations.json"))
    monkeypatch.setattr(config, "LOG_DIR", str(tmp_path / "logs"))
    for key in API_KEYS:
        monkeypatch.setattr(config, key, "")
    monkeypatch.setattr(ai_service, "_gateway", None)
    monkeypatch.setattr(ai_service, "_openai", None)
    cache_service.clear()

    application = create_app()
    application.config["TESTING"] = True
    yield application

    cache_service.clear()
    for lg in (logging.getLogger("vocaboo"), application.logger):
        for handler in list(lg.handlers):
            if str(tmp_path) in str(getattr(handler, "baseFilename", "")):
                lg.removeHandler(handler)
                handler.close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    """Register a user and return its bearer header."""
    resp = client.post("/auth/register", json={"email": "learner@example.com", "password": "s3cret"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.get_json()['token']}"}


def fake_response(status=200, json_data=None):
    """Minimal stand-in for requests.Response."""
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 400
    if isinstance(json_data, Exception):
        resp.json.side_effect = json_data
    else:
        resp.json.return_value = json_data
    return resp


def chat_response(content=None, tool_arguments=None):
    """Build an object shaped like an OpenAI chat completion."""
    tool_calls = None
    if tool_arguments is not None:
        tool_calls = [SimpleNamespace(function=SimpleNamespace(name="create_chapters", arguments=tool_arguments))]
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    """Records calls and replays canned chat/speech/transcription results."""

    def __init__(self, chat=None, transcription="", speech=b"", error=None):
        self.calls = []
        self._chat = chat
        self._error = error
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create_chat))
        self.audio = SimpleNamespace(
            transcriptions=SimpleNamespace(create=self._make("transcriptions", SimpleNamespace(text=transcription))),
            speech=SimpleNamespace(create=self._make("speech", SimpleNamespace(content=speech))),
        )

    def _create_chat(self, **kwargs):
        self.calls.append(("chat", kwargs))
        if self._error is not None:
            raise self._error
        if callable(self._chat):
            return self._chat(**kwargs)
        return self._chat

    def _make(self, name, result):
        def create(**kwargs):
            self.calls.append((name, kwargs))
            if self._error is not None:
                raise self._error
            return result
        return create
