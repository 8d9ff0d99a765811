import pytest

import providers
from app import create_app
from tests.helpers import FakeGenAI, FakeOpenAI, make_settings


@pytest.fixture
def fake_genai(monkeypatch):
    fake = FakeGenAI()
    monkeypatch.setattr(providers, "genai", fake)
    return fake


@pytest.fixture
def fake_openai(monkeypatch):
    monkeypatch.setattr(FakeOpenAI, "reply", "")
    monkeypatch.setattr(FakeOpenAI, "calls", [])
    monkeypatch.setattr(providers, "OpenAI", FakeOpenAI)
    return FakeOpenAI


@pytest.fixture
def make_client():
    def _make(settings=None, provider=None):
        app = create_app(settings or make_settings(), provider=provider)
        app.config["TESTING"] = True
        return app.test_client()
    return _make
