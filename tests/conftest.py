"""
Pytest configuration and shared fixtures for the TraceMap test suite.
"""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from tracemap.ai.explainer import ExplanationClient, Explainer


# ── Env setup ────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def set_test_env(monkeypatch: pytest.MonkeyPatch):
    """Unset real API keys so tests never make live calls."""
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    for key in [
        "GOOGLE_API_KEY", "OPENAI_API_KEY", "OPENROUTER_API_KEY", "ANTHROPIC_API_KEY",
    ]:
        monkeypatch.delenv(key, raising=False)


# ── Sample data fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def sample_email() -> str:
    return "admin@example.com"


# ── Explanation fakes ────────────────────────────────────────────────────────

GOOD_EXPLANATION = (
    "- The local part is short, which makes the handle easy to correlate.\n"
    "short line\n"
    "- Role words such as admin often recur across platform registrations.\n"
    "- Generic formats tend to leave more metadata in public archives.\n"
)


class FakeExplanationClient(ExplanationClient):
    """Records prompts and returns canned text or raises."""

    provider = "fake"

    def __init__(self, text: str = GOOD_EXPLANATION, error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.text


@pytest.fixture
def fake_client() -> FakeExplanationClient:
    return FakeExplanationClient()


@pytest.fixture
def failing_client() -> FakeExplanationClient:
    return FakeExplanationClient(error=RuntimeError("provider exploded"))


@pytest.fixture
def explainer(fake_client: FakeExplanationClient) -> Explainer:
    return Explainer(fake_client, timeout=1.0)


@pytest.fixture
def mock_client() -> AsyncMock:
    """Bare AsyncMock standing in for an ExplanationClient."""
    client = AsyncMock(spec=ExplanationClient)
    client.provider = "mock"
    client.generate.return_value = GOOD_EXPLANATION
    return client


# ── API fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def api_client_factory() -> Iterator:
    """Build a TestClient whose explainer wraps the given client."""
    from tracemap.main import app, get_explainer

    def _make(client: ExplanationClient) -> TestClient:
        app.dependency_overrides[get_explainer] = lambda: Explainer(client, timeout=1.0)
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def api_client(api_client_factory, fake_client: FakeExplanationClient) -> TestClient:
    return api_client_factory(fake_client)
