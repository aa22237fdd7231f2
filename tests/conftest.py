"""Shared pytest fixtures for all tests."""

import asyncio

import pytest

from company_research.ai.completion_client import CompletionResult
from company_research.settings import clear_settings_cache


@pytest.fixture(autouse=True)
def set_test_environment(monkeypatch):
    """
    Automatically set ENVIRONMENT variable for all tests.

    Keeps setup_logging() from printing its missing-environment warning and
    stops a developer's shell overrides from leaking into settings tests.
    """
    monkeypatch.setenv("ENVIRONMENT", "development")
    for name in (
        "RESEARCH_CONFIG_PATH",
        "RESEARCH_MODEL",
        "RESEARCH_TIMEOUT",
        "RESEARCH_CONCURRENCY",
        "OPENROUTER_BASE_URL",
        "OPENROUTER_API_KEY",
        "LOG_LEVEL",
        "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Settings are cached per process; start every test from a clean cache."""
    clear_settings_cache()
    yield
    clear_settings_cache()


def company_in_prompt(prompt: str) -> str:
    """Return the quoted company name that every research prompt starts with."""
    return prompt.split('"')[1]


class FakeCompletionClient:
    """
    Scripted stand-in for CompletionClient.

    ``reply`` is either a string, an exception instance, or a callable
    ``(user_prompt, title_suffix) -> str | Exception``. Every call is recorded
    and the number of simultaneously running calls is tracked so tests can
    check concurrency bounds.
    """

    def __init__(self, reply="", delay: float = 0.0):
        self.reply = reply
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self.closed = False

    async def complete(
        self,
        system_prompt,
        user_prompt,
        temperature=0.7,
        max_tokens=1000,
        model_override=None,
        title_suffix=None,
        credential=None,
    ):
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "title_suffix": title_suffix,
                "credential": credential,
            }
        )
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            reply = self.reply
            if callable(reply) and not isinstance(reply, Exception):
                reply = reply(user_prompt, title_suffix)
            if isinstance(reply, Exception):
                raise reply
            return CompletionResult(text=reply, model="test-model", total_tokens=42)
        finally:
            self.in_flight -= 1

    async def close(self):
        self.closed = True


@pytest.fixture
def make_client():
    """Factory for scripted fake completion clients."""
    return FakeCompletionClient


@pytest.fixture
def prompt_company():
    """Helper extracting the company name from a research or follow-up prompt."""
    return company_in_prompt
