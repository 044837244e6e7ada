"""LLM module test fixtures."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from typing import Any, Generator

import pytest

from layoutforge.llm.backend.base import CompletionRequest, ProviderClient
from layoutforge.schema import DEFAULT_DESIGN

# A scripted reply: literal text, an exception to raise, or a function of
# the request returning text.
Reply = str | Exception | Callable[[CompletionRequest], str]


# =============================================================================
# Mock Provider Client
# =============================================================================


class MockProviderClient(ProviderClient):
    """Mock provider client for testing without API keys.

    Replies are consumed in order from a script; once the script runs out,
    the default reply is used. Every request is recorded.
    """

    def __init__(
        self,
        replies: list[Reply] | None = None,
        *,
        default: Reply = "",
        native_schema: bool = True,
        stream_chunk_size: int = 8,
    ):
        self.replies = list(replies or [])
        self.default = default
        self.native_schema = native_schema
        self.stream_chunk_size = stream_chunk_size
        self.requests: list[CompletionRequest] = []

    @property
    def model_name(self) -> str:
        """Return mock model name."""
        return "mock-model-v1"

    @property
    def provider(self) -> str:
        """Return mock provider name."""
        return "mock"

    @property
    def supports_native_schema(self) -> bool:
        return self.native_schema

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def _next_reply(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    async def generate(self, request: CompletionRequest) -> str:
        """Return the next scripted reply."""
        return self._next_reply(request)

    async def stream(self, request: CompletionRequest) -> AsyncIterator[str]:
        """Yield the next scripted reply in fixed-size pieces."""
        text = self._next_reply(request)
        for start in range(0, len(text), self.stream_chunk_size):
            yield text[start : start + self.stream_chunk_size]


def design_reply(**overrides: Any) -> str:
    """Build a valid design JSON reply (without id), as a model would send."""
    payload = DEFAULT_DESIGN.model_dump()
    del payload["id"]
    payload["theme_name"] = "Midnight Terminal"
    payload["layout_type"] = "seamless"
    payload.update(overrides)
    return json.dumps(payload)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_client() -> MockProviderClient:
    """Create a mock provider client with no scripted replies.

    Returns:
        MockProviderClient instance.
    """
    return MockProviderClient()


@pytest.fixture
def mock_api_key() -> str:
    """Provide a mock API key for testing.

    Returns:
        A test API key string.
    """
    return "test-api-key-12345"


@pytest.fixture
def clean_llm_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Remove provider credentials and selections from the environment.

    Yields:
        None (context manager style).
    """
    for key in (
        "GEMINI_API_KEY",
        "API_KEY",
        "GEMINI_MODEL",
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_BASE_URL",
        "LLM_PROVIDER",
        "LLM_TIMEOUT",
        "LLM_MAX_RETRIES",
    ):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def sample_document() -> str:
    """A short multi-paragraph markdown document.

    Returns:
        Document text.
    """
    return "\n".join(
        [
            "# Release Notes",
            "",
            "We shipped a faster sync engine this week.",
            "",
            "Offline edits now merge without conflicts in most cases.",
            "",
            "> Thanks to everyone who filed bug reports.",
        ]
    )
