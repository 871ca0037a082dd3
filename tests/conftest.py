"""Pytest configuration and shared fixtures."""
import asyncio

import pytest

from finbot.chat import ChatSession, TypingAnimator
from finbot.completion import CompletionClient, TransportError
from finbot.llm import LLMProvider, LLMResponse
from finbot.transcript import InMemoryTranscriptStore


class FakeCompletionClient(CompletionClient):
    """Completion client that replays canned replies without any network."""

    def __init__(self, replies=None, error: Exception | None = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls: list[str] = []
        self.on_call = None
        self.gate: asyncio.Event | None = None
        self.closed = False

    async def _complete(self, user_text: str) -> str:
        self.calls.append(user_text)
        self._debug("debug", f"fake completion for '{user_text}'")
        if self.on_call:
            self.on_call(user_text)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""

    async def close(self) -> None:
        self.closed = True

    @property
    def client_type(self) -> str:
        return "fake"


class FakeProvider(LLMProvider):
    """Model provider that records prompts and returns a fixed reply."""

    def __init__(self, reply: str = "Diversify.", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[list] = []
        self.closed = False

    async def chat_completion(self, messages):
        self.prompts.append(list(messages))
        if self.error is not None:
            raise self.error
        usage = {"prompt_tokens": 30, "completion_tokens": 8, "total_tokens": 38}
        return LLMResponse(content=self.reply, model=self.model, usage=usage)

    @property
    def model(self) -> str:
        return "fake-model"

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_client():
    """Factory for fake completion clients."""
    return FakeCompletionClient


@pytest.fixture
def make_provider():
    """Factory for fake model providers."""
    return FakeProvider


@pytest.fixture
def fake_client():
    """Client answering with 'Yes, consider...'."""
    return FakeCompletionClient(["Yes, consider..."])


@pytest.fixture
def failing_client():
    """Client whose every call fails at the transport level."""
    return FakeCompletionClient(error=TransportError("connection refused"))


@pytest.fixture
def memory_store():
    return InMemoryTranscriptStore()


@pytest.fixture
def fast_animator():
    """Animator with no delay between ticks."""
    return TypingAnimator(chunk_size=3, interval=0)


@pytest.fixture
def make_session(memory_store, fast_animator):
    """Build a started-ready session around a given client."""
    def _make(client, store=memory_store, animator=fast_animator):
        return ChatSession(client, store, animator)
    return _make
