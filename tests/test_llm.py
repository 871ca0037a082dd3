"""Tests for the Gemini provider and the provider factory."""
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from finbot.llm import ChatMessage, GeminiProvider, create_llm_provider
from finbot.prompts import build_persona_messages


class FakeModels:
    """Stands in for ``client.aio.models``."""

    def __init__(self, response):
        self.response = response
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


def fake_genai_client(response):
    models = FakeModels(response)
    return SimpleNamespace(aio=SimpleNamespace(models=models)), models


def gemini_response(*texts, usage=None):
    parts = [SimpleNamespace(text=text) for text in texts]
    candidate = SimpleNamespace(content=SimpleNamespace(parts=parts))
    return SimpleNamespace(candidates=[candidate], usage_metadata=usage, text="".join(texts))


class TestGeminiProvider:
    """Tests for GeminiProvider with a stubbed SDK client."""

    async def test_chat_completion_returns_text_and_usage(self):
        usage = SimpleNamespace(prompt_token_count=12, candidates_token_count=5, total_token_count=17)
        client, models = fake_genai_client(gemini_response("Yes, ", "consider...", usage=usage))
        provider = GeminiProvider(api_key="test", client=client)

        response = await provider.chat_completion([ChatMessage(role="user", content="Should I invest?")])

        assert response.content == "Yes, consider..."
        assert response.model == "gemini-2.5-flash"
        assert response.usage == {"prompt_tokens": 12, "completion_tokens": 5, "total_tokens": 17}
        [call] = models.calls
        assert call["model"] == "gemini-2.5-flash"
        assert call["contents"][0].role == "user"
        assert call["contents"][0].parts[0].text == "Should I invest?"
        assert call["config"].system_instruction is None

    async def test_persona_becomes_system_instruction(self):
        """Test that the persona is sent as the system instruction, the question as content."""
        client, models = fake_genai_client(gemini_response("ok"))
        provider = GeminiProvider(api_key="test", model="gemini-2.5-pro", client=client)

        await provider.chat_completion(build_persona_messages("Should I invest now?"))

        [call] = models.calls
        assert call["model"] == "gemini-2.5-pro"
        assert call["config"].system_instruction == (
            "You are a helpful finance assistant for an app called Finbot. Answer briefly and clearly."
        )
        assert len(call["contents"]) == 1
        assert call["contents"][0].parts[0].text == "User question: Should I invest now?"

    async def test_empty_candidates_give_empty_content(self):
        response = SimpleNamespace(candidates=[], usage_metadata=None, text=None)
        client, _ = fake_genai_client(response)
        provider = GeminiProvider(api_key="test", client=client)

        result = await provider.chat_completion([ChatMessage(role="user", content="hi")])

        assert result.content == ""
        assert result.usage is None

    async def test_sdk_errors_propagate(self):
        class BrokenModels:
            async def generate_content(self, **kwargs):
                raise RuntimeError("permission denied")

        client = SimpleNamespace(aio=SimpleNamespace(models=BrokenModels()))
        provider = GeminiProvider(api_key="test", client=client)

        with pytest.raises(RuntimeError, match="permission denied"):
            await provider.chat_completion([ChatMessage(role="user", content="hi")])


class TestChatMessage:
    def test_only_system_and_user_roles(self):
        with pytest.raises(ValidationError):
            ChatMessage(role="assistant", content="hello")


class TestProviderFactory:
    def test_creates_gemini(self):
        provider = create_llm_provider("gemini", api_key="test-key", model="gemini-2.5-flash")
        assert isinstance(provider, GeminiProvider)
        assert provider.model == "gemini-2.5-flash"

    def test_gemini_requires_api_key(self):
        with pytest.raises(TypeError):
            create_llm_provider("gemini")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm_provider("openai", api_key="x")
