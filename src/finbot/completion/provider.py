"""In-process completion client.

Answers directly through an LLMProvider instead of the HTTP endpoint, sending
the Finbot persona as the system message ahead of the user question.
"""

from ..llm import ChatMessage, LLMProvider
from ..prompts import build_persona_messages
from .base import CompletionClient
from .errors import UpstreamError


class ProviderCompletionClient(CompletionClient):
    """Completion client backed by a model provider.

    Any provider failure is reported as UpstreamError: from the session's
    point of view the model is just another remote service.
    """

    def __init__(self, provider: LLMProvider, use_persona: bool = True):
        self._provider = provider
        self._use_persona = use_persona

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    @property
    def client_type(self) -> str:
        return "provider"

    def build_messages(self, user_text: str) -> list[ChatMessage]:
        """Messages actually sent to the model."""
        if self._use_persona:
            return build_persona_messages(user_text)
        return [ChatMessage(role="user", content=user_text)]

    async def _complete(self, user_text: str) -> str:
        try:
            response = await self._provider.chat_completion(self.build_messages(user_text))
        except Exception as e:
            raise UpstreamError(f"{self._provider.model} failed: {e}") from e

        if response.usage:
            self._debug(
                "debug",
                f"{response.model}: {response.usage.get('prompt_tokens', 0)} prompt + "
                f"{response.usage.get('completion_tokens', 0)} reply tokens",
            )
        return response.content

    async def close(self) -> None:
        await self._provider.close()
