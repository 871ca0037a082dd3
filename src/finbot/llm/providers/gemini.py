"""Google Gemini LLM provider implementation.

Uses the official Google GenAI SDK for async completions.
Reference: https://github.com/googleapis/python-genai

Note: Gemini can return empty responses (e.g. safety filtering). This provider
does not retry; an empty reply is returned as empty content and the caller
decides what to show.
"""

from typing import Any

from google import genai
from google.genai import types

from ..base import LLMProvider
from ..models import ChatMessage, LLMResponse

DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiProvider(LLMProvider):
    """Google Gemini LLM provider implementation.

    Hidden design decisions:
    - Google GenAI client initialization
    - Message format conversion (system messages become system_instruction)
    - Text extraction from candidates
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        client: Any | None = None,
        **client_kwargs: Any
    ):
        """Initialize Gemini provider.

        Args:
            api_key: Google AI API key
            model: Default model (gemini-2.5-flash, gemini-2.5-pro)
            client: Optional preconstructed genai.Client
            **client_kwargs: Additional kwargs for genai.Client
        """
        self._model = model
        self._client = client or genai.Client(api_key=api_key, **client_kwargs)

    @property
    def model(self) -> str:
        return self._model

    def _convert_messages(self, messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
        """Convert ChatMessage list to Gemini format.

        Returns:
            Tuple of (system_instruction, contents)
        """
        system_instruction = None
        contents = []

        for msg in messages:
            if msg.role == "system":
                system_instruction = msg.content
            else:
                contents.append(types.Content(role="user", parts=[types.Part(text=msg.content)]))

        return system_instruction, contents

    def _extract_content(self, response: Any) -> str:
        """Extract text from a Gemini response, "" when there is none."""
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)

        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    async def chat_completion(self, messages: list[ChatMessage]) -> LLMResponse:
        """Generate a completion using Google Gemini (single attempt)."""
        system_instruction, contents = self._convert_messages(messages)
        config = types.GenerateContentConfig(system_instruction=system_instruction)

        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=contents,
            config=config
        )

        usage = None
        if response.usage_metadata:
            usage = {
                "prompt_tokens": response.usage_metadata.prompt_token_count or 0,
                "completion_tokens": response.usage_metadata.candidates_token_count or 0,
                "total_tokens": response.usage_metadata.total_token_count or 0
            }

        return LLMResponse(
            content=self._extract_content(response),
            model=self._model,
            usage=usage
        )

    async def close(self) -> None:
        """Close the Gemini client.

        Note: The Google GenAI client doesn't require explicit closing,
        but we implement this for interface consistency.
        """
