from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """Represents a message sent to a model provider."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user"] = Field(description="'system' for the persona, 'user' for the question")
    content: str = Field(description="Content of the message")


class LLMResponse(BaseModel):
    """Response from an LLM provider."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="Generated text content")
    model: str = Field(description="Model that generated the response")
    usage: dict[str, int] | None = Field(
        default=None,
        description="Token usage: prompt_tokens, completion_tokens, total_tokens"
    )
