"""Wire payloads of the completion endpoint.

Shared by the HTTP client and the FastAPI endpoint so both sides agree on
the shape of ``{message} -> {reply} | {error}``.
"""

from pydantic import BaseModel, Field


class CompletionRequest(BaseModel):
    """Body of a completion request."""

    message: str | None = Field(default=None, description="User utterance")


class CompletionReply(BaseModel):
    """Successful completion response."""

    reply: str = Field(description="Generated reply text")


class CompletionFailure(BaseModel):
    """Error response returned with a non-2xx status."""

    error: str = Field(description="Human-readable error description")
