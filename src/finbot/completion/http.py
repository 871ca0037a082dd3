"""HTTP completion client.

Talks to the Finbot completion endpoint (see ``finbot.server``) over a single
POST per utterance using httpx.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from .base import CompletionClient
from .errors import TransportError, UpstreamError
from .models import CompletionFailure, CompletionReply, CompletionRequest

DEFAULT_ENDPOINT_URL = "http://127.0.0.1:8000/api/gemini"


class HttpCompletionClient(CompletionClient):
    """Completion client for the ``{message} -> {reply}`` endpoint.

    Hidden design decisions:
    - httpx.AsyncClient lifecycle (owned unless one is injected)
    - Mapping of httpx failures to TransportError
    - Mapping of non-2xx status and malformed JSON to UpstreamError
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT_URL,
        client: httpx.AsyncClient | None = None,
        **client_kwargs: Any
    ):
        """Initialize the HTTP client.

        Args:
            endpoint_url: Full URL of the completion endpoint
            client: Optional preconfigured httpx client (not closed by us)
            **client_kwargs: Additional kwargs for httpx.AsyncClient
        """
        self._endpoint_url = endpoint_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(**client_kwargs)

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    @property
    def client_type(self) -> str:
        return "http"

    async def _complete(self, user_text: str) -> str:
        payload = CompletionRequest(message=user_text).model_dump()
        self._debug("debug", f"POST {self._endpoint_url}")
        try:
            response = await self._client.post(self._endpoint_url, json=payload)
        except httpx.HTTPError as e:
            raise TransportError(f"Could not reach {self._endpoint_url}: {e}") from e

        self._debug("debug", f"HTTP {response.status_code} from {self._endpoint_url}")
        if not response.is_success:
            raise UpstreamError(
                self._error_text(response) or f"HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            reply = CompletionReply.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise UpstreamError(
                f"Unexpected completion payload: {e}",
                status_code=response.status_code,
            ) from e

        return reply.reply

    @staticmethod
    def _error_text(response: httpx.Response) -> str | None:
        """Pull the ``error`` field out of a failure response, if present."""
        try:
            return CompletionFailure.model_validate(response.json()).error
        except (ValueError, ValidationError):
            return None

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
