"""Factory for creating completion clients."""

from typing import Any

from .base import CompletionClient


def create_completion_client(kind: str = "http", **config: Any) -> CompletionClient:
    """Create a completion client.

    Args:
        kind: Client type ("http" or "gemini")
        **config: Client-specific configuration
            For http:
                - endpoint_url: str (default: local Finbot endpoint)
            For gemini:
                - api_key: str (required)
                - model: str (default: 'gemini-2.5-flash')

    Returns:
        CompletionClient instance

    Raises:
        ValueError: If client type is not supported
        TypeError: If required configuration is missing
    """
    kind_lower = kind.lower()

    if kind_lower == "http":
        from .http import HttpCompletionClient
        return HttpCompletionClient(**config)

    if kind_lower == "gemini":
        if "api_key" not in config:
            raise TypeError("Gemini completion client requires 'api_key' in config")
        from ..llm import create_llm_provider
        from .provider import ProviderCompletionClient
        return ProviderCompletionClient(create_llm_provider("gemini", **config))

    raise ValueError(
        f"Unsupported completion client: {kind}. "
        f"Supported clients: http, gemini"
    )
