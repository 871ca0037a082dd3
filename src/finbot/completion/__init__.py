"""Completion client module for finbot.

Turns one user utterance into one reply from a remote text-generation service.
"""

from .base import CompletionClient
from .errors import CompletionError, EmptyInput, TransportError, UpstreamError
from .factory import create_completion_client
from .http import HttpCompletionClient
from .models import CompletionFailure, CompletionReply, CompletionRequest
from .provider import ProviderCompletionClient

__all__ = [
    "CompletionClient",
    "CompletionError",
    "CompletionFailure",
    "CompletionReply",
    "CompletionRequest",
    "EmptyInput",
    "HttpCompletionClient",
    "ProviderCompletionClient",
    "TransportError",
    "UpstreamError",
    "create_completion_client",
]
