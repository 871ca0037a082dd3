"""
Finbot: a terminal chat assistant for personal finance questions.

The chat pipeline (session, suggestions, typing animation, transcript
persistence) is independent of where replies come from; replies are fetched
through a completion client that talks to the Finbot completion endpoint or
directly to Gemini.
"""

__version__ = "0.1.0"

from .chat import ChatSession, Message, Role, SessionPhase, suggest
from .completion import CompletionClient, create_completion_client
from .transcript import TranscriptStore, create_transcript_store

__all__ = [
    "ChatSession",
    "CompletionClient",
    "Message",
    "Role",
    "SessionPhase",
    "TranscriptStore",
    "create_completion_client",
    "create_transcript_store",
    "suggest",
]
