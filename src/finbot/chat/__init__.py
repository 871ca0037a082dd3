"""Chat session module for finbot.

Module structure (each module hides a design decision):
- models.py: Transcript and session state representation
- suggestions.py: Keyword heuristic for follow-up prompts
- animator.py: Chunked typing reveal of bot replies
- session.py: Turn orchestration and the one-turn-at-a-time guard
"""

from .animator import TypingAnimator, reveal_steps
from .models import (
    DEFAULT_GREETING,
    FALLBACK_REPLY,
    Message,
    Role,
    SessionPhase,
    SessionState,
    default_transcript,
)
from .session import ChatSession
from .suggestions import DEFAULT_SUGGESTIONS, MAX_SUGGESTIONS, suggest

__all__ = [
    "DEFAULT_GREETING",
    "DEFAULT_SUGGESTIONS",
    "FALLBACK_REPLY",
    "MAX_SUGGESTIONS",
    "ChatSession",
    "Message",
    "Role",
    "SessionPhase",
    "SessionState",
    "TypingAnimator",
    "default_transcript",
    "reveal_steps",
    "suggest",
]
