"""Data models for the chat session.

These models define the transcript representation shared by the session
controller, the transcript stores and the UI, independent of how the
transcript is rendered or persisted.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_GREETING = "Hi! I'm Finbot's AI assistant. How can I help you?"
FALLBACK_REPLY = "Error connecting to Finbot AI. Please try again."

TIMESTAMP_FORMAT = "%H:%M"


def format_time(moment: datetime | None = None) -> str:
    """Format a moment as the short display time shown under each bubble."""
    return (moment or datetime.now()).strftime(TIMESTAMP_FORMAT)


class Role(str, Enum):
    """Sender of a chat message."""

    USER = "user"
    BOT = "bot"


class SessionPhase(str, Enum):
    """Turn state of a chat session.

    IDLE -> AWAITING_REPLY on an accepted submit.
    AWAITING_REPLY -> ANIMATING on a non-empty completion.
    AWAITING_REPLY -> IDLE on failure (fallback reply appended).
    ANIMATING -> IDLE once the reveal finishes or is cancelled.
    """

    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"
    ANIMATING = "animating"


class Message(BaseModel):
    """A single transcript entry.

    Text is mutable so the typing animator can reveal a bot reply in place.
    """

    role: Role = Field(description="Sender: 'user' or 'bot'")
    text: str = Field(description="Message text (Markdown for bot replies)")
    timestamp: str | None = Field(default=None, description="Display time, e.g. '14:05'")

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=Role.USER, text=text, timestamp=format_time())

    @classmethod
    def bot(cls, text: str) -> "Message":
        return cls(role=Role.BOT, text=text, timestamp=format_time())


def default_transcript() -> list[Message]:
    """Transcript a brand-new session starts with."""
    return [Message.bot(DEFAULT_GREETING)]


class SessionState(BaseModel):
    """Complete state of one chat session.

    Invariants:
    - at most one message is animating, and it is a bot message
    - ``animating_index`` is set exactly when the phase is ANIMATING
    """

    messages: list[Message] = Field(default_factory=default_transcript)
    draft: str = Field(default="", description="Unsent input text")
    phase: SessionPhase = Field(default=SessionPhase.IDLE)
    animating_index: int | None = Field(default=None)

    @property
    def awaiting_completion(self) -> bool:
        return self.phase is SessionPhase.AWAITING_REPLY

    @property
    def animating(self) -> bool:
        return self.phase is SessionPhase.ANIMATING

    @property
    def idle(self) -> bool:
        return self.phase is SessionPhase.IDLE

    def last_user_message(self) -> Message | None:
        """Get the most recent user message, if any."""
        for message in reversed(self.messages):
            if message.role is Role.USER:
                return message
        return None
