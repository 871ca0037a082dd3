"""Chat session controller.

Orchestrates one conversation: accepts user input, asks the completion
client for a reply, hands the reply to the typing animator, persists the
transcript after every change and keeps the suggestion list current.

Hidden design decisions:
- The one-turn-at-a-time guard (an explicit SessionPhase state machine)
- When and how often the transcript is persisted
- How completion failures become a visible fallback reply
"""

from collections.abc import Callable
from typing import TYPE_CHECKING

from ..completion.base import CompletionClient
from ..completion.errors import CompletionError
from .animator import TypingAnimator
from .models import (
    FALLBACK_REPLY,
    Message,
    SessionPhase,
    SessionState,
    default_transcript,
)
from .suggestions import suggest

if TYPE_CHECKING:
    from ..transcript.base import TranscriptStore

DebugCallback = Callable[[str, str, str], None]
Listener = Callable[["ChatSession"], None]


class ChatSession:
    """A single chat conversation with the Finbot assistant.

    Usage:
        session = ChatSession(client, store)
        await session.start()
        await session.submit("Should I invest now?")
        await session.wait_idle()
        ...
        await session.close()
    """

    def __init__(
        self,
        client: CompletionClient,
        store: "TranscriptStore | None" = None,
        animator: TypingAnimator | None = None,
    ):
        """Initialize the session.

        Args:
            client: Completion client used for every turn
            store: Optional transcript store; None keeps the transcript in memory
            animator: Typing animator (default chunk size and interval if None)
        """
        self._client = client
        self._store = store
        self._animator = animator or TypingAnimator()
        self._state = SessionState()
        self._suggestions = suggest(self._state.messages)
        self._listeners: list[Listener] = []
        self._debug_callback: DebugCallback | None = None
        # (index, full text) of the reply being revealed
        self._pending_reply: tuple[int, str] | None = None
        self._closed = False

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def messages(self) -> list[Message]:
        """Snapshot of the transcript, oldest first."""
        return list(self._state.messages)

    @property
    def suggestions(self) -> list[str]:
        return list(self._suggestions)

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def draft(self) -> str:
        return self._state.draft

    @property
    def awaiting_completion(self) -> bool:
        return self._state.awaiting_completion

    @property
    def animating(self) -> bool:
        return self._state.animating

    @property
    def animating_index(self) -> int | None:
        return self._state.animating_index

    @property
    def closed(self) -> bool:
        return self._closed

    def set_draft(self, text: str) -> None:
        """Update the unsent input text."""
        self._state.draft = text

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        """Register a callable invoked with the session after every change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set the debug callback for detailed session logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'
        """
        self._debug_callback = callback
        self._client.set_debug_callback(callback)
        if self._store is not None:
            self._store.set_debug_callback(callback)

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Session", message)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Restore the saved transcript, keeping the greeting if there is none."""
        if self._store is not None:
            try:
                await self._store.connect()
                restored = await self._store.load()
            except Exception as e:
                self._debug("error", f"Could not restore transcript: {e}")
                restored = None

            if restored is not None:
                self._state.messages = restored
                self._debug("info", f"Restored {len(restored)} message(s)")

        self._suggestions = suggest(self._state.messages)
        self._notify()

    async def close(self) -> None:
        """Tear the session down.

        Cancels any running animation and saves its reply in full, then
        releases the completion client and the store. A reply that arrives
        after this point is discarded.
        """
        if self._closed:
            return
        self._closed = True
        try:
            await self._animator.aclose()
            await self._save_pending_reply()
        finally:
            try:
                await self._client.close()
            finally:
                if self._store is not None:
                    await self._store.disconnect()
        self._debug("debug", "Session closed")

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    async def submit(self, text: str | None = None) -> bool:
        """Send a user message and start fetching the reply.

        Returns once the reply is known: either the fallback message has been
        appended or the typing animation has started. Use ``wait_idle()`` to
        wait for the animation.

        Args:
            text: Message to send; None sends the current draft

        Returns:
            True if the message was accepted, False if it was ignored
            (blank text, a turn already in progress, or a closed session)
        """
        if self._closed:
            return False

        trimmed = (self._state.draft if text is None else text).strip()
        if not trimmed:
            return False
        if not self._state.idle:
            self._debug("debug", f"Ignoring submit while {self._state.phase.value}")
            return False

        self._state.draft = ""
        self._state.phase = SessionPhase.AWAITING_REPLY
        try:
            await self._append(Message.user(trimmed))
            self._debug("info", f"Sending: '{trimmed[:50]}'")

            try:
                reply = await self._client.complete(trimmed)
            except CompletionError as e:
                self._debug("warning", f"{type(e).__name__}: {e}")
                reply = ""

            if self._closed:
                self._debug("debug", "Discarding reply that arrived after close")
                return True

            if not reply.strip():
                self._state.phase = SessionPhase.IDLE
                await self._append(Message.bot(FALLBACK_REPLY))
                return True

            index = len(self._state.messages)
            self._state.phase = SessionPhase.ANIMATING
            self._state.animating_index = index
            await self._append(Message.bot(""))
            self._pending_reply = (index, reply)
            self._animator.start(index, reply, self._on_tick, self._on_animation_done)
        except BaseException as e:
            if self._closed:
                if isinstance(e, Exception):
                    self._debug("debug", f"Ignoring failure after close: {e}")
                    return True
                raise
            self._pending_reply = None
            self._state.phase = SessionPhase.IDLE
            self._state.animating_index = None
            self._notify()
            raise

        self._debug("debug", f"Animating {len(reply)} chars into message {index}")
        return True

    async def submit_suggestion(self, suggestion: str) -> bool:
        """Send a suggestion chip's text as if the user had typed it."""
        return await self.submit(suggestion)

    async def wait_idle(self) -> None:
        """Wait until the running typing animation, if any, has finished."""
        await self._animator.wait()

    async def reset(self) -> bool:
        """Start over with just the greeting. Ignored while a turn is running."""
        if self._closed or not self._state.idle:
            return False
        self._state.messages = default_transcript()
        await self._commit()
        self._debug("info", "Transcript reset")
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _append(self, message: Message) -> None:
        self._state.messages.append(message)
        await self._commit()

    async def _on_tick(self, index: int, visible: str) -> None:
        self._state.messages[index].text = visible
        await self._commit()

    def _on_animation_done(self, completed: bool) -> None:
        self._state.phase = SessionPhase.IDLE
        self._state.animating_index = None
        if completed or not self._closed:
            self._pending_reply = None
        if not completed:
            self._debug("debug", "Animation cancelled")
        if not self._closed:
            self._notify()

    async def _save_pending_reply(self) -> None:
        """Store the full text of a reply whose reveal was cut short."""
        if self._pending_reply is None:
            return
        index, text = self._pending_reply
        self._pending_reply = None
        self._state.messages[index].text = text
        await self._persist()
        self._debug("debug", f"Saved full reply for message {index}")

    async def _commit(self) -> None:
        """Persist, recompute suggestions and notify after a transcript change."""
        await self._persist()
        self._suggestions = suggest(self._state.messages)
        self._notify()

    async def _persist(self) -> None:
        if self._store is None:
            return
        try:
            await self._store.save(self._state.messages)
        except Exception as e:
            self._debug("error", f"Failed to save transcript: {e}")
