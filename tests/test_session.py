"""Tests for the chat session controller."""
import asyncio
import math

import pytest

from finbot.chat import (
    DEFAULT_GREETING,
    DEFAULT_SUGGESTIONS,
    FALLBACK_REPLY,
    ChatSession,
    Message,
    Role,
    SessionPhase,
    TypingAnimator,
)
from finbot.completion import UpstreamError
from finbot.transcript import (
    InMemoryTranscriptStore,
    decode_transcript,
    encode_transcript,
)
from finbot.transcript.base import TRANSCRIPT_KEY


class CountingStore(InMemoryTranscriptStore):
    """In-memory store that counts saves."""

    def __init__(self):
        super().__init__()
        self.saves = 0

    async def save(self, messages):
        self.saves += 1
        await super().save(messages)


class BrokenStore(InMemoryTranscriptStore):
    """Store whose writes always fail."""

    async def _write(self, key, blob):
        raise OSError("disk full")


def stored_messages(store: InMemoryTranscriptStore) -> list[Message]:
    return decode_transcript(store.blobs[TRANSCRIPT_KEY])


async def wait_for(condition, timeout: float = 1.0) -> None:
    """Poll until ``condition()`` is true."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.001)


class TestStart:
    """Tests for session start-up and transcript restore."""

    async def test_fresh_session_shows_greeting(self, make_session, fake_client):
        session = make_session(fake_client)
        await session.start()

        assert len(session.messages) == 1
        assert session.messages[0].role is Role.BOT
        assert session.messages[0].text == DEFAULT_GREETING
        assert session.phase is SessionPhase.IDLE
        assert session.suggestions == list(DEFAULT_SUGGESTIONS)

    async def test_restores_saved_transcript(self, fake_client, fast_animator):
        saved = [
            Message(role=Role.BOT, text=DEFAULT_GREETING),
            Message(role=Role.USER, text="I'm a beginner"),
            Message(role=Role.BOT, text="Welcome!"),
        ]
        store = InMemoryTranscriptStore(blobs={TRANSCRIPT_KEY: encode_transcript(saved)})
        session = ChatSession(fake_client, store, fast_animator)

        await session.start()

        assert session.messages == saved
        assert session.suggestions[0] == "How should a beginner start investing?"

    async def test_malformed_snapshot_falls_back_to_greeting(self, fake_client, fast_animator):
        """Test that a corrupt snapshot is discarded without raising."""
        store = InMemoryTranscriptStore(blobs={TRANSCRIPT_KEY: "{not json"})
        session = ChatSession(fake_client, store, fast_animator)
        logs = []
        session.set_debug_callback(lambda level, component, message: logs.append((level, component)))

        await session.start()

        assert [m.text for m in session.messages] == [DEFAULT_GREETING]
        assert ("warning", "Store") in logs

    async def test_works_without_store(self, fake_client, fast_animator):
        session = ChatSession(fake_client, animator=fast_animator)
        await session.start()
        assert await session.submit("hello")
        await session.wait_idle()
        assert len(session.messages) == 3


class TestSubmit:
    """Tests for a single turn."""

    async def test_full_turn(self, make_session, fake_client, memory_store):
        """Test the greeting, question and animated answer scenario."""
        session = make_session(fake_client)
        await session.start()

        accepted = await session.submit("Should I invest now?")
        assert accepted
        assert session.phase is SessionPhase.ANIMATING
        assert session.animating_index == 2

        await session.wait_idle()

        assert [(m.role, m.text) for m in session.messages] == [
            (Role.BOT, DEFAULT_GREETING),
            (Role.USER, "Should I invest now?"),
            (Role.BOT, "Yes, consider..."),
        ]
        assert session.phase is SessionPhase.IDLE
        assert session.animating_index is None
        assert stored_messages(memory_store) == session.messages

    async def test_user_message_appended_before_network_call(self, make_session, fake_client):
        seen = []
        session = make_session(fake_client)
        fake_client.on_call = lambda text: seen.append(
            (len(session.messages), session.messages[-1].role, session.awaiting_completion)
        )
        await session.start()

        await session.submit("  Should I invest now?  ")

        assert seen == [(2, Role.USER, True)]
        assert fake_client.calls == ["Should I invest now?"]
        assert session.messages[1].text == "Should I invest now?"
        assert session.messages[1].timestamp is not None

    async def test_blank_input_is_ignored(self, make_session, fake_client):
        session = make_session(fake_client)
        await session.start()

        assert not await session.submit("   \n\t ")
        assert not await session.submit()

        assert len(session.messages) == 1
        assert fake_client.calls == []

    async def test_submit_uses_and_clears_draft(self, make_session, fake_client):
        session = make_session(fake_client)
        await session.start()
        session.set_draft("Explain SIP vs Lump Sum")

        assert await session.submit()
        assert session.draft == ""
        assert session.messages[1].text == "Explain SIP vs Lump Sum"
        await session.wait_idle()

    async def test_rejected_submit_keeps_draft(self, make_session, fake_client):
        fake_client.gate = asyncio.Event()
        session = make_session(fake_client)
        await session.start()

        turn = asyncio.create_task(session.submit("first"))
        await wait_for(lambda: fake_client.calls)
        session.set_draft("second")

        assert not await session.submit()
        assert session.draft == "second"

        fake_client.gate.set()
        await turn
        await session.wait_idle()

    async def test_no_second_turn_while_awaiting(self, make_session, fake_client):
        """Test that a submit during an in-flight request changes nothing."""
        fake_client.gate = asyncio.Event()
        session = make_session(fake_client)
        await session.start()

        turn = asyncio.create_task(session.submit("first"))
        await wait_for(lambda: session.awaiting_completion)
        before = session.messages

        assert not await session.submit("second")
        assert not await session.submit_suggestion("Explain SIP vs Lump Sum")
        assert session.messages == before
        assert fake_client.calls == ["first"]

        fake_client.gate.set()
        assert await turn
        await session.wait_idle()
        assert len(session.messages) == 3

    async def test_no_second_turn_while_animating(self, make_session, make_client):
        client = make_client(["x" * 60])
        session = make_session(client, animator=TypingAnimator(chunk_size=1, interval=0.01))
        await session.start()

        await session.submit("first")
        assert session.animating
        before = [m.text for m in session.messages[:-1]]

        assert not await session.submit("second")
        assert [m.text for m in session.messages[:-1]] == before
        assert client.calls == ["first"]

        await session.wait_idle()
        assert session.messages[-1].text == "x" * 60

    async def test_transport_failure_appends_fallback(self, make_session, failing_client):
        session = make_session(failing_client)
        await session.start()

        assert await session.submit("hello")

        bots = [m for m in session.messages[1:] if m.role is Role.BOT]
        assert [m.text for m in bots] == [FALLBACK_REPLY]
        assert session.phase is SessionPhase.IDLE
        assert not session.awaiting_completion

    async def test_upstream_failure_appends_fallback(self, make_session, make_client):
        client = make_client(error=UpstreamError("Something went wrong", status_code=500))
        session = make_session(client)
        await session.start()

        await session.submit("hello")

        assert session.messages[-1].text == FALLBACK_REPLY
        assert session.phase is SessionPhase.IDLE

    async def test_empty_reply_appends_fallback(self, make_session, make_client):
        client = make_client(["   "])
        session = make_session(client)
        await session.start()

        await session.submit("hello")

        assert session.messages[-1].text == FALLBACK_REPLY
        assert session.phase is SessionPhase.IDLE

    async def test_unexpected_error_restores_idle(self, make_session, make_client):
        client = make_client(error=KeyError("boom"))
        session = make_session(client)
        await session.start()

        with pytest.raises(KeyError):
            await session.submit("hello")

        assert session.phase is SessionPhase.IDLE
        assert await session.reset()

    async def test_listener_error_while_sending_restores_idle(self, make_session, fake_client):
        """Test that a failure while recording the user message does not wedge the session."""
        session = make_session(fake_client)
        await session.start()
        raised = []

        def render_once_broken(s: ChatSession) -> None:
            if not raised:
                raised.append(True)
                raise RuntimeError("render failed")

        session.add_listener(render_once_broken)

        with pytest.raises(RuntimeError, match="render failed"):
            await session.submit("hello")

        assert session.phase is SessionPhase.IDLE
        assert fake_client.calls == []
        assert await session.submit("again")
        await session.wait_idle()
        assert session.messages[-1].text == "Yes, consider..."

    async def test_listener_error_when_reply_arrives_restores_idle(self, make_session, make_client):
        """Test that a failure while adding the reply bubble clears the animating state."""
        session = make_session(make_client(["First", "Second"]))
        await session.start()
        raised = []

        def break_on_animating(s: ChatSession) -> None:
            if s.animating and not raised:
                raised.append(True)
                raise RuntimeError("render failed")

        session.add_listener(break_on_animating)

        with pytest.raises(RuntimeError, match="render failed"):
            await session.submit("hello")

        assert session.phase is SessionPhase.IDLE
        assert session.animating_index is None
        assert await session.submit("again")
        await session.wait_idle()
        assert session.messages[-1].text == "Second"

    async def test_session_usable_after_failure(self, make_session, failing_client):
        session = make_session(failing_client)
        await session.start()
        await session.submit("first")

        failing_client.error = None
        failing_client.replies = ["Recovered"]
        assert await session.submit("second")
        await session.wait_idle()

        assert session.messages[-1].text == "Recovered"

    async def test_debug_callback_reaches_completion_client(self, make_session, fake_client):
        session = make_session(fake_client)
        logs = []
        session.set_debug_callback(lambda level, component, message: logs.append((component, message)))
        await session.start()

        await session.submit("hello")
        await session.wait_idle()

        assert ("Completion", "fake completion for 'hello'") in logs
        assert any(component == "Session" for component, _ in logs)

    async def test_suggestion_submits_its_text(self, make_session, fake_client):
        session = make_session(fake_client)
        await session.start()

        assert await session.submit_suggestion("How should a beginner start investing?")
        await session.wait_idle()

        assert fake_client.calls == ["How should a beginner start investing?"]
        assert session.suggestions[0] == "How should a beginner start investing?"


class TestPersistence:
    """Tests for saving the transcript."""

    async def test_saved_after_every_change(self, fake_client, fast_animator):
        store = CountingStore()
        session = ChatSession(fake_client, store, fast_animator)
        await session.start()

        await session.submit("Should I invest now?")
        await session.wait_idle()

        reply = "Yes, consider..."
        # user message, empty bot bubble, one save per reveal tick
        assert store.saves == 2 + math.ceil(len(reply) / 3)
        assert stored_messages(store) == session.messages

    async def test_snapshot_matches_state_on_every_notification(self, make_session, fake_client, memory_store):
        session = make_session(fake_client)
        await session.start()
        mismatches = []

        def check(s: ChatSession) -> None:
            if stored_messages(memory_store) != s.messages:
                mismatches.append(len(s.messages))

        session.add_listener(check)
        await session.submit("Should I invest now?")
        await session.wait_idle()

        assert mismatches == []

    async def test_save_failure_does_not_break_turn(self, fake_client, fast_animator):
        session = ChatSession(fake_client, BrokenStore(), fast_animator)
        logs = []
        session.set_debug_callback(lambda level, component, message: logs.append(level))
        await session.start()

        assert await session.submit("hello")
        await session.wait_idle()

        assert session.messages[-1].text == "Yes, consider..."
        assert "error" in logs

    async def test_reset_returns_to_greeting(self, make_session, fake_client, memory_store):
        session = make_session(fake_client)
        await session.start()
        await session.submit("I'm a beginner")
        await session.wait_idle()

        assert await session.reset()

        assert [m.text for m in session.messages] == [DEFAULT_GREETING]
        assert stored_messages(memory_store) == session.messages
        assert session.suggestions == list(DEFAULT_SUGGESTIONS)


class TestClose:
    """Tests for session teardown."""

    async def test_close_cancels_animation(self, make_session, make_client):
        reply = "a reply long enough to still be typing"
        client = make_client([reply])
        session = make_session(client, animator=TypingAnimator(chunk_size=1, interval=0.01))
        await session.start()
        await session.submit("hello")
        assert session.animating

        await session.close()
        texts = [m.text for m in session.messages]
        await asyncio.sleep(0.05)

        assert [m.text for m in session.messages] == texts
        assert session.phase is SessionPhase.IDLE
        assert session.closed
        assert client.closed

    async def test_interrupted_reply_is_saved_in_full(self, make_session, make_client, memory_store):
        """Test that closing mid-reveal stores the whole reply, not the visible part."""
        reply = "Diversify across index funds. " * 10
        session = make_session(make_client([reply]), animator=TypingAnimator(chunk_size=3, interval=0.01))
        await session.start()
        await session.submit("How should I invest?")
        await asyncio.sleep(0.05)
        assert session.animating

        await session.close()

        reopened = InMemoryTranscriptStore(blobs=memory_store.blobs)
        restored = await reopened.load()
        assert restored[-1].role is Role.BOT
        assert restored[-1].text == reply
        assert session.messages[-1].text == reply

    async def test_finished_reply_is_not_rewritten_on_close(self, make_session, fake_client, memory_store):
        session = make_session(fake_client)
        await session.start()
        await session.submit("hello")
        await session.wait_idle()
        await session.reset()

        await session.close()

        assert [m.text for m in stored_messages(memory_store)] == [DEFAULT_GREETING]

    async def test_cancelled_turn_after_close_does_not_notify(self, make_session, fake_client):
        fake_client.gate = asyncio.Event()
        session = make_session(fake_client)
        await session.start()
        notified = []
        session.add_listener(lambda s: notified.append(s.phase))

        turn = asyncio.create_task(session.submit("hello"))
        await wait_for(lambda: fake_client.calls)
        await session.close()
        count = len(notified)

        turn.cancel()
        with pytest.raises(asyncio.CancelledError):
            await turn

        assert len(notified) == count

    async def test_late_reply_is_discarded(self, make_session, fake_client):
        """Test that a completion arriving after close leaves the transcript alone."""
        fake_client.gate = asyncio.Event()
        session = make_session(fake_client)
        await session.start()

        turn = asyncio.create_task(session.submit("hello"))
        await wait_for(lambda: fake_client.calls)
        await session.close()
        count = len(session.messages)

        fake_client.gate.set()
        assert await turn

        assert len(session.messages) == count
        assert session.messages[-1].role is Role.USER

    async def test_submit_after_close_is_ignored(self, make_session, fake_client):
        session = make_session(fake_client)
        await session.start()
        await session.close()

        assert not await session.submit("hello")
        assert not await session.reset()
        assert fake_client.calls == []

    async def test_close_is_idempotent(self, make_session, fake_client):
        session = make_session(fake_client)
        await session.start()
        await session.close()
        await session.close()
        assert session.closed


class TestListeners:
    """Tests for change notifications."""

    async def test_listener_sees_each_phase(self, make_session, fake_client):
        session = make_session(fake_client)
        phases = []
        session.add_listener(lambda s: phases.append(s.phase))
        await session.start()

        await session.submit("hello")
        await session.wait_idle()

        assert phases[0] is SessionPhase.IDLE
        assert SessionPhase.AWAITING_REPLY in phases
        assert SessionPhase.ANIMATING in phases
        assert phases[-1] is SessionPhase.IDLE

    async def test_removed_listener_is_not_called(self, make_session, fake_client):
        session = make_session(fake_client)
        calls = []
        listener = calls.append
        session.add_listener(listener)
        session.remove_listener(listener)

        await session.start()

        assert calls == []
