"""Main Textual TUI application.

Orchestrates the UI components around a ChatSession: widgets are redrawn from
the session state whenever the session reports a change.
"""

import asyncio

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..chat.session import ChatSession
from .config import LogLevel
from .styles import APP_CSS
from .themes import FINBOT_MIDNIGHT
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    SuggestionBar,
    TypingIndicator,
)


class FinbotChatApp(App):
    """Textual TUI for chatting with Finbot."""

    CSS = APP_CSS
    TITLE = "Finbot"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+k", "reset_chat", "New Chat"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+d", "toggle_debug", "Debug"),
    ]

    def __init__(
        self,
        session: ChatSession,
        log_level: str | None = None,
        subtitle: str | None = None,
    ) -> None:
        super().__init__()
        self._session = session
        self._log_level = log_level
        self._subtitle = subtitle

    @property
    def session(self) -> ChatSession:
        return self._session

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield TypingIndicator(id="typing-indicator")
        yield SuggestionBar(id="suggestion-bar")
        yield ChatInputBar(id="chat-input-bar")
        yield DebugPanel(id="debug-panel")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(FINBOT_MIDNIGHT)
        self.theme = "finbot-midnight"
        if self._subtitle:
            self.sub_title = self._subtitle

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.info("TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        self._session.set_debug_callback(self._route_debug)
        self._session.add_listener(self._on_session_changed)
        self._start_session()

    async def on_unmount(self) -> None:
        """Tear the session down; cancels any running typing animation."""
        self._session.remove_listener(self._on_session_changed)
        self._session.set_debug_callback(None)
        await self._session.close()

    @work(exclusive=True, group="session")
    async def _start_session(self) -> None:
        await self._session.start()
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    def _route_debug(self, level: str, component: str, message: str) -> None:
        """Route session and store log entries to the log panel."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        if level == "debug":
            log_panel.debug(component, message)
        elif level == "info":
            log_panel.info(component, message)
        elif level == "warning":
            log_panel.warning(component, message)
        elif level == "error":
            log_panel.error(component, message)

    def _on_session_changed(self, session: ChatSession) -> None:
        """Redraw everything derived from the session state."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        chat.sync(session.messages, session.animating_index)

        self.query_one("#typing-indicator", TypingIndicator).set_active(session.awaiting_completion)

        suggestions = self.query_one("#suggestion-bar", SuggestionBar)
        suggestions.set_suggestions(session.suggestions)

        busy = not session.state.idle
        suggestions.set_enabled(not busy)

        input_bar = self.query_one("#chat-input-bar", ChatInputBar)
        input_bar.sync_draft(session.draft)
        input_bar.set_busy(busy, awaiting=session.awaiting_completion)

    def on_chat_input_bar_drafted(self, event: ChatInputBar.Drafted) -> None:
        self._session.set_draft(event.value)

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        self._session.set_draft(event.value)
        self._run_turn(None)

    def on_suggestion_bar_selected(self, event: SuggestionBar.Selected) -> None:
        """Handle a click on a suggestion chip."""
        self._run_turn(event.suggestion)

    @work(group="turn")
    async def _run_turn(self, text: str | None) -> None:
        """Run one turn as a background async worker.

        Not exclusive: a second submission must not cancel a running turn.
        The session itself rejects it while a reply is pending or typing.
        """
        try:
            if text is None:
                accepted = await self._session.submit()
            else:
                accepted = await self._session.submit_suggestion(text)
            if not accepted:
                self.notify("Finbot is still answering", severity="warning", timeout=2)
                return
            await self._session.wait_idle()
        except Exception as e:
            self.query_one("#debug-panel", DebugPanel).error("TUI", f"Exception: {e}")
            self.notify(f"Error: {str(e)[:50]}", severity="error", timeout=5)

    async def action_reset_chat(self) -> None:
        """Start a fresh conversation."""
        if await self._session.reset():
            self.notify("Chat cleared", timeout=2)
        else:
            self.notify("Wait for the current reply to finish", severity="warning", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last bot response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            self.copy_to_clipboard(response)
            self.notify("Response copied")
        else:
            self.notify("No response to copy", severity="warning")


async def run_chat_tui(
    session: ChatSession,
    log_level: str | None = None,
    subtitle: str | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        session: Chat session to drive (closed when the app exits)
        log_level: Log level for panel (debug/info/warning/error), None to hide
        subtitle: Header subtitle, e.g. the completion backend in use
    """
    app = FinbotChatApp(session=session, log_level=log_level, subtitle=subtitle)
    try:
        await app.run_async()
    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    finally:
        await session.close()
