"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Input history management
- Chat bubble rendering (Markdown for bot replies)
- Incremental transcript sync while a reply is being typed
- Suggestion chips and the typing indicator
- Log rendering and level filtering
"""

from collections.abc import Sequence
from datetime import datetime

from rich.markdown import Markdown as RichMarkdown
from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widgets import Button, Input, RichLog, Static

from ..chat.models import Message, Role
from .config import (
    BOT_LABEL,
    INPUT_HISTORY_MAX_SIZE,
    INPUT_PLACEHOLDER,
    LOG_TIMESTAMP_FORMAT,
    TYPING_DOT_INTERVAL,
    USER_LABEL,
    LogLevel,
)


class MessageBody(Static):
    """Text of one chat bubble. Bot text is rendered as Markdown."""

    def __init__(self, text: str, markdown: bool, *args, **kwargs) -> None:
        self._body_text = text
        self._as_markdown = markdown
        super().__init__(self._build(), *args, **kwargs)

    def _build(self):
        if self._as_markdown:
            return RichMarkdown(self._body_text)
        return Text(self._body_text)

    @property
    def text(self) -> str:
        return self._body_text

    def set_text(self, text: str) -> None:
        self._body_text = text
        if self.is_mounted:
            self.update(self._build())

    def on_mount(self) -> None:
        # Text may have changed between construction and mounting
        self.update(self._build())


class MessageBubble(Vertical):
    """A chat message that copies its raw text when clicked."""

    def __init__(self, message: Message, *args, **kwargs) -> None:
        is_user = message.role is Role.USER
        role_class = "user-message" if is_user else "bot-message"
        super().__init__(*args, classes=f"chat-message {role_class}", **kwargs)
        self._message_role = message.role
        label = USER_LABEL if is_user else BOT_LABEL
        stamp = f" [{message.timestamp}]" if message.timestamp else ""
        self._header_widget = Static(Text(f"{'>' if is_user else '<'} {label}{stamp}"), classes="message-header")
        self._body_widget = MessageBody(message.text, markdown=not is_user, classes="message-body")

    def compose(self):
        yield self._header_widget
        yield self._body_widget

    @property
    def role(self) -> Role:
        return self._message_role

    @property
    def text(self) -> str:
        return self._body_widget.text

    def set_text(self, text: str) -> None:
        self._body_widget.set_text(text)

    def on_click(self, event: Click) -> None:
        """Copy message content to clipboard when clicked."""
        event.stop()
        self.app.copy_to_clipboard(self.text)
        self.app.notify("Copied to clipboard", timeout=2)


class ChatHistoryWidget(VerticalScroll):
    """Scrollable transcript view kept in sync with the session."""

    BORDER_TITLE = "Finbot AI Chat"
    BORDER_SUBTITLE = "Ask about stocks, risk, saving vs investing"
    ALLOW_MAXIMIZE = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._bubbles: list[MessageBubble] = []

    def sync(self, messages: Sequence[Message], animating_index: int | None = None) -> None:
        """Bring the view in line with the transcript.

        Appended messages are mounted, changed texts updated in place. A
        transcript shorter than the view (after a reset) is redrawn.
        """
        if len(messages) < len(self._bubbles):
            self.clear_history()

        grew = len(messages) > len(self._bubbles)
        for index, message in enumerate(messages):
            if index < len(self._bubbles):
                bubble = self._bubbles[index]
                if bubble.text != message.text:
                    bubble.set_text(message.text)
            else:
                bubble = MessageBubble(message)
                self._bubbles.append(bubble)
                self.mount(bubble)
            bubble.set_class(index == animating_index, "-animating")

        self.border_subtitle = f"{len(messages)} messages"
        if grew or animating_index is not None:
            self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last bot response."""
        for bubble in reversed(self._bubbles):
            if bubble.role is Role.BOT:
                return bubble.text
        return None

    def clear_history(self) -> None:
        """Remove every bubble."""
        self._bubbles.clear()
        self.remove_children()

    @property
    def bubble_count(self) -> int:
        return len(self._bubbles)


class TypingIndicator(Static):
    """'Finbot is typing' dots shown while waiting for a completion."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__("", *args, **kwargs)
        self._dot_frame = 0

    def on_mount(self) -> None:
        self.set_interval(TYPING_DOT_INTERVAL, self._advance)

    def _advance(self) -> None:
        if not self.has_class("-visible"):
            return
        self._dot_frame = (self._dot_frame + 1) % 4
        self.update(f"AI {'•' * self._dot_frame}")

    def set_active(self, active: bool) -> None:
        self.set_class(active, "-visible")


class SuggestionBar(Horizontal):
    """Row of clickable follow-up prompts."""

    class Selected(TextualMessage):
        """Message sent when a suggestion chip is clicked."""

        def __init__(self, suggestion: str) -> None:
            super().__init__()
            self.suggestion = suggestion

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._suggestions: list[str] = []

    @property
    def suggestions(self) -> list[str]:
        return list(self._suggestions)

    def set_suggestions(self, suggestions: Sequence[str]) -> None:
        """Replace the chips, if the suggestions changed."""
        if list(suggestions) == self._suggestions:
            return
        self._suggestions = list(suggestions)
        self.remove_children()
        self.mount_all(
            Button(text, name=text, classes="suggestion")
            for text in self._suggestions
        )

    def set_enabled(self, enabled: bool) -> None:
        for button in self.query(Button):
            button.disabled = not enabled

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        if event.button.name:
            self.post_message(self.Selected(event.button.name))


class HistoryInput(Input):
    """Input widget with command history support.

    Use Up/Down arrow keys to navigate through history.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._current_input: str = ""

    def _on_key(self, event) -> None:
        """Handle key events for history navigation."""
        if event.key == "up":
            if self._history:
                if self._history_index == -1:
                    self._current_input = self.value
                    self._history_index = len(self._history) - 1
                elif self._history_index > 0:
                    self._history_index -= 1
                self.value = self._history[self._history_index]
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()
        elif event.key == "down":
            if self._history_index != -1:
                if self._history_index < len(self._history) - 1:
                    self._history_index += 1
                    self.value = self._history[self._history_index]
                else:
                    self._history_index = -1
                    self.value = self._current_input
                self.cursor_position = len(self.value)
            event.prevent_default()
            event.stop()

    def add_to_history(self, command: str) -> None:
        """Add a command to history."""
        if command and (not self._history or self._history[-1] != command):
            self._history.append(command)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        self._current_input = ""


class ChatInputBar(Horizontal):
    """Chat input bar with a single-line input and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    class Drafted(TextualMessage):
        """Message sent whenever the input text changes."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def compose(self):
        yield HistoryInput(placeholder=INPUT_PLACEHOLDER, id="chat-input")
        yield Button("Send", id="send-btn", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            event.stop()
            self._submit()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def on_input_changed(self, event: Input.Changed) -> None:
        event.stop()
        self.post_message(self.Drafted(event.value))

    def _submit(self) -> None:
        text_input = self.query_one("#chat-input", HistoryInput)
        value = text_input.value.strip()
        if value:
            text_input.add_to_history(value)
            self.post_message(self.Submitted(value))

    def sync_draft(self, draft: str) -> None:
        """Show the session's draft (cleared once a send is accepted)."""
        text_input = self.query_one("#chat-input", HistoryInput)
        if text_input.value != draft:
            text_input.value = draft

    def set_busy(self, busy: bool, awaiting: bool = False) -> None:
        """Disable input while a turn is running."""
        text_input = self.query_one("#chat-input", HistoryInput)
        button = self.query_one("#send-btn", Button)
        text_input.disabled = busy
        button.disabled = busy
        button.label = "Sending..." if awaiting else "Send"
        if not busy:
            text_input.focus()

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", HistoryInput).focus()


class DebugPanel(RichLog):
    """Log panel for real-time session tracing with level filtering.

    Shows timestamped log messages from all components.
    Supports standard log levels: DEBUG < INFO < WARNING < ERROR.
    Hidden by default, shown with --log-level flag or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Trace log"

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=False,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def log(
        self,
        component: str,
        message: str,
        level: int = LogLevel.DEBUG
    ) -> None:
        """Add a log entry if it meets the current level threshold.

        Args:
            component: Component name (TUI, Session, Store, ...)
            message: Log message
            level: Log level (LogLevel.DEBUG, INFO, WARNING, ERROR)
        """
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime(LOG_TIMESTAMP_FORMAT)

        level_colors = {
            LogLevel.DEBUG: "dim white",
            LogLevel.INFO: "cyan",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
        }
        level_color = level_colors.get(level, "white")

        component_colors = {
            "TUI": "cyan",
            "Session": "green",
            "Store": "bright_green",
            "Completion": "magenta",
        }
        comp_color = component_colors.get(component, "white")

        line = Text.from_markup(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<5}[/] "
            f"[{comp_color}]\\[{component}][/] "
        )
        line.append(message)
        self.write(line)

    def debug(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.DEBUG)

    def info(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.INFO)

    def warning(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.WARNING)

    def error(self, component: str, message: str) -> None:
        self.log(component, message, LogLevel.ERROR)

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
