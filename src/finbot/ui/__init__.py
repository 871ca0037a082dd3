"""Terminal UI module for finbot.

Provides a Textual-based TUI for chatting with the Finbot assistant.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (chat bubbles, suggestions, input history, log panel)
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and theme configuration
- config.py: UI constants and log levels
- app.py: Application orchestration (user interaction flow)
"""

from .app import FinbotChatApp, run_chat_tui
from .config import LogLevel
from .widgets import (
    ChatHistoryWidget,
    ChatInputBar,
    DebugPanel,
    MessageBubble,
    SuggestionBar,
    TypingIndicator,
)

__all__ = [
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "FinbotChatApp",
    "LogLevel",
    "MessageBubble",
    "SuggestionBar",
    "TypingIndicator",
    "run_chat_tui",
]
