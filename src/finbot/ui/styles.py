"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - single chat column
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 1fr;
    background: $surface;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

.chat-message {
    height: auto;
    margin: 1 0 0 0;
    padding: 0 1;
    max-width: 80%;

    &.user-message {
        background: $primary;
        color: #ffffff;
        margin: 1 0 0 8;
        border-right: tall $secondary;
    }

    &.bot-message {
        background: $panel;
        border-left: tall $accent;
    }

    &.-animating {
        border-left: tall $warning;
    }
}

.message-header {
    height: 1;
    text-style: bold;
    color: $text-muted;
}

.user-message .message-header {
    color: #dbeafe;
}

.message-body {
    height: auto;
}

/* ============================================
   Typing indicator
   ============================================ */
#typing-indicator {
    height: 1;
    padding: 0 2;
    color: $text-muted;
    display: none;

    &.-visible {
        display: block;
    }
}

/* ============================================
   Suggestion chips
   ============================================ */
#suggestion-bar {
    height: auto;
    padding: 0 1;

    Button.suggestion {
        min-width: 8;
        height: 3;
        margin: 0 1 0 0;
        border: round $accent 50%;
        background: transparent;
        color: $accent;

        &:hover {
            border: round $accent;
            background: $accent 15%;
        }
    }
}

/* ============================================
   Input bar
   ============================================ */
#chat-input-bar {
    height: auto;
    padding: 0 1;

    #chat-input {
        width: 1fr;
        border: round $border;

        &:focus {
            border: round $primary;
        }
    }

    #send-btn {
        min-width: 12;
        margin-left: 1;
    }
}

/* ============================================
   Log panel (hidden by default)
   ============================================ */
#debug-panel {
    height: 10;
    display: none;
    background: $background;
    border: round $border;
    border-title-color: $text-muted;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
}
"""
