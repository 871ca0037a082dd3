"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Theme variables (borders, scrollbars, etc.)

To add a new theme, define it here and register in the app.
"""

from textual.theme import Theme

# Deep navy background with the Finbot blue accent
FINBOT_MIDNIGHT = Theme(
    name="finbot-midnight",
    primary="#2563eb",      # Finbot blue - user bubbles, send button
    secondary="#3b82f6",    # Lighter blue - hover and focus
    accent="#60a5fa",       # Sky - suggestion chips
    foreground="#f3f4f6",   # Near-white text
    background="#02040a",   # Page background
    success="#22c55e",
    warning="#f59e0b",
    error="#ef4444",
    surface="#0b0f1a",      # Chat card
    panel="#101626",        # Bot bubbles
    dark=True,
    variables={
        "input-cursor-background": "#f3f4f6",
        "input-cursor-foreground": "#02040a",
        "input-selection-background": "#2563eb 30%",

        "border": "#1f2937",
        "border-blurred": "#111827",

        "scrollbar": "#1f2937",
        "scrollbar-hover": "#374151",
        "scrollbar-active": "#2563eb",
        "scrollbar-background": "#0b0f1a",

        "footer-foreground": "#9ca3af",
        "footer-background": "#02040a",
        "footer-key-foreground": "#60a5fa",
        "footer-key-background": "#111827",

        "text-muted": "#9ca3af",
        "text-disabled": "#4b5563",

        "button-foreground": "#f3f4f6",
        "button-color-foreground": "#ffffff",
    },
)
