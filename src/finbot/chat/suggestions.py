"""Follow-up prompt suggestions.

Hides the keyword heuristic that turns the latest user message into a short
list of canned prompts. Pure and deterministic: the same transcript always
yields the same suggestions in the same order.
"""

from collections.abc import Sequence
from typing import NamedTuple

from .models import Message, Role

MAX_SUGGESTIONS = 4

DEFAULT_SUGGESTIONS: tuple[str, ...] = (
    "How should a beginner start investing?",
    "Explain SIP vs Lump Sum",
    "Should I invest or keep it in savings?",
    "How do I build an emergency fund?",
)


class KeywordGroup(NamedTuple):
    """Keywords that trigger a group and the prompts it contributes."""

    name: str
    keywords: tuple[str, ...]
    suggestions: tuple[str, ...]


# Tested in this order; earlier groups win when the cap is reached.
KEYWORD_GROUPS: tuple[KeywordGroup, ...] = (
    KeywordGroup(
        name="beginner",
        keywords=("beginner", "new investor", "new to investing", "getting started", "first time"),
        suggestions=(
            "How should a beginner start investing?",
            "Build a beginner portfolio",
            "Explain SIP vs Lump Sum",
        ),
    ),
    KeywordGroup(
        name="sip",
        keywords=("sip", "mutual fund", "lump sum", "index fund"),
        suggestions=(
            "Explain SIP vs Lump Sum",
            "How much should I invest through SIP each month?",
            "How do I pick a mutual fund?",
        ),
    ),
    KeywordGroup(
        name="stocks",
        keywords=("stock", "share", "market", "equity", "nifty", "sensex"),
        suggestions=(
            "How do I analyse a stock before buying?",
            "Is now a good time to invest?",
            "Explain market volatility",
        ),
    ),
    KeywordGroup(
        name="savings",
        keywords=("saving", "save", "emergency", "rainy day"),
        suggestions=(
            "How big should my emergency fund be?",
            "Savings account vs fixed deposit",
            "How much of my salary should I save?",
        ),
    ),
)


def suggest(messages: Sequence[Message]) -> list[str]:
    """Suggest follow-up prompts for a transcript.

    Args:
        messages: Transcript, oldest first

    Returns:
        Up to MAX_SUGGESTIONS distinct prompts. The default set when there is
        no user message or no keyword group matches.
    """
    latest = next((m for m in reversed(messages) if m.role is Role.USER), None)
    if latest is None:
        return list(DEFAULT_SUGGESTIONS)

    text = latest.text.lower()
    picked: list[str] = []

    for group in KEYWORD_GROUPS:
        if len(picked) >= MAX_SUGGESTIONS:
            break
        if not any(keyword in text for keyword in group.keywords):
            continue
        for suggestion in group.suggestions:
            if len(picked) >= MAX_SUGGESTIONS:
                break
            if suggestion not in picked:
                picked.append(suggestion)

    return picked or list(DEFAULT_SUGGESTIONS)
