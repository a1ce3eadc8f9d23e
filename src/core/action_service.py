"""
MPA Assistant — Action Presentation.

Turns parsed directives into host-facing notices: a short label plus an
optional link the user can open (WhatsApp deep link, YouTube search).
Executing the action (dialing, translating, playing) stays with the user;
the assistant only prepares it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

from src.core.directives import (
    ActionDirective,
    Call,
    PlaySong,
    PlayVideo,
    SetReminder,
    Translate,
    URI_COMPONENT_SAFE,
    WhatsAppLink,
)

logger = logging.getLogger(__name__)

_YOUTUBE_SEARCH = "https://www.youtube.com/results?search_query="


@dataclass
class ActionNotice:
    """One follow-up message shown after the assistant's reply."""

    text: str
    link: str | None = None


def youtube_search_link(query: str) -> str:
    return _YOUTUBE_SEARCH + quote(query, safe=URI_COMPONENT_SAFE)


def build_notice(action: ActionDirective) -> ActionNotice:
    """Describe a single directive for display."""
    if isinstance(action, SetReminder):
        return ActionNotice(text=action.text)
    if isinstance(action, WhatsAppLink):
        return ActionNotice(
            text=f"WhatsApp message ready for {action.phone}", link=action.link,
        )
    if isinstance(action, Translate):
        return ActionNotice(text=action.text)
    if isinstance(action, Call):
        return ActionNotice(text=action.text)
    if isinstance(action, PlayVideo):
        return ActionNotice(
            text=f'Search for "{action.title}"',
            link=youtube_search_link(f"{action.title} public domain"),
        )
    if isinstance(action, PlaySong):
        return ActionNotice(
            text=f'Search for "{action.title}"',
            link=youtube_search_link(action.title),
        )
    raise TypeError(f"Unknown action type: {type(action).__name__}")


def build_notices(actions: list[ActionDirective]) -> list[ActionNotice]:
    """Describe every directive, preserving order."""
    notices = [build_notice(a) for a in actions]
    logger.debug("Built %d action notice(s)", len(notices))
    return notices
