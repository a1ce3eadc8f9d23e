"""
MPA Assistant — Slot Extractors.

One pure function per intent: raw utterance in, structured slots out.
Each tries a short ordered list of regular expressions and keeps the first
one that matches (first match wins, not best match). Missing slots come
back empty; deciding what to ask the user is the router's job.

No I/O: this module only transforms text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_I = re.IGNORECASE


@dataclass
class ReminderSlots:
    task: str   # e.g. "call mom"
    time: str   # e.g. "tomorrow at 3pm", "5pm", "monday"; "" if none


@dataclass
class TranslationSlots:
    text: str
    language: str
    oral: bool = False


@dataclass
class CallSlots:
    target: str   # phone number if given, else the contact name
    contact: str  # display label; equals the phone when a number was given


@dataclass
class WhatsAppSlots:
    phone: str    # "" when no number was found
    contact: str
    message: str


# ---------------------------------------------------------------------------
# Reminder
# ---------------------------------------------------------------------------

_TIME_PATTERNS = [
    re.compile(r"at (\d{1,2}(?::\d{2})?\s*(?:am|pm)?)", _I),
    re.compile(r"(\d{1,2}(?::\d{2})?\s*(?:am|pm))", _I),
    re.compile(r"(tomorrow|today|tonight)", _I),
    re.compile(r"on (monday|tuesday|wednesday|thursday|friday|saturday|sunday)", _I),
]

_TASK_ANCHORED = re.compile(r"remind me to (.+?)(?:\s+at|\s+tomorrow|\s+today|\s+on|\s+\d)", _I)
_TASK_SIMPLE = re.compile(r"remind me to (.+)", _I)


def _extract_time_expression(message: str) -> str:
    for pattern in _TIME_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1).strip()
    return ""


def extract_reminder(message: str) -> ReminderSlots:
    """Extract the task and time expression of a reminder request.

    If the utterance says "tomorrow" but a clock time was matched first,
    the time expression is widened to "tomorrow at <clock>" so the day
    is not lost on the way to the time normalizer.
    """
    time = _extract_time_expression(message)

    task = ""
    match = _TASK_ANCHORED.search(message)
    if match:
        task = match.group(1).strip()
    else:
        match = _TASK_SIMPLE.search(message)
        if match:
            task = match.group(1)
            if time:
                task = re.sub(re.escape(time), "", task, count=1, flags=_I)
            task = task.strip()

    if time and "tomorrow" not in time.lower() and "tomorrow" in message.lower():
        time = f"tomorrow at {time}"

    logger.debug("Reminder slots: task=%r time=%r", task, time)
    return ReminderSlots(task=task, time=time)


# ---------------------------------------------------------------------------
# Translation
# ---------------------------------------------------------------------------

# (pattern, text group, language group)
_TRANSLATE_PATTERNS = [
    (re.compile(r"translate\s+[\"'](.+?)[\"']\s+to\s+(\w+)", _I), 1, 2),
    (re.compile(r"translate\s+(.+?)\s+to\s+(\w+)", _I), 1, 2),
    (re.compile(r"translate\s+to\s+(\w+):?\s*(.+)", _I), 2, 1),
]


def extract_translation(message: str) -> TranslationSlots:
    """Extract text and target language; "oral"/"orally" sets the oral flag."""
    text, language = "", ""
    for pattern, text_group, language_group in _TRANSLATE_PATTERNS:
        match = pattern.search(message)
        if match:
            text = match.group(text_group).strip()
            language = match.group(language_group).strip()
            break

    oral = "oral" in message.lower()
    return TranslationSlots(text=text, language=language, oral=oral)


# ---------------------------------------------------------------------------
# Call
# ---------------------------------------------------------------------------

_CALL_PHONE = re.compile(r"call\s+(\+?\d[\d\s-]+)", _I)
_CALL_NAME = re.compile(r"call\s+([a-zA-Z][a-zA-Z\s]+?)(?:\s+at|\s+on|$)", _I)


def extract_call(message: str) -> CallSlots:
    """Extract who to call. A phone number wins over a name."""
    match = _CALL_PHONE.search(message)
    if match:
        phone = re.sub(r"\s", "", match.group(1))
        return CallSlots(target=phone, contact=phone)

    match = _CALL_NAME.search(message)
    if match:
        name = match.group(1).strip()
        return CallSlots(target=name, contact=name)

    return CallSlots(target="", contact="")


# ---------------------------------------------------------------------------
# Video / Song
# ---------------------------------------------------------------------------

_VIDEO_PATTERNS = [
    re.compile(r"play video\s+[\"'](.+?)[\"']", _I),
    re.compile(r"play video\s+(.+)", _I),
    re.compile(r"show video\s+[\"'](.+?)[\"']", _I),
    re.compile(r"show video\s+(.+)", _I),
]

_SONG_PATTERNS = [
    re.compile(r"play\s+(?:song|music)\s+[\"'](.+?)[\"']", _I),
    re.compile(r"play\s+[\"'](.+?)[\"']", _I),
    re.compile(r"play\s+(?:song|music)\s+(.+)", _I),
    re.compile(r"play\s+(.+)", _I),
]

# Generic words a "play ..." request can end with that are not titles
_NOT_SONG_TITLES = {"video", "videos", "a song", "song", "songs", "music", "something"}
_MIN_SONG_TITLE = 2


def extract_video_title(message: str) -> str:
    for pattern in _VIDEO_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1).strip()
    return ""


def extract_song_title(message: str) -> str:
    """Return the first non-generic title candidate, or "" if there is none.

    Generic words send the search on to the next pattern; a candidate that
    is merely too short ends it.
    """
    for pattern in _SONG_PATTERNS:
        match = pattern.search(message)
        if not match:
            continue
        title = match.group(1).strip()
        if title.lower() in _NOT_SONG_TITLES:
            logger.debug("Rejected generic song title %r", title)
            continue
        return title if len(title) >= _MIN_SONG_TITLE else ""
    return ""


# ---------------------------------------------------------------------------
# WhatsApp
# ---------------------------------------------------------------------------

_WA_PHONE = re.compile(r"(\+?\d{10,15})")
_WA_NAME = re.compile(r"(?:message|text|whatsapp)\s+([a-zA-Z]+)", _I)
_WA_TEXT_PATTERNS = [
    re.compile(r"(?:say|tell|message).*?[\"'](.+?)[\"']", _I),
    re.compile(r"message:?\s*(.+)", _I),
]

DEFAULT_CONTACT = "contact"
DEFAULT_MESSAGE = "Hello!"


def extract_whatsapp(message: str) -> WhatsAppSlots:
    """Extract phone, contact name and message body for a WhatsApp draft."""
    phone_match = _WA_PHONE.search(message)
    name_match = _WA_NAME.search(message)

    text = DEFAULT_MESSAGE
    for pattern in _WA_TEXT_PATTERNS:
        match = pattern.search(message)
        if match:
            text = match.group(1).strip() or DEFAULT_MESSAGE
            break

    return WhatsAppSlots(
        phone=phone_match.group(1) if phone_match else "",
        contact=name_match.group(1) if name_match else DEFAULT_CONTACT,
        message=text,
    )
