"""
MPA Assistant — Action Directives.

The router embeds single-line bracketed directives in its replies, e.g.
``[SET_REMINDER: 2024-01-02T09:00:00]``; the host later parses them into
structured actions and strips them before display.

Each directive model declares its wire fields once (``wire_fields``), and both
``encode()`` and ``parse_action_codes()`` are derived from that declaration,
so the embed and parse sides cannot fall out of step.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import ClassVar
from urllib.parse import quote

from pydantic import BaseModel, Field, computed_field

logger = logging.getLogger(__name__)

_ORAL_TOKEN = "oral"

# Characters JavaScript's encodeURIComponent leaves unescaped
URI_COMPONENT_SAFE = "-_.!~*'()"

# ---------------------------------------------------------------------------
# Directive models
# ---------------------------------------------------------------------------


class SetReminder(BaseModel):
    """Reminder at an absolute local time.

    Wire form: ``[SET_REMINDER: 2024-01-02T09:00:00]``
    """
    kind: ClassVar[str] = "SET_REMINDER"
    wire_fields: ClassVar[tuple[str, ...]] = ("datetime",)

    datetime: str = Field(min_length=1)  # ISO-8601, naive local time

    @computed_field
    @property
    def text(self) -> str:
        try:
            when = datetime.fromisoformat(self.datetime)
        except ValueError:
            return "Reminder set for the specified time"
        return f"Reminder set for {when.strftime('%d %b %Y, %H:%M')}"


class WhatsAppLink(BaseModel):
    """Prefilled WhatsApp message.

    Wire form: ``[WHATSAPP_LINK: 9876543210|hi]``
    """
    kind: ClassVar[str] = "WHATSAPP_LINK"
    wire_fields: ClassVar[tuple[str, ...]] = ("phone", "message")

    phone: str = Field(min_length=1)
    message: str = Field(min_length=1)

    @computed_field
    @property
    def link(self) -> str:
        return whatsapp_link(self.phone, self.message)

    @computed_field
    @property
    def text(self) -> str:
        return "Open WhatsApp"


class Translate(BaseModel):
    """Translation request, optionally spoken aloud.

    Wire form: ``[TRANSLATE: Tamil|Hello|oral]`` (third field optional)
    """
    kind: ClassVar[str] = "TRANSLATE"
    wire_fields: ClassVar[tuple[str, ...]] = ("language", "text_to_translate")

    language: str = Field(min_length=1)
    text_to_translate: str = Field(min_length=1)
    oral: bool = False

    @computed_field
    @property
    def text(self) -> str:
        return f"Translate to {self.language}"


class Call(BaseModel):
    """Phone call to a number or a named contact.

    Wire form: ``[CALL: +919876543210|+919876543210]`` or ``[CALL: Mom|Mom]``
    """
    kind: ClassVar[str] = "CALL"
    wire_fields: ClassVar[tuple[str, ...]] = ("phone", "contact")

    phone: str = Field(min_length=1)  # number, or the contact name when unknown
    contact: str = Field(min_length=1)

    @computed_field
    @property
    def text(self) -> str:
        return f"Call {self.contact}"


class PlayVideo(BaseModel):
    """Video search/playback.

    Wire form: ``[PLAY_VIDEO: Charlie Chaplin]``
    """
    kind: ClassVar[str] = "PLAY_VIDEO"
    wire_fields: ClassVar[tuple[str, ...]] = ("title",)

    title: str = Field(min_length=1)

    @computed_field
    @property
    def text(self) -> str:
        return f"Play video: {self.title}"


class PlaySong(BaseModel):
    """Song search/playback.

    Wire form: ``[PLAY_SONG: Clair de Lune]``
    """
    kind: ClassVar[str] = "PLAY_SONG"
    wire_fields: ClassVar[tuple[str, ...]] = ("title",)

    title: str = Field(min_length=1)

    @computed_field
    @property
    def text(self) -> str:
        return f"Play song: {self.title}"


ActionDirective = SetReminder | WhatsAppLink | Translate | Call | PlayVideo | PlaySong

_DIRECTIVE_TYPES: dict[str, type[BaseModel]] = {
    cls.kind: cls
    for cls in (SetReminder, WhatsAppLink, Translate, Call, PlayVideo, PlaySong)
}

_DIRECTIVE_RE = re.compile(
    r"\[(" + "|".join(_DIRECTIVE_TYPES) + r"):\s*([^\]]+)\]"
)
_STRIP_RE = re.compile(r"\[(?:" + "|".join(_DIRECTIVE_TYPES) + r"):[^\]]+\]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def whatsapp_link(phone: str, message: str) -> str:
    """Build a wa.me deep link: digits-only phone, percent-encoded message."""
    digits = re.sub(r"\D", "", phone)
    encoded = quote(message, safe=URI_COMPONENT_SAFE)
    return f"https://wa.me/{digits}?text={encoded}"


def neutralize_brackets(value: str) -> str:
    """Swap square brackets for parentheses so text can never form a directive."""
    return value.replace("[", "(").replace("]", ")")


def _sanitize_field(value: str) -> str:
    """Keep a field from terminating or breaking its directive early."""
    return " ".join(neutralize_brackets(value).split())


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------


def encode(directive: ActionDirective) -> str:
    """Render a directive in its bracketed wire form.

    ``|`` is the field delimiter, so it is replaced in every field except
    the last one of a fixed-width directive. TRANSLATE has an optional
    trailing flag, so none of its fields may keep it.
    """
    values = [_sanitize_field(str(getattr(directive, name))) for name in directive.wire_fields]
    keep_last = not isinstance(directive, Translate)
    for i in range(len(values)):
        if i < len(values) - 1 or not keep_last:
            values[i] = values[i].replace("|", "/")
    if isinstance(directive, Translate) and directive.oral:
        values.append(_ORAL_TOKEN)
    return f"[{directive.kind}: {'|'.join(values)}]"


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------


def _decode(kind: str, body: str) -> ActionDirective | None:
    """Turn one directive body into its model, or None if malformed."""
    cls = _DIRECTIVE_TYPES[kind]
    field_names = cls.wire_fields
    body = body.strip()

    data: dict[str, object] = {}
    if cls is Translate:
        head, sep, flag = body.rpartition("|")
        data["oral"] = bool(sep) and flag.strip() == _ORAL_TOKEN and "|" in head
        if data["oral"]:
            body = head

    parts = [p.strip() for p in body.split("|", len(field_names) - 1)]
    if len(parts) != len(field_names) or not all(parts):
        return None
    data.update(zip(field_names, parts))
    return cls(**data)


def parse_action_codes(response: str) -> list[ActionDirective]:
    """Extract every directive in ``response``, in document order.

    Malformed directives are skipped and logged, never raised.
    """
    actions: list[ActionDirective] = []
    for match in _DIRECTIVE_RE.finditer(response):
        kind, body = match.group(1), match.group(2)
        action = _decode(kind, body)
        if action is None:
            logger.debug("Skipping malformed directive: %s", match.group(0))
            continue
        actions.append(action)
    return actions


# ---------------------------------------------------------------------------
# Clean
# ---------------------------------------------------------------------------


def clean_response(response: str) -> str:
    """Strip every directive from a reply, leaving the user-facing text.

    Repeats until nothing matches, so a directive exposed by removing
    another one is stripped too and the result is idempotent.
    """
    cleaned = response
    while True:
        stripped = _STRIP_RE.sub("", cleaned)
        if stripped == cleaned:
            break
        cleaned = stripped
    return cleaned.strip()
