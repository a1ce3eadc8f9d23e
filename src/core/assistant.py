"""
MPA Assistant — Intent Router.

Brain of the assistant: takes one utterance through the access gate and
the content filter, classifies it with an ordered trigger table, fills the
intent's slots and answers with a reply that may carry embedded action
directives for the host to execute.

Every path returns a string. Malformed user input never raises; missing
slots turn into a clarifying question instead of a half-filled directive.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from src.core import directives
from src.core.directives import (
    ActionDirective,
    Call,
    PlaySong,
    PlayVideo,
    SetReminder,
    Translate,
    WhatsAppLink,
)
from src.core.extractors import (
    extract_call,
    extract_reminder,
    extract_song_title,
    extract_translation,
    extract_video_title,
    extract_whatsapp,
)
from src.core.phrases import (
    GENERAL_RESPONSES,
    JOKES,
    MOTIVATIONAL_KEYWORDS,
    PROHIBITED_KEYWORDS,
    QUOTES,
)
from src.core.time_normalizer import resolve_to_iso
from src.data.models import (
    DEFAULT_GENDER,
    DEFAULT_LANGUAGE,
    DEFAULT_NAME,
    GENDER_KEY,
    LANGUAGE_KEY,
    NAME_KEY,
    REGISTERED_USER_KEY,
    AssistantProfile,
)

if TYPE_CHECKING:
    from src.ports.profile_port import ProfileStore

logger = logging.getLogger(__name__)

PROHIBITED_REPLY = "I am sorry. I cannot be of help."
_UNAUTHORIZED_TEMPLATE = "Sorry, I am only available for {owner}."
_OWNER_PLACEHOLDER = "my registered user"

# Clarifying questions for incomplete slots
ASK_REMINDER = "I'd be delighted to set a reminder. Could you specify what and when?"
ASK_TRANSLATION = (
    "I'd be happy to translate. Please specify the text and target language "
    "(e.g., 'Translate Hello to Tamil')."
)
ASK_CALL = "Who would you like me to call?"
ASK_VIDEO = "Which video would you like to watch?"
ASK_SONG = "Which song would you like to hear?"
_ASK_PHONE_TEMPLATE = (
    "I'd be happy to draft a WhatsApp message to {contact}. "
    "Could you provide their phone number?"
)


def _echo(value: str) -> str:
    """User text repeated in a reply must not read as a directive."""
    return directives.neutralize_brackets(value)


def contains_prohibited(text: str) -> bool:
    """Case-insensitive substring check against the deny-list."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in PROHIBITED_KEYWORDS)


@dataclass(frozen=True)
class IntentRule:
    """One row of the dispatch table: any trigger substring selects the handler."""

    name: str
    triggers: tuple[str, ...]
    handler: Callable[[str], str]

    def matches(self, lowered: str) -> bool:
        return any(trigger in lowered for trigger in self.triggers)


class Assistant:
    """Rule-based personal assistant bound to one profile.

    Args:
        store: Persistent key/value store for the profile. Without one the
               literal defaults are used and setters only live in memory.
        clock: Returns "now" as a naive local datetime. Defaults to the
               host's wall clock.
        rng: Random source for jokes, quotes and fallback replies.
    """

    def __init__(
        self,
        store: ProfileStore | None = None,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or datetime.now
        self._rng = rng or random.Random()
        self.profile = self._load_profile()

        # Priority order matters: the first matching rule wins
        self._rules: list[IntentRule] = [
            IntentRule("joke", ("joke",), lambda _msg: self.get_joke()),
            IntentRule("quote", ("quote",), lambda _msg: self.get_quote()),
            IntentRule("reminder", ("remind",), self.handle_reminder_request),
            IntentRule("translation", ("translate",), self.handle_translation_request),
            IntentRule("call", ("call ",), self.handle_call_request),
            IntentRule("video", ("play video", "show video"), self.handle_video_request),
            IntentRule(
                "song", ("play song", "play music", "play a song"), self.handle_song_request,
            ),
            IntentRule("whatsapp", ("message", "whatsapp", "text"), self.handle_whatsapp_request),
        ]

    # -----------------------------------------------------------------------
    # Profile
    # -----------------------------------------------------------------------

    def _load_profile(self) -> AssistantProfile:
        if self._store is None:
            return AssistantProfile()
        return AssistantProfile(
            user_name=self._store.get_item(NAME_KEY) or DEFAULT_NAME,
            gender=self._store.get_item(GENDER_KEY) or DEFAULT_GENDER,
            language=self._store.get_item(LANGUAGE_KEY) or DEFAULT_LANGUAGE,
            registered_user=self._store.get_item(REGISTERED_USER_KEY) or None,
        )

    def _persist(self, key: str, value: str) -> None:
        if self._store is not None:
            self._store.set_item(key, value)

    @property
    def user_name(self) -> str:
        return self.profile.user_name

    @property
    def gender(self) -> str:
        return self.profile.gender

    @property
    def language(self) -> str:
        return self.profile.language

    def set_user_name(self, name: str) -> None:
        self.profile.user_name = name
        self._persist(NAME_KEY, name)

    def set_gender(self, gender: str) -> None:
        self.profile.gender = gender
        self._persist(GENDER_KEY, gender)

    def set_language(self, language: str) -> None:
        self.profile.language = language
        self._persist(LANGUAGE_KEY, language)

    def set_registered_user(self, username: str | None) -> None:
        """Lock the assistant to one caller. None (or "") reopens it."""
        self.profile.registered_user = username or None
        self._persist(REGISTERED_USER_KEY, username or "")
        logger.info("Registered user set to %r", self.profile.registered_user)

    def get_registered_user(self) -> str | None:
        return self.profile.registered_user

    # -----------------------------------------------------------------------
    # Access gate
    # -----------------------------------------------------------------------

    def is_authorized(self, caller_id: str | None) -> bool:
        """Open mode without an owner; otherwise the caller must be the owner."""
        owner = self.profile.registered_user
        if not owner:
            return True
        return caller_id == owner

    def unauthorized_response(self) -> str:
        owner = self.profile.registered_user or _OWNER_PLACEHOLDER
        return _UNAUTHORIZED_TEMPLATE.format(owner=owner)

    # -----------------------------------------------------------------------
    # Entry point
    # -----------------------------------------------------------------------

    def process_message(self, utterance: str, caller_id: str | None = None) -> str:
        """Answer one utterance: gate, filter, then route.

        Raises TypeError if the host passes a non-string utterance.
        """
        if not isinstance(utterance, str):
            raise TypeError(f"utterance must be str, got {type(utterance).__name__}")

        if not self.is_authorized(caller_id):
            logger.warning("Rejected message from unauthorized caller %r", caller_id)
            return self.unauthorized_response()

        if contains_prohibited(utterance):
            logger.info("Declined message matching the content deny-list")
            return PROHIBITED_REPLY

        return self.route(utterance)

    def _match_rule(self, utterance: str) -> IntentRule | None:
        lowered = utterance.lower()
        for rule in self._rules:
            if rule.matches(lowered):
                return rule
        return None

    def match_intent(self, utterance: str) -> str | None:
        """Return the name of the first matching intent, or None for fallback."""
        rule = self._match_rule(utterance)
        return rule.name if rule else None

    def route(self, utterance: str) -> str:
        """Dispatch to the first matching intent handler, or the fallback pool."""
        rule = self._match_rule(utterance)
        if rule is None:
            logger.debug("No intent matched: %s", utterance[:80])
            return self.get_general_response()
        logger.info("Intent '%s' matched", rule.name)
        return rule.handler(utterance)

    # -----------------------------------------------------------------------
    # Directive helpers (host side)
    # -----------------------------------------------------------------------

    @staticmethod
    def parse_action_codes(response: str) -> list[ActionDirective]:
        return directives.parse_action_codes(response)

    @staticmethod
    def clean_response(response: str) -> str:
        return directives.clean_response(response)

    # -----------------------------------------------------------------------
    # Intent handlers
    # -----------------------------------------------------------------------

    def get_joke(self) -> str:
        return f"{self._rng.choice(JOKES)} Anything else I can assist with?"

    def get_quote(self) -> str:
        return f"{self._rng.choice(QUOTES)}\n\nShall we put this wisdom into action today?"

    def get_general_response(self) -> str:
        return self._rng.choice(GENERAL_RESPONSES)

    def handle_reminder_request(self, message: str) -> str:
        slots = extract_reminder(message)
        if not slots.task or not slots.time:
            return ASK_REMINDER

        iso = resolve_to_iso(slots.time, now=self._clock())
        task, when = _echo(slots.task), _echo(slots.time)
        response = f"Done. I've logged your {task} for {when}."

        lowered = message.lower()
        if any(keyword in lowered for keyword in MOTIVATIONAL_KEYWORDS):
            response += f" Here's some motivation: {self._rng.choice(QUOTES)}"
        else:
            response += " Anything else?"

        return f"{response}\n{directives.encode(SetReminder(datetime=iso))}"

    def handle_translation_request(self, message: str) -> str:
        slots = extract_translation(message)
        if not slots.text or not slots.language:
            return ASK_TRANSLATION

        directive = Translate(
            language=slots.language, text_to_translate=slots.text, oral=slots.oral,
        )
        oral_note = " (orally)" if slots.oral else ""
        return (
            f'Translating "{_echo(slots.text)}" to {_echo(slots.language)}{oral_note}.\n'
            f"{directives.encode(directive)}"
        )

    def handle_call_request(self, message: str) -> str:
        slots = extract_call(message)
        if not slots.contact:
            return ASK_CALL

        directive = Call(phone=slots.target, contact=slots.contact)
        return (
            f"Calling {_echo(slots.contact)} now. Setting to speaker mode.\n"
            f"{directives.encode(directive)}"
        )

    def handle_video_request(self, message: str) -> str:
        title = extract_video_title(message)
        if not title:
            return ASK_VIDEO
        return (
            f'Playing "{_echo(title)}" from public domain.\n'
            f"{directives.encode(PlayVideo(title=title))}"
        )

    def handle_song_request(self, message: str) -> str:
        title = extract_song_title(message)
        if not title:
            return ASK_SONG
        return (
            f'Playing "{_echo(title)}" from public domain.\n'
            f"{directives.encode(PlaySong(title=title))}"
        )

    def handle_whatsapp_request(self, message: str) -> str:
        slots = extract_whatsapp(message)
        contact = _echo(slots.contact)
        if not slots.phone:
            return _ASK_PHONE_TEMPLATE.format(contact=contact)

        directive = WhatsAppLink(phone=slots.phone, message=slots.message)
        return (
            f'Drafted your message to {contact}: "{_echo(slots.message)}"\n'
            f"{directives.encode(directive)}"
        )
