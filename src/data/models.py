"""
MPA Assistant — Data Models.

The assistant profile is the only state that outlives a single message:
name, gender and language survive restarts through the profile store,
and the registered owner locks the assistant to one caller.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_NAME = "MPA"
DEFAULT_GENDER = "neutral"
DEFAULT_LANGUAGE = "en"

GENDERS = ("male", "female", "neutral")

# Language codes offered on the settings screen, with display names
LANGUAGES: dict[str, str] = {
    "en": "English",
    "hi": "Hindi",
    "ta": "Tamil",
    "te": "Telugu",
    "kn": "Kannada",
    "ml": "Malayalam",
    "mr": "Marathi",
    "bn": "Bengali",
    "gu": "Gujarati",
    "pa": "Punjabi",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "ja": "Japanese",
    "zh": "Chinese",
}

# Store keys, kept identical to the browser local-storage keys
NAME_KEY = "mpaUserName"
GENDER_KEY = "mpaGender"
LANGUAGE_KEY = "mpaLanguage"
REGISTERED_USER_KEY = "mpa_registered_user"
REGISTERED_USER_ID_KEY = "mpa_registered_user_id"


@dataclass
class AssistantProfile:
    """Persona and owner lock of one assistant instance."""

    user_name: str = DEFAULT_NAME       # the assistant's display name
    gender: str = DEFAULT_GENDER        # male | female | neutral
    language: str = DEFAULT_LANGUAGE    # ISO 639-1 code
    registered_user: str | None = None  # owner identity, None = open mode
