"""Profile store port — abstract key/value storage for the assistant profile.

Mirrors the browser local-storage contract: string keys, string values,
None for a missing key. Core modules depend on this protocol only.
"""

from __future__ import annotations

from typing import Protocol


class ProfileStore(Protocol):
    """Abstract persistent key/value store used by the assistant."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...
