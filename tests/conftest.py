"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides common fixtures like a temp profile DB and an assistant
with a frozen clock.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("TIMEZONE", "Asia/Kolkata")

import random
from datetime import datetime

import pytest

# 2024-01-01 is a Monday
FROZEN_NOW = datetime(2024, 1, 1, 10, 0, 0)


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_profile.db")


@pytest.fixture
def profile_db(tmp_db_path):
    """Return a ProfileDB instance backed by a temp file."""
    from src.data.db import ProfileDB
    return ProfileDB(db_path=tmp_db_path)


@pytest.fixture
def assistant():
    """Return an Assistant without storage, frozen at FROZEN_NOW."""
    from src.core.assistant import Assistant
    return Assistant(clock=lambda: FROZEN_NOW, rng=random.Random(7))
