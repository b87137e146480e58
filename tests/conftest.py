"""Shared fixtures for all tests."""

import os
import random

import pytest

from zwolf.config import Settings, get_settings
from zwolf.models import AbilityEntry, Character, Source, TierData


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    """Keep ZWOLF_ environment variables and cached settings out of tests."""
    for key in list(os.environ):
        if key.startswith("ZWOLF_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    """Default settings without reading any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def rng():
    """Seeded random generator for reproducible rolls."""
    return random.Random(1234)


@pytest.fixture
def make_source():
    """Factory for sources with sensible defaults."""

    def _make(name: str = "Source", kind: str = "universal", **kwargs) -> Source:
        return Source(name=name, kind=kind, **kwargs)

    return _make


@pytest.fixture
def make_track():
    """Factory for tracks with per-tier data."""

    def _make(name: str = "Track", slot_index: int | None = None, tiers=None, **kwargs) -> Source:
        return Source(
            name=name,
            kind="track",
            slot_index=slot_index,
            tiers={number: TierData.model_validate(data) for number, data in (tiers or {}).items()},
            **kwargs,
        )

    return _make


@pytest.fixture
def make_character():
    """Factory for characters with sensible defaults."""

    def _make(level: int = 1, sources=None, **kwargs) -> Character:
        return Character(name="Test Hero", level=level, sources=list(sources or []), **kwargs)

    return _make


@pytest.fixture
def ability():
    """Factory for ability entries."""

    def _make(name: str = "Ability", activity_kind: str = "passive", **kwargs) -> AbilityEntry:
        return AbilityEntry(name=name, activity_kind=activity_kind, **kwargs)

    return _make
