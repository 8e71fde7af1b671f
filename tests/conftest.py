"""Shared test fixtures and configuration.

Sets up environment variables before any src imports so src.config loads
a neutral team tier, and provides in-memory vaults and temp stores.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("VAULT_PATH", "")
os.environ.setdefault("PERSON_NOTES_FOLDER", "People")
os.environ.setdefault("GROUP_NOTES_FOLDER", "Teams")
os.environ.setdefault("DEVICE_STORE_PATH", "data/test-device.db")

import pytest

from src.adapters.memory import InMemoryRecordSource, InMemoryStore
from src.config import Settings


@pytest.fixture
def team_settings():
    """Settings with folders configured and no team-tier overrides."""
    return Settings(PERSON_NOTES_FOLDER="People", GROUP_NOTES_FOLDER="Teams")


@pytest.fixture
def vault():
    """An empty in-memory vault; tests add notes with vault.put()."""
    return InMemoryRecordSource()


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def store_db_path(tmp_path):
    """Return a temporary SQLite path for the local store."""
    return str(tmp_path / "test_device.db")


@pytest.fixture
def local_store_db(store_db_path):
    """Return a LocalStoreDB instance backed by a temp file."""
    from src.data.db import LocalStoreDB
    return LocalStoreDB(db_path=store_db_path)


@pytest.fixture
def registry(vault, team_settings):
    from src.core.group_registry import GroupRegistry
    return GroupRegistry(vault, config=team_settings)


@pytest.fixture
def resolver(vault, team_settings):
    from src.core.person_prefs import PersonPreferenceResolver
    return PersonPreferenceResolver(vault, config=team_settings)
