"""
VaultNotify — Centralized configuration.

Loads the vault-wide (team) settings from .env. These values are the middle
tier of every device preference: a device override wins over them, and a
hardcoded fallback applies when the team has not configured a value.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_NOTIFICATION_TYPES = ("in-app", "system", "both")
_DISPLAY_MODES = ("individual", "rollup")


class Settings(BaseModel):
    """Vault-wide settings loaded from environment variables."""

    # Vault layout
    VAULT_PATH: str = ""
    PERSON_NOTES_FOLDER: str = ""
    PERSON_NOTES_TAG: str = ""
    GROUP_NOTES_FOLDER: str = ""   # empty → falls back to PERSON_NOTES_FOLDER
    GROUP_NOTES_TAG: str = ""

    # Identity records: `type: person` / `type: group` by default
    IDENTITY_TYPE_PROPERTY: str = "type"
    PERSON_TYPE_VALUE: str = "person"
    GROUP_TYPE_VALUE: str = "group"

    # Task frontmatter key holding the assignee reference(s)
    ASSIGNEE_FIELD_NAME: str = "assignee"

    # Local (never synced) device store
    DEVICE_STORE_PATH: str = "data/device.db"

    # Team defaults: None means "not configured", defer to hardcoded
    NOTIFICATION_TYPE: str | None = None
    ENABLE_NOTIFICATIONS: bool | None = None
    CHECK_INTERVAL: int | None = None      # minutes
    ONLY_NOTIFY_IF_ASSIGNED_TO_ME: bool | None = None
    NOTIFY_FOR_UNASSIGNED_TASKS: bool | None = None
    BASE_NOTIFICATION_DISPLAY: str | None = None

    @field_validator(
        "ENABLE_NOTIFICATIONS",
        "ONLY_NOTIFY_IF_ASSIGNED_TO_ME",
        "NOTIFY_FOR_UNASSIGNED_TASKS",
        mode="before",
    )
    @classmethod
    def parse_optional_bool(cls, v: str | bool | None) -> bool | None:
        if v is None or isinstance(v, bool):
            return v
        text = str(v).strip().lower()
        if not text:
            return None
        if text in ("1", "true", "yes", "on"):
            return True
        if text in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"Not a boolean: {v!r}")

    @field_validator("CHECK_INTERVAL", mode="before")
    @classmethod
    def parse_interval(cls, v: str | int | None) -> int | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        interval = int(v)
        if interval < 1:
            raise ValueError("CHECK_INTERVAL must be at least 1 minute")
        return interval

    @field_validator("NOTIFICATION_TYPE", mode="before")
    @classmethod
    def parse_notification_type(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        value = str(v).strip().lower()
        if value not in _NOTIFICATION_TYPES:
            raise ValueError(f"NOTIFICATION_TYPE must be one of {_NOTIFICATION_TYPES}")
        return value

    @field_validator("BASE_NOTIFICATION_DISPLAY", mode="before")
    @classmethod
    def parse_display(cls, v: str | None) -> str | None:
        if v is None or not str(v).strip():
            return None
        value = str(v).strip().lower()
        if value not in _DISPLAY_MODES:
            raise ValueError(f"BASE_NOTIFICATION_DISPLAY must be one of {_DISPLAY_MODES}")
        return value


def _load_settings() -> Settings:
    """Load settings from environment, validating the vault location."""
    vault_path = os.getenv("VAULT_PATH", "")

    if vault_path and not Path(vault_path).is_dir():
        print(f"ERROR: VAULT_PATH {vault_path!r} is not a directory", file=sys.stderr)
        sys.exit(1)

    return Settings(
        VAULT_PATH=vault_path,
        PERSON_NOTES_FOLDER=os.getenv("PERSON_NOTES_FOLDER", ""),
        PERSON_NOTES_TAG=os.getenv("PERSON_NOTES_TAG", ""),
        GROUP_NOTES_FOLDER=os.getenv("GROUP_NOTES_FOLDER", ""),
        GROUP_NOTES_TAG=os.getenv("GROUP_NOTES_TAG", ""),
        IDENTITY_TYPE_PROPERTY=os.getenv("IDENTITY_TYPE_PROPERTY", "type"),
        PERSON_TYPE_VALUE=os.getenv("PERSON_TYPE_VALUE", "person"),
        GROUP_TYPE_VALUE=os.getenv("GROUP_TYPE_VALUE", "group"),
        ASSIGNEE_FIELD_NAME=os.getenv("ASSIGNEE_FIELD_NAME", "assignee"),
        DEVICE_STORE_PATH=os.getenv("DEVICE_STORE_PATH", "data/device.db"),
        NOTIFICATION_TYPE=os.getenv("NOTIFICATION_TYPE"),
        ENABLE_NOTIFICATIONS=os.getenv("ENABLE_NOTIFICATIONS"),
        CHECK_INTERVAL=os.getenv("CHECK_INTERVAL"),
        ONLY_NOTIFY_IF_ASSIGNED_TO_ME=os.getenv("ONLY_NOTIFY_IF_ASSIGNED_TO_ME"),
        NOTIFY_FOR_UNASSIGNED_TASKS=os.getenv("NOTIFY_FOR_UNASSIGNED_TASKS"),
        BASE_NOTIFICATION_DISPLAY=os.getenv("BASE_NOTIFICATION_DISPLAY"),
    )


# Singleton: the default team tier, imported as:
#   from src.config import settings
settings = _load_settings()
