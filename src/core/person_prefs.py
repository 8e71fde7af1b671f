"""
VaultNotify — Person Preference Resolver.

Person notes (`type: person`) may carry notification preferences in their
frontmatter:

    availableFrom: "08:30"
    availableUntil: "18:00"
    reminderLeadTimes:
      - {value: 1, unit: days}
      - {value: 30, unit: minutes}
    notificationEnabled: true
    overrideGlobalReminders: false

Anything missing or malformed falls back to DEFAULT_PERSON_PREFERENCES.
A person with no note at all is the common case, not an error: they simply
get the defaults.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.core.lead_time import to_duration, to_milliseconds
from src.core.paths import strip_link
from src.data.models import DEFAULT_PERSON_PREFERENCES, PersonPreferences, PersonRecord
from src.data.records import RawRecord

if TYPE_CHECKING:
    from src.config import Settings
    from src.ports.record_port import RecordHandle, RecordSource

logger = logging.getLogger(__name__)

_LEGACY_REMINDER_TIME = "reminderTime"


def _split_hhmm(value: str, fallback: tuple[int, int]) -> tuple[int, int]:
    try:
        hours, minutes = (int(part) for part in value.split(":"))
    except ValueError:
        return fallback
    return hours, minutes


def preferences_from_record(record: RawRecord) -> PersonPreferences:
    """Build fully-defaulted preferences from one person note's frontmatter."""
    defaults = DEFAULT_PERSON_PREFERENCES

    # Legacy notes only have `reminderTime`; it maps onto availableFrom
    if record.has("availableFrom"):
        available_from = record.get_time("availableFrom", defaults.available_from)
    elif record.has(_LEGACY_REMINDER_TIME):
        available_from = record.get_time(_LEGACY_REMINDER_TIME, defaults.available_from)
    else:
        available_from = defaults.available_from

    lead_times = record.get_lead_times("reminderLeadTimes")
    if lead_times is None:
        lead_times = list(defaults.reminder_lead_times)

    return PersonPreferences(
        available_from=available_from,
        available_until=record.get_time("availableUntil", defaults.available_until),
        reminder_lead_times=lead_times,
        notification_enabled=record.get_bool(
            "notificationEnabled", defaults.notification_enabled,
        ),
        override_global_reminders=record.get_bool(
            "overrideGlobalReminders", defaults.override_global_reminders,
        ),
    )


class PersonPreferenceResolver:
    """Reads and caches per-person notification preferences.

    One instance per host session; the cache is owned by the instance.
    """

    def __init__(self, source: RecordSource, config: Settings | None = None) -> None:
        if config is None:
            from src.config import settings
            config = settings

        self._source = source
        self._config = config
        self._cache: dict[str, PersonPreferences] = {}

    # -- Lookup ------------------------------------------------------------

    def _locate(self, person_path: str) -> RecordHandle | None:
        """Exact path first, then as a wikilink target."""
        path = strip_link(person_path)
        handle = self._source.get_record(path)
        if handle is None:
            handle = self._source.resolve_link(path.removesuffix(".md"))
        return handle

    def _read_record(self, person_path: str) -> RawRecord:
        handle = self._locate(person_path)
        if handle is None:
            logger.debug("Person note not found for '%s', using defaults", person_path)
            return RawRecord(None)

        record = RawRecord(self._source.read_metadata(handle))
        if not record:
            logger.debug("No frontmatter for '%s', using defaults", person_path)
        return record

    # -- Cache -------------------------------------------------------------

    def get_preferences(self, person_path: str) -> PersonPreferences:
        """Return preferences for a person, reading the note on first access."""
        cached = self._cache.get(person_path)
        if cached is not None:
            return cached

        record = self._read_record(person_path)
        preferences = preferences_from_record(record)
        self._cache[person_path] = preferences
        return preferences

    def invalidate(self, person_path: str) -> None:
        """Drop one person's cached preferences (their note changed)."""
        self._cache.pop(person_path, None)

    def clear_cache(self) -> None:
        self._cache = {}

    # -- Convenience queries ----------------------------------------------

    def get_available_from(self, person_path: str) -> tuple[int, int]:
        """(hours, minutes) of the availability start. Day+ reminders pin here."""
        return _split_hhmm(self.get_preferences(person_path).available_from, (9, 0))

    def get_available_until(self, person_path: str) -> tuple[int, int]:
        """(hours, minutes) of the availability end."""
        return _split_hhmm(self.get_preferences(person_path).available_until, (17, 0))

    def is_notification_enabled(self, person_path: str) -> bool:
        return self.get_preferences(person_path).notification_enabled

    def should_override_global(self, person_path: str) -> bool:
        """True = person lead times replace vault-wide rules, False = add to them."""
        return self.get_preferences(person_path).override_global_reminders

    def get_lead_times_ms(self, person_path: str) -> list[int]:
        return [
            to_milliseconds(lt)
            for lt in self.get_preferences(person_path).reminder_lead_times
        ]

    def get_lead_time_offsets(self, person_path: str) -> list[str]:
        """Lead times as reminder offsets, e.g. ["-P1D", "-PT15M"]."""
        return [
            to_duration(lt)
            for lt in self.get_preferences(person_path).reminder_lead_times
        ]

    def has_custom_lead_times(self, person_path: str) -> bool:
        """True only if the note itself declares a non-empty reminderLeadTimes list.

        Distinguishes "person chose lead times" from "person gets defaults".
        Not cached: reads the note each time.
        """
        value = self._read_record(person_path).get("reminderLeadTimes")
        return isinstance(value, list) and len(value) > 0

    # -- Discovery ---------------------------------------------------------

    def discover_persons(self) -> list[PersonRecord]:
        """List person notes, honoring the person folder and tag settings."""
        folder = self._config.PERSON_NOTES_FOLDER
        tag = self._config.PERSON_NOTES_TAG.lstrip("#")
        type_property = self._config.IDENTITY_TYPE_PROPERTY or "type"
        person_value = self._config.PERSON_TYPE_VALUE or "person"

        persons: list[PersonRecord] = []
        for handle in self._source.list_records(folder):
            record = RawRecord(self._source.read_metadata(handle))
            if record.get(type_property) != person_value:
                continue
            if tag and tag not in record.get_tags():
                continue

            persons.append(PersonRecord(
                path=handle.path,
                display_name=record.get_string("title") or handle.basename,
                role=record.get_string("role"),
                department=record.get_string("department"),
            ))

        logger.debug("Discovered %d person notes in '%s'", len(persons), folder)
        return persons
