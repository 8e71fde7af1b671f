"""
VaultNotify — Raw frontmatter records.

Frontmatter is an arbitrary key/value map: YAML (or the host's metadata
cache) decides the types, not us. RawRecord wraps one such map and exposes
typed accessors that encapsulate the tolerant-parsing rules, so resolvers
never type-check values inline.

Every accessor degrades instead of raising: a wrong type reads as "absent".
"""

from __future__ import annotations

import logging
import re
from typing import Any

from src.data.models import LEAD_TIME_UNITS, LeadTime

logger = logging.getLogger(__name__)

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_MINUTES_PER_DAY = 24 * 60


def minutes_to_hhmm(total: int) -> str:
    """Format minutes since midnight as zero-padded HH:MM."""
    return f"{total // 60:02d}:{total % 60:02d}"


class RawRecord:
    """Read-only typed view over one note's frontmatter."""

    def __init__(self, metadata: dict[str, Any] | None) -> None:
        self._data: dict[str, Any] = metadata if isinstance(metadata, dict) else {}

    def __bool__(self) -> bool:
        return bool(self._data)

    def has(self, key: str) -> bool:
        """True when the key is present (even if its value is malformed)."""
        return key in self._data and self._data[key] is not None

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def get_string(self, key: str) -> str | None:
        value = self._data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    def get_string_list(self, key: str) -> list[str]:
        """Return the string entries of a list field; non-strings are dropped."""
        value = self._data.get(key)
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, str)]

    def get_bool(self, key: str, default: bool) -> bool:
        """Native booleans or the literal strings "true"/"false"; else default."""
        value = self._data.get(key)
        if isinstance(value, bool):
            return value
        if value == "true":
            return True
        if value == "false":
            return False
        return default

    def get_time(self, key: str, default: str) -> str:
        """Parse an HH:MM time of day.

        YAML 1.1 loaders read a bare 08:30 as the sexagesimal integer 510,
        so minutes-since-midnight (0–1439) is accepted as well. Both forms
        resolve to the same zero-padded "HH:MM".
        """
        value = self._data.get(key)

        if isinstance(value, str):
            match = _HHMM_RE.match(value.strip())
            if match:
                hours, minutes = int(match.group(1)), int(match.group(2))
                if hours <= 23 and minutes <= 59:
                    return minutes_to_hhmm(hours * 60 + minutes)

        # bool is an int subclass; True must not read as 00:01
        if isinstance(value, int) and not isinstance(value, bool):
            if 0 <= value < _MINUTES_PER_DAY:
                return minutes_to_hhmm(value)

        if value is not None:
            logger.debug("Unparseable time %r for '%s', using %s", value, key, default)
        return default

    def get_lead_times(self, key: str) -> list[LeadTime] | None:
        """Parse a list of {value, unit} lead times.

        Returns None unless every entry is well-formed: one bad entry
        discards the whole list, the caller then applies its default.
        """
        value = self._data.get(key)
        if not isinstance(value, list) or not value:
            return None

        lead_times: list[LeadTime] = []
        for item in value:
            lead_time = _parse_lead_time(item)
            if lead_time is None:
                logger.debug("Malformed lead time %r in '%s', discarding list", item, key)
                return None
            lead_times.append(lead_time)
        return lead_times

    def get_tags(self) -> list[str]:
        """Frontmatter tags as a list, without leading '#'."""
        value = self._data.get("tags")
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return []
        return [t.lstrip("#") for t in value if isinstance(t, str)]


def _parse_lead_time(item: Any) -> LeadTime | None:
    if not isinstance(item, dict):
        return None

    raw_value = item.get("value")
    unit = item.get("unit")

    if isinstance(raw_value, bool) or not isinstance(raw_value, (int, float)):
        return None
    if isinstance(raw_value, float) and not raw_value.is_integer():
        return None
    if raw_value <= 0:
        return None
    if not isinstance(unit, str) or unit not in LEAD_TIME_UNITS:
        return None

    return LeadTime(value=int(raw_value), unit=unit)
