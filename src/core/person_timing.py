"""
VaultNotify — Person Timing.

Adjusts when a reminder fires for a specific person, using the preferences
from their person note:

- notifications disabled → skip the reminder entirely
- explicit reminders (written on the task) → exact time, untouched
- sub-day lead times under one hour → exact time (too close to defer)
- other sub-day lead times → deferred into the availability window
- day+ lead times and other rule-generated reminders → pinned to availableFrom

Also merges a person's lead times with the vault-wide lead-time rules, in
override (replace) or additive mode.

No I/O: preferences come from a PersonPreferenceResolver.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from src.core.lead_time import duration_to_milliseconds, is_sub_day
from src.data.models import Reminder, TimingDecision

if TYPE_CHECKING:
    from src.core.person_prefs import PersonPreferenceResolver

logger = logging.getLogger(__name__)

LEAD_TIME = "lead-time"
_CRITICAL_WINDOW_MS = 3_600_000


def _at(moment: datetime, hm: tuple[int, int]) -> datetime:
    return moment.replace(hour=hm[0], minute=hm[1], second=0, microsecond=0)


def defer_to_availability(
    notify_at: datetime,
    available_from: tuple[int, int],
    available_until: tuple[int, int],
) -> datetime:
    """Move a moment into the [from, until] window (bounds inclusive).

    Normal window (09:00-17:00): before it → today's start, after it →
    tomorrow's start. Wrap-around window (22:00-06:00): the gap between
    until and from → today's start.
    """
    from_min = available_from[0] * 60 + available_from[1]
    until_min = available_until[0] * 60 + available_until[1]
    current = notify_at.hour * 60 + notify_at.minute

    wraps = from_min > until_min
    if wraps:
        inside = current >= from_min or current <= until_min
    else:
        inside = from_min <= current <= until_min

    if inside:
        return notify_at

    if wraps or current < from_min:
        return _at(notify_at, available_from)
    return _at(notify_at + timedelta(days=1), available_from)


def apply_person_timing(
    notify_at: datetime,
    person_path: str | None,
    reminder: Reminder,
    resolver: PersonPreferenceResolver | None,
) -> TimingDecision:
    """Adjust a reminder's fire time to a person's preferences."""
    if not person_path or resolver is None:
        return TimingDecision(notify_at=notify_at)

    if not resolver.is_notification_enabled(person_path):
        logger.info("Skipping reminder for '%s': notifications disabled", person_path)
        return TimingDecision(notify_at=notify_at, skip=True)

    if not reminder.is_virtual:
        return TimingDecision(notify_at=notify_at)

    available_from = resolver.get_available_from(person_path)

    if reminder.semantic_type == LEAD_TIME and reminder.offset and is_sub_day(reminder.offset):
        offset_ms = abs(duration_to_milliseconds(reminder.offset) or 0)
        if 0 < offset_ms < _CRITICAL_WINDOW_MS:
            return TimingDecision(notify_at=notify_at)

        deferred = defer_to_availability(
            notify_at, available_from, resolver.get_available_until(person_path),
        )
        if deferred != notify_at:
            logger.debug(
                "Deferred reminder for '%s': %s -> %s", person_path,
                notify_at.isoformat(), deferred.isoformat(),
            )
        return TimingDecision(notify_at=deferred)

    pinned = _at(notify_at, available_from)
    if pinned != notify_at:
        logger.debug(
            "Pinned reminder for '%s' to availableFrom: %s -> %s", person_path,
            notify_at.strftime("%H:%M"), pinned.strftime("%H:%M"),
        )
    return TimingDecision(notify_at=pinned)


def merge_lead_times(
    person_offsets: list[str],
    global_offsets: list[str],
    override: bool,
) -> list[str]:
    """Combine person and vault-wide lead-time offsets.

    Override mode keeps only the person's offsets. Additive mode appends
    the global offsets the person doesn't already have.
    """
    if override:
        return list(person_offsets)
    merged = list(person_offsets)
    for offset in global_offsets:
        if offset not in merged:
            merged.append(offset)
    return merged


def effective_lead_time_offsets(
    person_path: str | None,
    global_offsets: list[str],
    resolver: PersonPreferenceResolver | None,
) -> list[str]:
    """Lead-time offsets that apply to one person's reminders.

    A person without custom lead times in their note just gets the
    vault-wide offsets; the default pair only matters to callers that ask
    for preferences directly.
    """
    if not person_path or resolver is None or not resolver.has_custom_lead_times(person_path):
        return list(global_offsets)

    mode_override = resolver.should_override_global(person_path)
    merged = merge_lead_times(
        resolver.get_lead_time_offsets(person_path), global_offsets, mode_override,
    )
    logger.debug(
        "Lead times for '%s': %d offsets (%s vault-wide rules)",
        person_path, len(merged), "replacing" if mode_override else "adding to",
    )
    return merged
