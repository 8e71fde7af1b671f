"""
VaultNotify — Data Models.

People and groups live as notes in the shared vault; their frontmatter is
the source of truth. These models are the resolved, in-memory view of that
metadata. Device preferences are the exception: they never leave the
device, and round-trip through JSON in the local store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

LeadTimeUnit = Literal["minutes", "hours", "days", "weeks"]

LEAD_TIME_UNITS: tuple[str, ...] = ("minutes", "hours", "days", "weeks")


@dataclass(frozen=True)
class LeadTime:
    """How long before an anchor moment a reminder should fire."""

    value: int            # positive, e.g. 15
    unit: LeadTimeUnit    # e.g. "minutes"


def _default_lead_times() -> list[LeadTime]:
    return [LeadTime(1, "days"), LeadTime(15, "minutes")]


@dataclass
class PersonPreferences:
    """Resolved notification preferences for one person note.

    Always fully populated: the resolver fills every missing field with
    its default before handing the value out.
    """

    available_from: str = "09:00"     # HH:MM, day+ reminders pin here
    available_until: str = "17:00"    # HH:MM
    reminder_lead_times: list[LeadTime] = field(default_factory=_default_lead_times)
    notification_enabled: bool = True
    override_global_reminders: bool = True   # False → add to vault-wide rules


DEFAULT_PERSON_PREFERENCES = PersonPreferences()


@dataclass
class GroupRecord:
    """A discovered group note (`type: group`) and its direct members."""

    path: str                  # e.g. "Teams/Frontend.md"
    display_name: str          # title, or the file basename
    member_paths: list[str]    # unresolved references, may be groups
    last_resolved: int = 0     # epoch ms of the discovery pass


@dataclass
class PersonRecord:
    """A discovered person note (`type: person`)."""

    path: str
    display_name: str
    role: str | None = None
    department: str | None = None


# ---------------------------------------------------------------------------
# Device preferences (local-only JSON blob)
# ---------------------------------------------------------------------------


class _DeviceModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        validate_assignment=True,
    )


class NotificationScopePrefs(_DeviceModel):
    """Which tasks this device is notified about."""

    filter_by_assignment: bool | None = None
    include_unassigned_tasks: bool | None = None


class DevicePreferences(_DeviceModel):
    """Per-device overrides. Every field is optional: None defers to the team tier.

    JSON example (as stored):
    {
        "notificationType": "system",
        "checkInterval": 3,
        "notificationScope": {"filterByAssignment": true}
    }
    """

    notification_type: Literal["in-app", "system", "both"] | None = None
    enable_notifications: bool | None = None
    check_interval: int | None = Field(default=None, ge=1)    # minutes
    notification_scope: NotificationScopePrefs | None = None

    # View preferences
    upcoming_view_period: Literal["year", "month", "week", "3day", "day", "list"] | None = None
    base_notification_display: Literal["individual", "rollup"] | None = None

    # Toast / status bar
    toast_click_behavior: Literal["view", "expand"] | None = None
    status_bar_click_behavior: Literal["view", "toast"] | None = None


# ---------------------------------------------------------------------------
# Reminder timing
# ---------------------------------------------------------------------------


@dataclass
class Reminder:
    """The parts of a task reminder that person timing looks at."""

    offset: str | None = None          # ISO 8601 duration, e.g. "-PT15M"
    related_to: str = "due"            # anchor property
    semantic_type: str | None = None   # e.g. "lead-time"
    is_virtual: bool = False           # generated from vault-wide rules


@dataclass
class TimingDecision:
    """When to fire a reminder for one person, or whether to skip it."""

    notify_at: datetime
    skip: bool = False
