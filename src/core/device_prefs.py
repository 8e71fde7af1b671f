"""
VaultNotify — Device Preference Store.

In a shared vault the team settings sync to every device. Settings that
should differ per device (notification type, scope, check interval, view
and toast behavior) live in a device-local store instead, resolved as:

    effective = device override ?? team default (.env) ?? hardcoded fallback

so the team settings act as defaults that any device can override.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from src.data.models import DevicePreferences, NotificationScopePrefs

if TYPE_CHECKING:
    from src.config import Settings
    from src.ports.store_port import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORAGE_KEY = "vaultnotify-device-prefs"


def resolve_tiered(override: T | None, team_default: T | None, fallback: T) -> T:
    """Apply the override chain. Only None defers; False and 0 are real values."""
    if override is not None:
        return override
    if team_default is not None:
        return team_default
    return fallback


class DevicePreferenceStore:
    """Per-device overrides persisted to a local key/value store.

    Writes persist immediately. A corrupt or unreadable blob starts the
    device over with no overrides.
    """

    def __init__(self, store: KeyValueStore, config: Settings | None = None) -> None:
        if config is None:
            from src.config import settings
            config = settings

        self._store = store
        self._config = config
        self._prefs = self._load()

    # -- Persistence -------------------------------------------------------

    def _load(self) -> DevicePreferences:
        try:
            raw = self._store.load(STORAGE_KEY)
            if raw:
                return DevicePreferences.model_validate_json(raw)
        except Exception as exc:
            logger.warning("Device preferences unreadable, starting fresh: %s", exc)
        return DevicePreferences()

    def _save(self) -> None:
        blob = self._prefs.model_dump_json(by_alias=True, exclude_none=True)
        try:
            self._store.save(STORAGE_KEY, blob)
        except Exception as exc:
            logger.error("Failed to persist device preferences: %s", exc)

    # -- Raw access --------------------------------------------------------

    def get_raw(self) -> DevicePreferences:
        """A copy of the raw overrides (for a settings UI)."""
        return self._prefs.model_copy(deep=True)

    def update(self, **partial: Any) -> None:
        """Set one or more overrides. Passing None clears that override.

        Raises ValueError for unknown keys and pydantic.ValidationError
        for values outside a field's allowed set.
        """
        unknown = set(partial) - set(DevicePreferences.model_fields)
        if unknown:
            raise ValueError(f"Unknown device preference(s): {sorted(unknown)}")

        data = self._prefs.model_dump()
        data.update(partial)
        self._prefs = DevicePreferences.model_validate(data)
        self._save()
        logger.info("Device preferences updated: %s", sorted(partial))

    def update_scope(self, **partial: Any) -> None:
        """Merge into the notification scope overrides."""
        unknown = set(partial) - set(NotificationScopePrefs.model_fields)
        if unknown:
            raise ValueError(f"Unknown notification scope key(s): {sorted(unknown)}")

        current = self._prefs.notification_scope or NotificationScopePrefs()
        data = current.model_dump()
        data.update(partial)
        self.update(notification_scope=NotificationScopePrefs.model_validate(data))

    def clear_override(self, key: str) -> None:
        """Drop one override so the field reverts to the team default."""
        if key not in DevicePreferences.model_fields:
            raise ValueError(f"Unknown device preference: {key!r}")
        setattr(self._prefs, key, None)
        self._save()

    def clear_all(self) -> None:
        self._prefs = DevicePreferences()
        self._save()

    # -- Resolved getters --------------------------------------------------

    def _scope(self) -> NotificationScopePrefs:
        return self._prefs.notification_scope or NotificationScopePrefs()

    def get_notification_type(self) -> str:
        return resolve_tiered(
            self._prefs.notification_type, self._config.NOTIFICATION_TYPE, "in-app",
        )

    def has_notification_type_override(self) -> bool:
        return self._prefs.notification_type is not None

    def get_enable_notifications(self) -> bool:
        return resolve_tiered(
            self._prefs.enable_notifications, self._config.ENABLE_NOTIFICATIONS, True,
        )

    def has_enable_notifications_override(self) -> bool:
        return self._prefs.enable_notifications is not None

    def get_check_interval(self) -> int:
        """Minutes between checks."""
        return resolve_tiered(
            self._prefs.check_interval, self._config.CHECK_INTERVAL, 5,
        )

    def has_check_interval_override(self) -> bool:
        return self._prefs.check_interval is not None

    def get_filter_by_assignment(self) -> bool:
        """Only notify for tasks assigned to this device's person."""
        return resolve_tiered(
            self._scope().filter_by_assignment,
            self._config.ONLY_NOTIFY_IF_ASSIGNED_TO_ME,
            False,
        )

    def has_filter_by_assignment_override(self) -> bool:
        return self._scope().filter_by_assignment is not None

    def get_include_unassigned_tasks(self) -> bool:
        """When filtering, also notify for tasks nobody is assigned to."""
        return resolve_tiered(
            self._scope().include_unassigned_tasks,
            self._config.NOTIFY_FOR_UNASSIGNED_TASKS,
            True,
        )

    def has_include_unassigned_tasks_override(self) -> bool:
        return self._scope().include_unassigned_tasks is not None

    # View preferences: no team tier for the upcoming view period

    def get_upcoming_view_period(self) -> str:
        return resolve_tiered(self._prefs.upcoming_view_period, None, "list")

    def has_upcoming_view_period_override(self) -> bool:
        return self._prefs.upcoming_view_period is not None

    def set_upcoming_view_period(self, period: str) -> None:
        self.update(upcoming_view_period=period)

    def get_base_notification_display(self) -> str:
        return resolve_tiered(
            self._prefs.base_notification_display,
            self._config.BASE_NOTIFICATION_DISPLAY,
            "individual",
        )

    def has_base_notification_display_override(self) -> bool:
        return self._prefs.base_notification_display is not None

    def set_base_notification_display(self, mode: str) -> None:
        self.update(base_notification_display=mode)

    # Toast / status bar

    def get_toast_click_behavior(self) -> str:
        return resolve_tiered(self._prefs.toast_click_behavior, None, "view")

    def has_toast_click_behavior_override(self) -> bool:
        return self._prefs.toast_click_behavior is not None

    def set_toast_click_behavior(self, behavior: str) -> None:
        self.update(toast_click_behavior=behavior)

    def get_status_bar_click_behavior(self) -> str:
        return resolve_tiered(self._prefs.status_bar_click_behavior, None, "view")

    def has_status_bar_click_behavior_override(self) -> bool:
        return self._prefs.status_bar_click_behavior is not None

    def set_status_bar_click_behavior(self, behavior: str) -> None:
        self.update(status_bar_click_behavior=behavior)
