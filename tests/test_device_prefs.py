"""Tests for src.core.device_prefs — three-tier device preference resolution."""

import json

import pytest
from pydantic import ValidationError

from src.adapters.memory import InMemoryStore
from src.config import Settings
from src.core.device_prefs import STORAGE_KEY, DevicePreferenceStore, resolve_tiered


class TestResolveTiered:
    def test_override_wins(self):
        assert resolve_tiered(3, 10, 5) == 3

    def test_team_default_next(self):
        assert resolve_tiered(None, 10, 5) == 10

    def test_fallback_last(self):
        assert resolve_tiered(None, None, 5) == 5

    def test_false_is_a_real_override(self):
        assert resolve_tiered(False, True, True) is False

    def test_zero_is_a_real_team_value(self):
        assert resolve_tiered(None, 0, 5) == 0


class TestCheckIntervalChain:
    def test_team_default_used_without_override(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings(CHECK_INTERVAL=10))
        assert prefs.get_check_interval() == 10
        assert prefs.has_check_interval_override() is False

    def test_device_override_wins_and_team_untouched(self, memory_store):
        team = Settings(CHECK_INTERVAL=10)
        prefs = DevicePreferenceStore(memory_store, config=team)
        prefs.update(check_interval=3)
        assert prefs.get_check_interval() == 3
        assert prefs.has_check_interval_override() is True
        assert team.CHECK_INTERVAL == 10

    def test_hardcoded_fallback(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        assert prefs.get_check_interval() == 5

    def test_clear_override_reverts_to_team(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings(CHECK_INTERVAL=10))
        prefs.update(check_interval=3)
        prefs.clear_override("check_interval")
        assert prefs.get_check_interval() == 10

    def test_invalid_interval_rejected(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        with pytest.raises(ValidationError):
            prefs.update(check_interval=0)


class TestFallbacks:
    def test_all_hardcoded_values(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        assert prefs.get_notification_type() == "in-app"
        assert prefs.get_enable_notifications() is True
        assert prefs.get_filter_by_assignment() is False
        assert prefs.get_include_unassigned_tasks() is True
        assert prefs.get_base_notification_display() == "individual"
        assert prefs.get_upcoming_view_period() == "list"
        assert prefs.get_toast_click_behavior() == "view"
        assert prefs.get_status_bar_click_behavior() == "view"

    def test_team_tier(self, memory_store):
        team = Settings(
            NOTIFICATION_TYPE="system",
            ENABLE_NOTIFICATIONS=False,
            ONLY_NOTIFY_IF_ASSIGNED_TO_ME=True,
            NOTIFY_FOR_UNASSIGNED_TASKS=False,
            BASE_NOTIFICATION_DISPLAY="rollup",
        )
        prefs = DevicePreferenceStore(memory_store, config=team)
        assert prefs.get_notification_type() == "system"
        assert prefs.get_enable_notifications() is False
        assert prefs.get_filter_by_assignment() is True
        assert prefs.get_include_unassigned_tasks() is False
        assert prefs.get_base_notification_display() == "rollup"


class TestOverrides:
    def test_update_several(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings(NOTIFICATION_TYPE="system"))
        prefs.update(notification_type="both", enable_notifications=False)
        assert prefs.get_notification_type() == "both"
        assert prefs.has_notification_type_override() is True
        assert prefs.get_enable_notifications() is False
        assert prefs.has_enable_notifications_override() is True

    def test_update_none_clears(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        prefs.update(notification_type="system")
        prefs.update(notification_type=None)
        assert prefs.has_notification_type_override() is False

    def test_unknown_key_raises(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        with pytest.raises(ValueError, match="Unknown device preference"):
            prefs.update(colour="blue")
        with pytest.raises(ValueError):
            prefs.clear_override("colour")

    def test_invalid_enum_rejected(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        with pytest.raises(ValidationError):
            prefs.update(notification_type="carrier-pigeon")

    def test_update_scope_merges(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings(NOTIFY_FOR_UNASSIGNED_TASKS=False))
        prefs.update_scope(filter_by_assignment=True)
        prefs.update_scope(include_unassigned_tasks=True)
        assert prefs.get_filter_by_assignment() is True
        assert prefs.get_include_unassigned_tasks() is True
        assert prefs.has_filter_by_assignment_override() is True
        assert prefs.has_include_unassigned_tasks_override() is True

    def test_scope_key_validation(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        with pytest.raises(ValueError, match="scope"):
            prefs.update_scope(everything=True)

    def test_view_and_toast_setters(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        prefs.set_upcoming_view_period("week")
        prefs.set_base_notification_display("rollup")
        prefs.set_toast_click_behavior("expand")
        prefs.set_status_bar_click_behavior("toast")
        assert prefs.get_upcoming_view_period() == "week"
        assert prefs.has_upcoming_view_period_override() is True
        assert prefs.get_base_notification_display() == "rollup"
        assert prefs.has_base_notification_display_override() is True
        assert prefs.get_toast_click_behavior() == "expand"
        assert prefs.has_toast_click_behavior_override() is True
        assert prefs.get_status_bar_click_behavior() == "toast"
        assert prefs.has_status_bar_click_behavior_override() is True

    def test_clear_all(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings(CHECK_INTERVAL=10))
        prefs.update(check_interval=1, notification_type="system")
        prefs.update_scope(filter_by_assignment=True)
        prefs.clear_all()
        assert prefs.get_check_interval() == 10
        assert prefs.has_notification_type_override() is False
        assert prefs.has_filter_by_assignment_override() is False

    def test_get_raw_is_a_copy(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        raw = prefs.get_raw()
        raw.check_interval = 42
        assert prefs.has_check_interval_override() is False


class TestPersistence:
    def test_writes_camel_case_json_immediately(self, memory_store):
        prefs = DevicePreferenceStore(memory_store, config=Settings())
        prefs.update(notification_type="system", check_interval=3)
        prefs.update_scope(filter_by_assignment=True)

        blob = json.loads(memory_store.load(STORAGE_KEY))
        assert blob == {
            "notificationType": "system",
            "checkInterval": 3,
            "notificationScope": {"filterByAssignment": True},
        }

    def test_reloads_from_store(self, memory_store):
        DevicePreferenceStore(memory_store, config=Settings()).update(check_interval=7)
        reloaded = DevicePreferenceStore(memory_store, config=Settings(CHECK_INTERVAL=10))
        assert reloaded.get_check_interval() == 7

    def test_reads_existing_blob(self):
        store = InMemoryStore({STORAGE_KEY: json.dumps({
            "toastClickBehavior": "expand",
            "notificationScope": {"includeUnassignedTasks": False},
        })})
        prefs = DevicePreferenceStore(store, config=Settings())
        assert prefs.get_toast_click_behavior() == "expand"
        assert prefs.get_include_unassigned_tasks() is False

    def test_other_device_does_not_see_overrides(self, memory_store):
        DevicePreferenceStore(memory_store, config=Settings()).update(check_interval=2)
        other_device = DevicePreferenceStore(InMemoryStore(), config=Settings(CHECK_INTERVAL=10))
        assert other_device.get_check_interval() == 10

    @pytest.mark.parametrize("blob", [
        "{not json",
        "null",
        "[1, 2, 3]",
        json.dumps({"notificationType": "fax"}),
    ])
    def test_corrupt_blob_resets_to_empty(self, blob):
        store = InMemoryStore({STORAGE_KEY: blob})
        prefs = DevicePreferenceStore(store, config=Settings(CHECK_INTERVAL=10))
        assert prefs.get_raw().model_dump(exclude_none=True) == {}
        assert prefs.get_check_interval() == 10

    def test_unreadable_store_resets_to_empty(self):
        class BrokenStore:
            def load(self, key):
                raise OSError("disk on fire")

            def save(self, key, value):
                raise OSError("disk on fire")

        prefs = DevicePreferenceStore(BrokenStore(), config=Settings())
        assert prefs.get_check_interval() == 5
        prefs.update(check_interval=2)
        assert prefs.get_check_interval() == 2

    def test_sqlite_store_round_trip(self, local_store_db):
        DevicePreferenceStore(local_store_db, config=Settings()).update(notification_type="both")
        assert DevicePreferenceStore(local_store_db, config=Settings()).get_notification_type() == "both"
