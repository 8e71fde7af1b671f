"""Notification eligibility — does this task's assignment concern me?

Shared by every notification path that needs to filter tasks by assignee.
The decision is made against the device's local identity (the person note
this device is registered as); groups are expanded via GroupRegistry.

Decision table for should_notify:

    local identity | task assignee        | result
    ---------------+----------------------+-------------------------------
    None           | anything             | True (nothing to filter on)
    set            | missing / empty list | notify_for_unassigned
    set            | one or more refs     | identity among resolved persons
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from src.core.paths import normalize

if TYPE_CHECKING:
    from src.core.device_prefs import DevicePreferenceStore
    from src.core.group_registry import GroupRegistry

logger = logging.getLogger(__name__)

AssigneeValue = str | list[Any] | None


def _is_unassigned(assignee_value: Any) -> bool:
    if assignee_value is None:
        return True
    if isinstance(assignee_value, str):
        return not assignee_value.strip()
    if isinstance(assignee_value, list):
        return len(assignee_value) == 0
    return False


def is_assigned_to_user(
    assignee_value: str | list[Any],
    local_identity: str,
    group_registry: GroupRegistry | None,
) -> bool:
    """Check whether the local identity is among a task's assignees.

    A single value is treated as a one-element list; non-string entries
    are skipped. Each entry is expanded through the group registry (when
    given) and every candidate is normalized before comparison.
    """
    me = normalize(local_identity)
    assignees = assignee_value if isinstance(assignee_value, list) else [assignee_value]

    for assignee in assignees:
        if not isinstance(assignee, str):
            continue

        if group_registry is not None:
            candidates = group_registry.resolve_assignee(assignee)
        else:
            candidates = {assignee}

        for person in candidates:
            if normalize(person) == me:
                return True

    return False


def should_notify(
    assignee_value: AssigneeValue,
    local_identity: str | None,
    notify_for_unassigned: bool,
    group_registry: GroupRegistry | None,
) -> bool:
    """Decide whether a notification should fire for a task on this device."""
    # No registered identity: can't filter, allow everything
    if not local_identity:
        return True

    if _is_unassigned(assignee_value):
        return notify_for_unassigned

    return is_assigned_to_user(assignee_value, local_identity, group_registry)


def resolve_task_recipient(
    task_metadata: dict[str, Any] | None,
    local_identity: str | None,
    device_prefs: DevicePreferenceStore,
    group_registry: GroupRegistry | None,
    assignee_field: str | None = None,
) -> str | None:
    """Return the person a task's reminders should be timed for, or None.

    None means either "no identity on this device" (reminders use plain
    timing) or "this task is not for this device's person" (skip it).
    When `task_metadata` is None the task can't be checked and the local
    identity is returned; an empty mapping is an unassigned task.
    """
    if not local_identity:
        return None

    if not device_prefs.get_filter_by_assignment():
        return local_identity

    if task_metadata is None:
        return local_identity

    if assignee_field is None:
        from src.config import settings
        assignee_field = settings.ASSIGNEE_FIELD_NAME

    assignee_value = task_metadata.get(assignee_field)

    if _is_unassigned(assignee_value):
        if device_prefs.get_include_unassigned_tasks():
            return local_identity
        return None

    if is_assigned_to_user(assignee_value, local_identity, group_registry):
        return local_identity

    logger.debug("Task not assigned to '%s', skipping", local_identity)
    return None
