"""
VaultNotify — Group Registry.

Groups are notes with `type: group` in frontmatter and a `members` list:

    type: group
    title: Frontend Team
    members:
      - "[[Alice]]"
      - "[[Design Guild]]"     # groups may nest

When a task is assigned to a group, every person reachable through its
members is an assignee. Resolution is depth-first with a shared visited set
(cycles and diamonds are walked once) and a hard depth bound, so a broken
group graph yields fewer recipients instead of an error.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Literal

from src.core.paths import normalize, strip_link
from src.data.models import GroupRecord
from src.data.records import RawRecord
from src.ports.record_port import RecordSourceError

if TYPE_CHECKING:
    from src.config import Settings
    from src.ports.record_port import RecordHandle, RecordSource

logger = logging.getLogger(__name__)

# Bound on nested group expansion, independent of cycle detection
MAX_RESOLUTION_DEPTH = 10

RecordKind = Literal["person", "group"]


class GroupRegistry:
    """Discovers group notes and resolves assignees to person keys.

    One instance per host session; the membership cache is owned by the
    instance and replaced wholesale by each discovery pass.
    """

    def __init__(self, source: RecordSource, config: Settings | None = None) -> None:
        if config is None:
            from src.config import settings
            config = settings

        self._source = source
        self._config = config
        self._groups: dict[str, GroupRecord] = {}
        self._kinds: dict[str, RecordKind] = {}

    # -- Settings helpers --------------------------------------------------

    def _group_folder(self) -> str:
        """Group folder, falling back to the person folder."""
        return self._config.GROUP_NOTES_FOLDER or self._config.PERSON_NOTES_FOLDER or ""

    def _type_of(self, record: RawRecord) -> RecordKind | None:
        value = record.get(self._config.IDENTITY_TYPE_PROPERTY or "type")
        if value == (self._config.GROUP_TYPE_VALUE or "group"):
            return "group"
        if value == (self._config.PERSON_TYPE_VALUE or "person"):
            return "person"
        return None

    # -- Record access -----------------------------------------------------

    def _locate(self, ref: str) -> RecordHandle | None:
        path = strip_link(ref)
        if not path:
            return None
        handle = self._source.get_record(path)
        if handle is None:
            handle = self._source.resolve_link(path.removesuffix(".md"))
        return handle

    def _lookup_path(self, ref: str) -> str:
        """Record path for a reference, or the stripped reference if unknown."""
        handle = self._locate(ref)
        return handle.path if handle is not None else strip_link(ref)

    def _read(self, ref: str) -> tuple[RecordHandle | None, RawRecord]:
        handle = self._locate(ref)
        if handle is None:
            return None, RawRecord(None)
        return handle, RawRecord(self._source.read_metadata(handle))

    def _extract_members(self, record: RawRecord) -> list[str]:
        """String members only, each resolved to a record path where possible."""
        return [self._lookup_path(m) for m in record.get_string_list("members")]

    # -- Discovery ---------------------------------------------------------

    def _scan(self, folder: str) -> tuple[list[GroupRecord], dict[str, RecordKind]]:
        tag = self._config.GROUP_NOTES_TAG.lstrip("#")
        now_ms = int(time.time() * 1000)

        groups: list[GroupRecord] = []
        kinds: dict[str, RecordKind] = {}

        for handle in self._source.list_records(folder):
            record = RawRecord(self._source.read_metadata(handle))
            kind = self._type_of(record)
            if kind is None:
                continue
            kinds[handle.path] = kind

            if kind != "group":
                continue
            if tag and tag not in record.get_tags():
                continue

            groups.append(GroupRecord(
                path=handle.path,
                display_name=record.get_string("title") or handle.basename,
                member_paths=self._extract_members(record),
                last_resolved=now_ms,
            ))

        return groups, kinds

    async def discover(self) -> list[GroupRecord]:
        """Scan the group folder and replace the membership cache.

        Returns the discovered groups. With no group or person folder
        configured there is nothing to scan and the cache is left as is.
        """
        folder = self._group_folder()
        if not folder:
            return []

        try:
            groups, kinds = await asyncio.to_thread(self._scan, folder)
        except RecordSourceError as exc:
            logger.warning("Group discovery failed, keeping previous cache: %s", exc)
            return []

        # Single reference swap: readers see the old or the new cache, never a mix
        self._groups = {g.path: g for g in groups}
        self._kinds = kinds

        logger.info(
            "Discovered %d groups in '%s' (%d identity notes classified)",
            len(groups), folder, len(kinds),
        )
        return groups

    def classification(self, path: str) -> RecordKind | None:
        """Kind recorded for a note by the last discovery pass, if any."""
        return self._kinds.get(path)

    # -- Type checks -------------------------------------------------------

    def is_group(self, ref: str) -> bool:
        _, record = self._read(ref)
        return self._type_of(record) == "group"

    def is_person(self, ref: str) -> bool:
        _, record = self._read(ref)
        return self._type_of(record) == "person"

    # -- Resolution --------------------------------------------------------

    def resolve_assignee(self, ref: str) -> set[str]:
        """Resolve a person or group reference to normalized person keys.

        A group expands recursively; anything else (person or unknown note)
        is returned as its own single key.
        """
        handle, record = self._read(ref)
        if handle is not None and self._type_of(record) == "group":
            return set(self._resolve_group_to_persons(handle.path, set(), 0))
        return {normalize(ref)}

    def _resolve_group_to_persons(
        self, group_path: str, visited: set[str], depth: int,
    ) -> list[str]:
        if group_path in visited:
            logger.debug("Cycle detected at '%s', skipping", group_path)
            return []

        if depth >= MAX_RESOLUTION_DEPTH:
            logger.debug("Max group depth reached at '%s', stopping", group_path)
            return []

        visited.add(group_path)

        resolved: list[str] = []
        # Each member is located once: its handle both classifies it and
        # names the subgroup to recurse into
        for member in self._direct_members(group_path, resolve_paths=False):
            handle, record = self._read(member)
            if handle is not None and self._type_of(record) == "group":
                resolved.extend(
                    self._resolve_group_to_persons(handle.path, visited, depth + 1)
                )
            else:
                resolved.append(normalize(member))

        # Deduplicate, keeping first-seen order
        return list(dict.fromkeys(resolved))

    def _direct_members(self, group_path: str, resolve_paths: bool = True) -> list[str]:
        """Members from the discovery cache, else read from the note.

        A fresh read returns the references as written unless
        `resolve_paths` asks for them to be located as well.
        """
        cached = self._groups.get(group_path)
        if cached is not None:
            return cached.member_paths

        handle, record = self._read(group_path)
        if handle is None:
            logger.debug("Group note '%s' not found, no members", group_path)
            return []
        if resolve_paths:
            return self._extract_members(record)
        return record.get_string_list("members")

    def get_group_members(self, group_ref: str) -> list[str]:
        """Direct members of a group, without recursive expansion."""
        return list(self._direct_members(self._lookup_path(group_ref)))

    def get_all_groups(self) -> list[GroupRecord]:
        return list(self._groups.values())

    def clear_cache(self) -> None:
        self._groups = {}
        self._kinds = {}
