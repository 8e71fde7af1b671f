"""In-memory adapters — RecordSource and KeyValueStore backed by dicts.

For hosts that already hold parsed metadata (e.g. an editor's metadata
cache) and for tests.
"""

from __future__ import annotations

import copy
from typing import Any

from src.ports.record_port import RecordHandle


class InMemoryRecordSource:
    """RecordSource over a {path: frontmatter} mapping."""

    def __init__(self, records: dict[str, dict[str, Any] | None] | None = None) -> None:
        self._records: dict[str, dict[str, Any] | None] = dict(records or {})

    def put(self, path: str, metadata: dict[str, Any] | None) -> None:
        self._records[path] = metadata

    def remove(self, path: str) -> None:
        self._records.pop(path, None)

    def list_records(self, folder: str = "") -> list[RecordHandle]:
        prefix = folder.rstrip("/") + "/" if folder else ""
        return [RecordHandle(path=p) for p in sorted(self._records) if p.startswith(prefix)]

    def get_record(self, path: str) -> RecordHandle | None:
        return RecordHandle(path=path) if path in self._records else None

    def resolve_link(self, link: str) -> RecordHandle | None:
        target = link[:-3] if link.endswith(".md") else link
        if not target:
            return None

        direct = self.get_record(f"{target}.md")
        if direct is not None:
            return direct

        name = target.rsplit("/", 1)[-1].lower()
        for path in sorted(self._records):
            handle = RecordHandle(path=path)
            if handle.basename.lower() == name:
                return handle
        return None

    def read_metadata(self, handle: RecordHandle) -> dict[str, Any] | None:
        metadata = self._records.get(handle.path)
        return copy.deepcopy(metadata) if metadata is not None else None


class InMemoryStore:
    """KeyValueStore over a plain dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.data[key] = value
