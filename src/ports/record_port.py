"""Record port — abstract interface over the note/metadata store.

Core modules depend on this protocol, never on a specific vault backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class RecordSourceError(Exception):
    """Raised when a record source cannot enumerate its records at all."""


@dataclass(frozen=True)
class RecordHandle:
    """A pointer to one note in the vault."""

    path: str        # vault-relative, e.g. "People/Alice.md"

    @property
    def basename(self) -> str:
        name = self.path.rsplit("/", 1)[-1]
        return name[:-3] if name.endswith(".md") else name


class RecordSource(Protocol):
    """Abstract metadata interface used by core modules."""

    def list_records(self, folder: str = "") -> list[RecordHandle]: ...

    def get_record(self, path: str) -> RecordHandle | None: ...

    def resolve_link(self, link: str) -> RecordHandle | None: ...

    def read_metadata(self, handle: RecordHandle) -> dict[str, Any] | None: ...
