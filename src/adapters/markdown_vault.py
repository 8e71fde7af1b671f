"""Markdown vault adapter — implements RecordSource over a folder of notes.

Each note is a `.md` file whose metadata is a leading YAML frontmatter
block delimited by `---` lines. Parsing uses PyYAML's safe loader.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from src.ports.record_port import RecordHandle, RecordSourceError

logger = logging.getLogger(__name__)

_DELIMITER = "---"


def parse_frontmatter(text: str) -> dict[str, Any] | None:
    """Extract the YAML frontmatter mapping from a note body.

    Returns None when the note has no frontmatter block. Raises
    yaml.YAMLError on malformed YAML.
    """
    lines = text.splitlines()
    if not lines or lines[0].strip() != _DELIMITER:
        return None

    for idx in range(1, len(lines)):
        if lines[idx].strip() == _DELIMITER:
            block = "\n".join(lines[1:idx])
            data = yaml.safe_load(block) if block.strip() else {}
            return data if isinstance(data, dict) else None
    return None


class MarkdownVaultSource:
    """Filesystem implementation of RecordSource."""

    def __init__(self, vault_path: str | None = None) -> None:
        if vault_path is None:
            from src.config import settings
            vault_path = settings.VAULT_PATH

        self._root = Path(vault_path)

    def _handle_for(self, file: Path) -> RecordHandle:
        return RecordHandle(path=file.relative_to(self._root).as_posix())

    def list_records(self, folder: str = "") -> list[RecordHandle]:
        """Return every note under `folder` (vault-relative folder), sorted by path."""
        if not self._root.is_dir():
            raise RecordSourceError(f"Vault not found: {self._root}")

        handles = [
            self._handle_for(f) for f in self._root.rglob("*.md") if f.is_file()
        ]
        if folder:
            prefix = folder.rstrip("/") + "/"
            handles = [h for h in handles if h.path.startswith(prefix)]
        return sorted(handles, key=lambda h: h.path)

    def get_record(self, path: str) -> RecordHandle | None:
        """Return the note at a vault-relative path, or None.

        Paths that land outside the vault (absolute, `..`, symlinked out)
        are treated as missing.
        """
        try:
            root = self._root.resolve()
            candidate = (self._root / path).resolve()
        except (OSError, ValueError) as exc:
            logger.debug("Unresolvable note path '%s': %s", path, exc)
            return None

        if not candidate.is_relative_to(root):
            logger.debug("Note path '%s' is outside the vault, ignoring", path)
            return None
        if candidate.suffix == ".md" and candidate.is_file():
            return RecordHandle(path=candidate.relative_to(root).as_posix())
        return None

    def resolve_link(self, link: str) -> RecordHandle | None:
        """Resolve a wikilink target ("Alice", "People/Alice") to a note.

        A link with a folder resolves to that exact note; a bare name
        resolves to the first note (by path) with a matching basename,
        compared case-insensitively.
        """
        target = link[:-3] if link.endswith(".md") else link
        if not target.strip("/"):
            return None

        direct = self.get_record(f"{target}.md")
        if direct is not None:
            return direct

        name = target.rsplit("/", 1)[-1].lower()
        try:
            handles = self.list_records()
        except RecordSourceError:
            return None
        for handle in handles:
            if handle.basename.lower() == name:
                return handle
        return None

    def read_metadata(self, handle: RecordHandle) -> dict[str, Any] | None:
        file = self._root / handle.path
        try:
            text = file.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to read note '%s': %s", handle.path, exc)
            return None

        try:
            return parse_frontmatter(text)
        except yaml.YAMLError as exc:
            logger.warning("Malformed frontmatter in '%s': %s", handle.path, exc)
            return None
