"""Store port — abstract local key/value persistence.

Backs the device preference store. Implementations must be device-local:
nothing written here may reach the shared vault.
"""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Abstract local key/value interface."""

    def load(self, key: str) -> str | None: ...

    def save(self, key: str, value: str) -> None: ...
