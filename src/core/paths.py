"""Assignee path normalization.

Person and group references arrive in several shapes: `[[Alice]]`,
`[[People/Alice|Al]]`, `People/Alice.md`, `alice`. Comparison happens on a
single key: the lowercase basename without extension.

Two notes with the same filename in different folders compare equal. That
is the established assignment semantic; keep it.
"""

from __future__ import annotations

_EXTENSION = ".md"


def strip_link(ref: str) -> str:
    """Remove wikilink brackets and display text, keeping folder and extension.

    [[People/Alice|Al]] -> People/Alice
    People/Alice.md     -> People/Alice.md
    """
    stripped = ref.strip()
    if stripped.startswith("[["):
        stripped = stripped[2:]
    if stripped.endswith("]]"):
        stripped = stripped[:-2]

    pipe = stripped.find("|")
    if pipe != -1:
        stripped = stripped[:pipe]
    return stripped.strip()


def _basename_key(ref: str) -> str:
    key = strip_link(ref)
    if key.endswith(_EXTENSION):
        key = key[: -len(_EXTENSION)]
    return key.rsplit("/", 1)[-1].strip()


def normalize(ref: str) -> str:
    """Return the lowercase comparison key for a person/group reference.

    Never raises: malformed input comes back normalized as far as possible.
    Stripping repeats until nothing changes, so the key is a fixed point
    (normalize(normalize(x)) == normalize(x)) even for odd input such as
    `[[Alice]].md`.
    """
    key = ref.lower()
    while True:
        stripped = _basename_key(key)
        if stripped == key:
            return key
        key = stripped
