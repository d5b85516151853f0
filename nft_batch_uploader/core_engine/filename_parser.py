"""Filename parsing: group key and normalized extension."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

from .constants import GROUP_KEY_SEPARATOR


@dataclass(frozen=True)
class FileEntry:
    """A directory entry reduced to its name and lowercased extension."""

    name: str
    extension: str

    @property
    def group_key(self) -> str:
        return parse_filename(self.name)[0]

    @classmethod
    def from_name(cls, name: str) -> "FileEntry":
        return cls(name=name, extension=parse_filename(name)[1])


def parse_filename(name: str) -> Tuple[str, str]:
    """Split a filename into its group key and lowercased extension.

    The key is the part of the base name (extension removed) before the first
    ``_``; without an ``_`` the whole base name is the key. The extension keeps
    its leading dot and is empty when the name has none. Any string is accepted.

    Args:
        name: Filename, e.g. ``"NZ_1.PNG"``.

    Returns:
        Tuple[str, str]: ``(group_key, extension)``, e.g. ``("NZ", ".png")``.
    """
    base, extension = os.path.splitext(os.path.basename(name))
    group_key = base.split(GROUP_KEY_SEPARATOR, 1)[0]
    return group_key, extension.lower()
