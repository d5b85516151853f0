"""Directory scanning: classify folder entries and group them by key.

Two layouts are supported. In the flat layout a single folder mixes images and
metadata documents and is classified in one pass. In the split layout images
and metadata live in separate folders; each folder is scanned with its own
role and the two results are merged by key.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .constants import METADATA_EXTENSIONS
from .errors import FileSystemError
from .filename_parser import FileEntry

logger = logging.getLogger(__name__)


class FileRole(str, enum.Enum):
    """Which side of a group a scanned folder feeds."""

    IMAGE = "image"
    METADATA = "metadata"


@dataclass
class FileGroup:
    """Files sharing one group key.

    Attributes:
        image_files: Image filenames, in scan order.
        json_files: Metadata filenames, in scan order.
        other: First file with an unexpected extension, if any.
        image_folder: Folder the images were scanned from.
        json_folder: Folder the metadata documents were scanned from.
    """

    image_files: List[str] = field(default_factory=list)
    json_files: List[str] = field(default_factory=list)
    other: Optional[str] = None
    image_folder: Optional[Path] = None
    json_folder: Optional[Path] = None

    def image_paths(self) -> List[Path]:
        return [Path(self.image_folder or ".") / name for name in self.image_files]

    def json_paths(self) -> List[Path]:
        return [Path(self.json_folder or ".") / name for name in self.json_files]


FileGroups = Dict[str, FileGroup]


def list_file_entries(folder: Union[str, Path]) -> List[FileEntry]:
    """List the regular files of a folder as FileEntry values, sorted by name.

    Sorting makes the group order, and therefore the image-to-metadata
    correspondence, independent of the filesystem's listing order.

    Raises:
        FileSystemError: If the folder is missing or cannot be read.
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise FileSystemError(f"Upload folder does not exist or is not a directory: {folder}")
    try:
        names = [p.name for p in folder.iterdir() if p.is_file()]
    except OSError as e:
        raise FileSystemError(f"Could not read folder {folder}: {e}") from e
    return [FileEntry.from_name(name) for name in sorted(names)]


def _record_other(group: FileGroup, name: str) -> None:
    if group.other is None:
        group.other = name
    else:
        logger.debug("Group already has unexpected file %s; also saw %s", group.other, name)


def scan_directory(
    folder: Union[str, Path],
    allowed_extensions: Iterable[str],
    role: FileRole,
) -> Tuple[FileGroups, int]:
    """Scan a single-role folder into FileGroups.

    Entries whose extension is in ``allowed_extensions`` are appended to the
    list matching ``role``; anything else is recorded as ``other``.

    Args:
        folder: Folder to list.
        allowed_extensions: Lowercase extensions (with dot) accepted for the role.
        role: Whether this folder holds images or metadata documents.

    Returns:
        Tuple[FileGroups, int]: The grouped files and the number of files seen.

    Raises:
        FileSystemError: If the folder is missing or unreadable.
    """
    folder = Path(folder)
    allowed = {e.lower() for e in allowed_extensions}
    entries = list_file_entries(folder)
    groups: FileGroups = {}
    for entry in entries:
        group = groups.setdefault(entry.group_key, FileGroup())
        if entry.extension in allowed:
            if role is FileRole.IMAGE:
                group.image_files.append(entry.name)
                group.image_folder = folder
            else:
                group.json_files.append(entry.name)
                group.json_folder = folder
        else:
            _record_other(group, entry.name)
    logger.debug("Scanned %d %s file(s) in %s into %d group(s)", len(entries), role.value, folder, len(groups))
    return groups, len(entries)


def scan_mixed_directory(
    folder: Union[str, Path],
    image_extensions: Iterable[str],
) -> Tuple[FileGroups, int]:
    """Scan a flat folder holding both images and metadata documents.

    Returns:
        Tuple[FileGroups, int]: The grouped files and the number of files seen.

    Raises:
        FileSystemError: If the folder is missing or unreadable.
    """
    folder = Path(folder)
    image_exts = {e.lower() for e in image_extensions}
    entries = list_file_entries(folder)
    groups: FileGroups = {}
    for entry in entries:
        group = groups.setdefault(entry.group_key, FileGroup())
        if entry.extension in image_exts:
            group.image_files.append(entry.name)
            group.image_folder = folder
        elif entry.extension in METADATA_EXTENSIONS:
            group.json_files.append(entry.name)
            group.json_folder = folder
        else:
            _record_other(group, entry.name)
    logger.debug("Scanned %d file(s) in %s into %d group(s)", len(entries), folder, len(groups))
    return groups, len(entries)


def merge_file_groups(left: FileGroups, right: FileGroups) -> FileGroups:
    """Union two FileGroups mappings by key.

    File lists are concatenated (left first). For scalar fields (``other`` and
    the source folders) the left value wins when both sides set one. A key
    present on one side only is kept with the other side empty. Left keys come
    first, followed by keys only the right side has, each in their own order.
    Neither input is mutated.
    """
    merged: FileGroups = {}
    for key in list(left) + [k for k in right if k not in left]:
        a = left.get(key) or FileGroup()
        b = right.get(key) or FileGroup()
        merged[key] = FileGroup(
            image_files=a.image_files + b.image_files,
            json_files=a.json_files + b.json_files,
            other=a.other if a.other is not None else b.other,
            image_folder=a.image_folder if a.image_folder is not None else b.image_folder,
            json_folder=a.json_folder if a.json_folder is not None else b.json_folder,
        )
    return merged
