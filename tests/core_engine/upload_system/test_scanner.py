from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the project root is on the Python path
PKG_ROOT: Path = Path(__file__).resolve().parents[3]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from nft_batch_uploader.core_engine.constants import KNOWN_IMAGE_EXTENSIONS, METADATA_EXTENSIONS
from nft_batch_uploader.core_engine.errors import FileSystemError
from nft_batch_uploader.core_engine.scanner import (
    FileGroup,
    FileRole,
    merge_file_groups,
    scan_directory,
    scan_mixed_directory,
)


def _touch(folder: Path, *names: str) -> None:
    folder.mkdir(parents=True, exist_ok=True)
    for name in names:
        (folder / name).write_text("{}", encoding="utf-8")


def test_scan_mixed_directory_classifies_by_extension(tmp_path: Path):
    """Images, metadata documents and unexpected files land in their buckets."""
    # Arrange
    _touch(tmp_path, "NZ_1.png", "NZ_1.json", "AU_1.JPG", "AU_notes.txt")

    # Act
    groups, count = scan_mixed_directory(tmp_path, KNOWN_IMAGE_EXTENSIONS)

    # Assert
    assert count == 4
    assert groups["NZ"].image_files == ["NZ_1.png"]
    assert groups["NZ"].json_files == ["NZ_1.json"]
    assert groups["NZ"].other is None
    assert groups["AU"].image_files == ["AU_1.JPG"]
    assert groups["AU"].other == "AU_notes.txt"
    assert groups["NZ"].image_paths() == [tmp_path / "NZ_1.png"]


def test_scan_orders_groups_by_filename(tmp_path: Path):
    """Entries are sorted before grouping, so group order is deterministic."""
    _touch(tmp_path, "ZA_1.png", "AU_1.png", "NZ_1.png")

    groups, _ = scan_mixed_directory(tmp_path, KNOWN_IMAGE_EXTENSIONS)

    assert list(groups) == ["AU", "NZ", "ZA"]


def test_scan_ignores_subdirectories(tmp_path: Path):
    """Nested folders are not files to upload."""
    _touch(tmp_path, "NZ_1.png")
    (tmp_path / "nested").mkdir()

    groups, count = scan_mixed_directory(tmp_path, KNOWN_IMAGE_EXTENSIONS)

    assert count == 1
    assert list(groups) == ["NZ"]


def test_scan_empty_directory_returns_no_groups(tmp_path: Path):
    """An empty folder is a 'no files' condition, not an error."""
    groups, count = scan_mixed_directory(tmp_path, KNOWN_IMAGE_EXTENSIONS)

    assert groups == {}
    assert count == 0


def test_scan_missing_directory_raises(tmp_path: Path):
    """A missing folder surfaces as FileSystemError."""
    with pytest.raises(FileSystemError):
        scan_directory(tmp_path / "missing", KNOWN_IMAGE_EXTENSIONS, FileRole.IMAGE)


def test_scan_directory_by_role(tmp_path: Path):
    """A metadata-role scan only accepts .json; anything else is unexpected."""
    folder = tmp_path / "metadata"
    _touch(folder, "NZ_1.json", "NZ_2.json", "AU_1.png")

    groups, count = scan_directory(folder, METADATA_EXTENSIONS, FileRole.METADATA)

    assert count == 3
    assert groups["NZ"].json_files == ["NZ_1.json", "NZ_2.json"]
    assert groups["NZ"].json_folder == folder
    assert groups["AU"].json_files == []
    assert groups["AU"].other == "AU_1.png"


def test_merge_keeps_one_sided_groups():
    """A key found in only one scan is kept with the other side empty."""
    images = {"NZ": FileGroup(image_files=["NZ_1.png"]), "AU": FileGroup(image_files=["AU_1.png"])}
    metadata = {"NZ": FileGroup(json_files=["NZ_1.json"]), "US": FileGroup(json_files=["US_1.json"])}

    merged = merge_file_groups(images, metadata)

    assert list(merged) == ["NZ", "AU", "US"]
    assert merged["NZ"].image_files == ["NZ_1.png"]
    assert merged["NZ"].json_files == ["NZ_1.json"]
    assert merged["AU"].json_files == []
    assert merged["US"].image_files == []
    assert merged["US"].json_files == ["US_1.json"]


def test_merge_left_wins_on_scalar_conflicts(tmp_path: Path):
    """Lists are concatenated, scalar fields prefer the left side, inputs are untouched."""
    left = {"NZ": FileGroup(image_files=["NZ_1.png"], other="NZ_a.txt", image_folder=tmp_path / "a")}
    right = {"NZ": FileGroup(image_files=["NZ_2.png"], other="NZ_b.txt", image_folder=tmp_path / "b")}

    merged = merge_file_groups(left, right)

    assert merged["NZ"].image_files == ["NZ_1.png", "NZ_2.png"]
    assert merged["NZ"].other == "NZ_a.txt"
    assert merged["NZ"].image_folder == tmp_path / "a"
    assert left["NZ"].image_files == ["NZ_1.png"]
