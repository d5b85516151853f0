from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pytest

# Ensure the project root is on the Python path
PKG_ROOT: Path = Path(__file__).resolve().parents[3]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from nft_batch_uploader.core_engine.config_loader import build_uploader_config
from nft_batch_uploader.core_engine.errors import FileSystemError, MetadataRewriteError, UploadError, ValidationFailure
from nft_batch_uploader.core_engine.workflow import resolve_layout, run_pre_upload_check, run_upload_workflow
from nft_batch_uploader.external.nft_storage.base import StorageClient


class FakeStorageClient(StorageClient):
    """Records uploads and hands out CIDs from a fixed sequence."""

    def __init__(self, directory_cids: Sequence[str] = ("bafExample", "bafMeta")) -> None:
        self.directory_cids = list(directory_cids)
        self.directory_calls: List[List[str]] = []
        self.item_calls: List[Dict[str, Any]] = []

    def store_directory(self, files):
        self.directory_calls.append([Path(f).name for f in files])
        return self.directory_cids[len(self.directory_calls) - 1]

    def store_item(self, image, metadata):
        self.item_calls.append({"image": Path(image).name, "metadata": metadata})
        return f"bafItem{len(self.item_calls)}"


def _config(tmp_path: Path, folder: Path, **extra: Any):
    cfg: Dict[str, Any] = {
        "input": {"upload_folder": str(folder), "layout": extra.pop("layout", "auto")},
        "results": {"output_path": str(tmp_path / "results.json")},
    }
    cfg.update(extra)
    return build_uploader_config(cfg, env={"JSON_FILES_PER_IMAGE": "1", "NFT_STORAGE_API_KEY": "tok"})


def _write(folder: Path, name: str, content: Any = None) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / name
    if name.endswith(".json"):
        path.write_text(json.dumps(content if content is not None else {"name": name}), encoding="utf-8")
    else:
        path.write_bytes(b"\x89PNG")
    return path


def test_end_to_end_single_pair(tmp_path: Path):
    """NZ_1.png + NZ_1.json passes, gets rewritten and recorded."""
    # Arrange
    folder = tmp_path / "uploads"
    _write(folder, "NZ_1.png")
    _write(folder, "NZ_1.json", {"name": "Kiwi"})
    client = FakeStorageClient()

    # Act
    result = run_upload_workflow(_config(tmp_path, folder), client=client)

    # Assert
    assert result["status"] == "success"
    assert result["exit_code"] == 0
    assert client.directory_calls == [["NZ_1.png"], ["NZ_1.json"]]
    metadata = json.loads((folder / "NZ_1.json").read_text(encoding="utf-8"))
    assert metadata == {"name": "Kiwi", "image": "ipfs://bafExample/NZ_1.png"}
    results = json.loads((tmp_path / "results.json").read_text(encoding="utf-8"))
    assert results == {"results": ["ipfs://bafMeta/NZ_1.json"]}


def test_missing_metadata_fails_without_upload(tmp_path: Path):
    """AU_1.png alone fails validation with one failure and nothing uploaded."""
    folder = tmp_path / "uploads"
    _write(folder, "AU_1.png")
    client = FakeStorageClient()

    with pytest.raises(ValidationFailure) as excinfo:
        run_upload_workflow(_config(tmp_path, folder), client=client)

    assert excinfo.value.failure_count == 1
    assert excinfo.value.file_count == 1
    assert client.directory_calls == []
    assert not (tmp_path / "results.json").exists()


def test_too_many_metadata_files_fail(tmp_path: Path):
    """US_1.png with two metadata files fails when one is required."""
    folder = tmp_path / "uploads"
    _write(folder, "US_1.png")
    _write(folder, "US_1.json")
    _write(folder, "US_2.json")

    outcome = run_pre_upload_check(_config(tmp_path, folder))

    assert outcome is not None
    assert not outcome.ok
    assert outcome.failure_count == 1
    assert "expected 1 metadata files but has 2" in outcome.results[0].message


def test_empty_folder_is_not_an_error(tmp_path: Path):
    folder = tmp_path / "uploads"
    folder.mkdir()
    client = FakeStorageClient()

    result = run_upload_workflow(_config(tmp_path, folder), client=client)

    assert result["status"] == "no_files"
    assert client.directory_calls == []


def test_missing_folder_raises_file_system_error(tmp_path: Path):
    with pytest.raises(FileSystemError):
        run_upload_workflow(_config(tmp_path, tmp_path / "nope"), client=FakeStorageClient())


def test_split_layout_is_detected_and_merged(tmp_path: Path):
    """images/ and metadata/ subfolders are scanned separately and merged by key."""
    folder = tmp_path / "uploads"
    _write(folder / "images", "NZ_1.png")
    _write(folder / "images", "AU_1.png")
    _write(folder / "metadata", "AU_1.json")
    _write(folder / "metadata", "NZ_1.json")
    config = _config(tmp_path, folder)
    client = FakeStorageClient()

    assert resolve_layout(config) == "split"
    result = run_upload_workflow(config, client=client)

    assert client.directory_calls == [["AU_1.png", "NZ_1.png"], ["AU_1.json", "NZ_1.json"]]
    assert result["results"] == ["ipfs://bafMeta/AU_1.json", "ipfs://bafMeta/NZ_1.json"]
    au = json.loads((folder / "metadata" / "AU_1.json").read_text(encoding="utf-8"))
    assert au["image"] == "ipfs://bafExample/AU_1.png"


def test_item_mode_stores_each_pair(tmp_path: Path):
    folder = tmp_path / "uploads"
    _write(folder, "NZ_1.png")
    _write(folder, "NZ_1.json", {"name": "Kiwi"})
    client = FakeStorageClient()

    result = run_upload_workflow(_config(tmp_path, folder, upload={"mode": "item"}), client=client)

    assert client.item_calls == [{"image": "NZ_1.png", "metadata": {"name": "Kiwi"}}]
    assert result["results"] == ["ipfs://bafItem1/metadata.json"]


def test_dry_run_uploads_nothing(tmp_path: Path):
    folder = tmp_path / "uploads"
    _write(folder, "NZ_1.png")
    _write(folder, "NZ_1.json")
    client = FakeStorageClient()

    result = run_upload_workflow(_config(tmp_path, folder), client=client, dry_run=True)

    assert result["status"] == "validated"
    assert client.directory_calls == []


def test_rewrite_failure_stops_before_metadata_upload(tmp_path: Path):
    """A metadata document that is not an object aborts the run after the image upload."""
    folder = tmp_path / "uploads"
    _write(folder, "NZ_1.png")
    _write(folder, "NZ_1.json", ["not", "an", "object"])
    client = FakeStorageClient()

    with pytest.raises(MetadataRewriteError):
        run_upload_workflow(_config(tmp_path, folder), client=client)

    assert client.directory_calls == [["NZ_1.png"]]


def test_upload_error_propagates(tmp_path: Path, mocker):
    folder = tmp_path / "uploads"
    _write(folder, "NZ_1.png")
    _write(folder, "NZ_1.json")
    client = FakeStorageClient()
    mocker.patch.object(client, "store_directory", side_effect=UploadError("down", status_code=503))

    with pytest.raises(UploadError):
        run_upload_workflow(_config(tmp_path, folder), client=client)

    assert json.loads((folder / "NZ_1.json").read_text(encoding="utf-8")) == {"name": "NZ_1.json"}
