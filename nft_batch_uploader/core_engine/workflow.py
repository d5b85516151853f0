"""End-to-end upload workflow: scan, validate, upload, rewrite, record.

The workflow functions return a summary dictionary on success (including the
"nothing to upload" case) and raise :class:`UploaderError` subclasses on
failure so that the CLI can map them onto exit codes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..external.nft_storage.base import StorageClient
from ..external.nft_storage.client import NFTStorageClient
from .config_loader import UploaderConfig
from .constants import (
    EXIT_OK,
    KNOWN_IMAGE_EXTENSIONS,
    LAYOUT_AUTO,
    LAYOUT_FLAT,
    LAYOUT_SPLIT,
    METADATA_EXTENSIONS,
    UPLOAD_MODE_ITEM,
)
from .errors import FileSystemError, ValidationFailure
from .metadata_rewriter import rewrite_metadata
from .orchestrator import UploadOrchestrator
from .result_recorder import build_item_result_uris, build_result_uris, record_results
from .scanner import FileGroups, FileRole, merge_file_groups, scan_directory, scan_mixed_directory
from .validator import ValidationOutcome, validate_file_groups

logger = logging.getLogger(__name__)


def resolve_layout(config: UploaderConfig) -> str:
    """Return ``flat`` or ``split``; ``auto`` becomes ``split`` when both subfolders exist."""
    if config.layout != LAYOUT_AUTO:
        return config.layout
    images_dir = config.upload_folder / config.images_subfolder
    metadata_dir = config.upload_folder / config.metadata_subfolder
    return LAYOUT_SPLIT if images_dir.is_dir() and metadata_dir.is_dir() else LAYOUT_FLAT


def scan_upload_folder(config: UploaderConfig) -> Tuple[FileGroups, int]:
    """Scan the upload folder according to its layout.

    Returns:
        Tuple[FileGroups, int]: Merged groups and the number of files seen.

    Raises:
        FileSystemError: If a folder is missing or unreadable.
    """
    if not config.upload_folder.is_dir():
        raise FileSystemError(f"Upload folder does not exist or is not a directory: {config.upload_folder}")

    layout = resolve_layout(config)
    image_exts = config.image_extensions or KNOWN_IMAGE_EXTENSIONS
    if layout == LAYOUT_FLAT:
        logger.info("Scanning %s (flat layout)", config.upload_folder)
        return scan_mixed_directory(config.upload_folder, image_exts)

    images_dir = config.upload_folder / config.images_subfolder
    metadata_dir = config.upload_folder / config.metadata_subfolder
    logger.info("Scanning %s and %s (split layout)", images_dir, metadata_dir)
    image_groups, image_count = scan_directory(images_dir, image_exts, FileRole.IMAGE)
    json_groups, json_count = scan_directory(metadata_dir, METADATA_EXTENSIONS, FileRole.METADATA)
    return merge_file_groups(image_groups, json_groups), image_count + json_count


def run_pre_upload_check(config: UploaderConfig) -> Optional[ValidationOutcome]:
    """Scan and validate the upload folder without uploading.

    Returns:
        Optional[ValidationOutcome]: None when there are no files to upload.

    Raises:
        FileSystemError: If the upload folder cannot be scanned.
    """
    groups, file_count = scan_upload_folder(config)
    if file_count == 0:
        logger.info("No files to upload")
        return None
    return validate_file_groups(groups, config.json_files_per_image, file_count)


def _summary(status: str, **fields: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {"status": status, "exit_code": EXIT_OK}
    result.update(fields)
    return result


def run_upload_workflow(
    config: UploaderConfig,
    client: Optional[StorageClient] = None,
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Validate the upload folder, upload it and record the results.

    Directory mode: upload images, rewrite metadata with the image URIs, upload
    metadata, record one URI per metadata file. Item mode: store each image with
    its metadata document and record one URI per stored item.

    Args:
        config: Run settings.
        client: Storage client; an :class:`NFTStorageClient` is built from
            ``config`` when None.
        dry_run: Stop after a successful validation.

    Returns:
        Dict[str, Any]: ``status`` (``no_files``, ``validated`` or ``success``),
        ``exit_code`` and run details.

    Raises:
        ValidationFailure: If any group failed validation; nothing is uploaded.
        FileSystemError: If scanning or writing fails.
        MetadataRewriteError: If metadata could not be rewritten.
        UploadError: If a storage call fails; remaining uploads are skipped.
    """
    outcome = run_pre_upload_check(config)
    if outcome is None:
        return _summary("no_files", results=[])
    if not outcome.ok:
        raise ValidationFailure(outcome.failure_count, outcome.file_count)

    groups: FileGroups = outcome.groups or {}
    logger.info("Pre-upload check succeeded")
    if dry_run:
        return _summary("validated", groups=len(groups), files=outcome.file_count, results=[])

    if client is None:
        client = NFTStorageClient(
            token=config.api_token,
            endpoint=config.api_endpoint,
            timeout=config.timeout_seconds,
        )
    orchestrator = UploadOrchestrator(client)
    logger.info("Beginning upload...")

    details: Dict[str, Any] = {}
    uris: List[str]
    if config.upload_mode == UPLOAD_MODE_ITEM:
        item_cids = orchestrator.upload_items(groups)
        uris = build_item_result_uris(item_cids)
        details["item_cids"] = item_cids
    else:
        image_cid = orchestrator.upload_images(groups)
        report = rewrite_metadata(
            image_cid,
            groups,
            indent=config.json_indent,
            continue_on_error=config.continue_on_error,
        )
        metadata_cid = orchestrator.upload_metadata(groups)
        uris = build_result_uris(metadata_cid, groups)
        details.update(
            image_cid=image_cid,
            metadata_cid=metadata_cid,
            rewrite_failures=[str(p) for p, _ in report.failures],
        )

    results_path: Path = record_results(uris, config.results_path)
    logger.info("Upload complete: %d result(s) written to %s", len(uris), results_path)
    return _summary("success", results=uris, results_path=str(results_path), **details)
