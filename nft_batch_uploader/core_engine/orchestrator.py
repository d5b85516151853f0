"""Upload orchestration over validated FileGroups.

Uploads run one at a time, in the insertion order of the validated mapping.
Nothing is retried: the first :class:`UploadError` propagates and aborts the
remaining queue, and content that was already stored stays stored.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from tqdm import tqdm

from ..external.nft_storage.base import StorageClient
from .errors import MetadataParseError
from .json_file_helper import read_json_file
from .scanner import FileGroups

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """Hand validated files to a storage client and collect the identifiers.

    Attributes:
        client (StorageClient): Storage service used for every upload.
    """

    def __init__(self, client: StorageClient) -> None:
        self.client = client

    def upload_images(self, groups: FileGroups) -> str:
        """Upload every group's image as one directory and return its CID."""
        paths: List[Path] = [p for g in groups.values() for p in g.image_paths()]
        logger.info("Uploading %d image file(s)...", len(paths))
        cid = self.client.store_directory(paths)
        logger.info("Images uploaded. CID: %s", cid)
        return cid

    def upload_metadata(self, groups: FileGroups) -> str:
        """Upload every group's metadata documents as one directory and return its CID."""
        paths: List[Path] = [p for g in groups.values() for p in g.json_paths()]
        logger.info("Uploading %d metadata file(s)...", len(paths))
        cid = self.client.store_directory(paths)
        logger.info("Metadata uploaded. CID: %s", cid)
        return cid

    def upload_items(self, groups: FileGroups) -> Dict[str, str]:
        """Upload each group's image with its first metadata document.

        Returns:
            Dict[str, str]: CID per group key, in upload order.
        """
        cids: Dict[str, str] = {}
        keys = list(groups)
        for i, key in enumerate(tqdm(keys, desc="Uploading items", unit="item"), 1):
            group = groups[key]
            image_path = group.image_paths()[0]
            logger.info("Attempting '%s' (%d of %d)", image_path.name, i, len(keys))
            metadata_path = group.json_paths()[0]
            metadata = read_json_file(metadata_path)
            if not isinstance(metadata, dict):
                raise MetadataParseError(f"Metadata in {metadata_path} is not a JSON object")
            cids[key] = self.client.store_item(image_path, metadata)
            logger.info("Stored '%s' as %s", key, cids[key])
        return cids
