"""Provider-agnostic interface for content-addressed storage clients.

The orchestration layer only depends on this interface so that the HTTP
client can be swapped for a fake in tests or for another provider.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Sequence


class StorageClient(ABC):
    """Abstract base class for storage clients."""

    @abstractmethod
    def store_directory(self, files: Sequence[Path]) -> str:
        """Upload files as one directory.

        Args:
            files: Local files; each is stored under its base name.

        Returns:
            str: Content identifier of the directory.

        Raises:
            UploadError: If the service call fails.
        """

    @abstractmethod
    def store_item(self, image: Path, metadata: Dict[str, Any]) -> str:
        """Upload one image together with its metadata document.

        Args:
            image: Local image file.
            metadata: Metadata document; its ``image`` field is replaced by a
                reference to the uploaded image.

        Returns:
            str: Content identifier of the stored item (the metadata root).

        Raises:
            UploadError: If the service call fails.
        """
