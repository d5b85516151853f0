"""Public API exports for the nft.storage client.

Typical usage:
    from nft_batch_uploader.external.nft_storage import NFTStorageClient
"""
from __future__ import annotations

# Prevent "No handler found" warnings if the application hasn't configured logging.
import logging as _logging
_logging.getLogger(__name__).addHandler(_logging.NullHandler())

from .base import StorageClient
from .client import NFTStorageClient

__all__ = [
    "StorageClient",
    "NFTStorageClient",
]
