# core_engine/constants.py
"""Core constants and default configuration values for the NFT batch uploader.

This module is the single source of truth for defaults (file names, folder
names, recognised extensions, environment variable names and logging levels)
so that the CLI, the workflow and the tests agree on the same values.

References:
    - configs/uploader_config.yaml
"""

from __future__ import annotations

import logging
from typing import FrozenSet

# =============================================================================
# 1. Application Settings & Default Names
# =============================================================================
DEFAULT_UPLOAD_FOLDER: str = "uploads"
DEFAULT_IMAGES_SUBFOLDER: str = "images"
DEFAULT_METADATA_SUBFOLDER: str = "metadata"
DEFAULT_RESULTS_FILENAME: str = "results.json"
DEFAULT_LOG_FOLDER: str = "logs"
DEFAULT_LOG_FILENAME: str = "nft_batch_uploader.log"

# Input layouts: one mixed folder, or images/ + metadata/ subfolders.
LAYOUT_FLAT: str = "flat"
LAYOUT_SPLIT: str = "split"
LAYOUT_AUTO: str = "auto"
SUPPORTED_LAYOUTS: FrozenSet[str] = frozenset({LAYOUT_FLAT, LAYOUT_SPLIT, LAYOUT_AUTO})

# Upload modes: whole folders via storeDirectory, or one item per group via store.
UPLOAD_MODE_DIRECTORY: str = "directory"
UPLOAD_MODE_ITEM: str = "item"
SUPPORTED_UPLOAD_MODES: FrozenSet[str] = frozenset({UPLOAD_MODE_DIRECTORY, UPLOAD_MODE_ITEM})

# =============================================================================
# 2. File Classification
# =============================================================================
KNOWN_IMAGE_EXTENSIONS: FrozenSet[str] = frozenset({".png", ".jpg", ".jpeg", ".gif"})
METADATA_EXTENSIONS: FrozenSet[str] = frozenset({".json"})

# Separator between the group key and the rest of a filename ("NZ_1.png" -> "NZ").
GROUP_KEY_SEPARATOR: str = "_"

# Field injected into each metadata document.
METADATA_IMAGE_FIELD: str = "image"
IPFS_URI_SCHEME: str = "ipfs://"

# Item mode: nft.storage stores the metadata document under this name.
ITEM_METADATA_FILENAME: str = "metadata.json"

# =============================================================================
# 3. Environment Variables
# =============================================================================
ENV_API_KEY: str = "NFT_STORAGE_API_KEY"
# Older name kept so existing .env files keep working.
ENV_API_KEY_ALIAS: str = "NFT_STORAGE_KEY"
ENV_JSON_FILES_PER_IMAGE: str = "JSON_FILES_PER_IMAGE"
ENV_LOG_DIR: str = "APP_LOG_DIR"

DEFAULT_JSON_FILES_PER_IMAGE: int = 1

# =============================================================================
# 4. Storage Service
# =============================================================================
DEFAULT_API_ENDPOINT: str = "https://api.nft.storage"

# =============================================================================
# 5. Exit Codes
# =============================================================================
EXIT_OK: int = 0
EXIT_VALIDATION_FAILED: int = 1
EXIT_RUN_FAILED: int = 2

# =============================================================================
# 6. Logging Configuration
# =============================================================================
DEFAULT_LOG_LEVEL: int = logging.INFO
