"""nft_batch_uploader.core_engine

Validation, upload orchestration and metadata rewriting for NFT batch uploads.
"""
import logging

# Prevent "No handler found" warnings if the application hasn't configured logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

from .config_loader import UploaderConfig, build_uploader_config, load_and_merge_configs
from .errors import (
    FileSystemError,
    MetadataParseError,
    MetadataRewriteError,
    UploadError,
    UploaderError,
    ValidationFailure,
)
from .filename_parser import FileEntry, parse_filename
from .orchestrator import UploadOrchestrator
from .scanner import FileGroup, FileRole, merge_file_groups, scan_directory, scan_mixed_directory
from .validator import GroupResult, ValidationOutcome, evaluate_group, validate_file_groups
from .workflow import run_pre_upload_check, run_upload_workflow

__all__ = [
    # Configuration
    "UploaderConfig",
    "build_uploader_config",
    "load_and_merge_configs",
    # Errors
    "UploaderError",
    "FileSystemError",
    "MetadataParseError",
    "MetadataRewriteError",
    "UploadError",
    "ValidationFailure",
    # Pairing
    "FileEntry",
    "parse_filename",
    "FileGroup",
    "FileRole",
    "scan_directory",
    "scan_mixed_directory",
    "merge_file_groups",
    "GroupResult",
    "ValidationOutcome",
    "evaluate_group",
    "validate_file_groups",
    # Upload
    "UploadOrchestrator",
    "run_pre_upload_check",
    "run_upload_workflow",
]
