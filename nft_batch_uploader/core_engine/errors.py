"""Exception hierarchy for the NFT batch uploader.

All errors raised by the core engine inherit from :class:`UploaderError` and
carry a human-readable message plus an optional ``details`` mapping. The CLI
maps these onto process exit codes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class UploaderError(Exception):
    """Base exception for all uploader errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FileSystemError(UploaderError):
    """A directory or file could not be read or written."""


class MetadataParseError(UploaderError):
    """A metadata document is not valid JSON."""


class ValidationFailure(UploaderError):
    """Pairing rules were violated; no upload may be attempted.

    Args:
        failure_count: Number of groups that failed validation.
        file_count: Total number of files seen by the scan.
    """

    def __init__(self, failure_count: int, file_count: int) -> None:
        verb = "has" if failure_count == 1 else "have"
        super().__init__(
            f"Out of {file_count} files, {failure_count} {verb} issues "
            "that should be addressed before upload",
            details={"failure_count": failure_count, "file_count": file_count},
        )
        self.failure_count = failure_count
        self.file_count = file_count


class UploadError(UploaderError):
    """The storage service rejected a request or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class MetadataRewriteError(UploaderError):
    """One or more metadata documents could not be rewritten.

    Args:
        failures: ``(path, reason)`` pairs, one per failed file.
    """

    def __init__(self, failures: List[Tuple[Path, str]]) -> None:
        super().__init__(
            f"{len(failures)} metadata file(s) could not be rewritten",
            details={"failures": [str(p) for p, _ in failures]},
        )
        self.failures = failures
