"""Metadata rewriting: embed the uploaded image URI into each metadata document.

Failure policy: a file that cannot be read, parsed or written is logged and
collected, and the remaining files are still processed. Once the pass is over,
any collected failure raises :class:`MetadataRewriteError` so that the caller
never uploads a partially rewritten metadata folder. With
``continue_on_error=True`` the failures are only summarized as a warning and
the failed documents are reported as ``None``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .constants import IPFS_URI_SCHEME, METADATA_IMAGE_FIELD
from .errors import FileSystemError, MetadataParseError, MetadataRewriteError
from .json_file_helper import read_json_file, save_json_file
from .log_utils import log_cross
from .scanner import FileGroups

logger = logging.getLogger(__name__)


def build_ipfs_uri(cid: str, filename: str) -> str:
    """Return ``ipfs://<cid>/<filename>``."""
    return f"{IPFS_URI_SCHEME}{cid}/{filename}"


@dataclass
class RewriteReport:
    """Outcome of a metadata rewrite pass.

    Attributes:
        documents: Rewritten document per metadata path; None when it failed.
        failures: ``(path, reason)`` for each file that could not be rewritten.
    """

    documents: Dict[Path, Optional[Dict[str, Any]]] = field(default_factory=dict)
    failures: List[Tuple[Path, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def rewrite_metadata_file(path: Path, image_uri: str, indent: Optional[int] = None) -> Dict[str, Any]:
    """Set the ``image`` field of one metadata document and save it in place.

    Raises:
        MetadataParseError: If the file is not valid JSON or not a JSON object.
        FileSystemError: If the file cannot be read or written.
    """
    document = read_json_file(path)
    if not isinstance(document, dict):
        raise MetadataParseError(f"Metadata in {path} is not a JSON object")
    document[METADATA_IMAGE_FIELD] = image_uri
    save_json_file(path, document, indent=indent)
    return document


def rewrite_metadata(
    image_cid: str,
    groups: FileGroups,
    indent: Optional[int] = None,
    continue_on_error: bool = False,
) -> RewriteReport:
    """Point every metadata document at its group's uploaded image.

    Groups are processed in mapping order, the same order the images were
    uploaded in. Each group has exactly one image after validation.

    Args:
        image_cid: Content identifier of the uploaded image folder.
        groups: Validated FileGroups mapping.
        indent: JSON indent for the rewritten files.
        continue_on_error: Report failures instead of raising.

    Returns:
        RewriteReport: Rewritten documents and any failures.

    Raises:
        MetadataRewriteError: If any file failed and ``continue_on_error`` is False.
    """
    report = RewriteReport()
    for key, group in groups.items():
        image_uri = build_ipfs_uri(image_cid, group.image_files[0])
        for path in group.json_paths():
            try:
                report.documents[path] = rewrite_metadata_file(path, image_uri, indent=indent)
            except (MetadataParseError, FileSystemError) as e:
                log_cross(logger, "Could not rewrite metadata for '%s': %s", key, e)
                report.documents[path] = None
                report.failures.append((path, str(e)))

    if report.failures:
        if not continue_on_error:
            raise MetadataRewriteError(report.failures)
        logger.warning(
            "%d of %d metadata file(s) were not rewritten and will be uploaded unchanged: %s",
            len(report.failures),
            len(report.documents),
            ", ".join(p.name for p, _ in report.failures),
        )
    return report
