"""Result recording: one URI per uploaded metadata document."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .constants import ITEM_METADATA_FILENAME
from .errors import FileSystemError
from .json_file_helper import save_json_file
from .metadata_rewriter import build_ipfs_uri
from .scanner import FileGroups

logger = logging.getLogger(__name__)


def build_result_uris(metadata_cid: str, groups: FileGroups) -> List[str]:
    """Return ``ipfs://<metadata_cid>/<json_filename>`` per metadata file, group by group."""
    return [build_ipfs_uri(metadata_cid, name) for g in groups.values() for name in g.json_files]


def build_item_result_uris(item_cids: Dict[str, str]) -> List[str]:
    """Return the metadata URI of each item stored in item mode, in upload order."""
    return [build_ipfs_uri(cid, ITEM_METADATA_FILENAME) for cid in item_cids.values()]


def record_results(
    uris: Sequence[str],
    output_path: Union[str, Path],
    indent: Optional[int] = 2,
) -> Path:
    """Write ``{"results": [...]}`` to ``output_path``, overwriting it.

    Raises:
        FileSystemError: If the file cannot be written.
    """
    path = Path(output_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"Could not create results folder {path.parent}: {e}") from e
    save_json_file(path, {"results": list(uris)}, indent=indent)
    logger.info("Recorded %d result URI(s) in %s", len(uris), path)
    return path
