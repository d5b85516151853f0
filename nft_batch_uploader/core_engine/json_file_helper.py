"""Read and write JSON documents on disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from .errors import FileSystemError, MetadataParseError
from .log_utils import log_tick

logger = logging.getLogger(__name__)


def check_is_json_file(file_path: Union[str, Path]) -> None:
    """Raise ValueError unless the path names a ``.json`` file."""
    if not str(file_path).lower().endswith(".json"):
        raise ValueError(f"Not a JSON file: {file_path}")


def read_json_file(file_path: Union[str, Path]) -> Any:
    """Load a JSON document.

    Raises:
        FileSystemError: If the file cannot be read.
        MetadataParseError: If the path is not a ``.json`` file or the content
            is not valid JSON.
    """
    path = Path(file_path)
    try:
        check_is_json_file(path)
    except ValueError as e:
        raise MetadataParseError(str(e)) from e
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise MetadataParseError(f"Malformed JSON in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise FileSystemError(f"Error reading file from disk: {path}: {e}") from e


def save_json_file(file_path: Union[str, Path], obj: Any, indent: Optional[int] = None) -> Path:
    """Write ``obj`` as JSON to ``file_path``, replacing any previous content.

    Raises:
        FileSystemError: If the file cannot be written.
    """
    path = Path(file_path)
    try:
        with path.open("w", encoding="utf-8") as f:
            json.dump(obj, f, indent=indent, ensure_ascii=False)
    except OSError as e:
        raise FileSystemError(f"Error writing file to disk: {path}: {e}") from e
    log_tick(logger, "File written successfully: %s", path.name)
    return path
