"""HTTP client for the nft.storage API.

Endpoints used
- ``POST /upload``: multipart body with one ``file`` part per file; the files
  are stored as a directory and the response carries its CID.
- ``POST /store``: multipart body with a ``meta`` JSON part and an ``image``
  file part; the response carries the ``ipnft`` CID of the stored metadata.

Responses look like ``{"ok": true, "value": {...}}``; failures carry
``{"ok": false, "error": {"name": ..., "message": ...}}``.

Do not configure logging handlers in this module. Applications/CLIs should
configure handlers; this module only defines a module-level logger.
"""

from __future__ import annotations

import json
import logging
import mimetypes
from contextlib import ExitStack
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from ...core_engine.constants import DEFAULT_API_ENDPOINT, METADATA_IMAGE_FIELD
from ...core_engine.errors import FileSystemError, UploadError
from .base import StorageClient

logger = logging.getLogger(__name__)


def guess_content_type(path: Path) -> str:
    """Return the MIME type for a file name, ``application/octet-stream`` if unknown."""
    content_type, _ = mimetypes.guess_type(path.name)
    return content_type or "application/octet-stream"


class NFTStorageClient(StorageClient):
    """nft.storage client backed by a ``requests`` session.

    Args:
        token: API token sent as a Bearer credential.
        endpoint: Base URL of the service.
        timeout: Per-request timeout in seconds; None uses requests' default.
        session: Optional pre-configured session.
    """

    def __init__(
        self,
        token: str,
        endpoint: str = DEFAULT_API_ENDPOINT,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not token:
            raise ValueError("An nft.storage API token is required (set NFT_STORAGE_API_KEY).")
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {token}"})

    def _post(self, route: str, files: List[Tuple[str, Any]]) -> Dict[str, Any]:
        url = f"{self.endpoint}{route}"
        try:
            resp = self.session.post(url, files=files, timeout=self.timeout)
        except requests.RequestException as e:
            raise UploadError(f"Request to {url} failed: {e}") from e

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.ok or not isinstance(body, dict) or not body.get("ok", False):
            error = (body or {}).get("error") if isinstance(body, dict) else None
            reason = (error or {}).get("message") if isinstance(error, dict) else None
            raise UploadError(
                f"{url} responded {resp.status_code}: {reason or resp.text[:200]}",
                status_code=resp.status_code,
            )
        return body.get("value") or {}

    def store_directory(self, files: Sequence[Path]) -> str:
        if not files:
            raise ValueError("store_directory needs at least one file")
        with ExitStack() as stack:
            parts = []
            for path in files:
                path = Path(path)
                try:
                    handle = stack.enter_context(path.open("rb"))
                except OSError as e:
                    raise FileSystemError(f"Could not open {path} for upload: {e}") from e
                parts.append(("file", (path.name, handle, guess_content_type(path))))
            logger.debug("Uploading %d file(s) as a directory", len(parts))
            value = self._post("/upload", parts)
        cid = value.get("cid")
        if not cid:
            raise UploadError("Upload response did not include a CID")
        return str(cid)

    def store_item(self, image: Path, metadata: Dict[str, Any]) -> str:
        image = Path(image)
        meta = dict(metadata)
        # The service substitutes the uploaded file's URL for this field.
        meta[METADATA_IMAGE_FIELD] = None
        try:
            with image.open("rb") as handle:
                parts = [
                    ("meta", (None, json.dumps(meta), "application/json")),
                    (METADATA_IMAGE_FIELD, (image.name, handle, guess_content_type(image))),
                ]
                value = self._post("/store", parts)
        except OSError as e:
            raise FileSystemError(f"Could not open {image} for upload: {e}") from e
        ipnft = value.get("ipnft")
        if not ipnft:
            raise UploadError("Store response did not include an ipnft CID")
        return str(ipnft)
