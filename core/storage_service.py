"""Leaf image uploads to the Supabase storage bucket."""

import logging
import time
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from core.errors import BackendError
from core.utils import MIME_TYPES

logger = logging.getLogger(__name__)

GUEST_FOLDER = "guest"


class LeafImageStorage:
    """Uploads and removes leaf photos in a public storage bucket.

    Objects are stored as ``<user_id>/<timestamp_ms><ext>`` (``guest/`` when
    no user is given) and referenced by their public URL.
    """

    def __init__(self, client, bucket: str = "leaf-images"):
        self._client = client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    def _files(self):
        return self._client.storage.from_(self._bucket)

    def upload(self, file_path: str, user_id: Optional[str] = None) -> str:
        """Upload a local image and return its public URL.

        Raises:
            BackendError: the file could not be read or the upload failed.
        """
        path = Path(file_path)
        ext = path.suffix.lower() or ".jpg"
        object_path = f"{user_id or GUEST_FOLDER}/{int(time.time() * 1000)}{ext}"

        try:
            data = path.read_bytes()
        except OSError as exc:
            raise BackendError(f"Could not read {path.name}: {exc}") from exc

        try:
            self._files().upload(
                path=object_path,
                file=data,
                file_options={
                    "content-type": MIME_TYPES.get(ext, "application/octet-stream"),
                    "cache-control": "3600",
                    "upsert": "false",
                },
            )
            url = self._files().get_public_url(object_path)
        except Exception as exc:
            logger.error("Upload of %s failed: %s", object_path, exc)
            raise BackendError(f"Image upload failed: {exc}") from exc

        logger.info("Uploaded leaf image to %s/%s", self._bucket, object_path)
        return url

    def object_path_from_url(self, url: str) -> Optional[str]:
        """Extract ``<folder>/<file>`` from a public URL of this bucket."""
        if not url:
            return None
        marker = f"/{self._bucket}/"
        path = unquote(urlparse(url).path)
        if marker not in path:
            return None
        return path.split(marker, 1)[1] or None

    def delete(self, url: str) -> bool:
        """Remove the object behind a public URL. Returns False if nothing was removed."""
        object_path = self.object_path_from_url(url)
        if object_path is None:
            return False
        try:
            removed = self._files().remove([object_path])
        except Exception as exc:
            logger.warning("Could not remove %s: %s", object_path, exc)
            return False
        return bool(removed)
