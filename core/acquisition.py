"""Image acquisition contract: camera/gallery sources and the handles they return."""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.errors import AcquisitionError
from core.image_preprocessor import ImagePreprocessor
from core.utils import MIME_TYPES, AcquisitionKind, get_preview_dir, validate_leaf_image

logger = logging.getLogger(__name__)


@dataclass
class ImageHandle:
    """An acquired leaf image plus its revocable preview thumbnail.

    Attributes:
        path: The raw image file.
        preview_path: Temporary JPEG shown in the UI; deleted on release().
        kind: How the image was acquired.
        owns_file: True when `path` is a temporary file (camera capture) that
            must also be deleted on release().
    """

    path: str
    preview_path: str
    kind: AcquisitionKind
    owns_file: bool = False
    released: bool = False

    @property
    def filename(self) -> str:
        return Path(self.path).name

    @property
    def extension(self) -> str:
        return Path(self.path).suffix.lower()

    @property
    def mime_type(self) -> str:
        return MIME_TYPES.get(self.extension, "application/octet-stream")

    def read_bytes(self) -> bytes:
        if self.released and self.owns_file:
            raise AcquisitionError(f"Image {self.filename} was already released")
        return Path(self.path).read_bytes()

    def release(self):
        """Delete the preview (and an owned raw file). Safe to call twice."""
        if self.released:
            return
        self.released = True
        paths = [self.preview_path]
        if self.owns_file:
            paths.append(self.path)
        for p in paths:
            if not p:
                continue
            try:
                Path(p).unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove %s: %s", p, exc)


class ImageSource:
    """Platform image source. Subclasses wrap a file picker and a camera."""

    def request_permission(self, kind: AcquisitionKind) -> bool:
        """Ask the platform for access. Sources gated by the OS at capture time return True."""
        return True

    def acquire(self, kind: AcquisitionKind) -> Optional[ImageHandle]:
        """Return a handle, None if the user cancelled, or raise AcquisitionError."""
        raise NotImplementedError


def create_image_handle(path: str, kind: AcquisitionKind, owns_file: bool = False) -> ImageHandle:
    """Validate an image file and create its preview thumbnail."""
    validation = validate_leaf_image(path)
    if not validation.valid:
        raise AcquisitionError(validation.error_message)

    preview_path = str(get_preview_dir() / f"preview_{uuid.uuid4().hex}.jpg")
    try:
        ImagePreprocessor.save_preview(path, preview_path)
    except OSError as exc:
        Path(preview_path).unlink(missing_ok=True)
        raise AcquisitionError(str(exc)) from exc

    logger.info("Acquired %s image %s", kind.value, Path(path).name)
    return ImageHandle(path=path, preview_path=preview_path, kind=kind, owns_file=owns_file)
