"""Leaf image loading, preview thumbnails, and upload preparation."""

import io
from pathlib import Path
from typing import Tuple

from PIL import Image, ImageOps


class ImagePreprocessor:
    """Handles loading leaf photos and deriving display thumbnails."""

    PREVIEW_SIZE = (480, 480)

    @staticmethod
    def load_image(image_path: str) -> Image.Image:
        """Open an image with EXIF orientation applied, converted to RGB.

        Phone and webcam photos often carry a rotation tag instead of rotated pixels.
        """
        with Image.open(image_path) as img:
            img = ImageOps.exif_transpose(img)
            if img.mode != "RGB":
                img = img.convert("RGB")
            img.load()
            return img

    @staticmethod
    def create_thumbnail(image_path: str, size: Tuple[int, int] = (128, 128)) -> bytes:
        """Create a JPEG thumbnail and return as bytes."""
        img = ImagePreprocessor.load_image(image_path)
        img.thumbnail(size, Image.Resampling.LANCZOS)

        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=80)
        return buffer.getvalue()

    @staticmethod
    def save_preview(image_path: str, output_path: str, size: Tuple[int, int] = PREVIEW_SIZE) -> str:
        """Write a display-sized JPEG preview of image_path to output_path."""
        data = ImagePreprocessor.create_thumbnail(image_path, size=size)
        Path(output_path).write_bytes(data)
        return output_path
