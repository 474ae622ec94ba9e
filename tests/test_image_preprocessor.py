"""Tests for core.image_preprocessor module."""

import io

import numpy as np
from PIL import Image

from core.image_preprocessor import ImagePreprocessor


def _rotated_jpeg(tmp_dir):
    """A 200x100 JPEG tagged with EXIF orientation 6 (rotate 90° clockwise)."""
    img = Image.fromarray(np.random.randint(0, 255, (100, 200, 3), dtype=np.uint8))
    exif = Image.Exif()
    exif[0x0112] = 6
    path = tmp_dir / "rotated.jpg"
    img.save(path, format="JPEG", exif=exif)
    return str(path)


class TestLoadImage:
    def test_load_rgb(self, leaf_image):
        img = ImagePreprocessor.load_image(leaf_image)
        assert img.mode == "RGB"
        assert img.size == (224, 224)

    def test_converts_grayscale(self, tmp_dir):
        path = tmp_dir / "gray.png"
        Image.fromarray(np.random.randint(0, 255, (64, 64), dtype=np.uint8)).save(path)
        img = ImagePreprocessor.load_image(str(path))
        assert img.mode == "RGB"

    def test_applies_exif_orientation(self, tmp_dir):
        img = ImagePreprocessor.load_image(_rotated_jpeg(tmp_dir))
        assert img.size == (100, 200)


class TestCreateThumbnail:
    def test_returns_jpeg_bytes(self, leaf_image):
        result = ImagePreprocessor.create_thumbnail(leaf_image)
        assert isinstance(result, bytes)
        # JPEG magic bytes
        assert result[:2] == b'\xff\xd8'

    def test_default_size(self, leaf_image):
        data = ImagePreprocessor.create_thumbnail(leaf_image)
        with Image.open(io.BytesIO(data)) as img:
            assert max(img.size) <= 128

    def test_custom_size_keeps_aspect(self, second_leaf_image):
        data = ImagePreprocessor.create_thumbnail(second_leaf_image, size=(64, 64))
        with Image.open(io.BytesIO(data)) as img:
            # source is 120x160
            assert img.size == (48, 64)

    def test_small_image_not_upscaled(self, tmp_dir):
        path = tmp_dir / "tiny.png"
        Image.fromarray(np.random.randint(0, 255, (32, 32, 3), dtype=np.uint8)).save(path)
        data = ImagePreprocessor.create_thumbnail(str(path))
        with Image.open(io.BytesIO(data)) as img:
            assert img.size == (32, 32)


class TestSavePreview:
    def test_writes_file(self, leaf_image, tmp_dir):
        out = tmp_dir / "preview.jpg"
        returned = ImagePreprocessor.save_preview(leaf_image, str(out))
        assert returned == str(out)
        with Image.open(out) as img:
            assert img.format == "JPEG"
            assert max(img.size) <= max(ImagePreprocessor.PREVIEW_SIZE)
