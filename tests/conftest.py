"""Shared test fixtures for MaizeScan."""

import os
import tempfile
from pathlib import Path
from typing import List, Optional

import numpy as np
import pytest
from PIL import Image

from core.acquisition import ImageHandle, ImageSource, create_image_handle
from core.errors import AcquisitionError
from core.utils import (
    AcquisitionKind,
    DetectionResult,
    Severity,
    TreatmentSuggestion,
)


@pytest.fixture(autouse=True)
def _isolated_dirs(tmp_path, monkeypatch):
    """Point data/cache directories at a per-test temp dir and load English."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    import i18n
    i18n.load_language("en")


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def leaf_image(tmp_dir):
    """A 224x224 greenish RGB JPEG standing in for a leaf photo."""
    pixels = np.zeros((224, 224, 3), dtype=np.uint8)
    pixels[..., 1] = np.random.randint(90, 200, (224, 224), dtype=np.uint8)
    pixels[..., 0] = np.random.randint(20, 80, (224, 224), dtype=np.uint8)
    path = tmp_dir / "leaf.jpg"
    Image.fromarray(pixels).save(path, format="JPEG")
    return str(path)


@pytest.fixture
def second_leaf_image(tmp_dir):
    img = Image.fromarray(np.random.randint(0, 255, (160, 120, 3), dtype=np.uint8))
    path = tmp_dir / "leaf_b.png"
    img.save(path)
    return str(path)


@pytest.fixture
def sample_result(leaf_image):
    """A Northern Corn Leaf Blight result for leaf_image."""
    return DetectionResult(
        identifier="detection-1",
        disease_name="Northern Corn Leaf Blight",
        description="Cigar-shaped lesions on leaves.",
        confidence_level=87,
        severity=Severity.MODERATE,
        suggestions=(
            TreatmentSuggestion(
                name="Azoxystrobin",
                description="Broad-spectrum fungicide",
                application_instructions="Apply as foliar spray.",
                safety_note="Follow label instructions.",
            ),
        ),
        source_image_reference=leaf_image,
        timestamp="2026-03-01T10:00:00+00:00",
    )


class FakeImageSource(ImageSource):
    """Scriptable ImageSource that records every call.

    `paths` maps a kind to the file returned by acquire(); a missing entry
    means the user cancelled the picker.
    """

    def __init__(self, paths=None, permission: bool = True, error: Optional[Exception] = None):
        self.paths = dict(paths or {})
        self.permission = permission
        self.error = error
        self.permission_requests: List[AcquisitionKind] = []
        self.acquisitions: List[AcquisitionKind] = []
        self.handles: List[ImageHandle] = []

    def request_permission(self, kind: AcquisitionKind) -> bool:
        self.permission_requests.append(kind)
        return self.permission

    def acquire(self, kind: AcquisitionKind) -> Optional[ImageHandle]:
        self.acquisitions.append(kind)
        if self.error is not None:
            raise self.error
        path = self.paths.get(kind)
        if path is None:
            return None
        handle = create_image_handle(path, kind)
        self.handles.append(handle)
        return handle


@pytest.fixture
def fake_source(leaf_image):
    return FakeImageSource({
        AcquisitionKind.CAMERA: leaf_image,
        AcquisitionKind.GALLERY: leaf_image,
    })


@pytest.fixture
def failing_source():
    return FakeImageSource(error=AcquisitionError("No camera was found on this device."))


@pytest.fixture
def make_source():
    """Factory for FakeImageSource with custom paths, permission or error."""
    return FakeImageSource
