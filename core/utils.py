"""Shared utilities, dataclasses, validation, and platform-specific paths."""

import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

APP_NAME = "MaizeScan"
ORG_NAME = "MaizeScan"
APP_VERSION = "1.0.0"


# --- Type aliases ---

CancelCheck = Callable[[], bool]  # Returns True if cancelled
IdentityProvider = Callable[[], Optional[str]]  # Current user id or None for guests


# --- Enums ---

class AcquisitionKind(Enum):
    CAMERA = "camera"
    GALLERY = "gallery"


class Severity(Enum):
    MILD = "Mild"
    MODERATE = "Moderate"
    SEVERE = "Severe"


# Older rows were written with a Low/Medium/High scale.
_LEGACY_SEVERITY = {
    "low": Severity.MILD,
    "medium": Severity.MODERATE,
    "high": Severity.SEVERE,
}


def parse_severity(value) -> Severity:
    """Map a stored severity string (current or legacy scale) to Severity."""
    if isinstance(value, Severity):
        return value
    text = str(value or "").strip()
    for severity in Severity:
        if severity.value.lower() == text.lower():
            return severity
    legacy = _LEGACY_SEVERITY.get(text.lower())
    if legacy is None:
        raise ValueError(f"Unknown severity: {value!r}")
    return legacy


def stored_severity(value) -> Severity:
    """Like parse_severity, but unknown stored values read back as Moderate."""
    try:
        return parse_severity(value)
    except ValueError:
        logger.warning("Unknown stored severity %r, reading as Moderate", value)
        return Severity.MODERATE


# --- Dataclasses ---

@dataclass(frozen=True)
class TreatmentSuggestion:
    """A treatment recommended for a detected disease."""
    name: str
    description: str
    application_instructions: str = ""
    safety_note: str = ""


@dataclass(frozen=True)
class DetectionResult:
    """Diagnosis produced for a single leaf image. Immutable once produced."""
    identifier: str
    disease_name: str
    description: str
    confidence_level: int
    severity: Severity
    suggestions: Tuple[TreatmentSuggestion, ...] = ()
    source_image_reference: str = ""
    timestamp: str = field(default_factory=lambda: utc_now_iso())

    def __post_init__(self):
        if isinstance(self.confidence_level, bool) or not isinstance(self.confidence_level, int):
            raise ValueError("confidence_level must be an integer")
        if not 0 <= self.confidence_level <= 100:
            raise ValueError(f"confidence_level out of range: {self.confidence_level}")
        if not isinstance(self.severity, Severity):
            raise ValueError(f"severity must be a Severity, got {self.severity!r}")
        object.__setattr__(self, "suggestions", tuple(self.suggestions))

    def recommendations_text(self) -> str:
        """Flatten suggestions into the text stored alongside history records."""
        return "\n\n".join(f"{s.name}: {s.description}" for s in self.suggestions)


@dataclass
class HistoryRecord:
    """A saved detection, owned by one user."""
    id: str
    user_id: str
    disease_name: str
    confidence_level: int
    severity: Severity
    image_url: str = ""
    detected_at: str = ""
    recommendations: str = ""
    thumbnail: bytes = b""


@dataclass
class OperationResult:
    """Outcome of a backend write: ok, or an error message for display."""
    success: bool
    error_message: str = ""
    record: Optional[HistoryRecord] = None

    @classmethod
    def ok(cls, record: Optional[HistoryRecord] = None) -> "OperationResult":
        return cls(success=True, record=record)

    @classmethod
    def failed(cls, message: str) -> "OperationResult":
        return cls(success=False, error_message=message)


@dataclass
class ValidationResult:
    """Result of image validation."""
    valid: bool
    error_message: str = ""
    image_width: int = 0
    image_height: int = 0
    file_size_bytes: int = 0


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# --- Platform-specific paths ---

def get_data_dir() -> Path:
    """Get the platform-specific application data directory."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support" / APP_NAME
    elif sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home())) / APP_NAME
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "maizescan"
    base.mkdir(parents=True, exist_ok=True)
    return base


def get_cache_dir() -> Path:
    """Get the platform-specific cache directory."""
    if sys.platform == "darwin":
        base = Path.home() / "Library" / "Caches" / APP_NAME
    elif sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home())) / APP_NAME / "Cache"
    else:
        base = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache")) / "maizescan"
    base.mkdir(parents=True, exist_ok=True)
    return base


def get_preview_dir() -> Path:
    """Directory for short-lived preview thumbnails."""
    preview_dir = get_cache_dir() / "previews"
    preview_dir.mkdir(parents=True, exist_ok=True)
    return preview_dir


def get_capture_dir() -> Path:
    """Directory for photos taken with the camera."""
    capture_dir = get_cache_dir() / "captures"
    capture_dir.mkdir(parents=True, exist_ok=True)
    return capture_dir


def get_history_db_path() -> Path:
    """Get the path to the SQLite history database."""
    return get_data_dir() / "history.db"


def get_history_image_dir() -> Path:
    """Directory holding copies of images saved to local history."""
    image_dir = get_data_dir() / "history_images"
    image_dir.mkdir(parents=True, exist_ok=True)
    return image_dir


# --- Asset paths ---

def get_asset_path(relative_path: str) -> str:
    """Get absolute path to an asset file, handling PyInstaller frozen apps."""
    if getattr(sys, "frozen", False):
        base = Path(sys._MEIPASS)
    else:
        base = Path(__file__).parent.parent
    return str(base / relative_path)


# --- Validation ---

SUPPORTED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".webp", ".tiff", ".tif"}

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".tiff": "image/tiff",
    ".tif": "image/tiff",
}


def validate_leaf_image(file_path: str) -> ValidationResult:
    """Validate that a file is a readable image in a supported format."""
    from i18n import t

    if not file_path:
        return ValidationResult(valid=False, error_message=t("validation.no_file"))

    path = Path(file_path)

    if not path.exists():
        return ValidationResult(valid=False, error_message=t("validation.file_not_found"))

    if not path.is_file():
        return ValidationResult(valid=False, error_message=t("validation.not_a_file"))

    file_size = path.stat().st_size
    if file_size == 0:
        return ValidationResult(valid=False, error_message=t("validation.empty_file"))

    ext = path.suffix.lower()
    if ext not in SUPPORTED_IMAGE_EXTENSIONS:
        return ValidationResult(
            valid=False,
            error_message=t("validation.unsupported_format", ext=ext),
        )

    from PIL import Image, UnidentifiedImageError

    try:
        with Image.open(str(path)) as img:
            img.verify()
            width, height = img.size
    except (OSError, UnidentifiedImageError, SyntaxError):
        return ValidationResult(
            valid=False,
            error_message=t("validation.cannot_read_image"),
        )

    return ValidationResult(
        valid=True,
        image_width=width,
        image_height=height,
        file_size_bytes=file_size,
    )


# --- Formatting ---

def format_file_size(size_bytes: int) -> str:
    """Format byte count as human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"


def format_timestamp(value: str) -> str:
    """Render an ISO-8601 timestamp as 'YYYY-MM-DD HH:MM' in local time."""
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value[:16].replace("T", " ")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M")


def is_remote_url(reference: str) -> bool:
    return reference.startswith(("http://", "https://"))
