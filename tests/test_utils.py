"""Tests for core.utils module."""

import pytest

from core.utils import (
    SUPPORTED_IMAGE_EXTENSIONS,
    DetectionResult,
    OperationResult,
    Severity,
    TreatmentSuggestion,
    format_file_size,
    format_timestamp,
    get_cache_dir,
    get_capture_dir,
    get_data_dir,
    get_history_db_path,
    get_history_image_dir,
    get_preview_dir,
    is_remote_url,
    parse_severity,
    stored_severity,
    validate_leaf_image,
)


def _result(**overrides):
    fields = dict(
        identifier="d1",
        disease_name="Common Rust",
        description="Pustules on both leaf surfaces.",
        confidence_level=85,
        severity=Severity.MILD,
    )
    fields.update(overrides)
    return DetectionResult(**fields)


class TestParseSeverity:
    def test_current_scale(self):
        assert parse_severity("Mild") == Severity.MILD
        assert parse_severity("Moderate") == Severity.MODERATE
        assert parse_severity("Severe") == Severity.SEVERE

    def test_case_insensitive(self):
        assert parse_severity("severe") == Severity.SEVERE
        assert parse_severity("  MODERATE ") == Severity.MODERATE

    def test_legacy_scale(self):
        assert parse_severity("low") == Severity.MILD
        assert parse_severity("Medium") == Severity.MODERATE
        assert parse_severity("HIGH") == Severity.SEVERE

    def test_enum_passthrough(self):
        assert parse_severity(Severity.MODERATE) is Severity.MODERATE

    def test_unknown_raises(self):
        with pytest.raises(ValueError):
            parse_severity("critical")
        with pytest.raises(ValueError):
            parse_severity(None)

    def test_stored_unknown_reads_as_moderate(self):
        assert stored_severity("critical") == Severity.MODERATE
        assert stored_severity("high") == Severity.SEVERE


class TestDetectionResult:
    def test_valid(self):
        result = _result()
        assert result.confidence_level == 85
        assert result.suggestions == ()
        assert result.timestamp

    def test_confidence_bounds(self):
        _result(confidence_level=0)
        _result(confidence_level=100)
        with pytest.raises(ValueError):
            _result(confidence_level=101)
        with pytest.raises(ValueError):
            _result(confidence_level=-1)

    def test_confidence_must_be_int(self):
        with pytest.raises(ValueError):
            _result(confidence_level=87.5)
        with pytest.raises(ValueError):
            _result(confidence_level=True)

    def test_severity_must_be_enum(self):
        with pytest.raises(ValueError):
            _result(severity="Mild")

    def test_suggestions_become_tuple(self):
        suggestion = TreatmentSuggestion("Mancozeb", "Protective fungicide")
        result = _result(suggestions=[suggestion])
        assert result.suggestions == (suggestion,)

    def test_frozen(self):
        result = _result()
        with pytest.raises(AttributeError):
            result.confidence_level = 10


    def test_recommendations_text(self):
        result = _result(suggestions=(
            TreatmentSuggestion("Azoxystrobin", "Broad-spectrum"),
            TreatmentSuggestion("Propiconazole", "Systemic"),
        ))
        assert result.recommendations_text() == "Azoxystrobin: Broad-spectrum\n\nPropiconazole: Systemic"
        assert _result().recommendations_text() == ""


class TestOperationResult:
    def test_ok(self):
        outcome = OperationResult.ok()
        assert outcome.success
        assert outcome.error_message == ""

    def test_failed(self):
        outcome = OperationResult.failed("row-level security")
        assert not outcome.success
        assert outcome.error_message == "row-level security"
        assert outcome.record is None


class TestFormatFileSize:
    def test_bytes(self):
        assert format_file_size(500) == "500 B"

    def test_kilobytes(self):
        assert format_file_size(2048) == "2.0 KB"

    def test_megabytes(self):
        assert format_file_size(5 * 1024 * 1024) == "5.0 MB"

    def test_zero(self):
        assert format_file_size(0) == "0 B"


class TestFormatTimestamp:
    def test_empty(self):
        assert format_timestamp("") == ""

    def test_naive_iso(self):
        assert format_timestamp("2026-03-01T10:05:00") == "2026-03-01 10:05"

    def test_unparseable_falls_back(self):
        assert format_timestamp("2026-03-01Tgarbage") == "2026-03-01 garba"


class TestIsRemoteUrl:
    def test_urls(self):
        assert is_remote_url("https://x.supabase.co/storage/v1/object/public/leaf-images/a.jpg")
        assert is_remote_url("http://localhost/a.jpg")
        assert not is_remote_url("/home/user/leaf.jpg")
        assert not is_remote_url("")


class TestPlatformPaths:
    def test_data_dir_exists(self):
        d = get_data_dir()
        assert d.exists()
        assert d.is_dir()

    def test_cache_subdirs_exist(self):
        for d in (get_cache_dir(), get_preview_dir(), get_capture_dir()):
            assert d.exists()
            assert d.is_dir()
        assert get_preview_dir().parent == get_cache_dir()

    def test_history_db_in_data_dir(self):
        assert get_history_db_path().parent == get_data_dir()
        assert get_history_db_path().name == "history.db"

    def test_history_images_in_data_dir(self):
        assert get_history_image_dir().parent == get_data_dir()
        assert get_history_image_dir().is_dir()


class TestValidateLeafImage:
    def test_valid_image(self, leaf_image):
        result = validate_leaf_image(leaf_image)
        assert result.valid
        assert result.image_width == 224
        assert result.image_height == 224
        assert result.file_size_bytes > 0

    def test_empty_path(self):
        result = validate_leaf_image("")
        assert not result.valid
        assert result.error_message == "No file selected."

    def test_missing_file(self):
        result = validate_leaf_image("/nonexistent/leaf.jpg")
        assert not result.valid
        assert "does not exist" in result.error_message

    def test_directory(self, tmp_dir):
        result = validate_leaf_image(str(tmp_dir))
        assert not result.valid
        assert "not a file" in result.error_message

    def test_empty_file(self, tmp_dir):
        path = tmp_dir / "empty.jpg"
        path.touch()
        result = validate_leaf_image(str(path))
        assert not result.valid
        assert "empty" in result.error_message

    def test_unsupported_extension(self, tmp_dir):
        path = tmp_dir / "leaf.gif"
        path.write_bytes(b"GIF89a")
        result = validate_leaf_image(str(path))
        assert not result.valid
        assert ".gif" in result.error_message

    def test_corrupt_image(self, tmp_dir):
        path = tmp_dir / "broken.png"
        path.write_bytes(b"not really a png")
        result = validate_leaf_image(str(path))
        assert not result.valid
        assert "readable" in result.error_message

    def test_supported_extensions(self):
        assert {".jpg", ".jpeg", ".png"} <= SUPPORTED_IMAGE_EXTENSIONS
