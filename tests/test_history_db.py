"""Tests for core.history_db module."""

import sqlite3
from dataclasses import replace
from pathlib import Path
from types import SimpleNamespace

import pytest

from core.errors import BackendError
from core.history_db import LocalHistoryRecorder
from core.history_recorder import create_history_recorder
from core.utils import Severity


class _Identity:
    def __init__(self, user_id=None):
        self.user_id = user_id

    def __call__(self):
        return self.user_id


@pytest.fixture
def identity():
    return _Identity("user-1")


@pytest.fixture
def image_dir(tmp_dir):
    path = tmp_dir / "history_images"
    path.mkdir()
    return path


@pytest.fixture
def temp_db(tmp_dir, identity, image_dir):
    return LocalHistoryRecorder(
        db_path=str(tmp_dir / "test_history.db"),
        identity=identity,
        image_dir=str(image_dir),
    )


class TestSave:
    def test_save_and_list(self, temp_db, sample_result):
        outcome = temp_db.save("user-1", sample_result)
        assert outcome.success
        assert outcome.record.id
        assert len(temp_db.list("user-1")) == 1

    def test_saving_twice_creates_two_records(self, temp_db, sample_result):
        first = temp_db.save("user-1", sample_result)
        second = temp_db.save("user-1", sample_result)
        assert first.record.id != second.record.id
        assert len(temp_db.list("user-1")) == 2

    def test_record_fields(self, temp_db, sample_result, image_dir):
        record = temp_db.save("user-1", sample_result).record
        assert record.user_id == "user-1"
        assert record.disease_name == "Northern Corn Leaf Blight"
        assert record.confidence_level == 87
        assert record.severity == Severity.MODERATE
        assert Path(record.image_url).parent == image_dir
        assert record.recommendations == "Azoxystrobin: Broad-spectrum fungicide"
        assert "T" in record.detected_at
        assert record.thumbnail[:2] == b'\xff\xd8'

    def test_missing_image_has_no_thumbnail(self, temp_db, sample_result):
        result = replace(sample_result, source_image_reference="/nonexistent/leaf.jpg")
        record = temp_db.save("user-1", result).record
        assert record.thumbnail == b""
        assert record.image_url == ""

    def test_guest_cannot_save(self, temp_db, sample_result):
        outcome = temp_db.save("", sample_result)
        assert not outcome.success
        assert outcome.error_message


class TestList:
    def test_newest_first(self, temp_db, sample_result):
        ids = [temp_db.save("user-1", sample_result).record.id for _ in range(3)]
        records = temp_db.list("user-1")
        assert [r.id for r in records] == list(reversed(ids))

    def test_only_own_records(self, temp_db, sample_result):
        temp_db.save("user-1", sample_result)
        temp_db.save("user-2", sample_result)
        assert len(temp_db.list("user-1")) == 1
        assert len(temp_db.list("user-2")) == 1
        assert temp_db.list("user-3") == []

    def test_round_trip(self, temp_db, sample_result):
        saved = temp_db.save("user-1", sample_result).record
        loaded = temp_db.list("user-1")[0]
        assert loaded == saved

    def test_snapshot(self, temp_db, sample_result):
        temp_db.save("user-1", sample_result)
        snapshot = temp_db.list("user-1")
        temp_db.save("user-1", sample_result)
        assert len(snapshot) == 1

    def test_legacy_severity_rows(self, temp_db, tmp_dir):
        with sqlite3.connect(str(tmp_dir / "test_history.db")) as conn:
            conn.execute(
                """INSERT INTO detections (id, seq, user_id, disease_name, confidence_level,
                                           severity, detected_at)
                   VALUES ('old', 1, 'user-1', 'Common Rust', 80, 'low', '2024-01-01T00:00:00')"""
            )
        record = temp_db.list("user-1")[0]
        assert record.severity == Severity.MILD

    def test_unreadable_store_raises(self, tmp_dir):
        db_path = tmp_dir / "broken.db"
        recorder = LocalHistoryRecorder(db_path=str(db_path))
        with sqlite3.connect(str(db_path)) as conn:
            conn.execute("DROP TABLE detections")
        with pytest.raises(BackendError):
            recorder.list("user-1")


class TestDelete:
    def test_delete_own_record(self, temp_db, sample_result):
        record = temp_db.save("user-1", sample_result).record
        outcome = temp_db.delete(record.id)
        assert outcome.success
        assert len(temp_db.list("user-1")) == 0

    def test_delete_nonexistent_fails(self, temp_db):
        outcome = temp_db.delete("missing")
        assert not outcome.success
        assert outcome.error_message

    def test_delete_not_owned_fails(self, temp_db, sample_result):
        record = temp_db.save("user-2", sample_result).record
        outcome = temp_db.delete(record.id)
        assert not outcome.success
        assert len(temp_db.list("user-2")) == 1

    def test_delete_as_guest_fails(self, temp_db, identity, sample_result):
        record = temp_db.save("user-1", sample_result).record
        identity.user_id = None
        assert not temp_db.delete(record.id).success
        assert len(temp_db.list("user-1")) == 1

    def test_delete_twice(self, temp_db, sample_result):
        record = temp_db.save("user-1", sample_result).record
        assert temp_db.delete(record.id).success
        assert not temp_db.delete(record.id).success


class TestKeptImages:
    def test_capture_survives_release(self, temp_db, sample_result, tmp_dir):
        capture = tmp_dir / "capture.jpg"
        capture.write_bytes(Path(sample_result.source_image_reference).read_bytes())
        result = replace(sample_result, source_image_reference=str(capture))

        record = temp_db.save("user-1", result).record
        capture.unlink()

        kept = Path(temp_db.list("user-1")[0].image_url)
        assert kept == Path(record.image_url)
        assert kept.is_file()
        assert kept.read_bytes()[:2] == b'\xff\xd8'

    def test_each_save_keeps_its_own_copy(self, temp_db, sample_result):
        first = temp_db.save("user-1", sample_result).record
        second = temp_db.save("user-1", sample_result).record
        assert first.image_url != second.image_url

    def test_remote_url_stored_as_is(self, temp_db, sample_result, image_dir):
        url = "https://example.com/leaf.jpg"
        record = temp_db.save("user-1", replace(sample_result, source_image_reference=url)).record
        assert record.image_url == url
        assert list(image_dir.iterdir()) == []

    def test_delete_removes_copy(self, temp_db, sample_result, image_dir):
        record = temp_db.save("user-1", sample_result).record
        assert temp_db.delete(record.id).success
        assert not Path(record.image_url).exists()
        assert list(image_dir.iterdir()) == []

    def test_failed_delete_keeps_copy(self, temp_db, sample_result):
        record = temp_db.save("user-2", sample_result).record
        assert not temp_db.delete(record.id).success
        assert Path(record.image_url).is_file()

    def test_source_image_untouched_by_delete(self, temp_db, sample_result, leaf_image):
        record = temp_db.save("user-1", sample_result).record
        temp_db.delete(record.id)
        assert Path(leaf_image).is_file()


class TestDefaultLocation:
    def test_uses_data_dir(self):
        recorder = LocalHistoryRecorder()
        from core.utils import get_history_db_path
        assert Path(recorder._db_path) == get_history_db_path()
        assert get_history_db_path().exists()


class TestCreateHistoryRecorder:
    def test_local_backend(self, identity):
        config = SimpleNamespace(history_backend="local", storage_bucket="leaf-images")
        recorder = create_history_recorder(config, identity=identity)
        assert isinstance(recorder, LocalHistoryRecorder)

    def test_supabase_without_client_is_unavailable(self):
        config = SimpleNamespace(history_backend="supabase", storage_bucket="leaf-images")
        assert create_history_recorder(config, client=None) is None
