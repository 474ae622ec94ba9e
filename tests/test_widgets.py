"""Tests for history reloads and save notifications in the Qt widgets."""

import threading

import pytest
from PyQt6.QtWidgets import QApplication

from core.config import AppConfig
from core.detection import MockDetector
from core.history_recorder import HistoryRecorder
from core.utils import HistoryRecord, OperationResult, Severity
from core.workflow import SaveTicket
from ui.detect_widget import DetectWidget
from ui.history_widget import HistoryWidget
from workers.history_worker import HistoryLoadWorker


@pytest.fixture(scope="module")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


class _Session:
    available = True

    def __init__(self, user_id=None):
        self.user_id = user_id

    def current_user_id(self):
        return self.user_id


def _record(record_id, user_id):
    return HistoryRecord(
        id=record_id,
        user_id=user_id,
        disease_name="Common Rust",
        confidence_level=84,
        severity=Severity.MILD,
    )


class _BlockingRecorder(HistoryRecorder):
    """Holds list() open until released, so a load is still running."""

    def __init__(self):
        self.release = threading.Event()
        self.listed = []

    def save(self, user_id, result):
        return OperationResult.failed("not used")

    def list(self, user_id):
        self.listed.append(user_id)
        self.release.wait(5)
        return [_record(f"{user_id}-1", user_id)]

    def delete(self, record_id):
        return OperationResult.failed("not used")


class TestHistoryLoadWorker:
    def test_reports_user_with_records(self, qapp):
        recorder = _BlockingRecorder()
        recorder.release.set()
        worker = HistoryLoadWorker(recorder, "user-1")
        received = []
        worker.finished.connect(lambda user_id, records: received.append((user_id, records)))
        worker.run()
        assert received[0][0] == "user-1"
        assert [r.id for r in received[0][1]] == ["user-1-1"]

    def test_reports_user_with_error(self, qapp):
        class Broken(_BlockingRecorder):
            def list(self, user_id):
                raise RuntimeError("JWT expired")

        worker = HistoryLoadWorker(Broken(), "user-1")
        errors = []
        worker.error.connect(lambda user_id, message: errors.append((user_id, message)))
        worker.run()
        assert errors == [("user-1", "JWT expired")]


class TestHistoryWidget:
    def test_records_for_previous_identity_dropped(self, qapp):
        session = _Session("user-2")
        widget = HistoryWidget(_BlockingRecorder(), session)
        widget._on_loaded("user-1", [_record("a", "user-1")])
        assert widget._cards_layout.count() == 0

    def test_records_for_current_identity_shown(self, qapp):
        session = _Session("user-1")
        widget = HistoryWidget(_BlockingRecorder(), session)
        widget._on_loaded("user-1", [_record("a", "user-1"), _record("b", "user-1")])
        assert widget._cards_layout.count() == 2

    def test_identity_switch_restarts_running_load(self, qapp):
        session = _Session("user-1")
        recorder = _BlockingRecorder()
        widget = HistoryWidget(recorder, session)
        try:
            widget.refresh()
            first = widget._load_worker
            session.user_id = "user-2"
            widget.refresh()
            assert widget._load_worker is not first
            assert widget._load_worker.user_id == "user-2"
        finally:
            recorder.release.set()
            widget.cleanup()
        assert sorted(recorder.listed) == ["user-1", "user-2"]

    def test_same_identity_does_not_restart(self, qapp):
        session = _Session("user-1")
        recorder = _BlockingRecorder()
        widget = HistoryWidget(recorder, session)
        try:
            widget.refresh()
            first = widget._load_worker
            widget.refresh()
            assert widget._load_worker is first
        finally:
            recorder.release.set()
            widget.cleanup()


class TestDetectWidgetSaveNotification:
    @pytest.fixture
    def widget(self, qapp):
        return DetectWidget(MockDetector(delay_s=0), None, _Session("user-1"), AppConfig())

    def _ticket(self, sample_result):
        return SaveTicket(generation=99, sequence=99, user_id="user-1", result=sample_result)

    def test_late_successful_save_still_refreshes_history(self, widget, sample_result):
        changed = []
        widget.history_changed.connect(lambda: changed.append(True))
        widget._on_save_finished(self._ticket(sample_result), OperationResult.ok())
        assert changed == [True]

    def test_failed_save_does_not_refresh_history(self, widget, sample_result):
        changed = []
        widget.history_changed.connect(lambda: changed.append(True))
        widget._on_save_finished(self._ticket(sample_result), OperationResult.failed("offline"))
        assert changed == []
