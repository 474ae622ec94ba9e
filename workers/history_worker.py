"""Background workers for history save, load and delete."""

from PyQt6.QtCore import QThread, pyqtSignal

from core.history_recorder import HistoryRecorder
from core.utils import OperationResult
from core.workflow import SaveTicket


class SaveWorker(QThread):
    """Saves one detection result for the ticket's user."""

    finished = pyqtSignal(object, object)  # SaveTicket, OperationResult

    def __init__(self, recorder: HistoryRecorder, ticket: SaveTicket, parent=None):
        super().__init__(parent)
        self._recorder = recorder
        self._ticket = ticket

    def run(self):
        try:
            outcome = self._recorder.save(self._ticket.user_id, self._ticket.result)
        except Exception as e:
            outcome = OperationResult.failed(str(e))
        self.finished.emit(self._ticket, outcome)


class HistoryLoadWorker(QThread):
    """Loads a user's history snapshot."""

    finished = pyqtSignal(str, list)  # user_id, List[HistoryRecord]
    error = pyqtSignal(str, str)  # user_id, message

    def __init__(self, recorder: HistoryRecorder, user_id: str, parent=None):
        super().__init__(parent)
        self._recorder = recorder
        self._user_id = user_id

    @property
    def user_id(self) -> str:
        return self._user_id

    def run(self):
        try:
            records = self._recorder.list(self._user_id)
        except Exception as e:
            self.error.emit(self._user_id, str(e))
            return
        self.finished.emit(self._user_id, records)


class HistoryDeleteWorker(QThread):
    """Deletes one history record."""

    finished = pyqtSignal(str, object)  # record_id, OperationResult

    def __init__(self, recorder: HistoryRecorder, record_id: str, parent=None):
        super().__init__(parent)
        self._recorder = recorder
        self._record_id = record_id

    def run(self):
        try:
            outcome = self._recorder.delete(self._record_id)
        except Exception as e:
            outcome = OperationResult.failed(str(e))
        self.finished.emit(self._record_id, outcome)
