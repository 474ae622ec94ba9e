"""Background worker that runs one leaf detection."""

from PyQt6.QtCore import QThread, pyqtSignal

from core.detection import Detector, detect_with_timeout
from core.errors import DetectionError
from core.workflow import DetectionTicket


class DetectionWorker(QThread):
    """Runs a detector off the UI thread for a single ticket."""

    finished = pyqtSignal(object, object)  # DetectionTicket, DetectionResult
    error = pyqtSignal(object, object)     # DetectionTicket, DetectionError

    def __init__(self, detector: Detector, ticket: DetectionTicket, timeout_s: float, parent=None):
        super().__init__(parent)
        self._detector = detector
        self._ticket = ticket
        self._timeout_s = timeout_s
        self._cancelled = False

    @property
    def ticket(self) -> DetectionTicket:
        return self._ticket

    def run(self):
        try:
            result = detect_with_timeout(
                self._detector,
                self._ticket.image,
                self._timeout_s,
                is_cancelled=self._is_cancelled,
            )
        except DetectionError as e:
            if not self._cancelled:
                self.error.emit(self._ticket, e)
        except Exception as e:
            if not self._cancelled:
                self.error.emit(self._ticket, DetectionError(f"Detection failed: {e}"))
        else:
            if not self._cancelled:
                self.finished.emit(self._ticket, result)

    def cancel(self):
        """Request cancellation; no signal is emitted afterwards."""
        self._cancelled = True

    def _is_cancelled(self) -> bool:
        return self._cancelled
