"""Background worker for account calls (login, signup, profile, ...)."""

from typing import Any, Callable

from PyQt6.QtCore import QThread, pyqtSignal


class AuthWorker(QThread):
    """Runs a single AuthService call and reports its return value."""

    finished = pyqtSignal(object)  # AuthResult, Profile, or User
    error = pyqtSignal(str)

    def __init__(self, call: Callable[..., Any], *args, parent=None):
        super().__init__(parent)
        self._call = call
        self._args = args

    def run(self):
        try:
            result = self._call(*self._args)
        except Exception as e:
            self.error.emit(str(e))
            return
        self.finished.emit(result)
