"""Busy indicator with a cancel button for detection and save calls."""

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from i18n import t


class ProgressWidget(QWidget):
    """Indeterminate progress bar with a status message.

    Detection reports no intermediate steps, so the bar runs in busy mode.
    """

    cancel_clicked = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._setup_ui()
        self.hide()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 8, 0, 8)
        layout.setSpacing(8)

        self._bar = QProgressBar()
        self._bar.setTextVisible(False)
        self._bar.setFixedHeight(8)

        status_row = QHBoxLayout()
        status_row.setSpacing(12)

        self._status_label = QLabel("")
        self._status_label.setProperty("class", "progressStatus")

        self._cancel_btn = QPushButton(t("progress.cancel"))
        self._cancel_btn.setProperty("class", "cancelButton")
        self._cancel_btn.setFixedWidth(80)
        self._cancel_btn.clicked.connect(self.cancel_clicked.emit)

        status_row.addWidget(self._status_label, 1)
        status_row.addWidget(self._cancel_btn)

        layout.addWidget(self._bar)
        layout.addLayout(status_row)

    def start(self, message: str, cancellable: bool = True):
        self._bar.setRange(0, 0)
        self._status_label.setText(message)
        self._cancel_btn.setVisible(cancellable)
        self.show()

    def reset(self):
        self._bar.setRange(0, 100)
        self._bar.setValue(0)
        self._status_label.setText("")
        self.hide()
