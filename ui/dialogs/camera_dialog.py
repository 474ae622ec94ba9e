"""Live camera viewfinder that captures one still photo."""

import logging
import uuid

from PyQt6.QtCore import Qt
from PyQt6.QtMultimedia import QCamera, QImageCapture, QMediaCaptureSession, QMediaDevices
from PyQt6.QtMultimediaWidgets import QVideoWidget
from PyQt6.QtWidgets import QDialog, QHBoxLayout, QLabel, QPushButton, QVBoxLayout

from core.errors import AcquisitionError
from core.utils import get_capture_dir
from i18n import t

logger = logging.getLogger(__name__)


class CameraCaptureDialog(QDialog):
    """Shows the default camera and saves a JPEG when the user presses capture.

    Raises AcquisitionError from the constructor when no camera exists.
    After exec(), captured_path() is the saved file or "" if cancelled.
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        device = QMediaDevices.defaultVideoInput()
        if device.isNull():
            raise AcquisitionError(t("camera.no_device"))

        self.setWindowTitle(t("camera.title"))
        self.setModal(True)
        self.setMinimumSize(640, 520)
        self._captured_path = ""
        self._error = ""

        self._camera = QCamera(device)
        self._capture = QImageCapture()
        self._session = QMediaCaptureSession()
        self._session.setCamera(self._camera)
        self._session.setImageCapture(self._capture)

        self._setup_ui()
        self._session.setVideoOutput(self._viewfinder)

        self._camera.errorOccurred.connect(self._on_camera_error)
        self._capture.imageSaved.connect(self._on_image_saved)
        self._capture.errorOccurred.connect(self._on_capture_error)
        self._capture.readyForCaptureChanged.connect(self._capture_btn.setEnabled)
        self._camera.start()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(12)

        self._viewfinder = QVideoWidget()
        self._viewfinder.setMinimumSize(600, 400)

        self._status_label = QLabel(t("camera.hint"))
        self._status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._status_label.setWordWrap(True)

        button_row = QHBoxLayout()
        cancel_btn = QPushButton(t("common.cancel"))
        cancel_btn.setProperty("class", "secondaryButton")
        cancel_btn.clicked.connect(self.reject)

        self._capture_btn = QPushButton(t("camera.capture"))
        self._capture_btn.setObjectName("primaryButton")
        self._capture_btn.setEnabled(False)
        self._capture_btn.clicked.connect(self._on_capture)

        button_row.addWidget(cancel_btn)
        button_row.addStretch()
        button_row.addWidget(self._capture_btn)

        layout.addWidget(self._viewfinder, 1)
        layout.addWidget(self._status_label)
        layout.addLayout(button_row)

    def _on_capture(self):
        self._capture_btn.setEnabled(False)
        path = str(get_capture_dir() / f"leaf_{uuid.uuid4().hex}.jpg")
        self._capture.setFileFormat(QImageCapture.FileFormat.JPEG)
        self._capture.captureToFile(path)

    def _on_image_saved(self, request_id: int, file_name: str):
        self._captured_path = file_name
        self._camera.stop()
        self.accept()

    def _on_capture_error(self, request_id: int, error, message: str):
        logger.error("Image capture failed: %s", message)
        self._error = message
        self._status_label.setText(t("camera.capture_failed", error=message))
        self._capture_btn.setEnabled(self._capture.isReadyForCapture())

    def _on_camera_error(self, error, message: str):
        logger.error("Camera error: %s", message)
        self._error = message
        self._status_label.setText(t("camera.capture_failed", error=message))

    def captured_path(self) -> str:
        return self._captured_path

    def error_message(self) -> str:
        return self._error

    def done(self, result: int):
        self._camera.stop()
        super().done(result)
