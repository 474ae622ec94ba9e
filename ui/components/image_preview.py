"""Preview of the acquired leaf image, with camera/gallery source buttons."""

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QColor, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.acquisition import ImageHandle
from core.utils import AcquisitionKind, format_file_size
from i18n import t


class ImagePreview(QWidget):
    """Shows the acquired image's preview thumbnail.

    Files cannot be dropped here: every image has to come through the
    camera or gallery buttons so the confirmation prompts are shown.
    """

    source_requested = pyqtSignal(object)  # AcquisitionKind

    def __init__(self, parent=None):
        super().__init__(parent)
        self._has_image = False
        self.setObjectName("imagePreview")
        self.setMinimumHeight(220)
        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        self._icon_label = QLabel("\U0001f33d")
        self._icon_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._icon_label.setProperty("class", "previewIcon")

        self._text_label = QLabel(t("detect.placeholder"))
        self._text_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._text_label.setWordWrap(True)
        self._text_label.setProperty("class", "previewText")

        self._image_label = QLabel()
        self._image_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._image_label.setFixedHeight(200)
        self._image_label.hide()

        self._info_label = QLabel()
        self._info_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._info_label.setProperty("class", "previewFileInfo")
        self._info_label.hide()

        button_row = QHBoxLayout()
        button_row.setAlignment(Qt.AlignmentFlag.AlignCenter)
        button_row.setSpacing(12)

        self._camera_btn = QPushButton(f"\U0001f4f7  {t('detect.take_photo')}")
        self._camera_btn.setProperty("class", "sourceButton")
        self._camera_btn.clicked.connect(lambda: self.source_requested.emit(AcquisitionKind.CAMERA))

        self._gallery_btn = QPushButton(f"\U0001f5bc  {t('detect.upload_photo')}")
        self._gallery_btn.setProperty("class", "sourceButton")
        self._gallery_btn.clicked.connect(lambda: self.source_requested.emit(AcquisitionKind.GALLERY))

        button_row.addWidget(self._camera_btn)
        button_row.addWidget(self._gallery_btn)

        layout.addWidget(self._icon_label)
        layout.addWidget(self._text_label)
        layout.addWidget(self._image_label)
        layout.addWidget(self._info_label)
        layout.addLayout(button_row)

    def show_image(self, image: ImageHandle, size_bytes: int = 0):
        pixmap = QPixmap(image.preview_path)
        if pixmap.isNull():
            self._image_label.setText(image.filename)
        else:
            self._image_label.setPixmap(pixmap.scaled(
                320, 200,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            ))
        info = image.filename
        if size_bytes:
            info = f"{info} ({format_file_size(size_bytes)})"
        self._info_label.setText(info)

        self._image_label.show()
        self._info_label.show()
        self._icon_label.hide()
        self._text_label.hide()
        self._has_image = True
        self.update()

    def set_sources_enabled(self, enabled: bool):
        self._camera_btn.setEnabled(enabled)
        self._gallery_btn.setEnabled(enabled)

    def clear(self):
        """Back to the placeholder. The pixmap is dropped before the preview file goes away."""
        self._image_label.clear()
        self._image_label.hide()
        self._info_label.hide()
        self._icon_label.show()
        self._text_label.show()
        self._has_image = False
        self.update()

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        if self._has_image:
            pen = QPen(QColor("#2e9e5b"), 2, Qt.PenStyle.SolidLine)
        else:
            pen = QPen(QColor("#888888"), 2, Qt.PenStyle.DashLine)
            pen.setDashPattern([8, 4])
        painter.setPen(pen)
        painter.drawRoundedRect(self.rect().adjusted(1, 1, -1, -1), 12, 12)
        painter.end()
