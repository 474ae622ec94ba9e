"""About MaizeScan."""

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QDialog, QLabel, QPushButton, QVBoxLayout

from core.detection import CANNED_OUTCOMES
from core.utils import APP_VERSION
from i18n import t


class AboutDialog(QDialog):

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle(t("about.title"))
        self.setFixedSize(420, 360)

        layout = QVBoxLayout(self)
        layout.setSpacing(12)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        icon_label = QLabel("\U0001f33d")
        icon_label.setStyleSheet("font-size: 48px;")
        icon_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel(t("app.title"))
        title.setProperty("class", "sectionTitle")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title.setStyleSheet("font-size: 20px;")

        version = QLabel(t("about.version", version=APP_VERSION))
        version.setAlignment(Qt.AlignmentFlag.AlignCenter)
        version.setStyleSheet("color: #888;")

        desc = QLabel(t("about.description"))
        desc.setAlignment(Qt.AlignmentFlag.AlignCenter)
        desc.setWordWrap(True)

        diseases = QLabel(t(
            "about.diseases",
            names=", ".join(o.disease_name for o in CANNED_OUTCOMES),
        ))
        diseases.setAlignment(Qt.AlignmentFlag.AlignCenter)
        diseases.setWordWrap(True)
        diseases.setStyleSheet("font-size: 12px;")

        note = QLabel(t("about.note"))
        note.setAlignment(Qt.AlignmentFlag.AlignCenter)
        note.setWordWrap(True)
        note.setStyleSheet("font-size: 11px; font-style: italic; color: #888;")

        close_btn = QPushButton(t("about.close"))
        close_btn.setProperty("class", "secondaryButton")
        close_btn.clicked.connect(self.accept)

        layout.addWidget(icon_label)
        layout.addWidget(title)
        layout.addWidget(version)
        layout.addWidget(desc)
        layout.addWidget(diseases)
        layout.addWidget(note)
        layout.addStretch()
        layout.addWidget(close_btn, alignment=Qt.AlignmentFlag.AlignCenter)
