"""Risk warning and access prompt shown before every image acquisition."""

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QDialog, QHBoxLayout, QLabel, QPushButton, QVBoxLayout

from core.utils import AcquisitionKind
from i18n import t


class _PromptDialog(QDialog):
    """Icon, title, message and two buttons. exec() returns Accepted/Rejected."""

    def __init__(self, icon: str, title: str, message: str, accept_text: str, parent=None):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.setMinimumWidth(420)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(28, 24, 28, 20)
        layout.setSpacing(12)

        icon_label = QLabel(icon)
        icon_label.setStyleSheet("font-size: 40px;")
        icon_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title_label = QLabel(title)
        title_label.setProperty("class", "sectionTitle")
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        title_label.setWordWrap(True)

        message_label = QLabel(message)
        message_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        message_label.setWordWrap(True)

        button_row = QHBoxLayout()
        button_row.setSpacing(12)

        cancel_btn = QPushButton(t("common.cancel"))
        cancel_btn.setProperty("class", "secondaryButton")
        cancel_btn.clicked.connect(self.reject)

        accept_btn = QPushButton(accept_text)
        accept_btn.setObjectName("primaryButton")
        accept_btn.setDefault(True)
        accept_btn.clicked.connect(self.accept)

        button_row.addWidget(cancel_btn)
        button_row.addStretch()
        button_row.addWidget(accept_btn)

        layout.addWidget(icon_label)
        layout.addWidget(title_label)
        layout.addWidget(message_label)
        layout.addSpacing(8)
        layout.addLayout(button_row)


class ImageWarningDialog(_PromptDialog):
    """First step: what makes a usable leaf photo and what happens to it."""

    def __init__(self, parent=None):
        super().__init__(
            "⚠",
            t("warning.title"),
            t("warning.message"),
            t("common.continue"),
            parent,
        )


class PermissionDialog(_PromptDialog):
    """Second step: explicit allow/deny for camera or file access."""

    def __init__(self, kind: AcquisitionKind, parent=None):
        if kind == AcquisitionKind.CAMERA:
            icon, title, message = "\U0001f4f7", t("permission.camera_title"), t("permission.camera_desc")
        else:
            icon, title, message = "\U0001f5bc", t("permission.gallery_title"), t("permission.gallery_desc")
        super().__init__(icon, title, message, t("permission.allow"), parent)
