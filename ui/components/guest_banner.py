"""Banner telling guests that results are not saved."""

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QWidget

from i18n import t


class GuestBanner(QWidget):
    """Shown on the detect tab while nobody is signed in."""

    sign_in_clicked = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("guestBanner")
        layout = QHBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(10)

        icon_label = QLabel("ℹ")
        icon_label.setFixedWidth(24)
        icon_label.setAlignment(Qt.AlignmentFlag.AlignTop)

        text_label = QLabel(t("guest.banner"))
        text_label.setProperty("class", "bannerText")
        text_label.setWordWrap(True)

        self._sign_in_btn = QPushButton(t("guest.sign_in"))
        self._sign_in_btn.setProperty("class", "secondaryButton")
        self._sign_in_btn.clicked.connect(self.sign_in_clicked.emit)

        layout.addWidget(icon_label)
        layout.addWidget(text_label, 1)
        layout.addWidget(self._sign_in_btn)

    def set_sign_in_available(self, available: bool):
        self._sign_in_btn.setVisible(available)
