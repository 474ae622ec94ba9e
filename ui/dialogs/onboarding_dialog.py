"""First-run welcome: what the app does, then continue as guest or sign in."""

from PyQt6.QtCore import QSettings, Qt
from PyQt6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from core.utils import APP_NAME, ORG_NAME
from i18n import t


class OnboardingDialog(QDialog):
    """Two informational pages followed by the guest/sign-in choice."""

    GUEST = "guest"
    SIGN_IN = "sign_in"

    def __init__(self, accounts_available: bool = True, parent=None):
        super().__init__(parent)
        self.setWindowTitle(t("onboarding.welcome_title"))
        self.setMinimumSize(520, 420)
        self.setModal(True)
        self._accounts_available = accounts_available
        self._choice = ""
        self._setup_ui()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(32, 28, 32, 24)
        layout.setSpacing(16)

        self._stack = QStackedWidget()
        self._stack.addWidget(self._create_page("\U0001f33d", "onboarding.welcome_title", "onboarding.welcome_text"))
        self._stack.addWidget(self._create_page("\U0001f50d", "onboarding.how_title", "onboarding.how_text"))
        self._stack.addWidget(self._create_choice_page())
        layout.addWidget(self._stack, 1)

        nav_row = QHBoxLayout()
        self._back_btn = QPushButton(t("onboarding.back"))
        self._back_btn.setFixedWidth(100)
        self._back_btn.clicked.connect(lambda: self._go_to(self._stack.currentIndex() - 1))
        self._back_btn.hide()

        self._next_btn = QPushButton(t("onboarding.next"))
        self._next_btn.setObjectName("primaryButton")
        self._next_btn.setFixedWidth(140)
        self._next_btn.clicked.connect(lambda: self._go_to(self._stack.currentIndex() + 1))

        nav_row.addWidget(self._back_btn)
        nav_row.addStretch()
        nav_row.addWidget(self._next_btn)
        layout.addLayout(nav_row)

    @staticmethod
    def _create_page(icon: str, title_key: str, text_key: str) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setSpacing(16)

        icon_label = QLabel(icon)
        icon_label.setStyleSheet("font-size: 64px;")
        icon_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel(t(title_key))
        title.setProperty("class", "sectionTitle")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)

        text = QLabel(t(text_key))
        text.setWordWrap(True)
        text.setAlignment(Qt.AlignmentFlag.AlignCenter)
        text.setProperty("class", "onboardingText")

        layout.addStretch()
        layout.addWidget(icon_label)
        layout.addWidget(title)
        layout.addWidget(text)
        layout.addStretch()
        return page

    def _create_choice_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setSpacing(12)

        title = QLabel(t("onboarding.choice_title"))
        title.setProperty("class", "sectionTitle")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)

        text = QLabel(t("onboarding.choice_text"))
        text.setWordWrap(True)
        text.setAlignment(Qt.AlignmentFlag.AlignCenter)

        sign_in_btn = QPushButton(t("onboarding.sign_in"))
        sign_in_btn.setObjectName("primaryButton")
        sign_in_btn.clicked.connect(lambda: self._finish(self.SIGN_IN))
        sign_in_btn.setVisible(self._accounts_available)

        guest_btn = QPushButton(t("onboarding.guest"))
        guest_btn.setProperty("class", "secondaryButton")
        guest_btn.clicked.connect(lambda: self._finish(self.GUEST))

        guest_note = QLabel(t("onboarding.guest_note"))
        guest_note.setWordWrap(True)
        guest_note.setAlignment(Qt.AlignmentFlag.AlignCenter)
        guest_note.setStyleSheet("font-size: 11px; color: #888;")

        layout.addStretch()
        layout.addWidget(title)
        layout.addWidget(text)
        layout.addSpacing(12)
        layout.addWidget(sign_in_btn)
        layout.addWidget(guest_btn)
        layout.addWidget(guest_note)
        layout.addStretch()
        return page

    def _go_to(self, index: int):
        index = max(0, min(index, self._stack.count() - 1))
        self._stack.setCurrentIndex(index)
        self._back_btn.setVisible(index > 0)
        self._next_btn.setVisible(index < self._stack.count() - 1)

    def _finish(self, choice: str):
        self._choice = choice
        QSettings(ORG_NAME, APP_NAME).setValue("welcome_complete", True)
        self.accept()

    def choice(self) -> str:
        """GUEST, SIGN_IN, or "" if the dialog was closed."""
        return self._choice

    @staticmethod
    def needs_onboarding() -> bool:
        settings = QSettings(ORG_NAME, APP_NAME)
        return not settings.value("welcome_complete", False, type=bool)
