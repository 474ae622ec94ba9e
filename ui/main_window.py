"""Main application window with sidebar navigation and stacked content."""

from typing import Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from core.auth_service import AuthService
from core.config import AppConfig
from core.detection import Detector
from core.history_recorder import HistoryRecorder
from i18n import t
from ui.account_widget import AccountWidget
from ui.detect_widget import DetectWidget
from ui.dialogs.about_dialog import AboutDialog
from ui.history_widget import HistoryWidget
from ui.settings_widget import SettingsWidget
from ui.theme import ThemeManager

DETECT_TAB = 0
HISTORY_TAB = 1
ACCOUNT_TAB = 2
SETTINGS_TAB = 3


class MainWindow(QMainWindow):
    """Sidebar (Detect, History, Account, Settings) plus the content stack."""

    # Emitted from whichever thread changed the session; delivered on the UI thread
    session_changed = pyqtSignal()

    def __init__(
        self,
        theme_manager: ThemeManager,
        config: AppConfig,
        auth: AuthService,
        detector: Detector,
        recorder: Optional[HistoryRecorder],
    ):
        super().__init__()
        self._theme_manager = theme_manager
        self._config = config
        self._auth = auth
        self._detector = detector
        self._recorder = recorder
        self._nav_buttons = []
        self.setWindowTitle(t("app.title"))
        self.setMinimumSize(900, 620)
        self.resize(1060, 720)
        self._setup_ui()
        self._setup_menu_bar()

        self.session_changed.connect(self._on_session_changed)
        self._auth.add_listener(lambda user: self.session_changed.emit())
        self._on_session_changed()
        self._switch_tab(DETECT_TAB)

    def _setup_ui(self):
        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        main_layout.addWidget(self._create_sidebar())

        self._stack = QStackedWidget()
        self._stack.setObjectName("contentArea")

        self._detect_widget = DetectWidget(self._detector, self._recorder, self._auth, self._config)
        self._history_widget = HistoryWidget(self._recorder, self._auth)
        self._account_widget = AccountWidget(self._auth)
        self._settings_widget = SettingsWidget(self._theme_manager, self._config)

        self._stack.addWidget(self._detect_widget)    # 0
        self._stack.addWidget(self._history_widget)   # 1
        self._stack.addWidget(self._account_widget)   # 2
        self._stack.addWidget(self._settings_widget)  # 3

        self._detect_widget.sign_in_requested.connect(self.show_sign_in)
        self._history_widget.sign_in_requested.connect(self.show_sign_in)

        main_layout.addWidget(self._stack, 1)

    def _create_sidebar(self) -> QWidget:
        sidebar = QWidget()
        sidebar.setObjectName("sidebar")
        sidebar.setFixedWidth(220)

        layout = QVBoxLayout(sidebar)
        layout.setContentsMargins(12, 16, 12, 16)
        layout.setSpacing(4)

        logo = QLabel(t("app.title"))
        logo.setObjectName("sidebarLogo")
        layout.addWidget(logo)

        subtitle = QLabel(t("app.subtitle"))
        subtitle.setObjectName("sidebarSubtitle")
        subtitle.setWordWrap(True)
        layout.addWidget(subtitle)
        layout.addSpacing(12)

        nav_items = [
            (t("sidebar.detect"), "\U0001f33d", DETECT_TAB),
            (t("sidebar.history"), "\U0001f4cb", HISTORY_TAB),
            (t("sidebar.account"), "\U0001f464", ACCOUNT_TAB),
        ]
        for label, icon, index in nav_items:
            layout.addWidget(self._nav_button(f"  {icon}  {label}", index))

        layout.addStretch()

        self._user_label = QLabel("")
        self._user_label.setObjectName("sidebarUser")
        self._user_label.setWordWrap(True)
        layout.addWidget(self._user_label)

        layout.addWidget(self._nav_button(f"  ⚙️  {t('sidebar.settings')}", SETTINGS_TAB))
        return sidebar

    def _nav_button(self, text: str, index: int) -> QPushButton:
        btn = QPushButton(text)
        btn.setProperty("class", "navButton")
        btn.clicked.connect(lambda checked, idx=index: self._switch_tab(idx))
        self._nav_buttons.append((index, btn))
        return btn

    def _switch_tab(self, index: int):
        self._stack.setCurrentIndex(index)
        for tab, btn in self._nav_buttons:
            btn.setProperty("active", "true" if tab == index else "false")
            btn.style().unpolish(btn)
            btn.style().polish(btn)

        if index == HISTORY_TAB:
            self._history_widget.refresh()

    def _setup_menu_bar(self):
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu(t("menu.file"))
        quit_action = QAction(t("menu.quit"), self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        view_menu = menu_bar.addMenu(t("menu.view"))
        toggle_theme = QAction(t("menu.toggle_dark_mode"), self)
        toggle_theme.setShortcut("Ctrl+D")
        toggle_theme.triggered.connect(self._theme_manager.toggle_theme)
        view_menu.addAction(toggle_theme)

        nav_shortcuts = [
            (t("sidebar.detect"), "Ctrl+1", DETECT_TAB),
            (t("sidebar.history"), "Ctrl+2", HISTORY_TAB),
            (t("sidebar.account"), "Ctrl+3", ACCOUNT_TAB),
            (t("sidebar.settings"), "Ctrl+,", SETTINGS_TAB),
        ]
        for label, shortcut, index in nav_shortcuts:
            action = QAction(label, self)
            action.setShortcut(shortcut)
            action.triggered.connect(lambda checked, i=index: self._switch_tab(i))
            view_menu.addAction(action)

        help_menu = menu_bar.addMenu(t("menu.help"))
        about_action = QAction(t("menu.about"), self)
        about_action.triggered.connect(lambda: AboutDialog(self).exec())
        help_menu.addAction(about_action)

    def show_sign_in(self):
        self._account_widget.show_login()
        self._switch_tab(ACCOUNT_TAB)

    def _on_session_changed(self):
        user = self._auth.current_user()
        if user:
            self._user_label.setText(t("sidebar.signed_in", name=user.name or user.email))
        else:
            self._user_label.setText(t("sidebar.guest"))
        self._detect_widget.refresh_session()
        self._account_widget.refresh()
        if self._stack.currentIndex() == HISTORY_TAB:
            self._history_widget.refresh()

    def closeEvent(self, event):
        for w in (
            self._detect_widget,
            self._history_widget,
            self._account_widget,
            self._settings_widget,
        ):
            w.cleanup()
        QApplication.processEvents()
        event.accept()
