"""Light/dark QSS theming and the severity palette shared by result widgets."""

import logging
import sys

from PyQt6.QtCore import QSettings
from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import QApplication

from core.utils import APP_NAME, ORG_NAME, Severity, get_asset_path

logger = logging.getLogger(__name__)

SEVERITY_COLORS = {
    Severity.MILD: "#2e9e5b",
    Severity.MODERATE: "#d98e04",
    Severity.SEVERE: "#d64545",
}

HEALTHY_COLOR = "#2e9e5b"


def severity_color(severity: Severity) -> str:
    return SEVERITY_COLORS.get(severity, "#888888")


class ThemeManager:
    """Applies assets/styles/<theme>.qss and remembers the choice in QSettings."""

    LIGHT = "light"
    DARK = "dark"
    THEMES = (LIGHT, DARK)

    def __init__(self, app: QApplication):
        self._app = app
        self._settings = QSettings(ORG_NAME, APP_NAME)
        theme = self._settings.value("theme", self.LIGHT)
        self._current_theme = theme if theme in self.THEMES else self.LIGHT
        self._setup_font()

    def _setup_font(self):
        if sys.platform == "darwin":
            font = QFont(".AppleSystemUIFont", 13)
        elif sys.platform == "win32":
            font = QFont("Segoe UI", 10)
        else:
            font = QFont("Noto Sans", 10)
        self._app.setFont(font)

    def apply_theme(self, theme: str = None):
        if theme in self.THEMES:
            self._current_theme = theme
        self._app.setStyleSheet(self._load_qss(self._current_theme))
        self._settings.setValue("theme", self._current_theme)

    def toggle_theme(self) -> str:
        new_theme = self.DARK if self._current_theme == self.LIGHT else self.LIGHT
        self.apply_theme(new_theme)
        return new_theme

    @property
    def current_theme(self) -> str:
        return self._current_theme

    @staticmethod
    def _load_qss(theme: str) -> str:
        qss_path = get_asset_path(f"assets/styles/{theme}.qss")
        try:
            with open(qss_path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            logger.warning("Stylesheet %s not found", qss_path)
            return ""
