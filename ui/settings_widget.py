"""Application settings tab: language, theme, backend status."""

from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from core.config import AppConfig
from core.utils import APP_VERSION, get_data_dir
from i18n import LANGUAGES, get_current_language, set_language, t
from ui.theme import ThemeManager


class SettingsWidget(QWidget):
    """User-facing settings for language and theme."""

    def __init__(self, theme_manager: ThemeManager, config: AppConfig, parent=None):
        super().__init__(parent)
        self._theme_manager = theme_manager
        self._config = config
        self._setup_ui()

    @staticmethod
    def _section(text: str) -> QLabel:
        header = QLabel(text)
        header.setProperty("class", "sectionTitle")
        header.setStyleSheet("font-size: 16px; margin-top: 12px;")
        return header

    def _setup_ui(self):
        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QScrollArea.Shape.NoFrame)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        title = QLabel(t("settings.title"))
        title.setProperty("class", "sectionTitle")
        layout.addWidget(title)

        # Language
        layout.addWidget(self._section(t("settings.language")))
        lang_row = QHBoxLayout()
        self._lang_combo = QComboBox()
        current = get_current_language()
        for code, info in LANGUAGES.items():
            self._lang_combo.addItem(f"{info['native_name']} ({info['name']})", code)
            if code == current:
                self._lang_combo.setCurrentIndex(self._lang_combo.count() - 1)
        self._lang_combo.currentIndexChanged.connect(self._on_language_changed)
        lang_row.addWidget(self._lang_combo)
        lang_row.addStretch()
        layout.addLayout(lang_row)

        lang_note = QLabel(t("settings.language_restart"))
        lang_note.setStyleSheet("font-size: 11px; color: #888; font-style: italic;")
        layout.addWidget(lang_note)

        # Theme
        layout.addWidget(self._section(t("settings.theme")))
        theme_row = QHBoxLayout()
        light_btn = QPushButton(t("settings.theme_light"))
        light_btn.setProperty("class", "secondaryButton")
        light_btn.clicked.connect(lambda: self._theme_manager.apply_theme(ThemeManager.LIGHT))
        dark_btn = QPushButton(t("settings.theme_dark"))
        dark_btn.setProperty("class", "secondaryButton")
        dark_btn.clicked.connect(lambda: self._theme_manager.apply_theme(ThemeManager.DARK))
        theme_row.addWidget(light_btn)
        theme_row.addWidget(dark_btn)
        theme_row.addStretch()
        layout.addLayout(theme_row)

        # Backend
        layout.addWidget(self._section(t("settings.backend")))
        if self._config.has_backend:
            backend_text = t("settings.backend_online", history=self._config.history_backend)
        else:
            backend_text = t("settings.backend_offline")
        detector_text = t("settings.detector", name=self._config.detector)
        backend_label = QLabel(f"{backend_text}\n{detector_text}\n{t('settings.data_dir', path=str(get_data_dir()))}")
        backend_label.setProperty("class", "sectionSubtitle")
        backend_label.setWordWrap(True)
        layout.addWidget(backend_label)

        # About
        layout.addWidget(self._section(t("settings.about")))
        about_text = QLabel(f"{t('about.description')}\n{t('about.version', version=APP_VERSION)}")
        about_text.setProperty("class", "sectionSubtitle")
        about_text.setWordWrap(True)
        layout.addWidget(about_text)

        layout.addStretch()
        scroll.setWidget(container)
        outer.addWidget(scroll)

    def _on_language_changed(self, index: int):
        set_language(self._lang_combo.itemData(index))

    def cleanup(self):
        pass
