"""Detection result card: diagnosis, confidence, severity, suggestions, actions."""

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from core.detection import HEALTHY_LABEL
from core.utils import DetectionResult, Severity
from i18n import t
from ui.components.confidence_gauge import ConfidenceGauge
from ui.components.suggestions_list import SuggestionsList
from ui.theme import HEALTHY_COLOR, severity_color

SEVERITY_KEYS = {
    Severity.MILD: "results.severity_mild",
    Severity.MODERATE: "results.severity_moderate",
    Severity.SEVERE: "results.severity_severe",
}


class ResultCard(QWidget):
    """Shows one DetectionResult. The save button appears only when saving is offered."""

    save_clicked = pyqtSignal()
    analyze_another = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("resultCard")
        self._result = None
        self._setup_ui()
        self.hide()

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(16)

        header_row = QHBoxLayout()
        header_row.setSpacing(20)

        self._gauge = ConfidenceGauge(label=t("results.confidence"), size=120)

        info_col = QVBoxLayout()
        info_col.setSpacing(6)
        self._name_label = QLabel("")
        self._name_label.setProperty("class", "sectionTitle")
        self._name_label.setStyleSheet("font-size: 20px;")

        self._severity_label = QLabel("")
        self._severity_label.setObjectName("severityBadge")

        self._description_label = QLabel("")
        self._description_label.setWordWrap(True)
        self._description_label.setProperty("class", "sectionSubtitle")

        info_col.addWidget(self._name_label)
        info_col.addWidget(self._severity_label)
        info_col.addWidget(self._description_label)
        info_col.addStretch()

        header_row.addWidget(self._gauge)
        header_row.addLayout(info_col, 1)

        self._suggestions = SuggestionsList()

        self._status_label = QLabel("")
        self._status_label.setProperty("class", "sectionSubtitle")
        self._status_label.hide()

        action_row = QHBoxLayout()
        action_row.setSpacing(8)

        self._save_btn = QPushButton(t("results.save"))
        self._save_btn.setProperty("class", "secondaryButton")
        self._save_btn.clicked.connect(self.save_clicked.emit)

        self._another_btn = QPushButton(t("results.analyze_another"))
        self._another_btn.setObjectName("primaryButton")
        self._another_btn.clicked.connect(self.analyze_another.emit)

        action_row.addWidget(self._save_btn)
        action_row.addStretch()
        action_row.addWidget(self._another_btn)

        layout.addLayout(header_row)
        layout.addWidget(self._suggestions)
        layout.addWidget(self._status_label)
        layout.addLayout(action_row)

    def show_result(self, result: DetectionResult, can_save: bool):
        self._result = result
        healthy = result.disease_name == HEALTHY_LABEL
        color = HEALTHY_COLOR if healthy else severity_color(result.severity)

        self._gauge.set_level(result.confidence_level, color)
        self._name_label.setText(result.disease_name)
        self._description_label.setText(result.description)

        self._severity_label.setText(t("results.severity", level=t(SEVERITY_KEYS[result.severity])))
        self._severity_label.setProperty("severity", result.severity.value)
        self._severity_label.setVisible(not healthy)
        self._severity_label.style().unpolish(self._severity_label)
        self._severity_label.style().polish(self._severity_label)

        self._suggestions.set_suggestions(result.suggestions)
        self._status_label.hide()
        self.set_save_offered(can_save)
        self.show()

    def set_save_offered(self, offered: bool):
        self._save_btn.setVisible(offered)
        self._save_btn.setEnabled(offered)

    def set_saving(self):
        self._save_btn.setEnabled(False)
        self._status_label.setText(t("results.saving"))
        self._status_label.show()

    def set_saved(self):
        self._save_btn.hide()
        self._status_label.setText(t("results.saved"))
        self._status_label.show()

    def reset(self):
        self._result = None
        self._gauge.reset()
        self._suggestions.reset()
        self._status_label.hide()
        self.hide()
