"""Treatment suggestions shown under a detection result."""

from typing import Sequence

from PyQt6.QtWidgets import QFrame, QLabel, QVBoxLayout, QWidget

from core.utils import TreatmentSuggestion
from i18n import t


class SuggestionsList(QWidget):
    """One card per suggested treatment, in the order the detector gave them."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(8)

        self._title = QLabel(t("results.suggestions"))
        self._title.setProperty("class", "sectionTitle")
        self._title.setStyleSheet("font-size: 16px;")
        self._layout.addWidget(self._title)
        self._cards = []
        self.hide()

    def set_suggestions(self, suggestions: Sequence[TreatmentSuggestion]):
        self.reset()
        for suggestion in suggestions:
            card = self._create_card(suggestion)
            self._layout.addWidget(card)
            self._cards.append(card)
        if self._cards:
            self.show()

    @staticmethod
    def _create_card(suggestion: TreatmentSuggestion) -> QFrame:
        card = QFrame()
        card.setObjectName("suggestionCard")
        layout = QVBoxLayout(card)
        layout.setContentsMargins(12, 10, 12, 10)
        layout.setSpacing(4)

        name = QLabel(suggestion.name)
        name.setProperty("class", "suggestionName")
        layout.addWidget(name)

        description = QLabel(suggestion.description)
        description.setWordWrap(True)
        layout.addWidget(description)

        if suggestion.application_instructions:
            how = QLabel(t("results.application", text=suggestion.application_instructions))
            how.setWordWrap(True)
            how.setProperty("class", "sectionSubtitle")
            layout.addWidget(how)

        if suggestion.safety_note:
            safety = QLabel(f"⚠ {suggestion.safety_note}")
            safety.setWordWrap(True)
            safety.setProperty("class", "safetyNote")
            layout.addWidget(safety)
        return card

    def reset(self):
        for card in self._cards:
            self._layout.removeWidget(card)
            card.deleteLater()
        self._cards = []
        self.hide()
