"""Saved detections browser tab."""

import logging
from typing import List, Optional

from PyQt6.QtCore import Qt, QUrl, pyqtSignal
from PyQt6.QtGui import QDesktopServices, QPixmap
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from core.auth_service import AuthService
from core.history_recorder import HistoryRecorder
from core.utils import HistoryRecord, format_timestamp, is_remote_url
from i18n import t
from ui.components.result_card import SEVERITY_KEYS
from workers.history_worker import HistoryDeleteWorker, HistoryLoadWorker

logger = logging.getLogger(__name__)


class _HistoryCard(QWidget):
    """Single saved detection."""

    delete_requested = pyqtSignal(str)

    def __init__(self, record: HistoryRecord, parent=None):
        super().__init__(parent)
        self._record = record
        self._setup_ui()

    def _setup_ui(self):
        self.setObjectName("resultCard")
        layout = QHBoxLayout(self)
        layout.setContentsMargins(16, 12, 16, 12)
        layout.setSpacing(16)

        thumb_label = QLabel()
        thumb_label.setFixedSize(64, 64)
        thumb_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        pixmap = QPixmap()
        if self._record.thumbnail and pixmap.loadFromData(self._record.thumbnail):
            thumb_label.setPixmap(pixmap.scaled(
                64, 64,
                Qt.AspectRatioMode.KeepAspectRatio,
                Qt.TransformationMode.SmoothTransformation,
            ))
        else:
            thumb_label.setText("\U0001f33d")
            thumb_label.setStyleSheet("font-size: 28px;")

        info_layout = QVBoxLayout()
        info_layout.setSpacing(2)

        name_label = QLabel(self._record.disease_name)
        name_label.setProperty("class", "sectionTitle")
        name_label.setStyleSheet("font-size: 14px;")

        detail_label = QLabel(t(
            "history.detail",
            confidence=self._record.confidence_level,
            severity=t(SEVERITY_KEYS[self._record.severity]),
        ))
        detail_label.setProperty("class", "sectionSubtitle")
        detail_label.setStyleSheet("font-size: 12px;")

        time_label = QLabel(format_timestamp(self._record.detected_at))
        time_label.setStyleSheet("font-size: 11px; color: #999;")

        info_layout.addWidget(name_label)
        info_layout.addWidget(detail_label)
        info_layout.addWidget(time_label)

        if self._record.recommendations:
            recommendations = QLabel(self._record.recommendations)
            recommendations.setWordWrap(True)
            recommendations.setStyleSheet("font-size: 12px;")
            recommendations.hide()
            toggle = QPushButton(t("history.show_recommendations"))
            toggle.setProperty("class", "linkButton")
            toggle.setCheckable(True)
            toggle.toggled.connect(recommendations.setVisible)
            info_layout.addWidget(toggle, alignment=Qt.AlignmentFlag.AlignLeft)
            info_layout.addWidget(recommendations)

        button_col = QVBoxLayout()
        if self._record.image_url:
            if is_remote_url(self._record.image_url):
                image_link = QUrl(self._record.image_url)
            else:
                image_link = QUrl.fromLocalFile(self._record.image_url)
            open_btn = QPushButton(t("history.open_image"))
            open_btn.setProperty("class", "secondaryButton")
            open_btn.clicked.connect(lambda: QDesktopServices.openUrl(image_link))
            button_col.addWidget(open_btn)

        delete_btn = QPushButton(t("history.delete"))
        delete_btn.setProperty("class", "cancelButton")
        delete_btn.clicked.connect(lambda: self.delete_requested.emit(self._record.id))
        button_col.addWidget(delete_btn)
        button_col.addStretch()

        layout.addWidget(thumb_label, alignment=Qt.AlignmentFlag.AlignTop)
        layout.addLayout(info_layout, 1)
        layout.addLayout(button_col)


class HistoryWidget(QWidget):
    """Lists the signed-in user's saved detections, newest first."""

    sign_in_requested = pyqtSignal()

    def __init__(self, recorder: Optional[HistoryRecorder], auth: AuthService, parent=None):
        super().__init__(parent)
        self._recorder = recorder
        self._auth = auth
        self._load_worker: Optional[HistoryLoadWorker] = None
        self._delete_worker: Optional[HistoryDeleteWorker] = None
        self._setup_ui()

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

        header_row = QHBoxLayout()
        title = QLabel(t("history.title"))
        title.setProperty("class", "sectionTitle")

        self._refresh_btn = QPushButton(t("history.refresh"))
        self._refresh_btn.setProperty("class", "secondaryButton")
        self._refresh_btn.clicked.connect(self.refresh)

        header_row.addWidget(title)
        header_row.addStretch()
        header_row.addWidget(self._refresh_btn)

        subtitle = QLabel(t("history.subtitle"))
        subtitle.setProperty("class", "sectionSubtitle")
        subtitle.setWordWrap(True)

        self._status_label = QLabel("")
        self._status_label.setProperty("class", "historyEmpty")
        self._status_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._status_label.setWordWrap(True)

        self._sign_in_btn = QPushButton(t("guest.sign_in"))
        self._sign_in_btn.setObjectName("primaryButton")
        self._sign_in_btn.clicked.connect(self.sign_in_requested.emit)
        self._sign_in_btn.hide()

        layout.addLayout(header_row)
        layout.addWidget(subtitle)
        layout.addWidget(self._status_label)
        layout.addWidget(self._sign_in_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self._cards_layout = QVBoxLayout()
        self._cards_layout.setSpacing(8)
        layout.addLayout(self._cards_layout)
        layout.addStretch()

        scroll.setWidget(container)
        outer.addWidget(scroll)

    def _clear_cards(self):
        while self._cards_layout.count():
            item = self._cards_layout.takeAt(0)
            if item.widget():
                item.widget().deleteLater()

    def _show_status(self, text: str, offer_sign_in: bool = False):
        self._status_label.setText(text)
        self._status_label.setVisible(bool(text))
        self._sign_in_btn.setVisible(offer_sign_in)

    def refresh(self):
        """Reload the history snapshot for the current user."""
        self._clear_cards()
        user_id = self._auth.current_user_id()
        if self._recorder is None:
            self._show_status(t("history.unavailable"))
            return
        if not user_id:
            self._show_status(t("history.sign_in_required"), offer_sign_in=self._auth.available)
            return
        if self._load_worker and self._load_worker.isRunning():
            if self._load_worker.user_id == user_id:
                return
            logger.debug("Identity changed during a history load; starting over")

        self._show_status(t("history.loading"))
        self._refresh_btn.setEnabled(False)
        self._load_worker = HistoryLoadWorker(self._recorder, user_id, parent=self)
        self._load_worker.finished.connect(self._on_loaded)
        self._load_worker.error.connect(self._on_load_error)
        self._load_worker.start()

    def _is_current(self, user_id: str) -> bool:
        if user_id != self._auth.current_user_id():
            logger.debug("Dropping history loaded for a previous identity")
            return False
        return True

    def _on_loaded(self, user_id: str, records: List[HistoryRecord]):
        if not self._is_current(user_id):
            return
        self._refresh_btn.setEnabled(True)
        self._clear_cards()
        if not records:
            self._show_status(t("history.empty"))
            return
        self._show_status("")
        for record in records:
            card = _HistoryCard(record)
            card.delete_requested.connect(self._confirm_delete)
            self._cards_layout.addWidget(card)

    def _on_load_error(self, user_id: str, message: str):
        if not self._is_current(user_id):
            return
        self._refresh_btn.setEnabled(True)
        logger.error("History load failed: %s", message)
        self._show_status(t("history.load_failed", error=message))

    def _confirm_delete(self, record_id: str):
        reply = QMessageBox.question(
            self,
            t("common.warning"),
            t("history.delete_confirm"),
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        )
        if reply != QMessageBox.StandardButton.Yes:
            return
        if self._delete_worker and self._delete_worker.isRunning():
            return
        self._delete_worker = HistoryDeleteWorker(self._recorder, record_id, parent=self)
        self._delete_worker.finished.connect(self._on_deleted)
        self._delete_worker.start()

    def _on_deleted(self, record_id: str, outcome):
        if outcome.success:
            self.refresh()
        else:
            QMessageBox.warning(self, t("common.error"), t("history.delete_failed", error=outcome.error_message))

    def cleanup(self):
        workers = self.findChildren(HistoryLoadWorker) + [self._delete_worker]
        for worker in workers:
            if worker and worker.isRunning():
                worker.wait(3000)
