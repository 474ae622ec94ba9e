"""Leaf disease detection tab."""

import logging
from pathlib import Path
from typing import List, Optional

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QDialog,
    QLabel,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from core.auth_service import AuthService
from core.config import AppConfig
from core.detection import Detector
from core.errors import IdentityRequired, InvalidTransition
from core.history_recorder import HistoryRecorder
from core.permission_gate import PermissionGate
from core.utils import AcquisitionKind
from core.workflow import (
    Acquired,
    Analyzing,
    Notice,
    NoticeKind,
    Resulted,
    Saved,
    WorkflowController,
    WorkflowState,
)
from i18n import t
from ui.components.guest_banner import GuestBanner
from ui.components.image_preview import ImagePreview
from ui.components.progress_widget import ProgressWidget
from ui.components.result_card import ResultCard
from ui.dialogs.permission_dialogs import ImageWarningDialog, PermissionDialog
from ui.qt_image_source import QtImageSource
from workers.detection_worker import DetectionWorker
from workers.history_worker import SaveWorker

logger = logging.getLogger(__name__)


class DetectWidget(QWidget):
    """Capture or pick a leaf photo, analyze it, and save the result."""

    sign_in_requested = pyqtSignal()
    history_changed = pyqtSignal()

    def __init__(
        self,
        detector: Detector,
        recorder: Optional[HistoryRecorder],
        auth: AuthService,
        config: AppConfig,
        parent=None,
    ):
        super().__init__(parent)
        self._detector = detector
        self._recorder = recorder
        self._auth = auth
        self._config = config
        self._detection_worker: Optional[DetectionWorker] = None
        self._workers: List = []
        self._setup_ui()
        self._controller = WorkflowController(
            PermissionGate(QtImageSource(self)),
            identity=self._current_user_id,
            on_state_changed=self._render,
            on_notice=self._show_notice,
        )
        self._connect_signals()
        self._render(self._controller.state)
        self.refresh_session()

    def _setup_ui(self):
        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QScrollArea.Shape.NoFrame)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(16)

        self._guest_banner = GuestBanner()

        title = QLabel(t("detect.title"))
        title.setProperty("class", "sectionTitle")

        subtitle = QLabel(t("detect.subtitle"))
        subtitle.setProperty("class", "sectionSubtitle")
        subtitle.setWordWrap(True)

        self._preview = ImagePreview()

        self._detect_btn = QPushButton(t("detect.analyze_button"))
        self._detect_btn.setObjectName("primaryButton")
        self._detect_btn.setEnabled(False)

        self._progress = ProgressWidget()
        self._result_card = ResultCard()

        layout.addWidget(self._guest_banner)
        layout.addWidget(title)
        layout.addWidget(subtitle)
        layout.addWidget(self._preview)
        layout.addWidget(self._detect_btn)
        layout.addWidget(self._progress)
        layout.addWidget(self._result_card)
        layout.addStretch()

        scroll.setWidget(container)
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.addWidget(scroll)

    def _connect_signals(self):
        self._preview.source_requested.connect(self._on_source_requested)
        self._detect_btn.clicked.connect(self._on_detect)
        self._progress.cancel_clicked.connect(self._on_cancel)
        self._result_card.save_clicked.connect(self._on_save)
        self._result_card.analyze_another.connect(self._on_another)
        self._guest_banner.sign_in_clicked.connect(self.sign_in_requested.emit)

    def _current_user_id(self) -> Optional[str]:
        if self._recorder is None:
            return None
        return self._auth.current_user_id()

    # --- Acquisition ---

    def _on_source_requested(self, kind: AcquisitionKind):
        self._cancel_detection_worker()
        self._controller.request_acquisition(kind)

        if ImageWarningDialog(self).exec() != QDialog.DialogCode.Accepted:
            self._controller.cancel_warning()
            return
        self._controller.continue_warning()

        if PermissionDialog(kind, self).exec() != QDialog.DialogCode.Accepted:
            self._controller.deny_permission()
            return
        self._controller.allow_permission()

    # --- Detection ---

    def _on_detect(self):
        try:
            ticket = self._controller.begin_detection()
        except InvalidTransition as e:
            logger.debug("Detect ignored: %s", e)
            return

        worker = DetectionWorker(self._detector, ticket, self._config.detection_timeout_s, parent=self)
        worker.finished.connect(self._controller.complete_detection)
        worker.error.connect(self._controller.fail_detection)
        self._track(worker)
        self._detection_worker = worker
        worker.start()

    def _on_cancel(self):
        self._cancel_detection_worker()
        if isinstance(self._controller.state, Analyzing):
            self._controller.cancel_detection()

    def _cancel_detection_worker(self):
        if self._detection_worker and self._detection_worker.isRunning():
            self._detection_worker.cancel()
        self._detection_worker = None

    # --- Saving ---

    def _on_save(self):
        if self._recorder is None:
            return
        try:
            ticket = self._controller.begin_save()
        except IdentityRequired:
            return
        except InvalidTransition as e:
            logger.debug("Save ignored: %s", e)
            return

        worker = SaveWorker(self._recorder, ticket, parent=self)
        worker.finished.connect(self._on_save_finished)
        self._track(worker)
        worker.start()

    def _on_save_finished(self, ticket, outcome):
        if not self._controller.complete_save(ticket, outcome):
            logger.debug("Save result arrived after the workflow moved on")
        if outcome.success:
            self.history_changed.emit()

    def _on_another(self):
        self._cancel_detection_worker()
        self._controller.discard()

    # --- Rendering ---

    def _render(self, state: WorkflowState):
        busy = isinstance(state, Analyzing)
        self._preview.set_sources_enabled(True)

        if isinstance(state, (Acquired, Analyzing, Resulted, Saved)):
            size = Path(state.image.path).stat().st_size if Path(state.image.path).exists() else 0
            self._preview.show_image(state.image, size)
        else:
            self._preview.clear()

        self._detect_btn.setVisible(not isinstance(state, (Resulted, Saved)))
        self._detect_btn.setEnabled(isinstance(state, Acquired))

        if busy:
            self._progress.start(t("detect.analyzing"))
        else:
            self._progress.reset()

        if isinstance(state, Resulted):
            self._result_card.show_result(state.result, self._controller.can_save)
            if state.saving:
                self._result_card.set_saving()
        elif isinstance(state, Saved):
            self._result_card.show_result(state.result, can_save=False)
            self._result_card.set_saved()
        else:
            self._result_card.reset()

    def _show_notice(self, notice: Notice):
        if notice.kind == NoticeKind.PERMISSION_DENIED:
            QMessageBox.information(self, t("notice.access_denied_title"), notice.message)
        elif notice.is_error:
            QMessageBox.warning(self, t("common.error"), notice.message)
        else:
            logger.info(notice.message)

    def refresh_session(self):
        """Update guest banner and save button after sign-in/out."""
        signed_in = self._current_user_id() is not None
        self._guest_banner.setVisible(not signed_in)
        self._guest_banner.set_sign_in_available(self._auth.available)
        if isinstance(self._controller.state, Resulted):
            self._result_card.set_save_offered(self._controller.can_save)

    # --- Worker bookkeeping ---

    def _track(self, worker):
        self._workers = [w for w in self._workers if w.isRunning()]
        self._workers.append(worker)

    def cleanup(self):
        self._cancel_detection_worker()
        for worker in list(self._workers):
            if worker.isRunning():
                if hasattr(worker, "cancel"):
                    worker.cancel()
                if not worker.wait(5000):
                    worker.terminate()
                    worker.wait(2000)
        self._controller.discard()
