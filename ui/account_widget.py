"""Account tab: sign in, create an account, reset a password, edit the profile."""

import logging
from typing import Callable, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QFormLayout,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from core.auth_service import AuthResult, AuthService, Profile, validate_email, validate_new_password
from i18n import t
from workers.auth_worker import AuthWorker

logger = logging.getLogger(__name__)

SIGNED_OUT_PAGE = 0
SIGNED_IN_PAGE = 1


def _password_field(placeholder: str) -> QLineEdit:
    field = QLineEdit()
    field.setEchoMode(QLineEdit.EchoMode.Password)
    field.setPlaceholderText(placeholder)
    return field


class AccountWidget(QWidget):
    """Account flows. All backend calls run on an AuthWorker."""

    def __init__(self, auth: AuthService, parent=None):
        super().__init__(parent)
        self._auth = auth
        self._worker: Optional[AuthWorker] = None
        self._on_done: Callable = lambda result: None
        self._setup_ui()
        self.refresh()

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

        title = QLabel(t("account.title"))
        title.setProperty("class", "sectionTitle")
        layout.addWidget(title)

        self._offline_label = QLabel(t("account.offline"))
        self._offline_label.setProperty("class", "sectionSubtitle")
        self._offline_label.setWordWrap(True)
        layout.addWidget(self._offline_label)

        self._pages = QStackedWidget()
        self._pages.addWidget(self._create_signed_out_page())  # 0
        self._pages.addWidget(self._create_signed_in_page())   # 1
        layout.addWidget(self._pages)
        layout.addStretch()

        scroll.setWidget(container)
        outer.addWidget(scroll)

    # --- Signed out ---

    def _create_signed_out_page(self) -> QWidget:
        self._tabs = QTabWidget()
        self._tabs.addTab(self._create_login_tab(), t("account.login"))
        self._tabs.addTab(self._create_signup_tab(), t("account.signup"))
        self._tabs.addTab(self._create_reset_tab(), t("account.reset"))
        return self._tabs

    def _create_login_tab(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)
        self._login_email = QLineEdit()
        self._login_email.setPlaceholderText(t("account.email"))
        self._login_password = _password_field(t("account.password"))

        self._login_btn = QPushButton(t("account.login"))
        self._login_btn.setObjectName("primaryButton")
        self._login_btn.clicked.connect(self._on_login)

        forgot_btn = QPushButton(t("account.forgot_password"))
        forgot_btn.setProperty("class", "linkButton")
        forgot_btn.clicked.connect(lambda: self._tabs.setCurrentIndex(2))

        form.addRow(t("account.email"), self._login_email)
        form.addRow(t("account.password"), self._login_password)
        form.addRow("", self._login_btn)
        form.addRow("", forgot_btn)
        return page

    def _create_signup_tab(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)
        self._signup_name = QLineEdit()
        self._signup_email = QLineEdit()
        self._signup_password = _password_field(t("account.password"))
        self._signup_confirm = _password_field(t("account.confirm_password"))

        self._signup_btn = QPushButton(t("account.signup"))
        self._signup_btn.setObjectName("primaryButton")
        self._signup_btn.clicked.connect(self._on_signup)

        form.addRow(t("account.full_name"), self._signup_name)
        form.addRow(t("account.email"), self._signup_email)
        form.addRow(t("account.password"), self._signup_password)
        form.addRow(t("account.confirm_password"), self._signup_confirm)
        form.addRow("", self._signup_btn)
        return page

    def _create_reset_tab(self) -> QWidget:
        page = QWidget()
        form = QFormLayout(page)
        hint = QLabel(t("account.reset_hint"))
        hint.setWordWrap(True)
        hint.setProperty("class", "sectionSubtitle")

        self._reset_email = QLineEdit()
        self._send_code_btn = QPushButton(t("account.send_code"))
        self._send_code_btn.setProperty("class", "secondaryButton")
        self._send_code_btn.clicked.connect(self._on_send_code)

        self._reset_code = QLineEdit()
        self._reset_password = _password_field(t("account.new_password"))
        self._reset_confirm = _password_field(t("account.confirm_password"))
        self._reset_btn = QPushButton(t("account.set_password"))
        self._reset_btn.setObjectName("primaryButton")
        self._reset_btn.clicked.connect(self._on_reset_password)

        form.addRow(hint)
        form.addRow(t("account.email"), self._reset_email)
        form.addRow("", self._send_code_btn)
        form.addRow(t("account.code"), self._reset_code)
        form.addRow(t("account.new_password"), self._reset_password)
        form.addRow(t("account.confirm_password"), self._reset_confirm)
        form.addRow("", self._reset_btn)
        return page

    # --- Signed in ---

    def _create_signed_in_page(self) -> QWidget:
        page = QWidget()
        layout = QVBoxLayout(page)
        layout.setSpacing(12)

        self._user_label = QLabel("")
        self._user_label.setProperty("class", "sectionSubtitle")
        layout.addWidget(self._user_label)

        profile_header = QLabel(t("account.profile"))
        profile_header.setProperty("class", "sectionTitle")
        profile_header.setStyleSheet("font-size: 16px;")
        layout.addWidget(profile_header)

        profile_form = QFormLayout()
        self._profile_name = QLineEdit()
        self._profile_phone = QLineEdit()
        self._save_profile_btn = QPushButton(t("account.save_profile"))
        self._save_profile_btn.setObjectName("primaryButton")
        self._save_profile_btn.clicked.connect(self._on_save_profile)
        profile_form.addRow(t("account.full_name"), self._profile_name)
        profile_form.addRow(t("account.phone"), self._profile_phone)
        profile_form.addRow("", self._save_profile_btn)
        layout.addLayout(profile_form)

        password_header = QLabel(t("account.change_password"))
        password_header.setProperty("class", "sectionTitle")
        password_header.setStyleSheet("font-size: 16px; margin-top: 12px;")
        layout.addWidget(password_header)

        password_form = QFormLayout()
        self._new_password = _password_field(t("account.new_password"))
        self._new_confirm = _password_field(t("account.confirm_password"))
        self._change_password_btn = QPushButton(t("account.set_password"))
        self._change_password_btn.setProperty("class", "secondaryButton")
        self._change_password_btn.clicked.connect(self._on_change_password)
        password_form.addRow(t("account.new_password"), self._new_password)
        password_form.addRow(t("account.confirm_password"), self._new_confirm)
        password_form.addRow("", self._change_password_btn)
        layout.addLayout(password_form)

        self._logout_btn = QPushButton(t("account.logout"))
        self._logout_btn.setProperty("class", "cancelButton")
        self._logout_btn.clicked.connect(self._on_logout)
        layout.addWidget(self._logout_btn, alignment=Qt.AlignmentFlag.AlignLeft)
        return page

    # --- State ---

    def refresh(self):
        """Show the page matching the current session."""
        self._offline_label.setVisible(not self._auth.available)
        self._pages.setEnabled(self._auth.available)
        user = self._auth.current_user()
        if user is None:
            self._pages.setCurrentIndex(SIGNED_OUT_PAGE)
            return
        self._pages.setCurrentIndex(SIGNED_IN_PAGE)
        self._user_label.setText(t("account.signed_in_as", email=user.email))
        self._run(self._auth.load_profile, on_done=self._on_profile_loaded)

    def show_login(self):
        if self._auth.current_user() is None:
            self._tabs.setCurrentIndex(0)

    def _run(self, call: Callable, *args, on_done: Callable):
        if self._worker and self._worker.isRunning():
            return
        self._set_busy(True)
        self._on_done = on_done
        self._worker = AuthWorker(call, *args, parent=self)
        self._worker.finished.connect(self._on_worker_finished)
        self._worker.error.connect(self._on_worker_error)
        self._worker.start()

    def _on_worker_finished(self, result):
        self._set_busy(False)
        self._on_done(result)

    def _set_busy(self, busy: bool):
        for btn in (
            self._login_btn, self._signup_btn, self._send_code_btn, self._reset_btn,
            self._save_profile_btn, self._change_password_btn, self._logout_btn,
        ):
            btn.setEnabled(not busy)

    def _on_worker_error(self, message: str):
        self._set_busy(False)
        logger.error("Account request failed: %s", message)
        QMessageBox.warning(self, t("common.error"), message)

    def _fail(self, message: str):
        QMessageBox.warning(self, t("common.error"), message)

    def _report(self, result: AuthResult, success_text: str = "") -> bool:
        if not result.success:
            self._fail(result.error_message)
            return False
        if success_text:
            QMessageBox.information(self, t("common.success"), success_text)
        return True

    # --- Actions ---

    def _on_login(self):
        email = self._login_email.text().strip()
        error = validate_email(email)
        if error:
            self._fail(error)
            return
        self._run(self._auth.login, email, self._login_password.text(), on_done=self._on_login_done)

    def _on_login_done(self, result: AuthResult):
        if self._report(result):
            self._login_password.clear()
            self.refresh()

    def _on_signup(self):
        email = self._signup_email.text().strip()
        error = validate_email(email) or validate_new_password(
            self._signup_password.text(), self._signup_confirm.text()
        )
        if error:
            self._fail(error)
            return
        self._run(
            self._auth.signup, email, self._signup_password.text(), self._signup_name.text().strip(),
            on_done=self._on_signup_done,
        )

    def _on_signup_done(self, result: AuthResult):
        if self._report(result, t("account.confirm_email_sent")):
            self._signup_password.clear()
            self._signup_confirm.clear()
            self.refresh()

    def _on_send_code(self):
        email = self._reset_email.text().strip()
        error = validate_email(email)
        if error:
            self._fail(error)
            return
        self._run(
            self._auth.request_password_reset, email,
            on_done=lambda result: self._report(result, t("account.reset_sent")),
        )

    def _on_reset_password(self):
        email = self._reset_email.text().strip()
        password = self._reset_password.text()
        error = validate_email(email) or validate_new_password(password, self._reset_confirm.text())
        if error:
            self._fail(error)
            return
        if not self._reset_code.text().strip():
            self._fail(t("account.code_required"))
            return
        self._run(
            self._verify_and_update, email, self._reset_code.text(), password,
            on_done=self._on_password_updated,
        )

    def _verify_and_update(self, email: str, code: str, password: str) -> AuthResult:
        verified = self._auth.verify_recovery_code(email, code)
        if not verified.success:
            return verified
        return self._auth.update_password(password)

    def _on_change_password(self):
        password = self._new_password.text()
        error = validate_new_password(password, self._new_confirm.text())
        if error:
            self._fail(error)
            return
        self._run(self._auth.update_password, password, on_done=self._on_password_updated)

    def _on_password_updated(self, result: AuthResult):
        if self._report(result, t("account.password_updated")):
            for field in (self._reset_password, self._reset_confirm, self._reset_code,
                          self._new_password, self._new_confirm):
                field.clear()
            self.refresh()

    def _on_profile_loaded(self, profile: Profile):
        self._profile_name.setText(profile.full_name)
        self._profile_phone.setText(profile.phone)

    def _on_save_profile(self):
        self._run(
            self._auth.update_profile, self._profile_name.text(), self._profile_phone.text(),
            on_done=lambda result: self._report(result, t("account.profile_saved")),
        )

    def _on_logout(self):
        self._run(self._auth.logout, on_done=self._on_logout_done)

    def _on_logout_done(self, result: AuthResult):
        if self._report(result):
            self._profile_name.clear()
            self._profile_phone.clear()
            self.refresh()

    def cleanup(self):
        if self._worker and self._worker.isRunning():
            self._worker.wait(3000)
