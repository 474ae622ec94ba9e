"""MaizeScan: maize leaf disease detection desktop client.

Entry point for the desktop application.
"""

import logging
import os
import sys

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QApplication, QMessageBox

import i18n
from core.auth_service import AuthService
from core.config import load_config
from core.detection import create_detector
from core.errors import ConfigError
from core.history_recorder import create_history_recorder
from core.supabase_backend import create_backend_client
from core.utils import APP_NAME, APP_VERSION, ORG_NAME, get_data_dir
from ui.dialogs.onboarding_dialog import OnboardingDialog
from ui.theme import ThemeManager

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO"):
    """Log to stderr and to maizescan.log in the data directory."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(get_data_dir() / "maizescan.log", encoding="utf-8"),
        ],
    )
    # SDK request logging is noisy at INFO
    for name in ("httpx", "httpcore", "hpack"):
        logging.getLogger(name).setLevel(logging.WARNING)


def main():
    """Application entry point."""
    if getattr(sys, "frozen", False):
        os.chdir(os.path.dirname(sys.executable))

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    app.setOrganizationName(ORG_NAME)

    i18n.init()
    if i18n.is_rtl():
        app.setLayoutDirection(Qt.LayoutDirection.RightToLeft)

    try:
        config = load_config()
    except ConfigError as e:
        configure_logging()
        logger.error("Invalid configuration: %s", e)
        QMessageBox.critical(None, i18n.t("common.error"), i18n.t("config.invalid", error=str(e)))
        sys.exit(1)

    configure_logging(config.log_level)
    logger.info("Starting %s %s (detector=%s, history=%s)",
                APP_NAME, APP_VERSION, config.detector, config.history_backend)

    theme_manager = ThemeManager(app)
    theme_manager.apply_theme()

    client = create_backend_client(config)
    auth = AuthService(client, config)
    auth.restore_session()

    detector = create_detector(config)
    recorder = create_history_recorder(config, client, identity=auth.current_user_id)

    choice = OnboardingDialog.GUEST
    if OnboardingDialog.needs_onboarding():
        dialog = OnboardingDialog(accounts_available=auth.available)
        dialog.exec()
        choice = dialog.choice()
        if not choice:
            sys.exit(0)

    from ui.main_window import MainWindow

    window = MainWindow(theme_manager, config, auth, detector, recorder)
    if choice == OnboardingDialog.SIGN_IN:
        window.show_sign_in()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
