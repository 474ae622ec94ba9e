"""Desktop ImageSource: file dialog for the gallery, QtMultimedia for the camera."""

from pathlib import Path
from typing import Optional

from PyQt6.QtWidgets import QDialog, QFileDialog, QWidget

from core.acquisition import ImageHandle, ImageSource, create_image_handle
from core.errors import AcquisitionError
from core.utils import SUPPORTED_IMAGE_EXTENSIONS, AcquisitionKind
from i18n import t


class QtImageSource(ImageSource):
    """Opens modal pickers parented to `parent`."""

    def __init__(self, parent: QWidget = None):
        self._parent = parent

    def acquire(self, kind: AcquisitionKind) -> Optional[ImageHandle]:
        if kind == AcquisitionKind.CAMERA:
            return self._capture_photo()
        return self._pick_file()

    def _pick_file(self) -> Optional[ImageHandle]:
        ext_filter = " ".join(f"*{e}" for e in sorted(SUPPORTED_IMAGE_EXTENSIONS))
        file_path, _ = QFileDialog.getOpenFileName(
            self._parent,
            t("detect.upload_photo"),
            "",
            f"{t('detect.image_filter')} ({ext_filter})",
        )
        if not file_path:
            return None
        return create_image_handle(file_path, AcquisitionKind.GALLERY)

    def _capture_photo(self) -> Optional[ImageHandle]:
        from ui.dialogs.camera_dialog import CameraCaptureDialog

        dialog = CameraCaptureDialog(self._parent)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            if dialog.error_message():
                raise AcquisitionError(dialog.error_message())
            return None
        path = dialog.captured_path()
        if not path:
            raise AcquisitionError(t("camera.capture_failed", error=""))
        try:
            return create_image_handle(path, AcquisitionKind.CAMERA, owns_file=True)
        except AcquisitionError:
            Path(path).unlink(missing_ok=True)
            raise
