"""Circular confidence gauge, colored by diagnosis severity."""

from PyQt6.QtCore import QEasingCurve, QPropertyAnimation, QRectF, Qt, pyqtProperty
from PyQt6.QtGui import QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QWidget


class ConfidenceGauge(QWidget):
    """Animated arc showing an integer confidence level (0-100)."""

    TRACK_COLOR = QColor("#E5E7EB")

    def __init__(self, label: str = "", size: int = 120, parent=None):
        super().__init__(parent)
        self._label = label
        self._size = size
        self._level = 0
        self._animated_level = 0.0
        self._color = QColor("#2e9e5b")
        self.setFixedSize(size, size)

        self._animation = QPropertyAnimation(self, b"animatedLevel")
        self._animation.setDuration(700)
        self._animation.setEasingCurve(QEasingCurve.Type.OutCubic)

    def set_level(self, level: int, color: str):
        self._level = max(0, min(100, int(level)))
        self._color = QColor(color)
        self._animation.stop()
        self._animation.setStartValue(self._animated_level)
        self._animation.setEndValue(float(self._level))
        self._animation.start()

    def _get_animated_level(self) -> float:
        return self._animated_level

    def _set_animated_level(self, value: float):
        self._animated_level = value
        self.update()

    animatedLevel = pyqtProperty(float, _get_animated_level, _set_animated_level)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        pen_width = 10
        margin = pen_width / 2 + 4
        rect = QRectF(margin, margin, self._size - 2 * margin, self._size - 2 * margin)

        painter.setPen(QPen(self.TRACK_COLOR, pen_width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap))
        painter.drawArc(rect, 225 * 16, -270 * 16)

        painter.setPen(QPen(self._color, pen_width, Qt.PenStyle.SolidLine, Qt.PenCapStyle.RoundCap))
        painter.drawArc(rect, 225 * 16, int(-270 * (self._animated_level / 100.0) * 16))

        font = QFont()
        font.setPixelSize(int(self._size * 0.22))
        font.setBold(True)
        painter.setFont(font)
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, f"{int(round(self._animated_level))}%")

        if self._label:
            painter.setPen(QPen(QColor("#888888")))
            label_font = QFont()
            label_font.setPixelSize(int(self._size * 0.1))
            painter.setFont(label_font)
            label_rect = QRectF(rect.x(), rect.center().y() + 12, rect.width(), 20)
            painter.drawText(label_rect, Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop, self._label)

        painter.end()

    def reset(self):
        self._animation.stop()
        self._level = 0
        self._animated_level = 0.0
        self.update()
