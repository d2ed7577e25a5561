"""
Content positioning for the resize editor.

After a resize is staged the preview shows the content at 1:1 inside a
viewport no larger than the maximum bounds. Content wider or taller than the
viewport can be dragged; the other axes stay centred.
"""

from typing import Optional

from PySide6.QtCore import QPointF, QSize


class ResizePositioner:
    """Tracks the pan offset of content inside the resize viewport."""

    def __init__(self, content_width: int, content_height: int, max_width: int, max_height: int) -> None:
        self._content = QSize(content_width, content_height)
        self._viewport = QSize(min(content_width, max_width), min(content_height, max_height))
        self._offset = self._clamp(QPointF(0, 0))
        self._press_pos: Optional[QPointF] = None
        self._press_offset = QPointF(self._offset)

    @property
    def content_size(self) -> QSize:
        return QSize(self._content)

    @property
    def viewport(self) -> QSize:
        return QSize(self._viewport)

    @property
    def offset(self) -> QPointF:
        """Position of the content's top-left corner inside the viewport."""
        return QPointF(self._offset)

    @property
    def is_dragging(self) -> bool:
        return self._press_pos is not None

    def can_pan(self) -> bool:
        return (
            self._content.width() > self._viewport.width()
            or self._content.height() > self._viewport.height()
        )

    def press(self, pos: QPointF) -> None:
        self._press_pos = QPointF(pos)
        self._press_offset = QPointF(self._offset)

    def drag(self, pos: QPointF) -> bool:
        """
        Pan by the distance moved since press().

        Returns:
            True if the offset changed.
        """
        if self._press_pos is None:
            return False
        target = self._press_offset + (pos - self._press_pos)
        offset = self._clamp(target)
        if offset == self._offset:
            return False
        self._offset = offset
        return True

    def release(self) -> None:
        self._press_pos = None

    def _clamp(self, offset: QPointF) -> QPointF:
        return QPointF(
            self._clamp_axis(offset.x(), self._content.width(), self._viewport.width()),
            self._clamp_axis(offset.y(), self._content.height(), self._viewport.height()),
        )

    @staticmethod
    def _clamp_axis(value: float, content: int, viewport: int) -> float:
        if content >= viewport:
            return max(viewport - content, min(value, 0.0))
        return (viewport - content) / 2
