"""
Text-input overlay contract.

A TextOverlay stands for the input box shown on top of the preview while a
text annotation is being typed. The host widget renders it (EditorWidget uses
a QLineEdit); the engine only opens, closes and reads it.
"""

from typing import Optional

from PySide6.QtCore import QObject, QRectF, Signal

from image_editor.editor.events import InputSource
from image_editor.services.logging_service import get_logger


class TextOverlay(QObject):
    """
    Input region bound to a rectangle of the preview.

    Signals:
        opened: Emitted with the bound rectangle when the overlay is shown.
        closed: Emitted when the overlay is hidden and detached.
        text_changed: Emitted with the new text.
    """

    opened = Signal(QRectF)
    closed = Signal()
    text_changed = Signal(str)

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._rect = QRectF()
        self._text = ""
        self._is_open = False
        self._is_attached = True
        # No Qt parent: subscriptions may hold it after the overlay is gone
        self.events = InputSource()

    @property
    def rect(self) -> QRectF:
        return QRectF(self._rect)

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        if text == self._text:
            return
        self._text = text
        self.text_changed.emit(text)

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def is_focused(self) -> bool:
        # The overlay takes focus whenever it is shown
        return self._is_open

    @property
    def is_attached(self) -> bool:
        return self._is_attached

    def open(self, rect: QRectF) -> None:
        """Show the overlay over rect and give it focus."""
        self._rect = QRectF(rect).normalized()
        self._is_open = True
        self._is_attached = True
        self._logger.debug(f"Text overlay opened at {self._rect}")
        self.opened.emit(QRectF(self._rect))

    def close(self) -> None:
        """Hide the overlay and detach it from its rectangle."""
        was_open = self._is_open
        self._is_open = False
        self._is_attached = False
        if was_open:
            self._logger.debug("Text overlay closed")
            self.closed.emit()
