"""
Rendering surface for the editor.

RenderSurface is the 2D drawing context the controller renders the preview
into. It is backed by a QImage and keeps a canvas-style transform stack
(save/translate/rotate/restore) that applies to every blit and paint.
"""

import asyncio
from contextlib import contextmanager
from typing import Iterator, List, Optional

from PySide6.QtCore import QBuffer, QIODevice, QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QTransform

from image_editor.editor.events import InputSource
from image_editor.services.logging_service import get_logger


SURFACE_FORMAT = QImage.Format.Format_ARGB32_Premultiplied


def _encode_image(image: QImage, fmt: str) -> Optional[bytes]:
    """Encode a QImage into bytes. Returns None if the encoder fails."""
    buffer = QBuffer()
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    try:
        if not image.save(buffer, fmt):
            return None
        return bytes(buffer.data().data())
    finally:
        buffer.close()


class RenderSurface:
    """
    Pixel surface with a canvas-like drawing API.

    Attributes:
        events: Pointer events that happen over this surface.
    """

    def __init__(
        self,
        width: int = 0,
        height: int = 0,
        image_format: QImage.Format = SURFACE_FORMAT,
    ) -> None:
        self._logger = get_logger(__name__)
        self._format = image_format
        self._width = max(0, int(width))
        self._height = max(0, int(height))
        self._image = self._new_image(self._width, self._height)
        self._transform = QTransform()
        self._saved: List[QTransform] = []
        self.events = InputSource()

    def _new_image(self, width: int, height: int) -> QImage:
        if not self.is_drawable() or width <= 0 or height <= 0:
            return QImage()
        image = QImage(width, height, self._format)
        image.fill(Qt.GlobalColor.transparent)
        return image

    def is_drawable(self) -> bool:
        """False when no drawing context can be created for this surface."""
        return self._format != QImage.Format.Format_Invalid

    # ─── Size ─────────────────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def set_size(self, width: int, height: int) -> None:
        """Resize the surface. Like a canvas, this drops content and transform."""
        self._width = max(0, int(width))
        self._height = max(0, int(height))
        self._image = self._new_image(self._width, self._height)
        self._transform = QTransform()
        self._saved.clear()

    def rect(self) -> QRectF:
        return QRectF(0, 0, self.width, self.height)

    # ─── Transform stack ──────────────────────────────────────────────────

    def save(self) -> None:
        self._saved.append(QTransform(self._transform))

    def restore(self) -> None:
        if self._saved:
            self._transform = self._saved.pop()

    def translate(self, dx: float, dy: float) -> None:
        self._transform.translate(dx, dy)

    def rotate(self, degrees: float) -> None:
        self._transform.rotate(degrees)

    def reset_transform(self) -> None:
        self._transform = QTransform()

    @property
    def transform(self) -> QTransform:
        return QTransform(self._transform)

    # ─── Drawing ──────────────────────────────────────────────────────────

    @contextmanager
    def painter(self) -> Iterator[Optional[QPainter]]:
        """
        Open a QPainter on the surface with the current transform applied.

        Yields None when the surface holds no pixels.
        """
        if self._image.isNull():
            yield None
            return

        painter = QPainter(self._image)
        try:
            painter.setRenderHint(QPainter.RenderHint.Antialiasing)
            painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
            painter.setTransform(self._transform)
            yield painter
        finally:
            painter.end()

    def clear(self, rect: Optional[QRectF] = None) -> None:
        """Make a region (default: everything) fully transparent."""
        with self.painter() as painter:
            if painter is None:
                return
            painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Clear)
            painter.fillRect(rect if rect is not None else self.rect(), Qt.GlobalColor.transparent)

    def fill_rect(self, rect: QRectF, color: QColor) -> None:
        with self.painter() as painter:
            if painter is None:
                return
            painter.fillRect(rect, color)

    def blit(self, source: QImage, src_rect: QRectF, dst_rect: QRectF) -> None:
        """Draw the src_rect part of source scaled into dst_rect."""
        if source.isNull():
            return
        with self.painter() as painter:
            if painter is None:
                return
            painter.drawImage(dst_rect, source, src_rect)

    def image(self) -> QImage:
        """Return a snapshot of the current pixels."""
        return self._image.copy()

    # ─── Export ───────────────────────────────────────────────────────────

    async def to_encoded_blob(self, fmt: str = "PNG") -> Optional[bytes]:
        """
        Encode the surface content.

        The encoder runs in the default executor; the snapshot is taken
        before awaiting so later drawing does not leak into the result.

        Returns:
            The encoded bytes, or None if the surface is empty or encoding failed.
        """
        if self._image.isNull():
            self._logger.warning("Export requested from an empty surface")
            return None

        snapshot = self._image.copy()
        loop = asyncio.get_running_loop()
        blob = await loop.run_in_executor(None, _encode_image, snapshot, fmt)
        if blob is None:
            self._logger.warning(f"Could not encode surface as {fmt}")
        else:
            self._logger.info(
                f"Encoded {snapshot.width()}x{snapshot.height()} surface as {fmt} ({len(blob)} bytes)"
            )
        return blob
