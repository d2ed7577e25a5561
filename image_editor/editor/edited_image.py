"""
Edited image model.

EditedImage owns the authoritative, full-resolution state of the image being
edited and its linear undo/redo history. Edits are staged first and become a
history entry only when commit() is called; committing after an undo drops
the redo tail.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from PySide6.QtCore import QRect, QSize, Qt
from PySide6.QtGui import QImage, QPainter, QTransform

from image_editor.editor.annotations import Annotation, AnnotationRecord, TextAnnotation
from image_editor.services.logging_service import get_logger


MODEL_FORMAT = QImage.Format.Format_ARGB32_Premultiplied


@dataclass(frozen=True)
class HistoryEntry:
    """Immutable snapshot of the edited image."""
    image: QImage
    angle: float = 0.0
    crop: Optional[QRect] = None  # last crop, in the coordinates of the image it was cut from
    annotations: Tuple[AnnotationRecord, ...] = ()

    @property
    def width(self) -> int:
        return self.image.width()

    @property
    def height(self) -> int:
        return self.image.height()

    @property
    def size(self) -> QSize:
        return QSize(self.width, self.height)


class EditedImage:
    """
    Full-resolution image state plus undo/redo history.

    Attributes:
        base: The image as loaded.
        current: Pixels of the entry under the history cursor.
        history: Committed entries, oldest first.
        history_index: Cursor into history.
    """

    def __init__(self, source: QImage, max_width: int = 643, max_height: int = 400) -> None:
        """
        Initialize from a loaded image.

        Args:
            source: The loaded image, at its natural size.
            max_width: Width of the preview viewport.
            max_height: Height of the preview viewport.
        """
        self._logger = get_logger(__name__)
        self._base = source.convertToFormat(MODEL_FORMAT) if not source.isNull() else QImage()
        self._max_width = max_width
        self._max_height = max_height
        self._history: List[HistoryEntry] = [HistoryEntry(image=self._base)]
        self._history_index = 0
        self._pending: Optional[HistoryEntry] = None

        self._logger.info(f"Edited image created: {self._base.width()}x{self._base.height()}")

    # ─── State ────────────────────────────────────────────────────────────

    @property
    def base(self) -> QImage:
        return self._base

    @property
    def history(self) -> Tuple[HistoryEntry, ...]:
        return tuple(self._history)

    @property
    def history_index(self) -> int:
        return self._history_index

    @property
    def entry(self) -> HistoryEntry:
        """The committed entry under the history cursor."""
        return self._history[self._history_index]

    @property
    def working(self) -> HistoryEntry:
        """The staged entry if there is one, otherwise the committed entry."""
        return self._pending if self._pending is not None else self.entry

    @property
    def current(self) -> QImage:
        return self.working.image

    @property
    def size(self) -> QSize:
        return self.working.size

    @property
    def angle(self) -> float:
        return self.working.angle

    @property
    def annotations(self) -> Tuple[AnnotationRecord, ...]:
        return self.working.annotations

    @property
    def scale(self) -> float:
        """Preview-to-model ratio; the preview never upscales."""
        width, height = self.size.width(), self.size.height()
        if width <= 0 or height <= 0:
            return 1.0
        return min(self._max_width / width, self._max_height / height, 1.0)

    def preview_size(self) -> QSize:
        """Size of the current image drawn at scale."""
        width, height = self.size.width(), self.size.height()
        if width <= 0 or height <= 0:
            return QSize(0, 0)
        scale = self.scale
        return QSize(max(1, round(width * scale)), max(1, round(height * scale)))

    @property
    def can_undo(self) -> bool:
        return self._history_index > 0

    @property
    def can_redo(self) -> bool:
        return self._history_index < len(self._history) - 1

    @property
    def has_pending_changes(self) -> bool:
        return self._pending is not None

    # ─── Staging ──────────────────────────────────────────────────────────

    def _stage(self, entry: HistoryEntry) -> None:
        self._pending = entry

    def temp_update_size(self, width: int, height: int) -> None:
        """
        Stage a resize of the committed image to width x height.

        A resize staged earlier is replaced, not compounded.
        """
        committed = self.entry
        if committed.image.isNull():
            return
        image = committed.image.scaled(
            width,
            height,
            Qt.AspectRatioMode.IgnoreAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        )
        self._stage(replace(committed, image=image))
        self._logger.debug(f"Staged resize to {width}x{height}")

    def update_crop(self, x: float, y: float, width: float, height: float) -> bool:
        """
        Stage a crop given in preview coordinates.

        Returns:
            False if the rectangle does not overlap the image.
        """
        working = self.working
        scale = self.scale
        rect = QRect(
            round(x / scale),
            round(y / scale),
            round(width / scale),
            round(height / scale),
        ).intersected(working.image.rect())
        if rect.isEmpty():
            self._logger.warning(f"Ignoring crop outside the image: {x}, {y}, {width}x{height}")
            return False

        self._stage(replace(working, image=working.image.copy(rect), crop=rect))
        self._logger.debug(f"Staged crop {rect.x()}, {rect.y()}, {rect.width()}x{rect.height()}")
        return True

    def update_angle(self, delta: float) -> None:
        """
        Stage a rotation by delta degrees around the image centre.

        The whole rotated bounding box is kept, so quarter turns swap width
        and height and other angles leave transparent corners.
        """
        working = self.working
        if working.image.isNull():
            return
        transform = QTransform().rotate(delta)
        image = working.image.transformed(transform, Qt.TransformationMode.SmoothTransformation)
        self._stage(replace(working, image=image, angle=(working.angle + delta) % 360))
        self._logger.debug(f"Staged rotation by {delta} degrees")

    def _paint_into(self, annotation: Annotation, text: bool) -> None:
        working = self.working
        scale = self.scale
        image = working.image.copy()
        if not image.isNull():
            painter = QPainter(image)
            try:
                painter.setRenderHint(QPainter.RenderHint.Antialiasing)
                painter.setRenderHint(QPainter.RenderHint.TextAntialiasing)
                painter.scale(1 / scale, 1 / scale)
                if text:
                    annotation.paint_text(painter)
                else:
                    annotation.paint(painter)
            finally:
                painter.end()

        records = working.annotations + (annotation.to_record(scale),)
        self._stage(replace(working, image=image, annotations=records))

    def update_annotation(self, annotation: Annotation) -> None:
        """Stage a committed shape, painted into model pixels."""
        self._paint_into(annotation, text=False)
        self._logger.debug(f"Staged {annotation.annotation_type.name.lower()} annotation")

    def update_text_annotation(self, annotation: TextAnnotation) -> None:
        """Stage a text annotation, painting its typed text."""
        self._paint_into(annotation, text=True)
        self._logger.debug("Staged text annotation")

    def discard_pending(self) -> None:
        self._pending = None

    # ─── History ──────────────────────────────────────────────────────────

    def commit(self) -> bool:
        """
        Append the staged entry to history.

        Anything after the cursor is dropped first.

        Returns:
            False if nothing was staged.
        """
        if self._pending is None:
            return False

        dropped = len(self._history) - self._history_index - 1
        del self._history[self._history_index + 1:]
        self._history.append(self._pending)
        self._history_index = len(self._history) - 1
        self._pending = None

        if dropped:
            self._logger.debug(f"Dropped {dropped} redo entr{'y' if dropped == 1 else 'ies'}")
        self._logger.debug(
            f"History entry {self._history_index} committed ({self.size.width()}x{self.size.height()})"
        )
        return True

    def back_history(self) -> bool:
        """Move the cursor one entry back. False at the first entry."""
        if self._history_index <= 0:
            return False
        self._pending = None
        self._history_index -= 1
        return True

    def forward_history(self) -> bool:
        """Move the cursor one entry forward. False at the last entry."""
        if self._history_index >= len(self._history) - 1:
            return False
        self._pending = None
        self._history_index += 1
        return True
