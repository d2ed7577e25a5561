"""
Annotation models for the image editor.

An annotation is drawn on the preview in two phases:
- draw mode: the user places it, either by dragging or by two clicks
- edit mode: the committed shape can be resized through its handles

Annotation Types:
- RectangleAnnotation: Outlined/filled rectangle with resize handles
- TextAnnotation: Text box typed into a TextOverlay

Coordinates are preview coordinates. to_record() converts the geometry to
model coordinates when the annotation is saved into the edited image.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QPainter, QPen

from image_editor.editor.text_overlay import TextOverlay


# Geometry of an annotation that has not been placed yet
SENTINEL = QPointF(-1, -1)


class AnnotationType(Enum):
    """Enum for annotation types."""
    RECTANGLE = auto()
    TEXT = auto()


class AnnotationMode(Enum):
    DRAW = auto()
    EDIT = auto()


class Placement(Enum):
    """Sub-state of draw mode."""
    IDLE = auto()  # nothing placed yet
    DRAGGING = auto()  # start point set, end follows the pointer
    CLICK_PLACED = auto()  # single click; the next click fixes the end point


@dataclass
class AnnotationStyle:
    """
    Style properties for annotations.

    Shared across annotation types where applicable.
    """
    stroke_color: QColor = field(default_factory=lambda: QColor(255, 80, 80))
    stroke_width: int = 3
    fill_color: Optional[QColor] = None
    opacity: float = 1.0  # 0.0 to 1.0
    font_size: int = 18
    font_bold: bool = False

    def clone(self) -> "AnnotationStyle":
        """Create a copy of this style."""
        return AnnotationStyle(
            stroke_color=QColor(self.stroke_color),
            stroke_width=self.stroke_width,
            fill_color=QColor(self.fill_color) if self.fill_color else None,
            opacity=self.opacity,
            font_size=self.font_size,
            font_bold=self.font_bold,
        )


@dataclass(frozen=True)
class AnnotationRecord:
    """Saved annotation geometry in model coordinates."""
    kind: AnnotationType
    start: QPointF
    end: QPointF
    text: str = ""


class Annotation(ABC):
    """
    Base class for annotations.

    Holds the draw/edit state machine shared by all variants. Subclasses
    decide how the shape is painted and which handles it exposes.
    """

    def __init__(
        self,
        style: Optional[AnnotationStyle] = None,
        handle_size: int = 8,
    ) -> None:
        """
        Initialize the annotation.

        Args:
            style: The style to use, or None for defaults.
            handle_size: Side of a resize handle square in preview pixels.
        """
        self.style: AnnotationStyle = style or AnnotationStyle()
        self.handle_size = handle_size
        self.mode = AnnotationMode.DRAW
        self.placement = Placement.IDLE
        self.start = QPointF(SENTINEL)
        self.end = QPointF(SENTINEL)
        # Name of the handle engaged by the current drag, '' when none
        self.point = ""
        self.invert = False

    @property
    @abstractmethod
    def annotation_type(self) -> AnnotationType:
        """Return the type of this annotation."""
        pass

    @abstractmethod
    def paint(self, painter: QPainter) -> None:
        """
        Paint the annotation shape.

        Args:
            painter: The QPainter to use, in preview coordinates.
        """
        pass

    # ─── State ────────────────────────────────────────────────────────────

    @property
    def is_click_mode(self) -> bool:
        return self.placement == Placement.CLICK_PLACED

    @property
    def is_set_start_point(self) -> bool:
        """True while a start point has been recorded but not committed."""
        return self.mode == AnnotationMode.DRAW and self.placement != Placement.IDLE

    @property
    def has_geometry(self) -> bool:
        return self.start != SENTINEL and self.end != SENTINEL

    def rect(self) -> QRectF:
        """The shape's extent, normalized."""
        return QRectF(self.start, self.end).normalized()

    # ─── Draw mode ────────────────────────────────────────────────────────

    def set_start_point(self, pos: QPointF) -> None:
        self.start = QPointF(pos)
        self.end = QPointF(pos)
        self.placement = Placement.DRAGGING

    def move_end_point(self, pos: QPointF) -> None:
        if self.placement == Placement.DRAGGING:
            self.end = QPointF(pos)

    def enter_click_mode(self) -> None:
        """The pointer went up where it went down; wait for a second click."""
        self.placement = Placement.CLICK_PLACED

    def set_end_point(self, pos: QPointF) -> None:
        self.end = QPointF(pos)

    def commit(self) -> None:
        """Finish placement and switch to edit mode."""
        self.mode = AnnotationMode.EDIT
        self.placement = Placement.IDLE
        self.point = ""
        self._update_invert()

    def clear(self) -> None:
        """Drop the geometry and go back to draw mode."""
        self.start = QPointF(SENTINEL)
        self.end = QPointF(SENTINEL)
        self.mode = AnnotationMode.DRAW
        self.placement = Placement.IDLE
        self.point = ""
        self.invert = False

    # ─── Edit mode ────────────────────────────────────────────────────────

    def detect_point(self, pos: QPointF) -> str:
        """
        Engage the handle under pos.

        Returns:
            The handle name, or '' when nothing is hit.
        """
        self.point = ""
        return self.point

    def move_detect_point(self, pos: QPointF) -> str:
        """Hover hit-test; does not engage anything."""
        return ""

    def calculate_position(self, pos: QPointF) -> None:
        """Move the engaged handle to pos."""
        pass

    def release_point(self) -> None:
        self.point = ""

    def cursor_for(self, name: str) -> Qt.CursorShape:
        return Qt.CursorShape.ArrowCursor

    def paint_handles(self, painter: QPainter) -> None:
        pass

    def _update_invert(self) -> None:
        # Exactly one axis crossed flips the handle diagonals
        self.invert = (self.start.x() > self.end.x()) != (self.start.y() > self.end.y())

    def _apply_style_to_pen(self, painter: QPainter) -> None:
        """Apply the annotation style to the painter's pen."""
        pen = QPen(self.style.stroke_color)
        pen.setWidth(self.style.stroke_width)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setJoinStyle(Qt.PenJoinStyle.RoundJoin)
        painter.setPen(pen)
        painter.setOpacity(self.style.opacity)

    # ─── Persistence ──────────────────────────────────────────────────────

    def to_record(self, scale: float) -> AnnotationRecord:
        """
        Snapshot the geometry in model coordinates.

        Args:
            scale: Preview-to-model ratio (preview = model * scale).
        """
        factor = 1.0 / scale if scale > 0 else 1.0
        return AnnotationRecord(
            kind=self.annotation_type,
            start=QPointF(self.start.x() * factor, self.start.y() * factor),
            end=QPointF(self.end.x() * factor, self.end.y() * factor),
        )


class RectangleAnnotation(Annotation):
    """
    Rectangle annotation with optional fill.

    The four named handles sit on the corners:
    left_top at start, right_bottom at end, start at (end.x, start.y)
    and end at (start.x, end.y). Dragging inside the shape moves it.
    """

    HANDLE_NAMES = ("left_top", "start", "right_bottom", "end")
    BODY = "body"

    def __init__(
        self,
        style: Optional[AnnotationStyle] = None,
        handle_size: int = 8,
    ) -> None:
        super().__init__(style, handle_size)
        self.hover_point = ""
        self.is_none_point = True
        self._drag_origin: Optional[QPointF] = None

    @property
    def annotation_type(self) -> AnnotationType:
        return AnnotationType.RECTANGLE

    def clear(self) -> None:
        super().clear()
        self.hover_point = ""
        self.is_none_point = True
        self._drag_origin = None

    # ─── Handles ──────────────────────────────────────────────────────────

    def named_handles(self) -> Dict[str, QPointF]:
        return {
            "left_top": QPointF(self.start),
            "start": QPointF(self.end.x(), self.start.y()),
            "right_bottom": QPointF(self.end),
            "end": QPointF(self.start.x(), self.end.y()),
        }

    def _handle_rect(self, center: QPointF) -> QRectF:
        half = self.handle_size / 2
        return QRectF(center.x() - half, center.y() - half, self.handle_size, self.handle_size)

    def handle_rects(self) -> List[QRectF]:
        """
        Get the drawn handle rectangles.

        Returns 8 handles: 4 corners + 4 edges.
        Order: TL, TC, TR, ML, MR, BL, BC, BR
        """
        rect = self.rect()
        centers = [
            rect.topLeft(),
            QPointF(rect.center().x(), rect.top()),
            rect.topRight(),
            QPointF(rect.left(), rect.center().y()),
            QPointF(rect.right(), rect.center().y()),
            rect.bottomLeft(),
            QPointF(rect.center().x(), rect.bottom()),
            rect.bottomRight(),
        ]
        return [self._handle_rect(center) for center in centers]

    def _hit(self, pos: QPointF) -> str:
        if self.mode != AnnotationMode.EDIT or not self.has_geometry:
            return ""
        for name, center in self.named_handles().items():
            if self._handle_rect(center).contains(pos):
                return name
        if self.rect().contains(pos):
            return self.BODY
        return ""

    def detect_point(self, pos: QPointF) -> str:
        self.point = self._hit(pos)
        self._drag_origin = QPointF(pos) if self.point == self.BODY else None
        return self.point

    def move_detect_point(self, pos: QPointF) -> str:
        self.hover_point = self._hit(pos)
        self.is_none_point = self.hover_point == ""
        return self.hover_point

    def release_point(self) -> None:
        super().release_point()
        self._drag_origin = None

    def calculate_position(self, pos: QPointF) -> None:
        """
        Move the engaged handle to pos.

        The handle diagonally opposite stays where it is. An axis that would
        collapse to zero width or height keeps its previous values.
        """
        if not self.point:
            return

        if self.point == self.BODY:
            if self._drag_origin is None:
                self._drag_origin = QPointF(pos)
                return
            delta = pos - self._drag_origin
            self.start += delta
            self.end += delta
            self._drag_origin = QPointF(pos)
            return

        start_x, start_y = self.start.x(), self.start.y()
        end_x, end_y = self.end.x(), self.end.y()

        if self.point == "left_top":
            start_x, start_y = pos.x(), pos.y()
        elif self.point == "right_bottom":
            end_x, end_y = pos.x(), pos.y()
        elif self.point == "start":
            end_x, start_y = pos.x(), pos.y()
        elif self.point == "end":
            start_x, end_y = pos.x(), pos.y()

        if abs(end_x - start_x) >= 1:
            self.start.setX(start_x)
            self.end.setX(end_x)
        if abs(end_y - start_y) >= 1:
            self.start.setY(start_y)
            self.end.setY(end_y)

        self._update_invert()

    def cursor_for(self, name: str) -> Qt.CursorShape:
        """Resize cursor for a handle, following the shape's current diagonal."""
        if name == self.BODY:
            return Qt.CursorShape.SizeAllCursor
        if name in ("start", "end"):
            inverted = Qt.CursorShape.SizeFDiagCursor
            normal = Qt.CursorShape.SizeBDiagCursor
        elif name in ("left_top", "right_bottom"):
            inverted = Qt.CursorShape.SizeBDiagCursor
            normal = Qt.CursorShape.SizeFDiagCursor
        else:
            return Qt.CursorShape.ArrowCursor
        return inverted if self.invert else normal

    # ─── Painting ─────────────────────────────────────────────────────────

    def paint(self, painter: QPainter) -> None:
        if not self.has_geometry:
            return

        painter.save()
        self._apply_style_to_pen(painter)

        # Fill if fill color is set
        if self.style.fill_color:
            painter.setBrush(self.style.fill_color)
        else:
            painter.setBrush(Qt.BrushStyle.NoBrush)

        painter.drawRect(self.rect())
        painter.restore()

    def paint_handles(self, painter: QPainter) -> None:
        """Draw the bounding outline and the 8 handle squares."""
        if not self.has_geometry:
            return

        painter.save()
        painter.setPen(QPen(QColor(80, 144, 208), 1))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(self.rect())

        painter.setBrush(QColor(255, 255, 255))
        for handle in self.handle_rects():
            painter.drawRect(handle)
        painter.restore()


class TextAnnotation(Annotation):
    """
    Text box annotation.

    The box is placed like a rectangle. On commit the text overlay
    (canvas_area) opens over the box; the typed text is painted into the
    image when the annotation is saved.
    """

    def __init__(
        self,
        style: Optional[AnnotationStyle] = None,
        handle_size: int = 8,
        overlay: Optional[TextOverlay] = None,
    ) -> None:
        super().__init__(style, handle_size)
        self.canvas_area: TextOverlay = overlay or TextOverlay()

    @property
    def annotation_type(self) -> AnnotationType:
        return AnnotationType.TEXT

    @property
    def text(self) -> str:
        return self.canvas_area.text

    # ─── Overlay ──────────────────────────────────────────────────────────

    def open_text_frame(self) -> None:
        self.canvas_area.open(self.rect())

    def close_text_frame(self) -> None:
        self.canvas_area.close()

    def reset_overlay(self, overlay: Optional[TextOverlay] = None) -> TextOverlay:
        """Discard the current overlay and install a fresh, empty one."""
        self.canvas_area.close()
        self.canvas_area = overlay or TextOverlay()
        return self.canvas_area

    # ─── Painting ─────────────────────────────────────────────────────────

    def _get_font(self) -> QFont:
        """Get the font for this text annotation."""
        font = QFont()
        font.setPixelSize(self.style.font_size)
        font.setBold(self.style.font_bold)
        return font

    def paint(self, painter: QPainter) -> None:
        """Dashed outline of the box while it is being placed."""
        if not self.has_geometry:
            return

        painter.save()
        pen = QPen(self.style.stroke_color, 1, Qt.PenStyle.DashLine)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(self.rect())
        painter.restore()

    def paint_text(self, painter: QPainter) -> None:
        """Render the committed text inside the box."""
        if not self.has_geometry or not self.text:
            return

        painter.save()
        painter.setOpacity(self.style.opacity)
        painter.setFont(self._get_font())
        painter.setPen(self.style.stroke_color)
        flags = (
            Qt.AlignmentFlag.AlignLeft.value
            | Qt.AlignmentFlag.AlignTop.value
            | Qt.TextFlag.TextWordWrap.value
        )
        painter.drawText(self.rect(), flags, self.text)
        painter.restore()

    def to_record(self, scale: float) -> AnnotationRecord:
        record = super().to_record(scale)
        return AnnotationRecord(record.kind, record.start, record.end, self.text)
