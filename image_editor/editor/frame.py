"""
Crop frame for the image editor.

The frame is a rectangle over the preview described by its distance from
each canvas margin. Eight control points (corners and edge midpoints) can be
dragged to resize it; an optional aspect ratio stays locked while dragging.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from PySide6.QtCore import QPointF, QRectF, Qt

from image_editor.editor.events import PointerEvent
from image_editor.services.logging_service import get_logger


# Control point order
DIRECTIONS = ("nw", "n", "ne", "e", "se", "s", "sw", "w")

# Named aspect ratios, width / height
PROPORTIONS = {
    "free": None,
    "1:1": 1.0,
    "4:3": 4 / 3,
    "3:4": 3 / 4,
    "3:2": 3 / 2,
    "2:3": 2 / 3,
    "16:9": 16 / 9,
    "9:16": 9 / 16,
}

_CURSORS = {
    "nw": Qt.CursorShape.SizeFDiagCursor,
    "se": Qt.CursorShape.SizeFDiagCursor,
    "ne": Qt.CursorShape.SizeBDiagCursor,
    "sw": Qt.CursorShape.SizeBDiagCursor,
    "n": Qt.CursorShape.SizeVerCursor,
    "s": Qt.CursorShape.SizeVerCursor,
    "e": Qt.CursorShape.SizeHorCursor,
    "w": Qt.CursorShape.SizeHorCursor,
}


def parse_proportion(name: str) -> Optional[float]:
    """
    Turn a proportion name into a width / height ratio.

    Args:
        name: A key of PROPORTIONS or any "W:H" string.

    Returns:
        The ratio, or None for "free".

    Raises:
        ValueError: If the name is not a known or well-formed proportion.
    """
    if name in PROPORTIONS:
        return PROPORTIONS[name]

    parts = name.split(":")
    if len(parts) == 2:
        try:
            width, height = float(parts[0]), float(parts[1])
        except ValueError:
            pass
        else:
            if width > 0 and height > 0:
                return width / height
    raise ValueError(f"Unknown proportion: {name!r}")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


@dataclass(frozen=True)
class ControlPoint:
    direction: str
    center: QPointF


class Frame:
    """
    Crop rectangle over a canvas_width x canvas_height preview.

    Attributes:
        current_point: Index of the dragged control point, or None.
        is_out: Whether the pointer is outside the crop rectangle.
    """

    def __init__(
        self,
        canvas_width: float,
        canvas_height: float,
        aspect_ratio: Optional[float] = None,
        min_size: float = 10,
        handle_size: float = 8,
    ) -> None:
        self._logger = get_logger(__name__)
        self._width = float(canvas_width)
        self._height = float(canvas_height)
        # A tiny canvas still keeps a positive crop
        self._min_size = max(1.0, min(float(min_size), self._width - 1, self._height - 1))
        self._handle_size = handle_size
        self._left = 0.0
        self._top = 0.0
        self._right = 0.0
        self._bottom = 0.0
        self._aspect_ratio: Optional[float] = None
        self.current_point: Optional[int] = None
        self.is_out = False

        if aspect_ratio is not None:
            self._set_ratio(aspect_ratio)

    # ─── Geometry ─────────────────────────────────────────────────────────

    @property
    def canvas_width(self) -> float:
        return self._width

    @property
    def canvas_height(self) -> float:
        return self._height

    @property
    def edges(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) distances from the canvas margins."""
        return (self._left, self._top, self._right, self._bottom)

    @property
    def aspect_ratio(self) -> Optional[float]:
        return self._aspect_ratio

    @property
    def rect(self) -> QRectF:
        return QRectF(
            self._left,
            self._top,
            self._width - self._left - self._right,
            self._height - self._top - self._bottom,
        )

    @property
    def points(self) -> List[ControlPoint]:
        rect = self.rect
        cx, cy = rect.center().x(), rect.center().y()
        left, top, right, bottom = rect.left(), rect.top(), rect.right(), rect.bottom()
        centers = (
            QPointF(left, top),
            QPointF(cx, top),
            QPointF(right, top),
            QPointF(right, cy),
            QPointF(right, bottom),
            QPointF(cx, bottom),
            QPointF(left, bottom),
            QPointF(left, cy),
        )
        return [ControlPoint(d, c) for d, c in zip(DIRECTIONS, centers)]

    def _point_at(self, pos: QPointF) -> Optional[int]:
        half = self._handle_size
        for index, point in enumerate(self.points):
            area = QRectF(point.center.x() - half, point.center.y() - half, half * 2, half * 2)
            if area.contains(pos):
                return index
        return None

    def cursor_at(self, pos: QPointF) -> Qt.CursorShape:
        """Resize cursor for the control point under pos."""
        index = self.current_point if self.current_point is not None else self._point_at(pos)
        if index is None:
            return Qt.CursorShape.ArrowCursor
        return _CURSORS[DIRECTIONS[index]]

    # ─── Pointer handling ─────────────────────────────────────────────────

    def handle_mouse_down(self, event: PointerEvent) -> bool:
        """Start dragging the control point under the pointer, if any."""
        self.current_point = self._point_at(event.pos)
        return self.current_point is not None

    def handle_mouse_move(self, event: PointerEvent) -> bool:
        """
        Drag the engaged control point.

        Corners move two edges, midpoints one. Edges never cross: opposite
        edges always leave at least min_size between them.

        Returns:
            True if any edge changed.
        """
        pos = event.pos
        self.is_out = not self.rect.contains(pos)
        if self.current_point is None:
            return False

        direction = DIRECTIONS[self.current_point]
        before = self.edges
        width, height, gap = self._width, self._height, self._min_size

        if "w" in direction:
            self._left = _clamp(pos.x(), 0, width - self._right - gap)
        if "e" in direction:
            self._right = _clamp(width - pos.x(), 0, width - self._left - gap)
        if "n" in direction:
            self._top = _clamp(pos.y(), 0, height - self._bottom - gap)
        if "s" in direction:
            self._bottom = _clamp(height - pos.y(), 0, height - self._top - gap)

        if self._aspect_ratio is not None:
            self._apply_ratio(direction)

        return self.edges != before

    def handle_mouse_up(self) -> None:
        self.current_point = None

    def _apply_ratio(self, direction: str) -> None:
        """Fit the rectangle to the locked ratio, moving the dragged side."""
        ratio = self._aspect_ratio
        if direction in ("n", "s"):
            rect_height = self._height - self._top - self._bottom
            rect_width = min(rect_height * ratio, self._width - self._left)
            rect_height = rect_width / ratio
            self._right = self._width - self._left - rect_width
            if direction == "n":
                self._top = self._height - self._bottom - rect_height
            else:
                self._bottom = self._height - self._top - rect_height
            return

        rect_width = self._width - self._left - self._right
        max_height = self._height - (self._bottom if "n" in direction else self._top)
        rect_height = rect_width / ratio
        if rect_height > max_height:
            rect_height = max_height
            rect_width = rect_height * ratio
            if "w" in direction:
                self._left = self._width - self._right - rect_width
            else:
                self._right = self._width - self._left - rect_width
        if "n" in direction:
            self._top = self._height - self._bottom - rect_height
        else:
            self._bottom = self._height - self._top - rect_height

    # ─── Proportions ──────────────────────────────────────────────────────

    def change_proportion(self, name: str) -> None:
        """
        Lock the frame to a named aspect ratio.

        The rectangle keeps its centre and its width where it fits, and
        shrinks until it lies inside the canvas. "free" unlocks the ratio.

        Raises:
            ValueError: If the name is not a known or well-formed proportion.
        """
        ratio = parse_proportion(name)
        if ratio is None:
            self._aspect_ratio = None
            self._logger.debug("Crop proportion unlocked")
            return
        self._set_ratio(ratio)
        self._logger.debug(f"Crop proportion set to {name}")

    def _set_ratio(self, ratio: float) -> None:
        self._aspect_ratio = ratio
        center = self.rect.center()
        cx, cy = center.x(), center.y()
        max_width = 2 * min(cx, self._width - cx)
        max_height = 2 * min(cy, self._height - cy)

        rect_width = self.rect.width()
        rect_height = rect_width / ratio
        if rect_height > max_height:
            rect_height = max_height
            rect_width = rect_height * ratio
        if rect_width > max_width:
            rect_width = max_width
            rect_height = rect_width / ratio

        self._left = cx - rect_width / 2
        self._right = self._width - cx - rect_width / 2
        self._top = cy - rect_height / 2
        self._bottom = self._height - cy - rect_height / 2
