"""
Tests for the crop frame.

Tests cover:
- Control point layout and hit-testing
- Corner and midpoint drags with clamping
- Locked aspect ratios
- Proportion parsing
"""

import pytest
from PySide6.QtCore import QPointF, QRectF, Qt

from image_editor.editor.events import PointerEvent
from image_editor.editor.frame import DIRECTIONS, Frame, parse_proportion


def at(x: float, y: float) -> PointerEvent:
    return PointerEvent(QPointF(x, y), Qt.MouseButton.LeftButton)


@pytest.fixture
def frame():
    return Frame(600, 400)


def drag(frame: Frame, start: QPointF, end: QPointF) -> bool:
    assert frame.handle_mouse_down(at(start.x(), start.y()))
    changed = frame.handle_mouse_move(at(end.x(), end.y()))
    frame.handle_mouse_up()
    return changed


class TestLayout:
    """Test frame geometry."""

    def test_initial_frame_covers_canvas(self, frame):
        """Test a new frame spans the whole canvas."""
        assert frame.edges == (0, 0, 0, 0)
        assert frame.rect == QRectF(0, 0, 600, 400)
        assert frame.current_point is None

    def test_points_order(self, frame):
        """Test the eight control points come in compass order."""
        points = frame.points
        assert [p.direction for p in points] == list(DIRECTIONS)
        assert points[0].center == QPointF(0, 0)
        assert points[1].center == QPointF(300, 0)
        assert points[4].center == QPointF(600, 400)
        assert points[7].center == QPointF(0, 200)

    def test_mouse_down_outside_points(self, frame):
        """Test pressing away from every point engages nothing."""
        assert frame.handle_mouse_down(at(300, 200)) is False
        assert frame.current_point is None

    def test_cursor_at_points(self, frame):
        """Test each control point reports a matching resize cursor."""
        assert frame.cursor_at(QPointF(0, 0)) == Qt.CursorShape.SizeFDiagCursor
        assert frame.cursor_at(QPointF(600, 0)) == Qt.CursorShape.SizeBDiagCursor
        assert frame.cursor_at(QPointF(300, 0)) == Qt.CursorShape.SizeVerCursor
        assert frame.cursor_at(QPointF(0, 200)) == Qt.CursorShape.SizeHorCursor
        assert frame.cursor_at(QPointF(300, 200)) == Qt.CursorShape.ArrowCursor


class TestDrag:
    """Test dragging control points."""

    def test_corner_moves_two_edges(self, frame):
        """Test dragging the nw corner moves left and top."""
        assert drag(frame, QPointF(0, 0), QPointF(50, 30))
        assert frame.edges == (50, 30, 0, 0)

    def test_midpoint_moves_one_edge(self, frame):
        """Test dragging the east midpoint only moves the right edge."""
        assert drag(frame, QPointF(600, 200), QPointF(500, 150))
        assert frame.edges == (0, 0, 100, 0)

    def test_move_without_drag_reports_no_change(self, frame):
        """Test a move with no engaged point changes nothing."""
        assert frame.handle_mouse_move(at(100, 100)) is False
        assert frame.edges == (0, 0, 0, 0)

    def test_drag_past_opposite_edge_is_clamped(self, frame):
        """Test a frame cannot invert; the minimum gap is kept."""
        drag(frame, QPointF(0, 0), QPointF(900, 900))
        left, top, right, bottom = frame.edges
        assert left == 590
        assert top == 390
        assert frame.rect.width() == 10
        assert frame.rect.height() == 10

    def test_drag_outside_canvas_is_clamped(self, frame):
        """Test edges never go below zero."""
        drag(frame, QPointF(600, 400), QPointF(900, 900))
        assert frame.edges == (0, 0, 0, 0)

    def test_is_out_tracks_pointer(self, frame):
        """Test is_out follows whether the pointer is inside the rectangle."""
        drag(frame, QPointF(0, 0), QPointF(100, 100))
        frame.handle_mouse_move(at(50, 50))
        assert frame.is_out
        frame.handle_mouse_move(at(300, 200))
        assert not frame.is_out


class TestProportion:
    """Test aspect ratio locking."""

    def test_parse_named_and_custom(self):
        """Test named, custom and free proportions."""
        assert parse_proportion("free") is None
        assert parse_proportion("16:9") == pytest.approx(16 / 9)
        assert parse_proportion("5:4") == pytest.approx(1.25)

    @pytest.mark.parametrize("name", ["square", "0:1", "1:x", ""])
    def test_parse_invalid(self, name):
        """Test malformed names raise ValueError."""
        with pytest.raises(ValueError):
            parse_proportion(name)

    def test_change_proportion_keeps_center(self, frame):
        """Test switching to 1:1 keeps the centre and fits the canvas."""
        frame.change_proportion("1:1")
        rect = frame.rect
        assert rect.center() == QPointF(300, 200)
        assert rect.width() == pytest.approx(400)
        assert rect.height() == pytest.approx(400)

    def test_change_proportion_unknown(self, frame):
        """Test unknown proportion names raise ValueError."""
        with pytest.raises(ValueError):
            frame.change_proportion("golden")

    @pytest.mark.parametrize(
        "start,end",
        [
            (QPointF(600, 400), QPointF(400, 350)),
            (QPointF(100, 0), QPointF(100, 80)),
            (QPointF(0, 200), QPointF(120, 200)),
            (QPointF(0, 0), QPointF(50, 10)),
        ],
    )
    def test_ratio_is_kept_while_dragging(self, start, end):
        """Test the locked ratio holds after any control point drag."""
        frame = Frame(600, 400, aspect_ratio=4 / 3)
        # Grab the point nearest to start on the fitted frame
        point = min(
            frame.points,
            key=lambda p: (p.center - start).manhattanLength(),
        )
        drag(frame, point.center, point.center + (end - start))
        rect = frame.rect
        assert rect.width() > 0 and rect.height() > 0
        assert rect.width() / rect.height() == pytest.approx(4 / 3)
        left, top, right, bottom = frame.edges
        assert min(left, top, right, bottom) >= -1e-9
