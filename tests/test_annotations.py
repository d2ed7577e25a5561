"""
Tests for annotation models.

Tests cover:
- Draw mode placement (drag and click)
- Rectangle handles, hit-testing and resizing
- Axis inversion and resize cursors
- Text annotation overlay lifecycle
"""

import pytest
from PySide6.QtCore import QPointF, QRectF, Qt

from image_editor.editor.annotations import (
    SENTINEL,
    AnnotationMode,
    Placement,
    RectangleAnnotation,
    TextAnnotation,
)
from image_editor.editor.text_overlay import TextOverlay


@pytest.fixture
def rectangle():
    """A committed rectangle from (50, 50) to (150, 120)."""
    annotation = RectangleAnnotation()
    annotation.set_start_point(QPointF(50, 50))
    annotation.move_end_point(QPointF(150, 120))
    annotation.set_end_point(QPointF(150, 120))
    annotation.commit()
    return annotation


class TestDrawMode:
    """Test placement state."""

    def test_new_annotation_is_empty(self):
        """Test a new annotation starts in draw mode with sentinel geometry."""
        annotation = RectangleAnnotation()
        assert annotation.mode == AnnotationMode.DRAW
        assert annotation.placement == Placement.IDLE
        assert annotation.start == SENTINEL
        assert annotation.end == SENTINEL
        assert not annotation.has_geometry

    def test_set_start_point_sets_both_corners(self):
        """Test start and end are both valid once a start point is set."""
        annotation = RectangleAnnotation()
        annotation.set_start_point(QPointF(10, 20))
        assert annotation.start == QPointF(10, 20)
        assert annotation.end == QPointF(10, 20)
        assert annotation.is_set_start_point

    def test_move_end_point_only_while_dragging(self):
        """Test the end point follows the pointer only during a drag."""
        annotation = RectangleAnnotation()
        annotation.move_end_point(QPointF(30, 30))
        assert annotation.end == SENTINEL

        annotation.set_start_point(QPointF(10, 10))
        annotation.move_end_point(QPointF(30, 30))
        assert annotation.end == QPointF(30, 30)

    def test_click_mode(self):
        """Test entering click mode keeps the start point."""
        annotation = RectangleAnnotation()
        annotation.set_start_point(QPointF(10, 10))
        annotation.enter_click_mode()
        assert annotation.is_click_mode
        assert annotation.start == QPointF(10, 10)

    def test_commit_switches_to_edit(self, rectangle):
        """Test commit moves to edit mode with no engaged handle."""
        assert rectangle.mode == AnnotationMode.EDIT
        assert rectangle.point == ""
        assert not rectangle.is_click_mode
        assert rectangle.start == QPointF(50, 50)
        assert rectangle.end == QPointF(150, 120)

    def test_clear_resets_to_sentinel(self, rectangle):
        """Test clear drops geometry and returns to draw mode."""
        rectangle.clear()
        assert rectangle.mode == AnnotationMode.DRAW
        assert rectangle.start == SENTINEL
        assert rectangle.end == SENTINEL
        assert not rectangle.invert


class TestRectangleHandles:
    """Test rectangle handle detection and resizing."""

    def test_named_handles(self, rectangle):
        """Test the four named handles sit on the corners."""
        handles = rectangle.named_handles()
        assert handles["left_top"] == QPointF(50, 50)
        assert handles["start"] == QPointF(150, 50)
        assert handles["right_bottom"] == QPointF(150, 120)
        assert handles["end"] == QPointF(50, 120)

    def test_eight_drawn_handles(self, rectangle):
        """Test corners and edge midpoints are drawn."""
        rects = rectangle.handle_rects()
        assert len(rects) == 8
        assert rects[0].center() == QPointF(50, 50)
        assert rects[1].center() == QPointF(100, 50)
        assert rects[7].center() == QPointF(150, 120)

    def test_detect_point(self, rectangle):
        """Test handles, body and empty space are told apart."""
        assert rectangle.detect_point(QPointF(151, 49)) == "start"
        assert rectangle.detect_point(QPointF(100, 90)) == "body"
        assert rectangle.detect_point(QPointF(300, 300)) == ""
        assert rectangle.point == ""

    def test_detect_point_only_in_edit_mode(self):
        """Test nothing is hit while the shape is still being drawn."""
        annotation = RectangleAnnotation()
        annotation.set_start_point(QPointF(50, 50))
        annotation.move_end_point(QPointF(150, 120))
        assert annotation.detect_point(QPointF(50, 50)) == ""

    def test_move_detect_point_sets_none_point(self, rectangle):
        """Test hovering empty space flags is_none_point."""
        rectangle.move_detect_point(QPointF(50, 50))
        assert rectangle.hover_point == "left_top"
        assert not rectangle.is_none_point

        rectangle.move_detect_point(QPointF(400, 400))
        assert rectangle.is_none_point
        assert rectangle.cursor_for(rectangle.hover_point) == Qt.CursorShape.ArrowCursor

    @pytest.mark.parametrize(
        "handle,opposite",
        [("left_top", "right_bottom"), ("right_bottom", "left_top"), ("start", "end"), ("end", "start")],
    )
    def test_resize_keeps_opposite_corner(self, rectangle, handle, opposite):
        """Test dragging a handle leaves the diagonally opposite one in place."""
        fixed = rectangle.named_handles()[opposite]
        rectangle.detect_point(rectangle.named_handles()[handle])
        rectangle.calculate_position(QPointF(90, 80))
        assert rectangle.named_handles()[opposite] == fixed
        assert rectangle.named_handles()[handle] == QPointF(90, 80)

    def test_resize_never_collapses(self, rectangle):
        """Test an axis that would become zero keeps its last size."""
        rectangle.detect_point(QPointF(150, 120))
        rectangle.calculate_position(QPointF(50, 200))
        assert rectangle.end == QPointF(150, 200)
        assert rectangle.rect().width() > 0

    def test_body_drag_moves_shape(self, rectangle):
        """Test dragging the body translates both corners."""
        rectangle.detect_point(QPointF(100, 90))
        rectangle.calculate_position(QPointF(110, 100))
        assert rectangle.start == QPointF(60, 60)
        assert rectangle.end == QPointF(160, 130)

    def test_release_point(self, rectangle):
        """Test releasing ends the drag."""
        rectangle.detect_point(QPointF(50, 50))
        rectangle.release_point()
        assert rectangle.point == ""


class TestInvert:
    """Test axis inversion and cursor glyphs."""

    def test_cursors_before_inversion(self, rectangle):
        """Test the default diagonals of each handle."""
        assert not rectangle.invert
        assert rectangle.cursor_for("start") == Qt.CursorShape.SizeBDiagCursor
        assert rectangle.cursor_for("end") == Qt.CursorShape.SizeBDiagCursor
        assert rectangle.cursor_for("left_top") == Qt.CursorShape.SizeFDiagCursor
        assert rectangle.cursor_for("right_bottom") == Qt.CursorShape.SizeFDiagCursor
        assert rectangle.cursor_for("body") == Qt.CursorShape.SizeAllCursor

    def test_end_handle_crossing_inverts(self, rectangle):
        """Test dragging end above-left of start flips the start cursor."""
        rectangle.detect_point(QPointF(50, 120))
        assert rectangle.point == "end"
        rectangle.calculate_position(QPointF(40, 30))

        assert rectangle.start == QPointF(40, 50)
        assert rectangle.end == QPointF(150, 30)
        assert rectangle.invert
        assert rectangle.cursor_for("start") == Qt.CursorShape.SizeFDiagCursor
        assert rectangle.cursor_for("left_top") == Qt.CursorShape.SizeBDiagCursor

    def test_crossing_both_axes_is_not_inverted(self, rectangle):
        """Test crossing both axes keeps the original diagonals."""
        rectangle.detect_point(QPointF(150, 120))
        rectangle.calculate_position(QPointF(10, 10))
        assert not rectangle.invert

    def test_commit_computes_invert(self):
        """Test a shape drawn up-right is inverted from the start."""
        annotation = RectangleAnnotation()
        annotation.set_start_point(QPointF(50, 120))
        annotation.set_end_point(QPointF(150, 50))
        annotation.commit()
        assert annotation.invert


class TestRecords:
    """Test conversion to model coordinates."""

    def test_to_record_divides_by_scale(self, rectangle):
        """Test geometry is divided by the preview scale."""
        record = rectangle.to_record(0.5)
        assert record.start == QPointF(100, 100)
        assert record.end == QPointF(300, 240)
        assert record.text == ""


class TestTextAnnotation:
    """Test the text overlay lifecycle."""

    def test_open_text_frame_binds_rect(self):
        """Test the overlay opens over the annotation rectangle."""
        annotation = TextAnnotation()
        annotation.set_start_point(QPointF(200, 100))
        annotation.set_end_point(QPointF(20, 10))
        annotation.commit()

        opened = []
        annotation.canvas_area.opened.connect(opened.append)
        annotation.open_text_frame()

        assert annotation.canvas_area.is_open
        assert annotation.canvas_area.is_focused
        assert opened == [QRectF(20, 10, 180, 90)]

    def test_text_comes_from_overlay(self):
        """Test the annotation text is the overlay's text."""
        annotation = TextAnnotation()
        annotation.canvas_area.set_text("note")
        assert annotation.text == "note"
        assert annotation.to_record(1.0).text == "note"

    def test_reset_overlay(self):
        """Test a reset closes the old overlay and installs an empty one."""
        annotation = TextAnnotation()
        old = annotation.canvas_area
        old.open(QRectF(0, 0, 10, 10))
        old.set_text("draft")

        new = annotation.reset_overlay()
        assert new is not old
        assert not old.is_open
        assert not old.is_attached
        assert annotation.text == ""

    def test_reset_overlay_with_given_overlay(self):
        """Test a caller-supplied overlay is installed as is."""
        annotation = TextAnnotation()
        overlay = TextOverlay()
        assert annotation.reset_overlay(overlay) is overlay
        assert annotation.canvas_area is overlay
