"""
Tests for resize-editor positioning.

Tests cover:
- Viewport sizing against the maximum bounds
- Clamped panning on oversized axes
- Centring on axes that fit
"""

from PySide6.QtCore import QPointF, QSize

from image_editor.editor.positioning import ResizePositioner


class TestResizePositioner:
    """Test pan offsets."""

    def test_viewport_is_limited_by_bounds(self):
        """Test the viewport is the content size capped at the bounds."""
        positioner = ResizePositioner(1000, 300, 643, 400)
        assert positioner.viewport == QSize(643, 300)
        assert positioner.content_size == QSize(1000, 300)
        assert positioner.can_pan()

    def test_content_that_fits_cannot_pan(self):
        """Test no panning when the content fits the bounds."""
        positioner = ResizePositioner(200, 100, 643, 400)
        assert not positioner.can_pan()
        assert positioner.offset == QPointF(0, 0)

    def test_drag_follows_pointer(self):
        """Test the offset moves by the pointer distance."""
        positioner = ResizePositioner(1000, 1000, 643, 400)
        positioner.press(QPointF(100, 100))
        assert positioner.drag(QPointF(50, 80))
        assert positioner.offset == QPointF(-50, -20)

    def test_drag_is_clamped(self):
        """Test the content edges never move inside the viewport."""
        positioner = ResizePositioner(1000, 1000, 643, 400)
        positioner.press(QPointF(0, 0))
        positioner.drag(QPointF(500, 500))
        assert positioner.offset == QPointF(0, 0)

        positioner.drag(QPointF(-5000, -5000))
        assert positioner.offset == QPointF(-357, -600)

    def test_drag_without_press(self):
        """Test dragging before press changes nothing."""
        positioner = ResizePositioner(1000, 1000, 643, 400)
        assert positioner.drag(QPointF(10, 10)) is False
        assert not positioner.is_dragging

    def test_release_ends_drag(self):
        """Test release stops the drag and keeps the offset."""
        positioner = ResizePositioner(1000, 1000, 643, 400)
        positioner.press(QPointF(0, 0))
        positioner.drag(QPointF(-10, 0))
        positioner.release()
        assert not positioner.is_dragging
        assert positioner.drag(QPointF(-100, 0)) is False
        assert positioner.offset == QPointF(-10, 0)
