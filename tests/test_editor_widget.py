"""
Tests for the Qt host widgets.

Tests cover:
- Delete reaching the controller while the text box has focus
- Other keys staying with the text box
"""

import pytest
from PySide6.QtCore import QEvent, Qt
from PySide6.QtGui import QKeyEvent
from PySide6.QtWidgets import QApplication

from image_editor.editor.annotations import AnnotationMode, TextAnnotation
from image_editor.editor.editor_widget import SurfaceView

from conftest import press, release


def send_key(widget, key: Qt.Key, text: str = "") -> bool:
    event = QKeyEvent(QEvent.Type.KeyPress, key, Qt.KeyboardModifier.NoModifier, text)
    return QApplication.sendEvent(widget, event)


@pytest.fixture
def view(loaded_controller, global_events):
    widget = SurfaceView(loaded_controller, global_events)
    yield widget
    widget.deleteLater()


@pytest.fixture
def placed_text(loaded_controller):
    """A text annotation placed through its overlay, ready for typing."""
    annotation = TextAnnotation()
    loaded_controller.add_annotation(annotation)
    events = annotation.canvas_area.events
    events.pointer_pressed.emit(press(20, 20))
    events.pointer_moved.emit(press(220, 80))
    events.pointer_released.emit(release(220, 80))
    return annotation


class TestSurfaceView:
    """Test key forwarding from the text box."""

    def test_delete_in_text_box_clears_annotation(self, view, placed_text):
        """Test Delete typed into the text box clears the text annotation."""
        assert placed_text.mode == AnnotationMode.EDIT
        old_overlay = placed_text.canvas_area

        send_key(view.text_edit, Qt.Key.Key_Delete)

        assert placed_text.mode == AnnotationMode.DRAW
        assert not placed_text.has_geometry
        assert placed_text.canvas_area is not old_overlay

    def test_typing_stays_in_text_box(self, view, placed_text):
        """Test ordinary keys are handled by the text box itself."""
        send_key(view.text_edit, Qt.Key.Key_A, "a")

        assert placed_text.mode == AnnotationMode.EDIT
        assert placed_text.canvas_area.is_open
