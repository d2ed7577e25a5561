"""
Pytest configuration and shared fixtures for the image editor tests.

Qt runs on the offscreen platform so the tests need no display.
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QImage
from PySide6.QtWidgets import QApplication

from image_editor.editor.editor_controller import EditorController
from image_editor.editor.events import InputSource, PointerEvent
from image_editor.editor.surface import RenderSurface


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Provide the QApplication required for painting, fonts and widgets."""
    app = QApplication.instance() or QApplication([])
    yield app


def make_image(width: int, height: int, color: QColor = QColor(40, 120, 200)) -> QImage:
    """Create a solid test image."""
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(color)
    return image


def press(x: float, y: float) -> PointerEvent:
    return PointerEvent(QPointF(x, y), Qt.MouseButton.LeftButton)


def release(x: float, y: float) -> PointerEvent:
    return PointerEvent(QPointF(x, y), Qt.MouseButton.NoButton)


@pytest.fixture
def large_image():
    """A 1200x800 image, twice the size of the preview viewport."""
    return make_image(1200, 800)


@pytest.fixture
def surface():
    return RenderSurface()


@pytest.fixture
def global_events():
    return InputSource()


@pytest.fixture
def controller(surface, global_events):
    """A controller over an empty surface with default settings."""
    editor = EditorController(surface, global_events)
    yield editor
    editor.dispose()


@pytest.fixture
def loaded_controller(controller, large_image):
    """A controller with the 1200x800 image loaded."""
    controller.load_image(large_image)
    return controller
