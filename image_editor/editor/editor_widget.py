"""
Editor widget - the Qt host for the editing engine.

This widget composes the editor interface:
- Top toolbar with crop, rotate, resize, annotation and history actions
- Center view showing the render surface, with a line edit for text boxes
- Bottom status line with the model dimensions

Mouse and key events are translated into InputSource emissions; the
EditorController does the rest.
"""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QEvent, QPointF, QRectF, Qt, Slot
from PySide6.QtGui import QImage, QPainter
from PySide6.QtWidgets import (
    QComboBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QSpinBox,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from image_editor.editor.annotations import AnnotationStyle, RectangleAnnotation, TextAnnotation
from image_editor.editor.editor_controller import EditorController
from image_editor.editor.events import InputSource, KeyEvent, PointerEvent
from image_editor.editor.frame import PROPORTIONS
from image_editor.editor.surface import RenderSurface
from image_editor.editor.text_overlay import TextOverlay
from image_editor.services.config_service import ConfigService
from image_editor.services.logging_service import get_logger


class SurfaceView(QWidget):
    """
    Shows a RenderSurface centred in the widget and feeds it pointer input.

    Releases are always reported to the global source as well, so a drag
    that ends outside the surface is still seen by the controller.
    """

    def __init__(
        self,
        controller: EditorController,
        global_events: InputSource,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._global_events = global_events
        self._last_pos = QPointF(-1, -1)

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setMinimumSize(200, 200)
        self.setStyleSheet("background-color: #1a1a1a;")

        self._text_edit = QLineEdit(self)
        self._text_edit.hide()
        self._text_edit.installEventFilter(self)

    @property
    def text_edit(self) -> QLineEdit:
        return self._text_edit

    def eventFilter(self, watched, event) -> bool:
        # Delete clears the text annotation even while the box has focus
        if (
            watched is self._text_edit
            and event.type() == QEvent.Type.KeyPress
            and event.key() == Qt.Key.Key_Delete
        ):
            self._global_events.key_pressed.emit(KeyEvent(event.key(), event.modifiers()))
            self.update()
            return True
        return super().eventFilter(watched, event)

    def origin(self) -> QPointF:
        """Widget position of the surface's top-left corner."""
        surface = self._controller.surface
        return QPointF(
            max(0.0, (self.width() - surface.width) / 2),
            max(0.0, (self.height() - surface.height) / 2),
        )

    def to_surface(self, pos: QPointF) -> QPointF:
        return pos - self.origin()

    def _pointer(self, event) -> PointerEvent:
        pos = self.to_surface(event.position())
        self._last_pos = pos
        return PointerEvent(pos, event.buttons())

    def _inside(self, pos: QPointF) -> bool:
        return self._controller.surface.rect().contains(pos)

    # ─── Event Handlers ───────────────────────────────────────────────────

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        try:
            image = self._controller.surface.image()
            if not image.isNull():
                painter.drawImage(self.origin(), image)
        finally:
            painter.end()

    def mousePressEvent(self, event) -> None:
        pointer = self._pointer(event)
        if self._inside(pointer.pos):
            self._controller.active_input_source.pointer_pressed.emit(pointer)
        self._global_events.pointer_pressed.emit(pointer)
        self.update()

    def mouseMoveEvent(self, event) -> None:
        pointer = self._pointer(event)
        if self._inside(pointer.pos):
            self._controller.active_input_source.pointer_moved.emit(pointer)
        self._global_events.pointer_moved.emit(pointer)
        self.update()

    def mouseReleaseEvent(self, event) -> None:
        pointer = self._pointer(event)
        if self._inside(pointer.pos):
            self._controller.active_input_source.pointer_released.emit(pointer)
        self._global_events.pointer_released.emit(pointer)
        self.update()

    def enterEvent(self, event) -> None:
        pointer = PointerEvent(self.to_surface(event.position()))
        self._controller.active_input_source.pointer_entered.emit(pointer)
        super().enterEvent(event)

    def leaveEvent(self, event) -> None:
        self._controller.active_input_source.pointer_left.emit(PointerEvent(self._last_pos))
        self.update()
        super().leaveEvent(event)


class EditorWidget(QWidget):
    """
    Main editor widget composing toolbar, surface view and status line.
    """

    def __init__(self, config_service: Optional[ConfigService] = None, parent=None):
        super().__init__(parent)
        self._logger = get_logger(__name__)
        self._config = config_service

        self._global_events = InputSource(self)
        self._surface = RenderSurface()
        self._controller = EditorController(self._surface, self._global_events, config_service, self)
        self._overlay: Optional[TextOverlay] = None
        self._style = AnnotationStyle()

        self._setup_ui()
        self._connect_signals()
        self._on_history_changed(False, False)

    @property
    def controller(self) -> EditorController:
        return self._controller

    def _setup_ui(self) -> None:
        """Build the UI layout."""
        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(0, 0, 0, 0)
        main_layout.setSpacing(0)

        # ─── Top Toolbar ──────────────────────────────────────────────
        self._toolbar = QToolBar()
        self._toolbar.setMovable(False)

        self._toolbar.addAction("Open", self._open_image)
        self._toolbar.addSeparator()

        self._toolbar.addAction("Crop", self._open_crop)
        self._proportion = QComboBox()
        self._proportion.addItems(list(PROPORTIONS))
        self._proportion.setToolTip("Crop proportion")
        self._proportion.currentTextChanged.connect(self._on_proportion_selected)
        self._toolbar.addWidget(self._proportion)
        self._toolbar.addAction("Apply Crop", self._apply_crop)
        self._toolbar.addSeparator()

        self._toolbar.addAction("Rotate Left", lambda: self._turn(-90))
        self._toolbar.addAction("Rotate Right", lambda: self._turn(90))
        self._toolbar.addSeparator()

        self._width_spin = QSpinBox()
        self._width_spin.setRange(1, 20000)
        self._height_spin = QSpinBox()
        self._height_spin.setRange(1, 20000)
        self._toolbar.addWidget(self._width_spin)
        self._toolbar.addWidget(self._height_spin)
        self._toolbar.addAction("Resize", self._resize)
        self._toolbar.addAction("Done", self._finish_resize)
        self._toolbar.addSeparator()

        self._toolbar.addAction("Rectangle", self._add_rectangle)
        self._toolbar.addAction("Text", self._add_text)
        self._toolbar.addAction("Save Annotation", self._save_annotation)
        self._toolbar.addSeparator()

        self._undo_action = self._toolbar.addAction("Undo", self._undo)
        self._redo_action = self._toolbar.addAction("Redo", self._redo)
        self._toolbar.addSeparator()

        self._toolbar.addAction("Export", self._export)

        main_layout.addWidget(self._toolbar)

        # ─── Center Content ───────────────────────────────────────────
        self._view = SurfaceView(self._controller, self._global_events)
        main_layout.addWidget(self._view, 1)

        # ─── Bottom Status Line ───────────────────────────────────────
        status = QHBoxLayout()
        status.setContentsMargins(8, 4, 8, 4)
        self._dimensions = QLabel("No image")
        status.addWidget(self._dimensions)
        status.addStretch(1)
        main_layout.addLayout(status)

    def _connect_signals(self) -> None:
        """Connect controller signals."""
        self._controller.cursor_changed.connect(self._on_cursor_changed)
        self._controller.history_changed.connect(self._on_history_changed)
        self._controller.image_changed.connect(self._on_image_changed)
        self._controller.text_overlay_changed.connect(self._on_text_overlay_changed)
        self._view.text_edit.textChanged.connect(self._on_text_typed)
        self._view.text_edit.returnPressed.connect(self._save_annotation)

    # ─── Signal Handlers ──────────────────────────────────────────────────

    @Slot(int)
    def _on_cursor_changed(self, shape: int) -> None:
        self._view.setCursor(Qt.CursorShape(shape))

    @Slot(bool, bool)
    def _on_history_changed(self, can_undo: bool, can_redo: bool) -> None:
        self._undo_action.setEnabled(can_undo)
        self._redo_action.setEnabled(can_redo)

    @Slot()
    def _on_image_changed(self) -> None:
        edited = self._controller.edited_image
        if edited is None:
            self._dimensions.setText("No image")
        else:
            size = edited.size
            self._dimensions.setText(f"{size.width()} x {size.height()}")
            self._width_spin.setValue(size.width())
            self._height_spin.setValue(size.height())
        self._view.update()

    @Slot(object)
    def _on_text_overlay_changed(self, overlay: Optional[TextOverlay]) -> None:
        if self._overlay is not None:
            self._overlay.opened.disconnect(self._show_text_edit)
            self._overlay.closed.disconnect(self._hide_text_edit)
        self._overlay = overlay
        self._hide_text_edit()
        if overlay is not None:
            overlay.opened.connect(self._show_text_edit)
            overlay.closed.connect(self._hide_text_edit)

    @Slot(QRectF)
    def _show_text_edit(self, rect: QRectF) -> None:
        edit = self._view.text_edit
        edit.blockSignals(True)
        edit.clear()
        edit.blockSignals(False)
        edit.setGeometry(rect.translated(self._view.origin()).toRect())
        edit.show()
        edit.setFocus()

    @Slot()
    def _hide_text_edit(self) -> None:
        self._view.text_edit.hide()
        self._view.setFocus()

    @Slot(str)
    def _on_text_typed(self, text: str) -> None:
        if self._overlay is not None:
            self._overlay.set_text(text)

    @Slot(str)
    def _on_proportion_selected(self, name: str) -> None:
        self._controller.change_cut_proportion(name)
        self._view.update()

    # ─── Actions ──────────────────────────────────────────────────────────

    def set_image(self, image: QImage) -> None:
        """Load an image into the editor, dropping any previous history."""
        self._controller.reset()
        self._controller.load_image(image)
        self._view.update()

    def _open_image(self) -> None:
        path, _ = QFileDialog.getOpenFileName(
            self, "Open Image", str(Path.home()), "Images (*.png *.jpg *.jpeg *.bmp *.gif)"
        )
        if not path:
            return
        image = QImage(path)
        if image.isNull():
            self._logger.error(f"Could not load image from {path}")
            return
        self.set_image(image)

    def _open_crop(self) -> None:
        self._controller.open_cut_frame(self._proportion.currentText())
        self._view.update()

    def _apply_crop(self) -> None:
        if not self._controller.save_cropping():
            self._controller.close_cut_frame()
        self._view.update()

    def _turn(self, angle: float) -> None:
        self._controller.turn(angle)
        self._view.update()

    def _resize(self) -> None:
        self._controller.resize(self._width_spin.value(), self._height_spin.value())
        self._view.update()

    def _finish_resize(self) -> None:
        self._controller.close_resize_editor()
        self._view.update()

    def _add_rectangle(self) -> None:
        self._controller.add_annotation(RectangleAnnotation(self._style.clone()))
        self._view.update()

    def _add_text(self) -> None:
        self._controller.add_annotation(TextAnnotation(self._style.clone()))
        self._view.update()

    def _save_annotation(self) -> None:
        self._controller.save_annotation()
        self._view.update()

    def _undo(self) -> None:
        self._controller.undo()
        self._view.update()

    def _redo(self) -> None:
        self._controller.redo()
        self._view.update()

    def _export(self) -> None:
        """Encode the full-resolution image and write it to the save folder."""
        if self._controller.edited_image is None:
            return

        blob = asyncio.run(self._controller.upload_image())
        self._view.update()
        if blob is None:
            self._logger.error("Export failed")
            return

        if self._config:
            save_folder = Path(self._config.default_save_folder)
            extension = self._config.export_format.lower()
        else:
            save_folder = Path.home() / "Pictures"
            extension = "png"

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = save_folder / f"image_editor_{timestamp}.{extension}"
        try:
            save_folder.mkdir(parents=True, exist_ok=True)
            filepath.write_bytes(blob)
            self._logger.info(f"Saved to {filepath}")
        except OSError as e:
            self._logger.error(f"Failed to save to {filepath}: {e}")

    # ─── Key Events ───────────────────────────────────────────────────────

    def keyPressEvent(self, event) -> None:
        """Forward keys to the engine and handle history shortcuts."""
        key = event.key()
        modifiers = event.modifiers()

        if key == Qt.Key.Key_Z and modifiers & Qt.KeyboardModifier.ControlModifier:
            if modifiers & Qt.KeyboardModifier.ShiftModifier:
                self._redo()
            else:
                self._undo()
            return

        self._global_events.key_pressed.emit(KeyEvent(key, modifiers))
        self._view.update()
        super().keyPressEvent(event)
