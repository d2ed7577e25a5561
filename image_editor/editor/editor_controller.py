"""
Editor controller.

The EditorController owns the edited image, the crop frame and the active
annotation. It routes pointer and keyboard input to whichever tool is open,
renders the preview onto a RenderSurface and commits finished edits into the
image history.

Tools:
- Resize editor: pans staged content inside the viewport
- Cut frame: crop rectangle with a dimmed outside
- Annotation: rectangle or text, drawn then edited
"""

from enum import Enum, auto
from typing import Dict, Optional

from PySide6.QtCore import QObject, QPointF, QRectF, Qt, Signal
from PySide6.QtGui import QColor, QImage, QPen, QTransform

from image_editor.editor.annotations import (
    Annotation,
    AnnotationMode,
    Placement,
    TextAnnotation,
)
from image_editor.editor.edited_image import EditedImage
from image_editor.editor.events import (
    InputSource,
    KeyEvent,
    PointerEvent,
    Subscription,
    subscribe,
)
from image_editor.editor.frame import Frame
from image_editor.editor.positioning import ResizePositioner
from image_editor.editor.surface import RenderSurface
from image_editor.services.config_service import DEFAULT_CONFIG, ConfigService
from image_editor.services.logging_service import get_logger


class EditorMode(Enum):
    """The tool that currently receives pointer input."""
    NONE = auto()
    SIZE = auto()
    CUT = auto()
    ANNOTATION = auto()


# Results of undo() / redo()
HISTORY_NOOP = 0
HISTORY_MOVED = 1
HISTORY_AT_BOUNDARY = 2


class EditorController(QObject):
    """
    Orchestrates the editing tools over a RenderSurface.

    Signals:
        cursor_changed: Value of the Qt.CursorShape the host should show
            over the surface.
        history_changed: (undo available, redo available).
        image_changed: Emitted when a change is committed or history moves.
        text_overlay_changed: The TextOverlay the host should render, or None.
    """

    cursor_changed = Signal(int)
    history_changed = Signal(bool, bool)
    image_changed = Signal()
    text_overlay_changed = Signal(object)

    def __init__(
        self,
        surface: RenderSurface,
        global_events: Optional[InputSource] = None,
        config: Optional[ConfigService] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        """
        Initialize the controller.

        Args:
            surface: Where the preview is rendered.
            global_events: Window-wide input, used for releases outside the
                surface and for the delete key. A private source is created
                if omitted.
            config: Editor settings; built-in defaults are used if omitted.
            parent: Optional QObject parent.
        """
        super().__init__(parent)
        self._logger = get_logger(__name__)

        self._surface = surface
        self._global_events = global_events or InputSource(self)

        settings = config.editor if config else DEFAULT_CONFIG["editor"]
        self._max_width = int(settings["max_width"])
        self._max_height = int(settings["max_height"])
        self._handle_size = int(settings["handle_size"])
        self._min_crop_size = int(settings["min_crop_size"])
        self._crop_dim_alpha = int(settings["crop_dim_alpha"])
        self._export_format = config.export_format if config else DEFAULT_CONFIG["export_format"]

        # Sampled once; a surface without a drawing context stays that way
        self._has_context = surface.is_drawable()
        if not self._has_context:
            self._logger.warning("Rendering surface has no drawing context; editing is disabled")

        self.edited_image: Optional[EditedImage] = None
        self.current_editor = EditorMode.NONE
        self.current_frame: Optional[Frame] = None
        self.current_annotation: Optional[Annotation] = None
        self._positioner: Optional[ResizePositioner] = None
        self._subscriptions: Dict[str, Subscription] = {}
        self._cursor = Qt.CursorShape.ArrowCursor

    # ─── Properties ───────────────────────────────────────────────────────

    @property
    def surface(self) -> RenderSurface:
        return self._surface

    @property
    def global_events(self) -> InputSource:
        return self._global_events

    @property
    def has_context(self) -> bool:
        return self._has_context

    @property
    def scale(self) -> float:
        return self.edited_image.scale if self.edited_image else 1.0

    @property
    def cursor(self) -> Qt.CursorShape:
        return self._cursor

    @property
    def positioner(self) -> Optional[ResizePositioner]:
        return self._positioner

    @property
    def is_undo_inactive(self) -> bool:
        return self.edited_image is None or not self.edited_image.can_undo

    @property
    def is_redo_inactive(self) -> bool:
        return self.edited_image is None or not self.edited_image.can_redo

    @property
    def active_input_source(self) -> InputSource:
        """Where the host should deliver pointer input over the preview."""
        if isinstance(self.current_annotation, TextAnnotation):
            return self.current_annotation.canvas_area.events
        return self._surface.events

    # ─── Helpers ──────────────────────────────────────────────────────────

    def _require_context(self, operation: str) -> bool:
        if not self._has_context:
            self._logger.warning(f"{operation} skipped: no drawing context")
            return False
        if self.edited_image is None:
            self._logger.debug(f"{operation} skipped: no image loaded")
            return False
        return True

    def _subscribe(self, key: str, source: InputSource, **handlers) -> None:
        self._unsubscribe(key)
        self._subscriptions[key] = subscribe(source, **handlers)

    def _unsubscribe(self, key: str) -> None:
        subscription = self._subscriptions.pop(key, None)
        if subscription is not None:
            subscription.dispose()

    def _set_cursor(self, cursor: Qt.CursorShape) -> None:
        if cursor != self._cursor:
            self._cursor = cursor
            self.cursor_changed.emit(int(cursor.value))

    def _emit_history(self) -> None:
        self.history_changed.emit(not self.is_undo_inactive, not self.is_redo_inactive)

    def _is_on_surface(self, pos: QPointF) -> bool:
        return self._surface.rect().contains(pos)

    def _clamp_pos(self, pos: QPointF) -> QPointF:
        return QPointF(
            max(0.0, min(pos.x(), float(self._surface.width))),
            max(0.0, min(pos.y(), float(self._surface.height))),
        )

    def _close_active_tool(self, apply: bool = True) -> None:
        if self.current_editor == EditorMode.SIZE:
            self.close_resize_editor(apply=apply)
        elif self.current_editor == EditorMode.CUT:
            self.close_cut_frame()
        elif self.current_editor == EditorMode.ANNOTATION:
            self.remove_annotation()

    def dispose(self) -> None:
        """Close any open tool and release every event handler."""
        self._close_active_tool(apply=False)
        for key in list(self._subscriptions):
            self._unsubscribe(key)

    # ─── Image ────────────────────────────────────────────────────────────

    def load_image(self, image: QImage) -> None:
        """
        Show an image in the editor.

        The first call creates the edited image and its history. Later calls
        only refresh the preview; use reset() to start over with a new image.
        """
        if self.edited_image is None:
            self.edited_image = EditedImage(image, self._max_width, self._max_height)
            self._logger.info(f"Image loaded: {image.width()}x{image.height()}")
            self._emit_history()
            self.image_changed.emit()
        self.redraw()

    def reset(self) -> None:
        """Drop the edited image and its history."""
        self._close_active_tool(apply=False)
        self.edited_image = None
        self._surface.set_size(0, 0)
        self._emit_history()
        self._logger.info("Editor reset")

    async def upload_image(self) -> Optional[bytes]:
        """
        Export the edited image at full resolution.

        Commits staged changes, renders the model image 1:1 onto the surface
        and encodes it. The preview is restored afterwards.

        Returns:
            The encoded image, or None if there is nothing to export.
        """
        if not self._require_context("Export"):
            return None

        self.close_resize_editor()
        self.apply_changes()
        current = self.edited_image.current
        width, height = current.width(), current.height()
        self._surface.set_size(width, height)
        self._surface.blit(current, QRectF(current.rect()), QRectF(0, 0, width, height))

        blob = await self._surface.to_encoded_blob(self._export_format)
        self._logger.info(f"Exported {width}x{height} image as {self._export_format}")

        self.redraw()
        return blob

    # ─── History ──────────────────────────────────────────────────────────

    def undo(self) -> int:
        """
        Step back in history.

        Returns:
            0 if already at the first entry, 2 if the first entry was
            reached, 1 otherwise.
        """
        if self.edited_image is None:
            return HISTORY_NOOP
        self._close_active_tool(apply=False)
        if not self.edited_image.back_history():
            return HISTORY_NOOP

        self._after_history_move("Undo")
        return HISTORY_AT_BOUNDARY if self.edited_image.history_index == 0 else HISTORY_MOVED

    def redo(self) -> int:
        """
        Step forward in history.

        Returns:
            0 if already at the last entry, 2 if the last entry was
            reached, 1 otherwise.
        """
        if self.edited_image is None:
            return HISTORY_NOOP
        self._close_active_tool(apply=False)
        if not self.edited_image.forward_history():
            return HISTORY_NOOP

        self._after_history_move("Redo")
        at_end = self.edited_image.history_index == len(self.edited_image.history) - 1
        return HISTORY_AT_BOUNDARY if at_end else HISTORY_MOVED

    def _after_history_move(self, action: str) -> None:
        self._logger.info(
            f"{action} to entry {self.edited_image.history_index} "
            f"of {len(self.edited_image.history)}"
        )
        self.redraw()
        self._emit_history()
        self.image_changed.emit()

    def apply_changes(self) -> bool:
        """
        Commit staged edits as a new history entry.

        Returns:
            True if an entry was appended.
        """
        if self.edited_image is None or not self.edited_image.commit():
            return False
        self._logger.info(f"Changes applied (history entry {self.edited_image.history_index})")
        self._emit_history()
        self.image_changed.emit()
        return True

    # ─── Rendering ────────────────────────────────────────────────────────

    def redraw(self) -> None:
        """Render the current image onto the surface at preview scale."""
        if not self._has_context or self.edited_image is None:
            return

        if self.current_editor == EditorMode.SIZE and self._positioner is not None:
            self._render_resize_editor()
            return

        size = self.edited_image.preview_size()
        self._surface.set_size(size.width(), size.height())
        current = self.edited_image.current
        self._surface.blit(current, QRectF(current.rect()), QRectF(0, 0, size.width(), size.height()))

    # ─── Resize ───────────────────────────────────────────────────────────

    def resize(self, width: int, height: int) -> None:
        """
        Stage a new model size and open the resize editor.

        The size is committed when the resize editor is closed.

        Raises:
            ValueError: If width or height is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid size: {width}x{height}")
        if not self._require_context("Resize"):
            return

        self._surface.clear()
        self.edited_image.temp_update_size(width, height)
        self._logger.info(f"Resize staged: {width}x{height}")
        self.open_resize_editor()

    def open_resize_editor(self) -> None:
        """Show the staged content 1:1 in a viewport limited to the maximum bounds."""
        if not self._require_context("Resize editor"):
            return

        if self.current_editor != EditorMode.SIZE:
            self._close_active_tool()
            self.current_editor = EditorMode.SIZE
            self._subscribe(
                "size",
                self._surface.events,
                pointer_pressed=self._on_size_press,
                pointer_moved=self._on_size_move,
                pointer_released=self._on_size_release,
                pointer_left=self._on_size_release,
            )
            self._subscribe(
                "size_global",
                self._global_events,
                pointer_released=self._on_size_release,
            )

        size = self.edited_image.size
        self._positioner = ResizePositioner(
            size.width(), size.height(), self._max_width, self._max_height
        )
        self._set_cursor(
            Qt.CursorShape.OpenHandCursor if self._positioner.can_pan() else Qt.CursorShape.ArrowCursor
        )
        self.redraw()

    def close_resize_editor(self, apply: bool = True) -> None:
        """
        Leave the resize editor.

        Args:
            apply: Commit the staged size (True) or drop it (False).
        """
        if self.current_editor != EditorMode.SIZE:
            return

        self._unsubscribe("size")
        self._unsubscribe("size_global")
        self._positioner = None
        self.current_editor = EditorMode.NONE
        self._set_cursor(Qt.CursorShape.ArrowCursor)

        if self.edited_image is not None:
            if apply:
                self.apply_changes()
            else:
                self.edited_image.discard_pending()
        self.redraw()

    def move_canvas(self, pos: QPointF) -> bool:
        """
        Pan the resize editor content to follow the pointer.

        Returns:
            True if the content moved.
        """
        if self._positioner is None:
            return False
        moved = self._positioner.drag(pos)
        if moved:
            self._render_resize_editor()
        return moved

    def _render_resize_editor(self) -> None:
        viewport = self._positioner.viewport
        offset = self._positioner.offset
        current = self.edited_image.current
        self._surface.set_size(viewport.width(), viewport.height())
        self._surface.blit(
            current,
            QRectF(current.rect()),
            QRectF(offset.x(), offset.y(), current.width(), current.height()),
        )

    def _on_size_press(self, event: PointerEvent) -> None:
        if self._positioner is None or not self._positioner.can_pan():
            return
        self._positioner.press(event.pos)
        self._set_cursor(Qt.CursorShape.ClosedHandCursor)

    def _on_size_move(self, event: PointerEvent) -> None:
        if self._positioner is not None and self._positioner.is_dragging:
            self.move_canvas(event.pos)

    def _on_size_release(self, event: PointerEvent) -> None:
        if self._positioner is None or not self._positioner.is_dragging:
            return
        self._positioner.release()
        self._set_cursor(Qt.CursorShape.OpenHandCursor)

    # ─── Rotate ───────────────────────────────────────────────────────────

    def turn(self, angle: float) -> None:
        """
        Rotate the image by angle degrees around its centre and commit.

        The preview is rendered rotated into the scaled bounding box of the
        result; the model keeps the full bounding box.
        """
        if not self._require_context("Rotate"):
            return

        self._close_active_tool()
        current = self.edited_image.current
        bounds = QTransform().rotate(angle).mapRect(QRectF(current.rect()))
        bound_width, bound_height = round(bounds.width()), round(bounds.height())
        if bound_width <= 0 or bound_height <= 0:
            return

        scale = min(self._max_width / bound_width, self._max_height / bound_height, 1.0)
        preview_width = max(1, round(bound_width * scale))
        preview_height = max(1, round(bound_height * scale))
        width, height = current.width() * scale, current.height() * scale

        self._surface.set_size(preview_width, preview_height)
        self._surface.save()
        self._surface.translate(preview_width / 2, preview_height / 2)
        self._surface.rotate(angle)
        self._surface.blit(
            current, QRectF(current.rect()), QRectF(-width / 2, -height / 2, width, height)
        )
        self._surface.reset_transform()
        self._surface.restore()

        self.edited_image.update_angle(angle)
        self.apply_changes()
        self._logger.info(f"Rotated by {angle} degrees, now {self.edited_image.angle}")

    # ─── Crop ─────────────────────────────────────────────────────────────

    def open_cut_frame(self, proportion: str = "free") -> None:
        """Open a crop frame covering the whole preview."""
        if not self._require_context("Crop"):
            return

        self._close_active_tool()
        self.redraw()
        frame = Frame(
            self._surface.width,
            self._surface.height,
            min_size=self._min_crop_size,
            handle_size=self._handle_size,
        )
        frame.change_proportion(proportion)
        self.current_frame = frame
        self.current_editor = EditorMode.CUT

        self._subscribe(
            "cut",
            self._surface.events,
            pointer_pressed=self._on_cut_press,
            pointer_moved=self._on_cut_move,
            pointer_released=self._on_cut_release,
        )
        self._subscribe(
            "cut_global",
            self._global_events,
            pointer_moved=self._on_cut_global_move,
            pointer_released=self._on_cut_release,
        )
        self.draw_cropped_image(*frame.edges)

    def change_cut_proportion(self, proportion: str) -> None:
        """
        Lock the crop frame to a named aspect ratio.

        Raises:
            ValueError: If the proportion name is not recognised.
        """
        if self.current_frame is None:
            return
        self.current_frame.change_proportion(proportion)
        self.draw_cropped_image(*self.current_frame.edges)

    def draw_cropped_image(self, left: float, top: float, right: float, bottom: float) -> None:
        """Dim the preview and show the area inside the given edges at full opacity."""
        if not self._require_context("Crop preview"):
            return

        self.redraw()
        width = self._surface.width - left - right
        height = self._surface.height - top - bottom
        self._surface.fill_rect(self._surface.rect(), QColor(0, 0, 0, self._crop_dim_alpha))
        self.cropping(left, top, width, height)

        with self._surface.painter() as painter:
            if painter is None:
                return
            painter.setPen(QPen(QColor(255, 255, 255), 1))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(QRectF(left, top, width, height))

    def cropping(self, x: float, y: float, width: float, height: float) -> None:
        """Blit the preview region (x, y, width, height) from the model image."""
        if not self._require_context("Crop preview") or width <= 0 or height <= 0:
            return
        scale = self.edited_image.scale
        self._surface.blit(
            self.edited_image.current,
            QRectF(x / scale, y / scale, width / scale, height / scale),
            QRectF(x, y, width, height),
        )

    def save_cropping(
        self,
        left: Optional[float] = None,
        top: Optional[float] = None,
        right: Optional[float] = None,
        bottom: Optional[float] = None,
    ) -> bool:
        """
        Crop the image to the given edges (default: the open frame's edges).

        Nothing happens when the edges keep the whole preview.

        Returns:
            True if a crop was committed.
        """
        if not self._require_context("Crop"):
            return False
        if None in (left, top, right, bottom):
            if self.current_frame is None:
                return False
            left, top, right, bottom = self.current_frame.edges

        width = self._surface.width - left - right
        height = self._surface.height - top - bottom
        if round(width) == self._surface.width and round(height) == self._surface.height:
            self._logger.debug("Crop keeps the whole image; nothing to save")
            return False

        if not self.edited_image.update_crop(left, top, width, height):
            return False
        committed = self.apply_changes()
        self.close_cut_frame()
        size = self.edited_image.size
        self._logger.info(f"Cropped to {size.width()}x{size.height()}")
        return committed

    def close_cut_frame(self) -> None:
        if self.current_editor != EditorMode.CUT:
            return
        self._unsubscribe("cut")
        self._unsubscribe("cut_global")
        self.current_frame = None
        self.current_editor = EditorMode.NONE
        self._set_cursor(Qt.CursorShape.ArrowCursor)
        self.redraw()

    def _on_cut_press(self, event: PointerEvent) -> None:
        if self.current_frame is not None:
            self.current_frame.handle_mouse_down(event)

    def _on_cut_move(self, event: PointerEvent) -> None:
        frame = self.current_frame
        if frame is None:
            return
        if frame.handle_mouse_move(event):
            self.draw_cropped_image(*frame.edges)
        self._set_cursor(frame.cursor_at(event.pos))

    def _on_cut_global_move(self, event: PointerEvent) -> None:
        frame = self.current_frame
        if frame is None or frame.current_point is None or self._is_on_surface(event.pos):
            return
        # Off the surface: drag to the nearest canvas position
        clamped = PointerEvent(self._clamp_pos(event.pos), event.buttons)
        if frame.handle_mouse_move(clamped):
            self.draw_cropped_image(*frame.edges)

    def _on_cut_release(self, event: PointerEvent) -> None:
        if self.current_frame is not None:
            self.current_frame.handle_mouse_up()

    # ─── Annotations ──────────────────────────────────────────────────────

    def add_annotation(self, annotation: Annotation) -> None:
        """Make annotation the active tool, in draw mode."""
        if not self._require_context("Annotation"):
            return

        self._close_active_tool()
        annotation.handle_size = self._handle_size
        self.current_annotation = annotation
        self.current_editor = EditorMode.ANNOTATION
        self._bind_annotation()
        self._set_cursor(Qt.CursorShape.CrossCursor)
        self.redraw()
        self._logger.info(f"{annotation.annotation_type.name.capitalize()} annotation started")

    def _bind_annotation(self) -> None:
        annotation = self.current_annotation
        self._subscribe(
            "annotation",
            self.active_input_source,
            pointer_pressed=self._on_annotation_press,
            pointer_moved=self._on_annotation_move,
            pointer_released=self._on_annotation_release,
        )
        self._subscribe(
            "annotation_global",
            self._global_events,
            pointer_moved=self._on_global_move,
            pointer_released=self._on_global_release,
            key_pressed=self._on_key,
        )
        if isinstance(annotation, TextAnnotation):
            self.text_overlay_changed.emit(annotation.canvas_area)

    def _unbind_annotation(self) -> None:
        self._unsubscribe("annotation")
        self._unsubscribe("annotation_global")
        if isinstance(self.current_annotation, TextAnnotation):
            self.text_overlay_changed.emit(None)
        self.current_annotation = None
        self.current_editor = EditorMode.NONE
        self._set_cursor(Qt.CursorShape.ArrowCursor)

    def draw_annotation(self) -> None:
        """Redraw the preview with the active annotation (and its handles in edit mode)."""
        if not self._require_context("Annotation preview") or self.current_annotation is None:
            return

        self.redraw()
        annotation = self.current_annotation
        with self._surface.painter() as painter:
            if painter is None:
                return
            annotation.paint(painter)
            if annotation.mode == AnnotationMode.EDIT:
                annotation.paint_handles(painter)

    def save_annotation(self) -> bool:
        """
        Paint the active annotation into the image and commit it.

        Returns:
            True if a history entry was appended.
        """
        annotation = self.current_annotation
        if annotation is None or self.edited_image is None:
            return False
        if annotation.mode != AnnotationMode.EDIT or not annotation.has_geometry:
            self._logger.debug("Nothing drawn; discarding annotation")
            self.remove_annotation()
            return False

        if isinstance(annotation, TextAnnotation):
            self.edited_image.update_text_annotation(annotation)
            annotation.close_text_frame()
        else:
            self.edited_image.update_annotation(annotation)

        committed = self.apply_changes()
        self._unbind_annotation()
        self.redraw()
        self._logger.info(f"{annotation.annotation_type.name.capitalize()} annotation saved")
        return committed

    def clear_annotation(self) -> None:
        """Reset the active annotation to an empty draw-mode shape."""
        annotation = self.current_annotation
        if annotation is None:
            return
        if isinstance(annotation, TextAnnotation):
            # A closed input cannot be reused
            annotation.reset_overlay()
        annotation.clear()
        self._bind_annotation()
        self._set_cursor(Qt.CursorShape.CrossCursor)
        self.redraw()

    def remove_annotation(self) -> None:
        """Discard the active annotation without touching history."""
        annotation = self.current_annotation
        if annotation is None:
            return
        if isinstance(annotation, TextAnnotation):
            annotation.close_text_frame()
        self._unbind_annotation()
        self.redraw()

    def _finish_placement(self, pos: QPointF) -> None:
        annotation = self.current_annotation
        annotation.set_end_point(pos)
        annotation.commit()
        if isinstance(annotation, TextAnnotation):
            # Typing happens in the overlay from here on
            self._unsubscribe("annotation")
            annotation.open_text_frame()
            self._set_cursor(Qt.CursorShape.ArrowCursor)
        self.draw_annotation()

    def _on_annotation_press(self, event: PointerEvent) -> None:
        annotation = self.current_annotation
        if annotation is None:
            return
        pos = self._clamp_pos(event.pos)

        if annotation.mode == AnnotationMode.DRAW:
            if not annotation.is_click_mode:
                annotation.set_start_point(pos)
            return

        name = annotation.detect_point(pos)
        self._set_cursor(annotation.cursor_for(name))

    def _on_annotation_move(self, event: PointerEvent) -> None:
        annotation = self.current_annotation
        if annotation is None:
            return
        pos = self._clamp_pos(event.pos)

        if annotation.mode == AnnotationMode.DRAW:
            if annotation.placement == Placement.DRAGGING:
                annotation.move_end_point(pos)
                self.draw_annotation()
            return

        hovered = annotation.move_detect_point(pos)
        if annotation.point and event.primary_pressed:
            annotation.calculate_position(pos)
            self.draw_annotation()
            self._set_cursor(annotation.cursor_for(annotation.point))
        else:
            self._set_cursor(annotation.cursor_for(hovered))

    def _on_annotation_release(self, event: PointerEvent) -> None:
        annotation = self.current_annotation
        if annotation is None:
            return
        pos = self._clamp_pos(event.pos)

        if annotation.mode == AnnotationMode.DRAW:
            if annotation.placement == Placement.IDLE:
                return
            if pos == annotation.start:
                # A click without a drag: wait for the second click
                annotation.enter_click_mode()
                return
            self._finish_placement(pos)
            return

        if annotation.point:
            annotation.calculate_position(pos)
            annotation.release_point()
            self.draw_annotation()

    def _on_global_move(self, event: PointerEvent) -> None:
        annotation = self.current_annotation
        if annotation is None or self._is_on_surface(event.pos):
            return

        # Moved outside the surface while dragging
        pos = self._clamp_pos(event.pos)
        if annotation.mode == AnnotationMode.DRAW:
            if annotation.placement == Placement.DRAGGING:
                annotation.move_end_point(pos)
                self.draw_annotation()
        elif annotation.point and event.primary_pressed:
            annotation.calculate_position(pos)
            self.draw_annotation()

    def _on_global_release(self, event: PointerEvent) -> None:
        annotation = self.current_annotation
        if annotation is None or self._is_on_surface(event.pos):
            return

        # Released outside the surface
        pos = self._clamp_pos(event.pos)
        if annotation.mode == AnnotationMode.DRAW:
            if annotation.placement == Placement.DRAGGING:
                self._finish_placement(pos)
        elif annotation.point:
            annotation.calculate_position(pos)
            annotation.release_point()
            self.draw_annotation()

    def _on_key(self, event: KeyEvent) -> None:
        if event.key == Qt.Key.Key_Delete and self.current_annotation is not None:
            self._logger.debug("Delete pressed; clearing annotation")
            self.clear_annotation()
