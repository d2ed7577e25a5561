"""
Pointer and keyboard event plumbing for the editor.

Each interactive region (the rendering surface, the window as a whole,
a text overlay) owns an InputSource. Tools attach to a source through
subscribe(), which returns a Subscription that the controller disposes
when the tool is switched off.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from PySide6.QtCore import QObject, QPointF, Qt, Signal

from image_editor.services.logging_service import get_logger


@dataclass(frozen=True)
class PointerEvent:
    """A pointer position in surface coordinates plus the held buttons."""
    pos: QPointF
    buttons: Qt.MouseButton = Qt.MouseButton.NoButton

    @property
    def primary_pressed(self) -> bool:
        return bool(self.buttons & Qt.MouseButton.LeftButton)


@dataclass(frozen=True)
class KeyEvent:
    key: Qt.Key
    modifiers: Qt.KeyboardModifier = Qt.KeyboardModifier.NoModifier


class InputSource(QObject):
    """
    Emits pointer and key events for one interactive region.

    Signals:
        pointer_pressed: PointerEvent, a button went down.
        pointer_moved: PointerEvent, the pointer moved.
        pointer_released: PointerEvent, a button went up.
        pointer_entered: PointerEvent, the pointer entered the region.
        pointer_left: PointerEvent, the pointer left the region.
        key_pressed: KeyEvent.
    """

    pointer_pressed = Signal(object)
    pointer_moved = Signal(object)
    pointer_released = Signal(object)
    pointer_entered = Signal(object)
    pointer_left = Signal(object)
    key_pressed = Signal(object)

    SIGNAL_NAMES = (
        "pointer_pressed",
        "pointer_moved",
        "pointer_released",
        "pointer_entered",
        "pointer_left",
        "key_pressed",
    )


class Subscription:
    """
    A set of handler connections that can be released exactly once.

    The subscription holds a reference to its source until disposed, so
    the signals are still there to disconnect from.

    Usable as a context manager:

        with subscribe(source, pointer_moved=on_move):
            ...
    """

    def __init__(self, source: InputSource, handlers: List[Tuple[str, Callable]]) -> None:
        self._logger = get_logger(__name__)
        self._source: Optional[InputSource] = source
        self._handlers = handlers

    @property
    def active(self) -> bool:
        return self._source is not None and bool(self._handlers)

    def dispose(self) -> None:
        """Disconnect every handler. Calling it again does nothing."""
        source, self._source = self._source, None
        handlers, self._handlers = self._handlers, []
        if source is None:
            return
        for name, handler in handlers:
            getattr(source, name).disconnect(handler)
        if handlers:
            self._logger.debug(f"Released {len(handlers)} event handler(s)")

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


def subscribe(source: InputSource, **handlers: Callable) -> Subscription:
    """
    Connect handlers to an InputSource by signal name.

    Args:
        source: The region to listen on.
        **handlers: signal_name=callable pairs, e.g. pointer_moved=on_move.

    Returns:
        A Subscription owning the connections.

    Raises:
        ValueError: If a name is not one of InputSource.SIGNAL_NAMES.
    """
    unknown = [name for name in handlers if name not in InputSource.SIGNAL_NAMES]
    if unknown:
        raise ValueError(f"Unknown input signal(s): {', '.join(unknown)}")

    connected = []
    for name, handler in handlers.items():
        signal = getattr(source, name)
        signal.connect(handler)
        connected.append((name, handler))
    return Subscription(source, connected)
