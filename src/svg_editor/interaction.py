"""Pointer-driven selection, drag and wheel-scale state machine.

The editor is in one of three states, derived from the current selection
and drag session:

- IDLE: nothing selected.
- SELECTED: an element is selected, no drag in progress.
- DRAGGING: an element is selected and a captured pointer moves it.

``TransformEditor.handle`` is the single transition function. It consumes
one input event, updates the selected element's transform attribute and
reports what the host should do (prevent default handling, capture or
release the pointer).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union
from xml.etree import ElementTree as ET

from .geometry import Viewport, screen_delta_to_document
from .transform import (
    MAX_SCALE,
    MIN_SCALE,
    clamp_scale,
    read_transform,
    write_transform,
)
from .utils import find_manipulable, get_element_label

logger = logging.getLogger(__name__)

ZOOM_IN_FACTOR = 1.05
ZOOM_OUT_FACTOR = 0.95


class EditState(Enum):
    IDLE = "idle"
    SELECTED = "selected"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class PointerDown:
    """Pointer pressed over ``target``."""

    target: ET.Element
    pointer_id: int = 1


@dataclass(frozen=True)
class PointerMove:
    """Pointer moved by (movement_x, movement_y) screen pixels."""

    movement_x: float
    movement_y: float
    pointer_id: int = 1


@dataclass(frozen=True)
class PointerUp:
    pointer_id: int = 1


@dataclass(frozen=True)
class PointerCancel:
    pointer_id: int = 1


@dataclass(frozen=True)
class LostPointerCapture:
    pointer_id: int = 1


@dataclass(frozen=True)
class Wheel:
    """Wheel scrolled; negative delta_y is wheel up (zoom in)."""

    delta_y: float


InputEvent = Union[PointerDown, PointerMove, PointerUp, PointerCancel, LostPointerCapture, Wheel]


@dataclass(frozen=True)
class EventOutcome:
    """What handling an event did, for the host to act on."""

    default_prevented: bool = False
    captured_pointer: int | None = None
    released_pointer: int | None = None
    transform_changed: bool = False
    committed: bool = False


IGNORED = EventOutcome()


@dataclass
class DragSession:
    """Ephemeral drag state: active while a captured pointer is down."""

    active: bool = False
    pointer_id: int | None = None

    def start(self, pointer_id: int) -> None:
        self.active = True
        self.pointer_id = pointer_id

    def stop(self) -> None:
        self.active = False
        self.pointer_id = None

    def owns(self, pointer_id: int) -> bool:
        """Check if the session is active for the given pointer."""
        return self.active and self.pointer_id == pointer_id


class TransformEditor:
    """Selection and transform editing for the shapes of one SVG root.

    Args:
        root: Root SVG element whose shapes are edited.
        viewport_provider: Returns the viewport the root is currently
            rendered in, or None if it is not attached. Called on every
            drag step.
        on_commit: Called when a transform change is committed (drag end,
            wheel step).
        min_scale: Lower scale bound for wheel zoom.
        max_scale: Upper scale bound for wheel zoom.
        zoom_in: Scale multiplier for wheel up.
        zoom_out: Scale multiplier for wheel down.
    """

    def __init__(
        self,
        root: ET.Element,
        viewport_provider: Callable[[], Viewport | None] | None = None,
        on_commit: Callable[[], None] | None = None,
        min_scale: float = MIN_SCALE,
        max_scale: float = MAX_SCALE,
        zoom_in: float = ZOOM_IN_FACTOR,
        zoom_out: float = ZOOM_OUT_FACTOR,
    ):
        self.root = root
        self._viewport_provider = viewport_provider or (lambda: None)
        self._on_commit = on_commit or (lambda: None)
        self.min_scale = min_scale
        self.max_scale = max_scale
        self.zoom_in = zoom_in
        self.zoom_out = zoom_out
        self.selected: ET.Element | None = None
        self.drag = DragSession()
        self._handlers: dict[type, Callable[..., EventOutcome]] = {
            PointerDown: self._on_pointer_down,
            PointerMove: self._on_pointer_move,
            PointerUp: self._on_pointer_release,
            PointerCancel: self._on_pointer_release,
            LostPointerCapture: self._on_pointer_release,
            Wheel: self._on_wheel,
        }

    @property
    def state(self) -> EditState:
        if self.selected is None:
            return EditState.IDLE
        if self.drag.active:
            return EditState.DRAGGING
        return EditState.SELECTED

    def handle(self, event: InputEvent) -> EventOutcome:
        """Apply one input event.

        Raises:
            TypeError: If the event type is not an input event.
        """
        try:
            handler = self._handlers[type(event)]
        except KeyError:
            raise TypeError(f"Unsupported input event: {event!r}") from None
        return handler(event)

    def _on_pointer_down(self, event: PointerDown) -> EventOutcome:
        element = find_manipulable(self.root, event.target)
        if element is None or element is self.root:
            return IGNORED

        self.selected = element
        self.drag.start(event.pointer_id)
        logger.debug("Selected %s", get_element_label(element))
        return EventOutcome(default_prevented=True, captured_pointer=event.pointer_id)

    def _on_pointer_move(self, event: PointerMove) -> EventOutcome:
        if self.selected is None or not self.drag.owns(event.pointer_id):
            return IGNORED

        state = read_transform(self.selected)
        dx, dy = screen_delta_to_document(
            self.root, event.movement_x, event.movement_y, self._viewport_provider()
        )
        write_transform(self.selected, state.translated(dx, dy))
        return EventOutcome(transform_changed=True)

    def _on_pointer_release(
        self, event: PointerUp | PointerCancel | LostPointerCapture
    ) -> EventOutcome:
        if not self.drag.owns(event.pointer_id):
            return IGNORED

        self.drag.stop()
        committed = self.selected is not None
        if committed:
            self._on_commit()
        return EventOutcome(released_pointer=event.pointer_id, committed=committed)

    def _on_wheel(self, event: Wheel) -> EventOutcome:
        if self.selected is None:
            return IGNORED

        state = read_transform(self.selected)
        factor = self.zoom_in if event.delta_y < 0 else self.zoom_out
        scale = clamp_scale(state.scale * factor, self.min_scale, self.max_scale)
        write_transform(self.selected, state.scaled(scale))
        self._on_commit()
        return EventOutcome(default_prevented=True, transform_changed=True, committed=True)
