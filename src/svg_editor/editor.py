"""Editor session: layer mounts, document buffer and user actions.

An SvgEditor ties the pieces together the way an editing page would: a
static grid layer and an editable layer mounted over it, a text buffer
holding the editable SVG, and a SyncScheduler keeping the two in step.
"""

import logging
from importlib import resources
from pathlib import Path
from typing import Callable, Literal
from xml.etree import ElementTree as ET

from .config import EditorConfig
from .document import (
    LoadError,
    ParseError,
    ensure_viewbox,
    load_svg_text,
    prepare_grid,
    serialize_svg,
    to_svg_element,
)
from .geometry import Viewport
from .interaction import IGNORED, EventOutcome, InputEvent, TransformEditor
from .scheduler import SyncScheduler, TimerLoop
from .xml_format import format_xml

logger = logging.getLogger(__name__)

BufferOrigin = Literal["user", "graphic", "load", "format"]
BufferListener = Callable[[str, BufferOrigin], None]


def load_default_grid() -> str:
    """Text of the grid SVG shipped with the package."""
    return resources.files("svg_editor").joinpath("data/grid.svg").read_text(
        encoding="utf-8"
    )


class LayerMount:
    """A mount point that displays one SVG root at a time."""

    def __init__(self, name: str, viewport: Viewport | None = None):
        self.name = name
        self.viewport = viewport
        self.root: ET.Element | None = None

    def replace_children(self, root: ET.Element) -> None:
        """Display root, replacing whatever was mounted before."""
        self.root = root

    def clear(self) -> None:
        self.root = None

    def viewport_for(self, root: ET.Element) -> Viewport | None:
        """Viewport of root, or None if root is not the mounted element."""
        if self.root is not root:
            return None
        return self.viewport


class DocumentBuffer:
    """Text form of the editable layer, with change listeners."""

    def __init__(self, text: str = ""):
        self._text = text
        self._listeners: list[BufferListener] = []

    @property
    def text(self) -> str:
        return self._text

    def set(self, text: str, origin: BufferOrigin = "user") -> None:
        """Replace the buffer content and notify listeners."""
        self._text = text
        for listener in list(self._listeners):
            listener(text, origin)

    def subscribe(self, listener: BufferListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)


class SvgEditor:
    """One independent editing session.

    Args:
        config: Editor configuration (defaults when omitted).
        loop: Event loop used for debounce timers; when omitted the running
            asyncio loop is used at trigger time.
    """

    def __init__(self, config: EditorConfig | None = None, loop: TimerLoop | None = None):
        self.config = config or EditorConfig()
        viewport = Viewport(self.config.viewport.width, self.config.viewport.height)
        self.grid_layer = LayerMount("grid", viewport)
        self.edit_layer = LayerMount("edit", viewport)
        self.buffer = DocumentBuffer()
        self.scheduler = SyncScheduler(
            serialize=self._sync_graphic_to_text,
            render=self._sync_text_to_graphic,
            graphic_delay=self.config.sync.graphic_delay,
            text_delay=self.config.sync.text_delay,
            loop=loop,
        )
        self.transform_editor: TransformEditor | None = None
        self.render_count = 0

    @property
    def selected(self) -> ET.Element | None:
        """Currently selected element of the editable layer."""
        if self.transform_editor is None:
            return None
        return self.transform_editor.selected

    def load_grid(self, source: str | Path | None = None) -> bool:
        """Load, recolor and mount the reference grid.

        Args:
            source: Path or URL; defaults to the configured source, then the
                packaged grid.

        Returns:
            True if the grid was mounted.
        """
        source = source if source is not None else self.config.grid.source
        try:
            text = load_default_grid() if source is None else load_svg_text(source)
            grid = to_svg_element(text)
        except (LoadError, ParseError) as e:
            logger.error("Grid error: %s", e)
            return False

        self.grid_layer.replace_children(grid)
        count = prepare_grid(grid, self.config.grid.stroke)
        logger.debug("Grid mounted, %d strokes recolored", count)
        return True

    def render_from_text(self, text: str) -> ET.Element:
        """Parse text and mount it as the editable layer.

        The previous selection is dropped; a new TransformEditor is attached
        to the new root.

        Raises:
            ParseError: If the text is not a valid SVG document. The
                previously mounted root is left in place.
        """
        svg = to_svg_element(text)
        ensure_viewbox(svg)
        # Mount and attach together so the editor never drives a stale root
        self.edit_layer.replace_children(svg)
        self._attach(svg)
        self.render_count += 1
        logger.info("Rendered")
        return svg

    def _attach(self, svg: ET.Element) -> None:
        scale = self.config.scale
        self.transform_editor = TransformEditor(
            svg,
            viewport_provider=lambda: self.edit_layer.viewport_for(svg),
            on_commit=self.scheduler.notify_graphic_changed,
            min_scale=scale.min,
            max_scale=scale.max,
            zoom_in=scale.zoom_in,
            zoom_out=scale.zoom_out,
        )

    def upload(self, source: str | Path) -> bool:
        """Load a file or URL into the buffer and render it.

        The buffer receives the loaded text even when it fails to parse.

        Returns:
            True if the document was rendered.
        """
        try:
            text = load_svg_text(source)
        except LoadError as e:
            logger.error("Load error: %s", e)
            return False

        self.buffer.set(text, origin="load")
        try:
            self.render_from_text(text)
        except ParseError as e:
            logger.error("Upload error: %s", e)
            return False
        return True

    def input_text(self, text: str) -> None:
        """User typed into the buffer; re-render after the typing pause."""
        self.buffer.set(text, origin="user")
        self.scheduler.notify_text_changed()

    def apply(self) -> bool:
        """Render the buffer immediately, bypassing the typing debounce.

        Returns:
            True if the buffer was rendered.
        """
        self.scheduler.text_channel.cancel()
        try:
            self.render_from_text(self.buffer.text.strip())
        except ParseError as e:
            logger.error("Apply error: %s", e)
            return False
        return True

    def format(self) -> None:
        """Pretty-print the buffer, then schedule a re-render."""
        indent = " " * self.config.format.indent
        self.buffer.set(format_xml(self.buffer.text, indent), origin="format")
        self.scheduler.notify_text_changed()

    def dispatch(self, event: InputEvent) -> EventOutcome:
        """Route a pointer or wheel event to the editable layer."""
        if self.transform_editor is None:
            return IGNORED
        return self.transform_editor.handle(event)

    def _sync_graphic_to_text(self) -> None:
        root = self.edit_layer.root
        if root is None:
            return
        self.buffer.set(serialize_svg(root), origin="graphic")
        logger.debug("Buffer synced from graphic")

    def _sync_text_to_graphic(self) -> None:
        text = self.buffer.text.strip()
        if not text:
            return
        try:
            self.render_from_text(text)
        except ParseError as e:
            logger.error("Rerender error: %s", e)
