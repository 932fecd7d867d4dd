"""SVG Editor - interactive transform editing with live text synchronization."""

__version__ = "0.1.0"

from .config import EditorConfig, parse_config_file
from .document import (
    LoadError,
    ParseError,
    SvgEditorError,
    ensure_viewbox,
    load_svg_text,
    prepare_grid,
    serialize_svg,
    to_svg_element,
)
from .editor import DocumentBuffer, LayerMount, SvgEditor
from .geometry import Matrix, Viewport, get_screen_ctm, screen_delta_to_document
from .interaction import (
    EditState,
    EventOutcome,
    LostPointerCapture,
    PointerCancel,
    PointerDown,
    PointerMove,
    PointerUp,
    TransformEditor,
    Wheel,
)
from .scheduler import Debouncer, SyncScheduler, VirtualLoop
from .session import (
    SessionReport,
    SessionScript,
    format_session_report,
    parse_session_file,
    run_session,
)
from .transform import TransformState, clamp_scale, read_transform, write_transform
from .xml_format import format_xml

__all__ = [
    # Config
    "EditorConfig",
    "parse_config_file",
    # Document
    "LoadError",
    "ParseError",
    "SvgEditorError",
    "ensure_viewbox",
    "load_svg_text",
    "prepare_grid",
    "serialize_svg",
    "to_svg_element",
    # Editor session
    "DocumentBuffer",
    "LayerMount",
    "SvgEditor",
    # Coordinate mapping
    "Matrix",
    "Viewport",
    "get_screen_ctm",
    "screen_delta_to_document",
    # Interaction
    "EditState",
    "EventOutcome",
    "LostPointerCapture",
    "PointerCancel",
    "PointerDown",
    "PointerMove",
    "PointerUp",
    "TransformEditor",
    "Wheel",
    # Scheduling
    "Debouncer",
    "SyncScheduler",
    "VirtualLoop",
    # Scripted sessions
    "SessionReport",
    "SessionScript",
    "format_session_report",
    "parse_session_file",
    "run_session",
    # Transform codec
    "TransformState",
    "clamp_scale",
    "read_transform",
    "write_transform",
    # Formatting
    "format_xml",
]
