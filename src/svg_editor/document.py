"""Loading, parsing, preparing and serializing SVG documents."""

import logging
from pathlib import Path
from xml.etree import ElementTree as ET

import requests

from .geometry import content_bbox
from .transform import format_number
from .utils import (
    get_local_name,
    register_document_namespaces,
    register_namespaces,
)

logger = logging.getLogger(__name__)

DEFAULT_VIEWBOX = "0 0 100 100"
DEFAULT_TIMEOUT = 10.0  # seconds


class SvgEditorError(Exception):
    """Base class for editor errors."""


class LoadError(SvgEditorError):
    """Raised when SVG text cannot be fetched or read."""


class ParseError(SvgEditorError):
    """Raised when text is not valid XML or its root is not ``<svg>``."""


def is_url(source: str | Path) -> bool:
    """Check if a source refers to an http(s) URL."""
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def load_svg_text(source: str | Path, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Load raw SVG text from a local file or an http(s) URL.

    Args:
        source: File path or URL.
        timeout: Network timeout in seconds.

    Returns:
        The document text.

    Raises:
        LoadError: If the request fails, returns a non-2xx status, or the
            file cannot be read as UTF-8.
    """
    if is_url(source):
        try:
            response = requests.get(str(source), timeout=timeout)
        except requests.RequestException as e:
            raise LoadError(f"Failed to load {source}: {e}") from e
        if not response.ok:
            raise LoadError(
                f"Failed to load {source}: {response.status_code} {response.reason}"
            )
        response.encoding = response.encoding or "utf-8"
        return response.text

    try:
        return Path(source).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(f"Failed to load {source}: {e}") from e


def to_svg_element(text: str) -> ET.Element:
    """Parse SVG text and prepare the root for rendering at full size.

    Args:
        text: SVG document text.

    Returns:
        Root ``<svg>`` element with width/height set to 100% and
        ``preserveAspectRatio="xMidYMid meet"``.

    Raises:
        ParseError: If the text is not valid XML or the root is not svg.
    """
    register_namespaces()
    # Keep comments and processing instructions so serialization is lossless
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    try:
        svg = ET.fromstring(text, parser=parser)
    except ET.ParseError as e:
        raise ParseError(f"Invalid SVG: {e}") from e

    if get_local_name(svg.tag).lower() != "svg":
        raise ParseError("Not a valid SVG (no <svg> root).")

    register_document_namespaces(text)

    svg.set("width", "100%")
    svg.set("height", "100%")
    svg.set("preserveAspectRatio", "xMidYMid meet")
    return svg


def ensure_viewbox(svg: ET.Element) -> None:
    """Give an SVG root a viewBox covering its content if it has none.

    The inferred box is at least 1x1 units; when the content cannot be
    measured the default ``0 0 100 100`` is used.

    Args:
        svg: Root SVG element (modified in-place).
    """
    if svg.get("viewBox"):
        return

    try:
        bbox = content_bbox(svg)
    except (ValueError, ArithmeticError) as e:
        logger.debug("Could not measure SVG content, using default viewBox: %s", e)
        svg.set("viewBox", DEFAULT_VIEWBOX)
        return

    if bbox is None:
        x, y, width, height = 0.0, 0.0, 0.0, 0.0
    else:
        x, y, width, height = bbox.x, bbox.y, bbox.width, bbox.height
    values = (x, y, max(width, 1.0), max(height, 1.0))
    svg.set("viewBox", " ".join(format_number(v) for v in values))


def prepare_grid(svg: ET.Element, stroke: str = "currentColor") -> int:
    """Recolor grid strokes so they follow the theme color.

    Every descendant with a ``stroke`` attribute or a ``stroke:`` style
    declaration gets its ``stroke`` attribute set to the given color.

    Args:
        svg: Root of the grid SVG (modified in-place).
        stroke: Stroke color to apply.

    Returns:
        Number of elements recolored.
    """
    count = 0
    for elem in svg.iter():
        if elem is svg or not isinstance(elem.tag, str):
            continue
        if "stroke" in elem.attrib or "stroke:" in elem.get("style", ""):
            elem.set("stroke", stroke)
            count += 1
    return count


def serialize_svg(root: ET.Element) -> str:
    """Serialize an SVG root element back to text."""
    register_namespaces()
    return ET.tostring(root, encoding="unicode")
