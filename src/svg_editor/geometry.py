"""Geometry utilities: screen-to-document mapping and content bounding boxes."""

import logging
import re
from dataclasses import dataclass
from typing import Literal
from xml.etree import ElementTree as ET

from svgpathtools import parse_path

from .transform import TransformState, read_transform
from .utils import get_local_name

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

AlignValue = Literal["min", "mid", "max"]


@dataclass(frozen=True)
class Matrix:
    """2D affine matrix in SVG order: [a c e; b d f; 0 0 1]."""

    a: float = 1.0
    b: float = 0.0
    c: float = 0.0
    d: float = 1.0
    e: float = 0.0
    f: float = 0.0

    @classmethod
    def identity(cls) -> "Matrix":
        """Identity matrix."""
        return cls()

    def multiply(self, other: "Matrix") -> "Matrix":
        """Return self x other (other is applied first)."""
        return Matrix(
            a=self.a * other.a + self.c * other.b,
            b=self.b * other.a + self.d * other.b,
            c=self.a * other.c + self.c * other.d,
            d=self.b * other.c + self.d * other.d,
            e=self.a * other.e + self.c * other.f + self.e,
            f=self.b * other.e + self.d * other.f + self.f,
        )

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Transform a point."""
        return (
            self.a * x + self.c * y + self.e,
            self.b * x + self.d * y + self.f,
        )


@dataclass
class Viewport:
    """Pixel area a layer is rendered into, with view zoom and pan."""

    width: float
    height: float
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0

    @property
    def is_visible(self) -> bool:
        """Check if the viewport has a drawable area."""
        return self.width > 0 and self.height > 0 and self.zoom > 0


@dataclass(frozen=True)
class ViewBox:
    """Parsed viewBox attribute."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class AspectRatio:
    """Parsed preserveAspectRatio attribute."""

    align_x: AlignValue | None = "mid"
    align_y: AlignValue | None = "mid"
    slice: bool = False

    @property
    def is_none(self) -> bool:
        """Check for non-uniform scaling (``preserveAspectRatio="none"``)."""
        return self.align_x is None


@dataclass
class BoundingBox:
    """Axis-aligned bounding box."""

    x: float
    y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        """X coordinate of the center."""
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        """Y coordinate of the center."""
        return self.y + self.height / 2

    @property
    def center(self) -> tuple[float, float]:
        """Center point (x, y)."""
        return (self.center_x, self.center_y)

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @classmethod
    def from_extents(
        cls, min_x: float, min_y: float, max_x: float, max_y: float
    ) -> "BoundingBox":
        """Build a box from its extents."""
        return cls(min_x, min_y, max_x - min_x, max_y - min_y)

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box containing both boxes."""
        return BoundingBox.from_extents(
            min(self.x, other.x),
            min(self.y, other.y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def transformed(self, state: TransformState) -> "BoundingBox":
        """Apply ``translate(tx ty) scale(s)`` to the box."""
        x1 = state.tx + state.scale * self.x
        x2 = state.tx + state.scale * self.max_x
        y1 = state.ty + state.scale * self.y
        y2 = state.ty + state.scale * self.max_y
        return BoundingBox.from_extents(min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))


def parse_viewbox(value: str | None) -> ViewBox | None:
    """Parse a viewBox attribute.

    Args:
        value: Attribute value like ``"0 0 100 50"`` (commas allowed).

    Returns:
        ViewBox, or None if absent, malformed, or of non-positive size.
    """
    if not value:
        return None
    parts = value.replace(",", " ").split()
    if len(parts) != 4:
        return None
    try:
        x, y, width, height = (float(part) for part in parts)
    except ValueError:
        return None
    if width <= 0 or height <= 0:
        return None
    return ViewBox(x, y, width, height)


def parse_aspect_ratio(value: str | None) -> AspectRatio:
    """Parse a preserveAspectRatio attribute, defaulting to ``xMidYMid meet``."""
    if not value:
        return AspectRatio()
    parts = value.split()
    if parts and parts[0] == "defer":
        parts = parts[1:]
    if not parts:
        return AspectRatio()

    align = parts[0]
    slice_mode = len(parts) > 1 and parts[1] == "slice"
    if align == "none":
        return AspectRatio(align_x=None, align_y=None, slice=False)

    match = re.fullmatch(r"x(Min|Mid|Max)Y(Min|Mid|Max)", align)
    if not match:
        return AspectRatio(slice=slice_mode)
    return AspectRatio(
        align_x=match.group(1).lower(),  # type: ignore[arg-type]
        align_y=match.group(2).lower(),  # type: ignore[arg-type]
        slice=slice_mode,
    )


def _align_offset(align: AlignValue | None, available: float, used: float) -> float:
    if align == "mid":
        return (available - used) / 2
    if align == "max":
        return available - used
    return 0.0


def get_screen_ctm(root: ET.Element, viewport: Viewport | None) -> Matrix | None:
    """Compute the document-to-screen matrix of a rendered SVG root.

    Args:
        root: Root SVG element, rendered at 100% of the viewport.
        viewport: Viewport the root is mounted in, or None if not attached.

    Returns:
        Matrix mapping document units to screen pixels, or None when the
        root is not attached or not visible.
    """
    if viewport is None or not viewport.is_visible:
        return None

    base = Matrix.identity()
    viewbox = parse_viewbox(root.get("viewBox"))
    if viewbox is not None:
        ratio = parse_aspect_ratio(root.get("preserveAspectRatio"))
        sx = viewport.width / viewbox.width
        sy = viewport.height / viewbox.height
        if ratio.is_none:
            base = Matrix(a=sx, d=sy, e=-viewbox.x * sx, f=-viewbox.y * sy)
        else:
            s = max(sx, sy) if ratio.slice else min(sx, sy)
            e = -viewbox.x * s + _align_offset(
                ratio.align_x, viewport.width, viewbox.width * s
            )
            f = -viewbox.y * s + _align_offset(
                ratio.align_y, viewport.height, viewbox.height * s
            )
            base = Matrix(a=s, d=s, e=e, f=f)

    view = Matrix(a=viewport.zoom, d=viewport.zoom, e=viewport.pan_x, f=viewport.pan_y)
    return view.multiply(base)


def screen_delta_to_document(
    root: ET.Element,
    dx_px: float,
    dy_px: float,
    viewport: Viewport | None = None,
) -> tuple[float, float]:
    """Convert a screen-space pixel delta into document units.

    Only the diagonal scale terms of the screen CTM are used, as absolute
    values, so mirrored axes do not invert drag directions. Rotation and
    skew are ignored. The CTM is recomputed on every call.

    Args:
        root: Root SVG element.
        dx_px: Horizontal movement in screen pixels.
        dy_px: Vertical movement in screen pixels.
        viewport: Viewport the root is mounted in.

    Returns:
        Tuple (dx, dy) in document units.
    """
    ctm = get_screen_ctm(root, viewport)
    if ctm is None:
        return (dx_px, dy_px)
    sx = abs(ctm.a) or 1.0
    sy = abs(ctm.d) or 1.0
    return (dx_px / sx, dy_px / sy)


def _float_attr(element: ET.Element, name: str, default: float = 0.0) -> float:
    """Read a numeric attribute; raises ValueError for units or garbage."""
    value = element.get(name)
    if value is None or value.strip() == "":
        return default
    return float(value)


def _points_bbox(points: list[tuple[float, float]]) -> BoundingBox | None:
    if not points:
        return None
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return BoundingBox.from_extents(min(xs), min(ys), max(xs), max(ys))


def _shape_bbox(element: ET.Element) -> BoundingBox | None:
    """Local bounding box of a single shape, ignoring its own transform."""
    name = get_local_name(element.tag)

    if name == "rect":
        return BoundingBox(
            _float_attr(element, "x"),
            _float_attr(element, "y"),
            _float_attr(element, "width"),
            _float_attr(element, "height"),
        )

    if name == "circle":
        cx, cy = _float_attr(element, "cx"), _float_attr(element, "cy")
        r = _float_attr(element, "r")
        return BoundingBox(cx - r, cy - r, 2 * r, 2 * r)

    if name == "ellipse":
        cx, cy = _float_attr(element, "cx"), _float_attr(element, "cy")
        rx, ry = _float_attr(element, "rx"), _float_attr(element, "ry")
        return BoundingBox(cx - rx, cy - ry, 2 * rx, 2 * ry)

    if name == "line":
        return _points_bbox(
            [
                (_float_attr(element, "x1"), _float_attr(element, "y1")),
                (_float_attr(element, "x2"), _float_attr(element, "y2")),
            ]
        )

    if name in ("polyline", "polygon"):
        numbers = [float(n) for n in _NUMBER_RE.findall(element.get("points", ""))]
        return _points_bbox(list(zip(numbers[0::2], numbers[1::2])))

    if name == "path":
        d = element.get("d", "")
        if not d.strip():
            return None
        return _path_bbox(d)

    if name == "g":
        return _children_bbox(element)

    return None


def _path_bbox(d: str) -> BoundingBox | None:
    # svgpathtools rejects some valid data, e.g. a zero-length arc
    # (AssertionError), so any failure leaves the path unmeasured.
    try:
        path = parse_path(d)
        if len(path) == 0:
            return None
        xmin, xmax, ymin, ymax = path.bbox()
    except Exception as e:
        logger.debug("Could not measure path %r: %r", d, e)
        return None
    return BoundingBox.from_extents(xmin, ymin, xmax, ymax)


def _children_bbox(parent: ET.Element) -> BoundingBox | None:
    result: BoundingBox | None = None
    for child in parent:
        bbox = element_bbox(child)
        if bbox is None:
            continue
        result = bbox if result is None else result.union(bbox)
    return result


def element_bbox(element: ET.Element) -> BoundingBox | None:
    """Bounding box of an element in its parent's coordinate system.

    The element's translate/scale is applied; other transform functions
    are not. Elements with unit-suffixed or malformed geometry are skipped.

    Args:
        element: SVG element.

    Returns:
        BoundingBox, or None if the element has no measurable geometry.
    """
    try:
        bbox = _shape_bbox(element)
    except (ValueError, IndexError):
        return None
    if bbox is None:
        return None
    return bbox.transformed(read_transform(element))


def content_bbox(root: ET.Element) -> BoundingBox | None:
    """Union of the bounding boxes of root's children in root user units."""
    return _children_bbox(root)
