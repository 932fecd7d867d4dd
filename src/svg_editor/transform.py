"""Translate + uniform scale transform model stored in SVG transform attributes.

The ``transform`` attribute is the single source of truth: state is parsed
from it each time it is needed and written back in the canonical form
``translate(tx ty) scale(s)``.
"""

import math
import re
from dataclasses import dataclass
from decimal import Decimal
from xml.etree import ElementTree as ET

# Scale limits applied by wheel zooming
MIN_SCALE = 0.05
MAX_SCALE = 20.0

# Optional sign, digits with optional fraction, or a bare fraction like ".5"
NUMBER_PATTERN = r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)"

_TRANSLATE_RE = re.compile(
    rf"translate\(\s*({NUMBER_PATTERN})(?:\s*,\s*|\s+)({NUMBER_PATTERN})\s*\)"
)
_SCALE_RE = re.compile(rf"scale\(\s*({NUMBER_PATTERN})\s*\)")


@dataclass(frozen=True)
class TransformState:
    """Translate (document units) and uniform scale of an element."""

    tx: float = 0.0
    ty: float = 0.0
    scale: float = 1.0

    def translated(self, dx: float, dy: float) -> "TransformState":
        """Return a copy moved by (dx, dy)."""
        return TransformState(self.tx + dx, self.ty + dy, self.scale)

    def scaled(self, scale: float) -> "TransformState":
        """Return a copy with a different scale."""
        return TransformState(self.tx, self.ty, scale)


IDENTITY = TransformState()


def parse_transform(value: str | None) -> TransformState:
    """Parse translate and scale out of a transform attribute value.

    Unrecognized transform functions are ignored and malformed parts fall
    back to identity values; this never raises.

    Args:
        value: Transform attribute value, or None if absent.

    Returns:
        Parsed TransformState.

    Example:
        >>> parse_transform("rotate(45) translate(10, -2.5) scale(2)")
        TransformState(tx=10.0, ty=-2.5, scale=2.0)
    """
    if not value:
        return IDENTITY

    tx, ty, scale = 0.0, 0.0, 1.0
    translate_match = _TRANSLATE_RE.search(value)
    if translate_match:
        tx = float(translate_match.group(1))
        ty = float(translate_match.group(2))
    scale_match = _SCALE_RE.search(value)
    if scale_match:
        scale = float(scale_match.group(1))
    return TransformState(tx, ty, scale)


def format_number(value: float) -> str:
    """Format a float in the shortest form that parse_transform reads back.

    Exponent notation is expanded, integral values lose their ``.0`` suffix
    and negative zero becomes ``0``.
    """
    value = float(value)
    if value == 0:
        return "0"
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    elif text.endswith(".0"):
        text = text[:-2]
    return text


def format_transform(state: TransformState) -> str:
    """Render a TransformState in canonical attribute form."""
    return (
        f"translate({format_number(state.tx)} {format_number(state.ty)}) "
        f"scale({format_number(state.scale)})"
    )


def read_transform(element: ET.Element) -> TransformState:
    """Read the current transform state of an element.

    Args:
        element: SVG element.

    Returns:
        TransformState parsed from the element's transform attribute.
    """
    return parse_transform(element.get("transform"))


def write_transform(element: ET.Element, state: TransformState) -> None:
    """Write a transform state to an element in canonical form.

    Any other transform functions previously present are discarded.

    Args:
        element: SVG element (modified in-place).
        state: Transform to write.
    """
    element.set("transform", format_transform(state))


def clamp_scale(
    value: float, minimum: float = MIN_SCALE, maximum: float = MAX_SCALE
) -> float:
    """Clamp a scale factor into [minimum, maximum]."""
    if math.isnan(value):
        return minimum
    return min(maximum, max(minimum, value))
