"""Utility functions for SVG element lookup."""

import io
from xml.etree import ElementTree as ET

# SVG namespace mappings
SVG_NAMESPACES = {
    "svg": "http://www.w3.org/2000/svg",
    "inkscape": "http://www.inkscape.org/namespaces/inkscape",
    "sodipodi": "http://sodipodi.sourceforge.net/DTD/sodipodi-0.dtd",
    "xlink": "http://www.w3.org/1999/xlink",
}

# Elements that can be selected and transformed
MANIPULABLE_ELEMENTS = frozenset(
    [
        "path",
        "rect",
        "circle",
        "ellipse",
        "polygon",
        "polyline",
        "line",
        "g",
    ]
)


def register_namespaces() -> None:
    """Register SVG namespaces so serialized output keeps readable prefixes.

    The SVG namespace itself is registered as the default namespace, so
    ``<svg xmlns="http://www.w3.org/2000/svg">`` round-trips without an
    ``svg:`` prefix on every element.
    """
    for prefix, uri in SVG_NAMESPACES.items():
        ET.register_namespace("" if prefix == "svg" else prefix, uri)


def register_document_namespaces(text: str) -> dict[str, str]:
    """Register the prefixes a document declares for its own namespaces.

    Without this, ElementTree writes ``ns0``, ``ns1``... for any namespace
    outside SVG_NAMESPACES. Default namespaces, the standard SVG URIs and
    prefixes ElementTree reserves are left alone.

    Args:
        text: Well-formed XML document text.

    Returns:
        Mapping of registered prefix to namespace URI.
    """
    known_uris = set(SVG_NAMESPACES.values())
    registered = {}
    for _, (prefix, uri) in ET.iterparse(io.StringIO(text), events=("start-ns",)):
        if not prefix or uri in known_uris or prefix in registered:
            continue
        try:
            ET.register_namespace(prefix, uri)
        except ValueError:
            # ns0, ns1... are reserved
            continue
        registered[prefix] = uri
    return registered


def get_local_name(tag: str) -> str:
    """Extract local name from a namespaced tag.

    Args:
        tag: Full tag name, possibly with namespace.

    Returns:
        Local name without namespace prefix.

    Example:
        >>> get_local_name("{http://www.w3.org/2000/svg}rect")
        'rect'
    """
    if not isinstance(tag, str):
        # Comments and processing instructions carry factory functions as tag
        return ""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def is_manipulable(element: ET.Element) -> bool:
    """Check if an element is a shape or group that can be moved and scaled.

    Args:
        element: An XML element.

    Returns:
        True if the element kind supports transform editing.
    """
    return get_local_name(element.tag) in MANIPULABLE_ELEMENTS


def build_parent_map(root: ET.Element) -> dict[ET.Element, ET.Element]:
    """Map every descendant of root to its parent element."""
    return {child: parent for parent in root.iter() for child in parent}


def find_manipulable(root: ET.Element, target: ET.Element) -> ET.Element | None:
    """Find the closest manipulable ancestor-or-self of target inside root.

    Walks from target up to root, returning the first element whose kind is
    in MANIPULABLE_ELEMENTS. Returns None when target is not inside root or
    no such element exists below root.

    Args:
        root: Root SVG element the search is confined to.
        target: Element that received the pointer event.

    Returns:
        The matching element, which may be root itself only if root is a
        manipulable kind.
    """
    parents = build_parent_map(root)
    if target is not root and target not in parents:
        return None

    current: ET.Element | None = target
    while current is not None:
        if is_manipulable(current):
            return current
        if current is root:
            return None
        current = parents.get(current)
    return None


def find_element_by_id(root: ET.Element, element_id: str) -> ET.Element | None:
    """Find an element by its id attribute.

    A leading ``#`` is accepted, so CSS-style references work too.

    Args:
        root: Root SVG element.
        element_id: id value to search for.

    Returns:
        Element or None if not found.
    """
    wanted = element_id[1:] if element_id.startswith("#") else element_id
    for elem in root.iter():
        if elem.get("id") == wanted:
            return elem
    return None


def get_element_label(element: ET.Element) -> str:
    """Describe an element for reports and log messages.

    Prefers the id attribute, then inkscape:label, then the tag name.
    """
    element_id = element.get("id")
    if element_id:
        return element_id
    label = element.get(f"{{{SVG_NAMESPACES['inkscape']}}}label")
    if label:
        return label
    return f"<{get_local_name(element.tag)}>"
