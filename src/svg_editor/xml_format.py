"""Minimal XML pretty-printer for the document text buffer."""

import re

_BETWEEN_TAGS_RE = re.compile(r">\s+<")
_TOKEN_RE = re.compile(r"(<[^>]*>)")


def _is_tag(token: str) -> bool:
    return token.startswith("<") and token.endswith(">")


def _is_closing(token: str) -> bool:
    return token.startswith("</")


def _is_opening(token: str) -> bool:
    """Opening tag that increases nesting depth."""
    return (
        _is_tag(token)
        and not token.startswith(("</", "<!", "<?"))
        and not token.endswith("/>")
    )


def format_xml(xml: str, indent: str = "  ") -> str:
    """Indent XML text one tag per line.

    Whitespace between tags is collapsed, then each tag starts a new line
    indented by its nesting depth. Elements containing only text (or
    nothing) stay on a single line. The input is not validated; malformed
    markup gets best-effort indentation.

    Args:
        xml: XML text.
        indent: Indentation unit per nesting level.

    Returns:
        Formatted text without leading or trailing blank lines.

    Example:
        >>> print(format_xml("<a><b>x</b></a>"))
        <a>
          <b>x</b>
        </a>
    """
    xml = _BETWEEN_TAGS_RE.sub("><", xml.strip())
    tokens = [token for token in _TOKEN_RE.split(xml) if token.strip()]

    lines: list[str] = []
    depth = 0
    i = 0
    while i < len(tokens):
        token = tokens[i].strip()

        if _is_opening(token):
            # <b>text</b> and <b></b> stay on one line
            following = [t.strip() for t in tokens[i + 1 : i + 3]]
            if following and _is_closing(following[0]):
                lines.append(indent * depth + token + following[0])
                i += 2
                continue
            if (
                len(following) == 2
                and not _is_tag(following[0])
                and _is_closing(following[1])
            ):
                lines.append(indent * depth + token + tokens[i + 1] + following[1])
                i += 3
                continue

        if _is_closing(token):
            depth = max(depth - 1, 0)
        lines.append(indent * depth + token)
        if _is_opening(token):
            depth += 1
        i += 1

    return "\n".join(lines)
