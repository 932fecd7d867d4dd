#!/usr/bin/env python3
"""Indent an SVG/XML file one tag per line."""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_editor.xml_format import format_xml


def main() -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    parser = argparse.ArgumentParser(description="Indent an SVG/XML file.")
    parser.add_argument("svg_file", type=Path, help="Path to file to format")
    parser.add_argument(
        "--indent", "-i", type=int, default=2, help="Spaces per level (default: 2)"
    )
    parser.add_argument(
        "-o", "--output", type=Path, help="Output file (default: stdout)"
    )

    args = parser.parse_args()

    if args.indent < 0:
        print(f"Error: --indent must be >= 0, got {args.indent}", file=sys.stderr)
        return 1

    try:
        text = args.svg_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: Failed to read {args.svg_file}: {e}", file=sys.stderr)
        return 1

    output = format_xml(text, " " * args.indent)

    if args.output:
        args.output.write_text(output + "\n", encoding="utf-8")
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
