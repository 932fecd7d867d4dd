#!/usr/bin/env python3
"""Load an SVG into a headless editor, replay an input script, write the result."""

import argparse
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_editor.config import EditorConfig, parse_config_file
from svg_editor.editor import SvgEditor
from svg_editor.scheduler import VirtualLoop
from svg_editor.session import (
    SessionScript,
    format_session_report,
    parse_session_file,
    run_session,
)
from svg_editor.xml_format import format_xml


def main() -> int:
    """Main entry point.

    Returns:
        Exit code:
        - 0: Success
        - 1: I/O or parse error
        - 2: Config or script error
        - 3: Script steps failed
    """
    parser = argparse.ArgumentParser(
        description="Edit SVG shape transforms by replaying pointer/wheel input.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Render only, print the normalized document
  %(prog)s input.svg

  # Replay a session and save the synchronized text
  %(prog)s input.svg --script session.yaml --output output.svg

  # Use custom delays / zoom limits, pretty-print the output
  %(prog)s input.svg --script session.yaml --config editor.yaml -o out.svg --pretty
""",
    )
    parser.add_argument("svg_file", type=Path, help="Path to SVG file to edit")
    parser.add_argument("--script", "-s", type=Path, help="YAML session script")
    parser.add_argument("--config", "-c", type=Path, help="YAML editor config")
    parser.add_argument("--output", "-o", type=Path, help="Output SVG file")
    parser.add_argument(
        "--pretty", action="store_true", help="Format the output with indentation"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.svg_file.exists():
        print(f"Error: SVG file not found: {args.svg_file}", file=sys.stderr)
        return 1

    # Parse config
    config = EditorConfig()
    if args.config:
        try:
            config = parse_config_file(args.config)
        except Exception as e:
            print(f"Error: Failed to parse config file: {e}", file=sys.stderr)
            return 2

    # Parse script
    script = SessionScript()
    if args.script:
        try:
            script = parse_session_file(args.script)
        except Exception as e:
            print(f"Error: Failed to parse script file: {e}", file=sys.stderr)
            return 2

    loop = VirtualLoop()
    editor = SvgEditor(config, loop=loop)
    editor.load_grid()
    if not editor.upload(args.svg_file):
        print(f"Error: Failed to render SVG: {args.svg_file}", file=sys.stderr)
        return 1

    report = run_session(editor, script, loop)
    print(format_session_report(report))

    if args.output:
        text = editor.buffer.text
        if args.pretty:
            text = format_xml(text, " " * config.format.indent)
        try:
            args.output.write_text(text + "\n", encoding="utf-8")
            print(f"\nOutput written to: {args.output}")
        except OSError as e:
            print(f"Error: Failed to write output: {e}", file=sys.stderr)
            return 1

    if report.has_errors:
        return 3

    return 0


if __name__ == "__main__":
    sys.exit(main())
