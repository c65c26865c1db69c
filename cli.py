"""CLI entry point for sanitizing an SVG certificate template."""

import argparse
import json
import logging
import sys
from pathlib import Path

from svg_sanitizer.sanitize import sanitize_svg


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Sanitize an SVG certificate template and print its content hash"
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Path to the SVG template",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Write the sanitized SVG to this path (written even if invalid)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full result as JSON instead of a summary",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s %(levelname)s: %(message)s",
    )

    # utf-8-sig drops a leading byte order mark
    raw = args.input.read_text(encoding="utf-8-sig")
    result = sanitize_svg(raw)

    if args.output and result.sanitized_svg:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(result.sanitized_svg.encode("utf-8"))

    if args.json:
        json.dump(result.to_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        for issue in result.issues:
            print(f"issue: {issue}", file=sys.stderr)
        for error in result.errors:
            print(f"error: {error}", file=sys.stderr)
        if result.valid:
            print(result.hash)
            if args.output:
                print(f"Sanitized SVG written to {args.output}", file=sys.stderr)

    return 0 if result.valid else 1


if __name__ == "__main__":
    sys.exit(main())
