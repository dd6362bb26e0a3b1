"""Command line front end: ``html2pptx --file slide.html`` or ``--folder slides/``."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import Settings
from .convert import convert_file, convert_folder


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert HTML slides to a PowerPoint presentation.",
        epilog=(
            "Each file is converted directly first; on validation errors it is "
            "auto-fixed once (the original is kept as <name>.backup) and retried. "
            "Files that still fail are skipped."
        ),
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="Single HTML slide to convert")
    source.add_argument("--folder", help="Folder of HTML slides, converted in name order")
    parser.add_argument(
        "--output", default="output.pptx", help="Output PPTX file path (default: output.pptx)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.file or args.folder)
    if not input_path.exists():
        print(f"Error: Input path not found: {input_path}", file=sys.stderr)
        sys.exit(1)

    try:
        settings = Settings.from_env()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    output_path = Path(args.output)
    print(f"Output: {output_path}")

    if args.folder:
        results = asyncio.run(convert_folder(input_path, output_path, settings))
        success = results.success > 0
    else:
        success = asyncio.run(convert_file(input_path, output_path, settings))

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
