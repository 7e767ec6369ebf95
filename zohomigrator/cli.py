#!/usr/bin/env python3
"""Command line entry point: convert a Zoho Notebook export without the GUI."""

import argparse
import logging
import sys
from pathlib import Path

from zohomigrator.core.converter import ZohoToObsidian
from zohomigrator.core.models import ConversionProgress, ConversionSettings

logger = logging.getLogger("zohomigrator")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zohomigrator",
        description="Convert Zoho Notebook exports to Obsidian Markdown",
    )
    parser.add_argument("input", type=Path, help="Path to Zoho export .zip or extracted folder")
    parser.add_argument("output", type=Path, help="Path to output directory (created if needed)")
    parser.add_argument("--skip-empty", action="store_true", help="Skip notes with no content")
    parser.add_argument("--verbose", action="store_true", help="Log each file being processed")
    parser.add_argument(
        "--attachments-folder",
        default="attachments",
        help="Folder inside the output directory for copied images and files (default: attachments)",
    )
    return parser


def print_progress(progress: ConversionProgress):
    if progress.message:
        logger.info("[%s] %s", progress.phase, progress.message)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    settings = ConversionSettings(
        input_path=args.input,
        output_dir=args.output,
        skip_empty=args.skip_empty,
        verbose=args.verbose,
        attachments_folder=args.attachments_folder,
    )

    print(f"Reading from: {args.input}")
    result = ZohoToObsidian(settings, progress_callback=print_progress).run()

    if not result.success:
        print(f"Error: {result.error_message}", file=sys.stderr)
        return 1

    print(result.summary())
    print(f"\nOutput written to: {args.output.resolve()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
