"""CLI with subcommands: rename, flatten."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .core.config import BatchRequest, FlattenRequest, ProgressKind, SortBy, TransferMode
from .engines.fingerprint import is_media
from .logging.rich_logger import (
    QuietProgressReporter,
    RichProgressReporter,
    configure_logging,
)


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="filerenamer",
        description="Rename, deduplicate and file media; flatten dropped folders.",
    )

    # Global options
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress non-essential output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ============ RENAME command ============
    rename_parser = subparsers.add_parser(
        "rename",
        help="Deduplicate and rename media files",
    )
    rename_parser.add_argument(
        "files",
        nargs="+",
        type=Path,
        help="Media files to process (other files are ignored)",
    )
    rename_parser.add_argument(
        "--mode",
        type=str,
        choices=[m.value for m in TransferMode],
        default=TransferMode.INPLACE.value,
        help="Rename next to the source, or move into --dest (default: inplace)",
    )
    rename_parser.add_argument(
        "-d", "--dest",
        type=Path,
        default=None,
        help="Destination folder (required with --mode move)",
    )
    rename_parser.add_argument(
        "--sort-by",
        type=str,
        choices=[s.value for s in SortBy],
        default=SortBy.DATE.value,
        help="Processing order and naming scheme (default: date)",
    )
    rename_parser.add_argument(
        "--folders",
        action="store_true",
        help="File results into YYYY-MM-DD subfolders",
    )
    rename_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the response as JSON on stdout",
    )

    # ============ FLATTEN command ============
    flatten_parser = subparsers.add_parser(
        "flatten",
        help="Move every file under each folder into its parent",
    )
    flatten_parser.add_argument(
        "folders",
        nargs="+",
        type=Path,
        help="Folders to flatten",
    )
    flatten_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the response as JSON on stdout",
    )

    return parser


# ============ Command Handlers ============

def _print_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def cmd_rename(args: argparse.Namespace, reporter) -> int:
    """Handle the rename command."""
    from .services.coordinator import BatchCoordinator

    try:
        request = BatchRequest(
            file_paths=args.files,
            destination_folder=args.dest,
            mode=args.mode,
            sort_by=args.sort_by,
            sort_into_folders=args.folders,
        )
    except ValidationError as e:
        reporter.log(f"Invalid request: {e}", ProgressKind.ERROR)
        return 1

    coordinator = BatchCoordinator(reporter=reporter)
    reporter.print_header(f"Renaming by {request.sort_by.value} ({request.mode.value})")
    reporter.start_phase(
        "Processing",
        total=sum(1 for p in request.file_paths if is_media(p)),
    )
    try:
        response = coordinator.process(request)
    finally:
        reporter.end_phase()

    if args.json:
        _print_json(response.to_dict())
    elif response.success:
        reporter.print_result(response.results)

    if not response.success or response.results.errors:
        return 1
    return 0


def cmd_flatten(args: argparse.Namespace, reporter) -> int:
    """Handle the flatten command."""
    from .services.coordinator import BatchCoordinator

    coordinator = BatchCoordinator(reporter=reporter)
    request = FlattenRequest(folder_paths=args.folders)
    response = coordinator.flatten(request)

    if args.json:
        _print_json(response.to_dict())
    elif response.success:
        reporter.print_flatten_result(response.results)

    if not response.success or response.results.errors:
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=getattr(args, "verbose", False),
        quiet=getattr(args, "quiet", False),
    )

    # Create reporter
    if getattr(args, "quiet", False):
        reporter = QuietProgressReporter()
    else:
        reporter = RichProgressReporter(verbose=getattr(args, "verbose", False))

    # No command specified - show help
    if not args.command:
        parser.print_help()
        return 0

    # Dispatch to command handler
    try:
        if args.command == "rename":
            return cmd_rename(args, reporter)
        elif args.command == "flatten":
            return cmd_flatten(args, reporter)
        else:
            reporter.log(f"Unknown command: {args.command}", ProgressKind.ERROR)
            return 1

    except KeyboardInterrupt:
        # Clean exit on Ctrl+C - no stack trace
        return 130
    except Exception as e:
        reporter.log(f"Error: {e}", ProgressKind.ERROR)
        if getattr(args, "verbose", False):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
