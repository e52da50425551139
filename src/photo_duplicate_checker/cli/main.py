"""CLI entry point for photo duplicate checker."""

import argparse
import logging
import sys
from pathlib import Path

from .. import __version__
from ..core import (
    ApplicationConfig,
    DirectoryAssetSource,
    ScanState,
    ScanWorker,
)
from ..ui.formatting import DateFormatter, format_progress, format_variants

EXIT_CANCELLED = 130

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def scan_directory_cli(
    directory: Path, recursive: bool = True, config: ApplicationConfig | None = None
) -> ScanState:
    """
    Scan a directory for duplicate photos from the command line.

    Args:
        directory: Directory to scan
        recursive: Whether to scan recursively
        config: Application configuration, defaults to ApplicationConfig()

    Returns:
        Final ScanState; ``cancelled`` is set when the user pressed Ctrl-C
    """
    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {directory}")

    config = config or ApplicationConfig()

    def load_progress_callback(current: int, total: int | None = None, message: str = "") -> None:
        if total:
            print(f"\rReading photos: {current}/{total}", end="", flush=True)

    def scan_progress_callback(processed: int, total: int, group_count: int) -> None:
        print(f"\r{format_progress(processed, total, group_count)}", end="", flush=True)

    source = DirectoryAssetSource(
        directory, recursive=recursive, config=config, progress_callback=load_progress_callback
    )
    worker = ScanWorker()

    logger.info(f"Starting scan of directory: {directory}")
    print(f"Scanning directory: {directory}")
    worker.start(source, progress_callback=scan_progress_callback)

    try:
        state = _wait_for(worker)
    except KeyboardInterrupt:
        print("\nStopping scan...")
        worker.cancel()
        state = _wait_for(worker)
    print()  # New line after progress

    logger.info(f"Scan finished: {state}")
    return state


def _wait_for(worker: ScanWorker) -> ScanState:
    """Join the worker in short slices so Ctrl-C is delivered promptly."""
    while True:
        state = worker.wait(timeout=0.2)
        if state is not None:
            return state


def print_scan_results(
    scan_result: ScanState, detailed: bool = False, config: ApplicationConfig | None = None
) -> None:
    """
    Print scan results to console.

    Args:
        scan_result: Results from the scan operation
        detailed: Whether to show every asset of each group
        config: Application configuration used for date formatting
    """
    date_formatter = DateFormatter(config)

    print("\n" + "=" * 60)
    print("SCAN RESULTS" + (" (CANCELLED)" if scan_result.cancelled else ""))
    print("=" * 60)

    print(f"Photos checked: {scan_result.processed_count} of {scan_result.total_count}")
    print(f"Duplicate groups: {scan_result.group_count}")
    print(f"Duplicates found: {scan_result.duplicate_count}")
    print(f"Scan time: {scan_result.duration_seconds:.1f} seconds")

    if not scan_result.groups:
        print("\nNo duplicates found.")
        return

    print("\n" + "-" * 60)
    print("DUPLICATE GROUPS")
    print("-" * 60)

    for i, group in enumerate(scan_result.groups, 1):
        representative = group.representative
        print(f"\nGroup {i}: '{representative.display_name}'")
        print(f"  Captured: {date_formatter.format(representative)}")
        print(f"  Dimensions: {representative.dimensions}")
        variants = format_variants(representative)
        if variants:
            print(f"  Variant: {variants}")
        print(f"  Duplicates: {group.member_count}")

        if detailed:
            print("  Assets:")
            for asset in group.assets:
                marker = "*" if asset is representative else "-"
                print(
                    f"    {marker} {asset.display_name} "
                    f"({date_formatter.format(asset)}, {asset.dimensions})"
                )
                if asset.file_path is not None:
                    print(f"      Path: {asset.file_path}")


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description=(
            "Photo Duplicate Checker - Find duplicate photos by capture time, "
            "variant and dimensions"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Launch GUI
  photo-duplicate-checker

  # Scan directory from command line
  photo-duplicate-checker --scan /path/to/photos

  # Scan with detailed output
  photo-duplicate-checker --scan /path/to/photos --detailed

  # Scan only current directory (non-recursive)
  photo-duplicate-checker --scan . --no-recursive

  # Machine readable output
  photo-duplicate-checker --scan /path/to/photos --output-format json

Press Ctrl-C during a scan to stop it and print the groups found so far.
        """,
    )

    parser.add_argument(
        "--scan",
        type=Path,
        metavar="DIRECTORY",
        help="Scan directory for duplicates (command-line mode)",
    )

    parser.add_argument(
        "--no-recursive", action="store_true", help="Don't scan subdirectories recursively"
    )

    parser.add_argument(
        "--detailed", action="store_true", help="List every photo of each duplicate group"
    )

    parser.add_argument(
        "--output-format",
        choices=["text", "json"],
        default="text",
        help="Output format for results (default: text)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI application.

    Args:
        argv: Arguments to parse, defaults to sys.argv[1:]

    Returns:
        Exit code (0 for success, 130 if the scan was cancelled, 1 for errors)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config = ApplicationConfig(log_level=args.log_level)
    if config.enable_logging:
        setup_logging(config.log_level)

    try:
        if args.scan:
            logger.info("Running in CLI mode")

            scan_result = scan_directory_cli(
                directory=args.scan, recursive=not args.no_recursive, config=config
            )

            if args.output_format == "json":
                print(scan_result.model_dump_json(indent=2))
            else:
                print_scan_results(scan_result, detailed=args.detailed, config=config)

            return EXIT_CANCELLED if scan_result.cancelled else 0

        logger.info("Running in GUI mode")

        try:
            from ..ui.main_window import MainWindow
        except ImportError:
            print("Error: tkinter is not available. GUI mode requires tkinter.")
            print("Try running with --scan option for command-line mode.")
            return 1

        app = MainWindow(config)
        app.run()
        return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 1
    except (FileNotFoundError, NotADirectoryError) as e:
        print(f"Error: {e}")
        return 1
    except Exception as e:
        logger.exception("Unexpected error occurred")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
