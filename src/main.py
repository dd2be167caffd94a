#!/usr/bin/env python3
"""
Main entry point for the log archiver.

This module provides a command-line interface for exporting a day of
Better Stack logs to Google Drive and for checking the configuration.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from src.archive_pipeline import LogArchivePipeline
from src.config import Config
from src.time_window import parse_day


def setup_logging(level: str = "INFO"):
    """Set up logging configuration."""
    log_level = getattr(logging, level.upper())
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def run_archive(
    day: str = None, output_dir: str = None, dry_run: bool = False, keep_local: bool = False
) -> None:
    """
    Export one UTC day of logs and upload the archive.

    Args:
        day: Day to export as YYYY-MM-DD (default: yesterday)
        output_dir: Directory for the local archive
        dry_run: Skip the upload and keep the archive locally
        keep_local: Keep the archive after uploading
    """
    logger = logging.getLogger(__name__)

    try:
        settings = Config.load(require_drive=not dry_run)
        target_day = parse_day(day) if day else None

        pipeline = LogArchivePipeline(
            settings, output_dir=Path(output_dir) if output_dir else None
        )
        result = pipeline.run(day=target_day, dry_run=dry_run, keep_local=keep_local)

    except Exception as e:
        logger.error(f"Archive failed: {e}")
        sys.exit(1)

    if result["status"] == "uploaded":
        logger.info(f"Uploaded: {result['name']} (id={result['file_id']})")
    elif result["status"] == "dry_run":
        logger.info(f"Dry run complete, archive kept at {result['path']}")
    else:
        logger.info(f"Nothing to archive for {result['day']}")


def validate_config(dry_run: bool = False) -> None:
    """Validate project configuration."""
    validation = Config.validate_config(require_drive=not dry_run)

    if validation["valid"]:
        print("✓ Configuration is valid")
    else:
        print("✗ Configuration issues found:")
        for issue in validation["issues"]:
            print(f"  - {issue}")
        sys.exit(1)


def main(argv=None):
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Log Archiver - export daily Better Stack logs to Google Drive"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.getenv("LOG_LEVEL", Config.DEFAULT_LOG_LEVEL).upper(),
        help="Set logging level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Export and upload one day of logs")
    run_parser.add_argument("--date", help="UTC day to export (YYYY-MM-DD, default: yesterday)")
    run_parser.add_argument("--output-dir", help="Directory for the local archive")
    run_parser.add_argument(
        "--dry-run", action="store_true", help="Query and compress only, no upload"
    )
    run_parser.add_argument(
        "--keep-local", action="store_true", help="Keep the archive after uploading"
    )

    # Config command
    config_parser = subparsers.add_parser("validate-config", help="Validate configuration")
    config_parser.add_argument(
        "--dry-run", action="store_true", help="Skip Google Drive settings"
    )

    args = parser.parse_args(argv)

    # Set up logging
    setup_logging(args.log_level)

    if args.command == "run":
        run_archive(args.date, args.output_dir, args.dry_run, args.keep_local)
    elif args.command == "validate-config":
        validate_config(args.dry_run)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
