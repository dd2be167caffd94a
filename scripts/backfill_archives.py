#!/usr/bin/env python3
"""
Backfill Log Archives CLI Tool

Runs the daily archive export for every UTC day in an inclusive date range,
e.g. after an outage of the scheduled job.

Usage:
  python scripts/backfill_archives.py --start 2024-03-01 --end 2024-03-05
  python scripts/backfill_archives.py --start 2024-03-01 --end 2024-03-05 --dry-run
  python scripts/backfill_archives.py --start 2024-03-01 --end 2024-03-05 --continue-on-error
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List

sys.path.append(str(Path(__file__).parent.parent))

from src.archive_pipeline import LogArchivePipeline
from src.config import Config
from src.main import setup_logging
from src.time_window import ONE_DAY, parse_day


def days_in_range(start: date, end: date) -> List[date]:
    """All days from start to end, both inclusive."""
    if end < start:
        raise ValueError(f"End date {end} is before start date {start}")

    days = []
    current = start
    while current <= end:
        days.append(current)
        current += ONE_DAY
    return days


def backfill(
    pipeline: LogArchivePipeline,
    days: List[date],
    dry_run: bool = False,
    continue_on_error: bool = False,
) -> List[Dict[str, Any]]:
    """
    Export each day in turn.

    Returns:
        One result dict per attempted day; failures carry "status": "failed"
    """
    results = []
    for i, day in enumerate(days, 1):
        print(f"\n📅 [{i}/{len(days)}] Archiving {day.isoformat()}...")
        try:
            result = pipeline.run(day=day, dry_run=dry_run)
        except Exception as e:
            print(f"❌ {day.isoformat()} failed: {e}")
            results.append({"day": day.isoformat(), "status": "failed", "error": str(e)})
            if not continue_on_error:
                break
            continue

        print(f"✅ {day.isoformat()}: {result['status']}")
        results.append(result)

    return results


def main():
    parser = argparse.ArgumentParser(description="Backfill daily log archives")
    parser.add_argument("--start", required=True, help="First UTC day (YYYY-MM-DD)")
    parser.add_argument("--end", required=True, help="Last UTC day, inclusive (YYYY-MM-DD)")
    parser.add_argument("--output-dir", help="Directory for local archives")
    parser.add_argument(
        "--dry-run", action="store_true", help="Query and compress only, no upload"
    )
    parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Keep going after a failed day instead of stopping",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )

    args = parser.parse_args()
    setup_logging(args.log_level)

    print("🚀 Backfill Log Archives")
    print("=" * 50)

    try:
        days = days_in_range(parse_day(args.start), parse_day(args.end))
        settings = Config.load(require_drive=not args.dry_run)
    except Exception as e:
        print(f"❌ Fatal error: {e}")
        sys.exit(1)

    if args.dry_run:
        print("🔍 DRY RUN MODE - archives are written locally, nothing is uploaded")

    pipeline = LogArchivePipeline(
        settings, output_dir=Path(args.output_dir) if args.output_dir else None
    )
    results = backfill(
        pipeline, days, dry_run=args.dry_run, continue_on_error=args.continue_on_error
    )

    # Summary
    failed = [r for r in results if r["status"] == "failed"]
    print("\n" + "=" * 50)
    print("📋 SUMMARY")
    print("=" * 50)
    print(f"Days requested: {len(days)}")
    print(f"Days attempted: {len(results)}")
    for status in ("uploaded", "dry_run", "skipped_empty", "failed"):
        count = len([r for r in results if r["status"] == status])
        if count:
            print(f"   {status}: {count}")

    if failed or len(results) < len(days):
        sys.exit(1)

    print("\n🎯 Backfill complete!")


if __name__ == "__main__":
    main()
