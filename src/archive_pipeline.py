"""
Daily log archive pipeline.

Orchestrates the export of one UTC day of logs: query Better Stack,
gzip the JSON lines, upload the archive to Google Drive, and remove the
local copy.
"""

import logging
import tempfile
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from src.clickhouse_client import ClickHouseClient
from src.compression import write_gzip_archive
from src.config import ArchiveSettings
from src.query_builder import build_export_query
from src.time_window import (
    TimeWindow,
    to_clickhouse_datetime64,
    utc_range_for_day,
    utc_range_for_yesterday,
)

logger = logging.getLogger(__name__)

STATUS_UPLOADED = "uploaded"
STATUS_SKIPPED_EMPTY = "skipped_empty"
STATUS_DRY_RUN = "dry_run"


def archive_filename(prefix: str, window: TimeWindow) -> str:
    """Name of the archive for a window, e.g. logs-2024-03-09.jsonl.gz."""
    return f"{prefix}-{window.label}.jsonl.gz"


class LogArchivePipeline:
    """Exports one day of logs from Better Stack into Google Drive."""

    def __init__(
        self,
        settings: ArchiveSettings,
        logstore_client: Optional[ClickHouseClient] = None,
        uploader=None,
        output_dir: Optional[Path] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            settings: Loaded archive settings
            logstore_client: Optional client (default: built from settings)
            uploader: Optional Drive uploader (default: built on first upload)
            output_dir: Where the archive is written (default: system temp dir)
            clock: Returns the current time; used to find "yesterday"
        """
        self.settings = settings
        self.logstore_client = logstore_client or ClickHouseClient(
            settings.logstore_url,
            settings.logstore_user,
            settings.logstore_password,
            timeout=settings.logstore_timeout,
        )
        self._uploader = uploader
        self.output_dir = Path(output_dir) if output_dir else Path(tempfile.gettempdir())
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def uploader(self):
        # Built lazily so dry runs never need Drive credentials
        if self._uploader is None:
            from src.cloud_storage import DriveUploader, credentials_from_settings

            self._uploader = DriveUploader(
                credentials_from_settings(self.settings),
                self.settings.drive_folder_id,
            )
        return self._uploader

    def resolve_window(self, day: Optional[date] = None) -> TimeWindow:
        if day is not None:
            return utc_range_for_day(day)
        return utc_range_for_yesterday(self.clock())

    def build_query(self, window: TimeWindow) -> str:
        return build_export_query(
            window, self.settings.logstore_table, self.settings.noise_filter
        )

    def run(
        self, day: Optional[date] = None, dry_run: bool = False, keep_local: bool = False
    ) -> Dict[str, Any]:
        """
        Run the export for one day.

        Args:
            day: UTC day to export (default: yesterday)
            dry_run: Query and compress, but skip the upload and keep the file
            keep_local: Keep the local archive after a successful upload

        Returns:
            Dict describing the run outcome
        """
        window = self.resolve_window(day)
        filename = archive_filename(self.settings.archive_prefix, window)
        out_path = self.output_dir / filename

        result = {
            "day": window.label,
            "filename": filename,
            "path": None,
            "bytes_in": 0,
            "bytes_out": 0,
        }

        logger.info(f"Querying logs for {window.label}...")
        payload = self.logstore_client.query(self.build_query(window))
        result["bytes_in"] = len(payload.encode("utf-8"))

        if self.settings.skip_empty and not payload.strip():
            logger.info(f"No log rows for {window.label}, skipping archive")
            result["status"] = STATUS_SKIPPED_EMPTY
            return result

        logger.info("Compressing...")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        result["bytes_out"] = write_gzip_archive(payload, out_path)
        result["path"] = str(out_path)
        logger.info(
            f"Wrote {out_path} ({result['bytes_in']:,} -> {result['bytes_out']:,} bytes)"
        )

        if dry_run:
            logger.info("Dry run, skipping upload")
            result["status"] = STATUS_DRY_RUN
            return result

        logger.info("Uploading to Google Drive...")
        uploaded = self.uploader.upload_file(
            out_path,
            filename,
            app_properties={
                "window_start": to_clickhouse_datetime64(window.start),
                "window_end": to_clickhouse_datetime64(window.end),
                "source_table": self.settings.logstore_table,
            },
        )
        result["status"] = STATUS_UPLOADED
        result["file_id"] = uploaded["id"]
        result["name"] = uploaded["name"]

        if not keep_local:
            out_path.unlink()
            result["path"] = None
            logger.debug(f"Removed local archive {out_path}")

        return result
