"""
Exception types raised by the log archiver.

Nothing here is retried or recovered locally; every error propagates to the
command-line entry point, which logs it and exits non-zero.
"""

from typing import List, Optional


class ArchiveError(Exception):
    """Base class for all log archiver errors."""


class ConfigError(ArchiveError):
    """A configuration value is present but unusable."""


class ConfigMissingError(ConfigError):
    """One or more required environment variables are not set."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"Missing env var: {', '.join(self.missing)}")


class QueryFailedError(ArchiveError):
    """The log store answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body_snippet: str):
        self.status_code = status_code
        self.body_snippet = body_snippet
        super().__init__(f"ClickHouse HTTP {status_code}: {body_snippet}")


class TransportError(ArchiveError):
    """Network, DNS or TLS failure talking to a remote service."""


class UploadFailedError(ArchiveError):
    """Google Drive rejected the upload or its authorization."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        if status_code is not None:
            message = f"Drive upload failed (status={status_code}): {message}"
        else:
            message = f"Drive upload failed: {message}"
        super().__init__(message)
