"""
Configuration settings for the log archiver.

All settings come from the process environment. A local .env file is loaded
first so the job can be run by hand with the same variables as in CI.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from dotenv import load_dotenv

from src.clickhouse_client import normalize_endpoint_url
from src.exceptions import ConfigError, ConfigMissingError
from src.query_builder import DEFAULT_NOISE_FIELD, NoiseFilter

# Load environment variables from .env file
load_dotenv()

AUTH_MODE_OAUTH = "oauth"
AUTH_MODE_SERVICE_ACCOUNT = "service_account"


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ArchiveSettings:
    """Resolved settings for one archive run."""

    logstore_url: str
    logstore_user: str
    logstore_password: str
    logstore_table: str
    drive_folder_id: Optional[str] = None
    auth_mode: Optional[str] = None
    oauth_client_id: Optional[str] = None
    oauth_client_secret: Optional[str] = None
    oauth_refresh_token: Optional[str] = None
    service_account_info: Optional[Dict[str, Any]] = field(default=None, repr=False)
    archive_prefix: str = "logs"
    skip_empty: bool = False
    noise_filter: Optional[NoiseFilter] = None
    logstore_timeout: Optional[float] = None


class Config:
    """Configuration class for the project."""

    # Better Stack / ClickHouse
    LOGSTORE_VARS = [
        "BETTERSTACK_CH_URL",
        "BETTERSTACK_CH_USER",
        "BETTERSTACK_CH_PASS",
        "BETTERSTACK_LOGS_TABLE",
    ]

    # Google Drive
    DRIVE_FOLDER_VAR = "DRIVE_FOLDER_ID"
    OAUTH_VARS = [
        "GOOGLE_OAUTH_CLIENT_ID",
        "GOOGLE_OAUTH_CLIENT_SECRET",
        "GOOGLE_OAUTH_REFRESH_TOKEN",
    ]
    SERVICE_ACCOUNT_VAR = "GOOGLE_SERVICE_ACCOUNT_JSON"
    AUTH_MODE_VAR = "DRIVE_AUTH_MODE"

    # Optional behaviour
    DEFAULT_ARCHIVE_PREFIX = "logs"
    DEFAULT_LOG_LEVEL = "INFO"

    @staticmethod
    def _get(env: Mapping[str, str], name: str) -> str:
        return (env.get(name) or "").strip()

    @classmethod
    def resolve_auth_mode(cls, env: Mapping[str, str]) -> str:
        """
        Decide which Drive credential strategy applies.

        An explicit DRIVE_AUTH_MODE wins; otherwise a configured service
        account document is preferred over OAuth.
        """
        explicit = cls._get(env, cls.AUTH_MODE_VAR).lower()
        if explicit:
            if explicit not in (AUTH_MODE_OAUTH, AUTH_MODE_SERVICE_ACCOUNT):
                raise ConfigError(
                    f"Invalid {cls.AUTH_MODE_VAR}: {explicit} "
                    f"(expected {AUTH_MODE_OAUTH} or {AUTH_MODE_SERVICE_ACCOUNT})"
                )
            return explicit

        if cls._get(env, cls.SERVICE_ACCOUNT_VAR):
            return AUTH_MODE_SERVICE_ACCOUNT
        return AUTH_MODE_OAUTH

    @classmethod
    def missing_vars(
        cls, env: Mapping[str, str], require_drive: bool = True
    ) -> List[str]:
        """List required variables that are unset or blank."""
        required = list(cls.LOGSTORE_VARS)
        if require_drive:
            required.append(cls.DRIVE_FOLDER_VAR)
            if cls.resolve_auth_mode(env) == AUTH_MODE_SERVICE_ACCOUNT:
                required.append(cls.SERVICE_ACCOUNT_VAR)
            else:
                required.extend(cls.OAUTH_VARS)
        return [name for name in required if not cls._get(env, name)]

    @classmethod
    def parse_service_account(cls, value: str) -> Dict[str, Any]:
        """
        Parse the service account credential document.

        Args:
            value: Inline JSON document, or a path to a key file

        Returns:
            Parsed key document
        """
        if value.lstrip().startswith("{"):
            raw = value
        else:
            key_path = Path(value).expanduser()
            if not key_path.is_file():
                raise ConfigError(
                    f"{cls.SERVICE_ACCOUNT_VAR} is neither JSON nor an existing file: {value}"
                )
            raw = key_path.read_text(encoding="utf-8")

        try:
            info = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigError(f"{cls.SERVICE_ACCOUNT_VAR} is not valid JSON: {e}") from e

        if not isinstance(info, dict) or "private_key" not in info:
            raise ConfigError(
                f"{cls.SERVICE_ACCOUNT_VAR} does not look like a service account key"
            )
        return info

    @classmethod
    def load(
        cls, environ: Optional[Mapping[str, str]] = None, require_drive: bool = True
    ) -> ArchiveSettings:
        """
        Build settings from the environment, failing fast on missing values.

        Args:
            environ: Mapping to read from (default: os.environ)
            require_drive: Whether upload credentials must be present

        Returns:
            ArchiveSettings for this run
        """
        env = os.environ if environ is None else environ

        missing = cls.missing_vars(env, require_drive=require_drive)
        if missing:
            raise ConfigMissingError(missing)

        auth_mode = None
        service_account_info = None
        if require_drive:
            auth_mode = cls.resolve_auth_mode(env)
            if auth_mode == AUTH_MODE_SERVICE_ACCOUNT:
                service_account_info = cls.parse_service_account(
                    cls._get(env, cls.SERVICE_ACCOUNT_VAR)
                )

        noise_filter = None
        noise_pattern = cls._get(env, "NOISE_FILTER_PATTERN")
        if noise_pattern:
            noise_filter = NoiseFilter(
                pattern=noise_pattern,
                field=cls._get(env, "NOISE_FILTER_FIELD") or DEFAULT_NOISE_FIELD,
            )

        timeout = None
        timeout_value = cls._get(env, "LOGSTORE_TIMEOUT")
        if timeout_value:
            try:
                timeout = float(timeout_value)
            except ValueError:
                raise ConfigError(f"Invalid LOGSTORE_TIMEOUT: {timeout_value}")
            if timeout <= 0:
                raise ConfigError(f"Invalid LOGSTORE_TIMEOUT: {timeout_value}")

        return ArchiveSettings(
            logstore_url=normalize_endpoint_url(cls._get(env, "BETTERSTACK_CH_URL")),
            logstore_user=cls._get(env, "BETTERSTACK_CH_USER"),
            logstore_password=cls._get(env, "BETTERSTACK_CH_PASS"),
            logstore_table=cls._get(env, "BETTERSTACK_LOGS_TABLE"),
            drive_folder_id=cls._get(env, cls.DRIVE_FOLDER_VAR) or None,
            auth_mode=auth_mode,
            oauth_client_id=cls._get(env, "GOOGLE_OAUTH_CLIENT_ID") or None,
            oauth_client_secret=cls._get(env, "GOOGLE_OAUTH_CLIENT_SECRET") or None,
            oauth_refresh_token=cls._get(env, "GOOGLE_OAUTH_REFRESH_TOKEN") or None,
            service_account_info=service_account_info,
            archive_prefix=cls._get(env, "ARCHIVE_PREFIX") or cls.DEFAULT_ARCHIVE_PREFIX,
            skip_empty=_env_flag(env.get("SKIP_EMPTY_EXPORT")),
            noise_filter=noise_filter,
            logstore_timeout=timeout,
        )

    @classmethod
    def validate_config(
        cls, environ: Optional[Mapping[str, str]] = None, require_drive: bool = True
    ) -> Dict[str, Any]:
        """
        Validate configuration settings.

        Returns:
            Dictionary with validation results
        """
        issues = []

        try:
            cls.load(environ, require_drive=require_drive)
        except ConfigMissingError as e:
            issues.extend(f"{name} not set" for name in e.missing)
        except ConfigError as e:
            issues.append(str(e))

        return {"valid": len(issues) == 0, "issues": issues}
