"""
Credential builders for the Google Drive API.

Two strategies are supported: a user-delegated OAuth refresh token, or a
service account key document.
"""

import logging
from typing import Any, Dict

from google.oauth2 import service_account
from google.oauth2.credentials import Credentials as UserCredentials

from src.config import AUTH_MODE_OAUTH, AUTH_MODE_SERVICE_ACCOUNT, ArchiveSettings
from src.exceptions import ConfigError

logger = logging.getLogger(__name__)

DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive"]
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


def oauth_credentials(
    client_id: str, client_secret: str, refresh_token: str
) -> UserCredentials:
    """
    Build user credentials from a long-lived refresh token.

    No access token is supplied; google-auth exchanges the refresh token
    at the token endpoint on first use.
    """
    return UserCredentials(
        token=None,
        refresh_token=refresh_token,
        token_uri=GOOGLE_TOKEN_URI,
        client_id=client_id,
        client_secret=client_secret,
        scopes=DRIVE_SCOPES,
    )


def service_account_credentials(info: Dict[str, Any]) -> service_account.Credentials:
    """Build signed-JWT credentials from a service account key document."""
    try:
        return service_account.Credentials.from_service_account_info(
            info, scopes=DRIVE_SCOPES
        )
    except ValueError as e:
        raise ConfigError(f"Invalid service account key: {e}") from e


def credentials_from_settings(settings: ArchiveSettings):
    """
    Pick the credential strategy configured for this run.

    Args:
        settings: Loaded archive settings (with Drive settings present)

    Returns:
        google-auth credentials usable by googleapiclient
    """
    if settings.auth_mode == AUTH_MODE_SERVICE_ACCOUNT:
        logger.info("Using service account credentials for Google Drive")
        return service_account_credentials(settings.service_account_info)

    if settings.auth_mode == AUTH_MODE_OAUTH:
        logger.info("Using OAuth refresh token credentials for Google Drive")
        return oauth_credentials(
            settings.oauth_client_id,
            settings.oauth_client_secret,
            settings.oauth_refresh_token,
        )

    raise ConfigError(f"No Google Drive auth configured (auth_mode={settings.auth_mode})")
