"""
Google Drive storage for exported log archives.

Main components:
- drive_auth: builds OAuth (refresh token) or service-account credentials
- DriveUploader: creates archive files inside a Drive folder
"""

from src.cloud_storage.drive_auth import (
    credentials_from_settings,
    oauth_credentials,
    service_account_credentials,
)
from src.cloud_storage.drive_uploader import DriveUploader

__all__ = [
    'DriveUploader',
    'credentials_from_settings',
    'oauth_credentials',
    'service_account_credentials',
]
