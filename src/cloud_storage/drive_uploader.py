"""
Upload archive files to a Google Drive folder.

Each upload is one multipart files.create call. There is no resumable
upload and no retry; any failure aborts the run.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import httplib2
from google.auth import exceptions as google_auth_exceptions
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from src.exceptions import TransportError, UploadFailedError

logger = logging.getLogger(__name__)

ARCHIVE_MIME_TYPE = "application/gzip"


def describe_http_error(error: HttpError) -> str:
    """Pull the API's error message out of an HttpError."""
    content = error.content
    if isinstance(content, bytes):
        content = content.decode("utf-8", "ignore")
    try:
        payload = json.loads(content) if content else {}
    except json.JSONDecodeError:
        payload = {}

    message = ""
    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        message = payload["error"].get("message", "")
    return message or str(error)[:200]


class DriveUploader:
    """
    Creates files inside a single Google Drive folder.
    """

    def __init__(self, credentials, folder_id: str, service=None):
        """
        Initialize the uploader.

        Args:
            credentials: google-auth credentials with a Drive scope
            folder_id: Destination parent folder ID
            service: Optional pre-built Drive v3 service
        """
        self.folder_id = folder_id
        self.service = service or build(
            "drive", "v3", credentials=credentials, cache_discovery=False
        )

    def upload_file(
        self,
        path: Union[str, Path],
        name: str,
        mime_type: str = ARCHIVE_MIME_TYPE,
        app_properties: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Upload a local file into the destination folder.

        Args:
            path: Local file to upload
            name: Target file name in Drive
            mime_type: Declared content type
            app_properties: Optional private key/value metadata for the file

        Returns:
            Dict with the created file's "id" and "name"
        """
        metadata = {"name": name, "parents": [self.folder_id]}
        if app_properties:
            metadata["appProperties"] = app_properties

        media = MediaFileUpload(str(path), mimetype=mime_type, resumable=False)

        logger.info(f"Uploading {name} to Drive folder {self.folder_id}")
        try:
            created = (
                self.service.files()
                .create(
                    body=metadata,
                    media_body=media,
                    fields="id,name",
                    supportsAllDrives=True,
                )
                .execute()
            )
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            raise UploadFailedError(
                describe_http_error(e), status_code=int(status) if status else None
            ) from e
        except google_auth_exceptions.RefreshError as e:
            raise UploadFailedError(f"authorization failed: {e}") from e
        except (google_auth_exceptions.TransportError, httplib2.HttpLib2Error) as e:
            raise TransportError(f"Request to Google Drive failed: {e}") from e
        finally:
            # MediaFileUpload keeps the archive open until closed here
            media.stream().close()

        logger.info(f"Uploaded {created.get('name')} (id={created.get('id')})")
        return {"id": created.get("id"), "name": created.get("name")}
