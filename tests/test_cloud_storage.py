"""
Test module for Google Drive credentials and uploads.
"""

import json
from dataclasses import replace
from unittest.mock import Mock, patch

import httplib2
import pytest
from google.auth import exceptions as google_auth_exceptions
from googleapiclient.errors import HttpError

from src.cloud_storage import (
    DriveUploader,
    credentials_from_settings,
    oauth_credentials,
    service_account_credentials,
)
from src.cloud_storage.drive_auth import DRIVE_SCOPES, GOOGLE_TOKEN_URI
from src.config import AUTH_MODE_SERVICE_ACCOUNT
from src.exceptions import ConfigError, TransportError, UploadFailedError


def _http_error(status, message):
    resp = httplib2.Response({"status": status})
    content = json.dumps({"error": {"code": status, "message": message}}).encode("utf-8")
    return HttpError(resp, content)


class TestDriveAuth:
    """Test cases for credential builders."""

    def test_oauth_credentials(self):
        creds = oauth_credentials("cid", "csecret", "rtoken")

        assert creds.token is None
        assert creds.refresh_token == "rtoken"
        assert creds.client_id == "cid"
        assert creds.client_secret == "csecret"
        assert creds.token_uri == GOOGLE_TOKEN_URI
        assert creds.scopes == DRIVE_SCOPES

    @patch("src.cloud_storage.drive_auth.service_account.Credentials.from_service_account_info")
    def test_service_account_credentials(self, mock_from_info):
        info = {"private_key": "k", "client_email": "a@b"}

        creds = service_account_credentials(info)

        assert creds is mock_from_info.return_value
        mock_from_info.assert_called_once_with(info, scopes=DRIVE_SCOPES)

    @patch("src.cloud_storage.drive_auth.service_account.Credentials.from_service_account_info")
    def test_service_account_bad_key(self, mock_from_info):
        mock_from_info.side_effect = ValueError("Could not deserialize key data")

        with pytest.raises(ConfigError, match="Invalid service account key"):
            service_account_credentials({"private_key": "garbage"})

    def test_from_settings_oauth(self, settings):
        creds = credentials_from_settings(settings)
        assert creds.refresh_token == "refresh-token"

    @patch("src.cloud_storage.drive_auth.service_account_credentials")
    def test_from_settings_service_account(self, mock_sa, settings):
        sa_settings = replace(
            settings,
            auth_mode=AUTH_MODE_SERVICE_ACCOUNT,
            service_account_info={"private_key": "k"},
        )

        assert credentials_from_settings(sa_settings) is mock_sa.return_value
        mock_sa.assert_called_once_with({"private_key": "k"})

    def test_from_settings_without_drive(self, settings):
        with pytest.raises(ConfigError, match="No Google Drive auth"):
            credentials_from_settings(replace(settings, auth_mode=None))


class TestDriveUploader:
    """Test cases for DriveUploader."""

    @pytest.fixture
    def service(self):
        service = Mock()
        service.files.return_value.create.return_value.execute.return_value = {
            "id": "file-123",
            "name": "logs-2024-03-09.jsonl.gz",
        }
        return service

    @pytest.fixture
    def uploader(self, service):
        return DriveUploader(credentials=None, folder_id="folder-abc", service=service)

    @pytest.fixture
    def archive(self, tmp_path):
        path = tmp_path / "logs-2024-03-09.jsonl.gz"
        path.write_bytes(b"\x1f\x8b")
        return path

    @patch("src.cloud_storage.drive_uploader.build")
    def test_builds_drive_v3_service(self, mock_build):
        creds = Mock()
        uploader = DriveUploader(creds, "folder-abc")

        mock_build.assert_called_once_with(
            "drive", "v3", credentials=creds, cache_discovery=False
        )
        assert uploader.service is mock_build.return_value

    @patch("src.cloud_storage.drive_uploader.MediaFileUpload")
    def test_upload_file(self, mock_media, uploader, service, archive):
        result = uploader.upload_file(archive, archive.name)

        assert result == {"id": "file-123", "name": "logs-2024-03-09.jsonl.gz"}
        mock_media.assert_called_once_with(
            str(archive), mimetype="application/gzip", resumable=False
        )
        service.files.return_value.create.assert_called_once_with(
            body={"name": archive.name, "parents": ["folder-abc"]},
            media_body=mock_media.return_value,
            fields="id,name",
            supportsAllDrives=True,
        )

    @patch("src.cloud_storage.drive_uploader.MediaFileUpload")
    def test_upload_with_app_properties(self, mock_media, uploader, service, archive):
        uploader.upload_file(archive, archive.name, app_properties={"source_table": "t1"})

        body = service.files.return_value.create.call_args.kwargs["body"]
        assert body["appProperties"] == {"source_table": "t1"}

    def test_upload_real_media_object(self, uploader, service, archive):
        """Test with googleapiclient's own MediaFileUpload."""
        uploader.upload_file(archive, archive.name)

        media = service.files.return_value.create.call_args.kwargs["media_body"]
        assert media.mimetype() == "application/gzip"
        assert media.resumable() is False
        assert media.stream().closed

    def test_archive_handle_closed_after_failure(self, uploader, service, archive):
        service.files.return_value.create.return_value.execute.side_effect = _http_error(
            403, "Insufficient permissions"
        )

        with pytest.raises(UploadFailedError):
            uploader.upload_file(archive, archive.name)

        media = service.files.return_value.create.call_args.kwargs["media_body"]
        assert media.stream().closed

    @patch("src.cloud_storage.drive_uploader.MediaFileUpload")
    def test_http_error_raises_upload_failed(self, mock_media, uploader, service, archive):
        service.files.return_value.create.return_value.execute.side_effect = _http_error(
            404, "File not found: folder-abc."
        )

        with pytest.raises(UploadFailedError) as exc_info:
            uploader.upload_file(archive, archive.name)

        assert exc_info.value.status_code == 404
        assert "File not found: folder-abc." in str(exc_info.value)

    @patch("src.cloud_storage.drive_uploader.MediaFileUpload")
    def test_refresh_error_raises_upload_failed(self, mock_media, uploader, service, archive):
        service.files.return_value.create.return_value.execute.side_effect = (
            google_auth_exceptions.RefreshError("invalid_grant: Token has been expired")
        )

        with pytest.raises(UploadFailedError, match="invalid_grant"):
            uploader.upload_file(archive, archive.name)

    @patch("src.cloud_storage.drive_uploader.MediaFileUpload")
    def test_transport_error(self, mock_media, uploader, service, archive):
        service.files.return_value.create.return_value.execute.side_effect = (
            httplib2.ServerNotFoundError("Unable to find the server at www.googleapis.com")
        )

        with pytest.raises(TransportError, match="Unable to find the server"):
            uploader.upload_file(archive, archive.name)
