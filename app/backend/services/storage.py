# app/backend/services/storage.py
from __future__ import annotations

import logging
from typing import BinaryIO, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.backend.core.config import Settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class AttachmentStore(Protocol):
    def put(self, bucket: str, key: str, stream: BinaryIO, content_type: str) -> None: ...


class S3AttachmentStore:
    """
    Object storage through the S3 API.
    Pointed at https://storage.googleapis.com it talks to GCS via HMAC interop keys.
    """

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3AttachmentStore":
        kwargs = {}
        if settings.storage_endpoint_url:
            kwargs["endpoint_url"] = settings.storage_endpoint_url
        if settings.storage_access_id:
            kwargs["aws_access_key_id"] = settings.storage_access_id
            kwargs["aws_secret_access_key"] = settings.storage_secret_key
        return cls(boto3.client("s3", **kwargs))

    def put(self, bucket: str, key: str, stream: BinaryIO, content_type: str) -> None:
        try:
            self.client.upload_fileobj(stream, bucket, key, ExtraArgs={"ContentType": content_type})
        except (BotoCoreError, ClientError) as exc:
            logger.error("upload to %s/%s failed: %s", bucket, key, exc)
            raise StorageError(f"upload to {bucket}/{key} failed") from exc
