# itsm_portal/backend/app/services/object_storage.py
"""
Object storage gateway for ticket attachments (S3 or MinIO).

Clients upload straight to the bucket with a presigned PUT URL; the API only
ever sees the resulting object path ("/objects/<key>"), checks it exists
before recording an attachment, and streams it back on download. Upload keys
are "<prefix>/<user id>/<uuid4>" so an upload can only be attached by the
user it was issued to.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .. import config
from ..errors import NotFoundError, StorageUnavailable, ValidationError

logger = logging.getLogger(__name__)

OBJECT_PATH_PREFIX = "/objects/"
DOWNLOAD_CHUNK_SIZE = 64 * 1024

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass
class StoredObject:
    body: Iterator[bytes]
    content_type: Optional[str]
    content_length: Optional[int]


class ObjectStorageService:
    def __init__(
        self,
        bucket: str = None,
        endpoint_url: str = None,
        region: str = None,
        prefix: str = None,
        client=None,
    ):
        self._bucket = bucket or config.OBJECT_STORAGE_BUCKET
        self._endpoint_url = endpoint_url or config.OBJECT_STORAGE_ENDPOINT_URL
        self._region = region or config.AWS_REGION
        self._prefix = (prefix or config.OBJECT_STORAGE_PREFIX).strip("/")
        self._client = client

    def _get_client(self):
        """Lazy initialization of the S3 client"""
        if self._client is None:
            kwargs = {
                "region_name": self._region,
                "config": Config(signature_version="s3v4", s3={"addressing_style": "path"}),
            }
            if self._endpoint_url:
                kwargs["endpoint_url"] = self._endpoint_url
            # Without explicit keys boto3 falls back to the instance role
            if config.AWS_ACCESS_KEY_ID and config.AWS_SECRET_ACCESS_KEY:
                kwargs["aws_access_key_id"] = config.AWS_ACCESS_KEY_ID
                kwargs["aws_secret_access_key"] = config.AWS_SECRET_ACCESS_KEY
            self._client = boto3.client("s3", **kwargs)
            logger.info("[STORAGE] S3 client ready for bucket %s", self._bucket)
        return self._client

    # Paths

    @staticmethod
    def normalize_object_path(object_path: str) -> str:
        """
        Accept "/objects/<key>" (or a bare key) and return the canonical
        "/objects/<key>" form. Rejects traversal and empty keys.
        """
        raw = (object_path or "").strip()
        if raw.startswith(OBJECT_PATH_PREFIX):
            key = raw[len(OBJECT_PATH_PREFIX):]
        else:
            key = raw.lstrip("/")
        parts = key.split("/")
        if not key or any(part in ("", ".", "..") for part in parts):
            raise ValidationError(f"Invalid object path '{raw}'")
        return OBJECT_PATH_PREFIX + key

    def _key_for(self, object_path: str) -> str:
        return self.normalize_object_path(object_path)[len(OBJECT_PATH_PREFIX):]

    def uploader_of(self, object_path: str) -> Optional[int]:
        """User id an upload key was issued to, or None for foreign keys."""
        key = self._key_for(object_path)
        head = self._prefix + "/"
        if not key.startswith(head):
            return None
        parts = key[len(head):].split("/")
        if len(parts) != 2 or not parts[0].isdigit():
            return None
        return int(parts[0])

    # Operations

    def get_upload_url(self, user_id: int, ttl_seconds: int = None) -> Tuple[str, str]:
        key = f"{self._prefix}/{user_id}/{uuid.uuid4()}"
        try:
            url = self._get_client().generate_presigned_url(
                "put_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=ttl_seconds or config.UPLOAD_URL_TTL_SECONDS,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("[STORAGE] failed to presign upload: %s", exc)
            raise StorageUnavailable("Could not create upload URL")
        return url, OBJECT_PATH_PREFIX + key

    def object_exists(self, object_path: str) -> bool:
        try:
            self._get_client().head_object(Bucket=self._bucket, Key=self._key_for(object_path))
            return True
        except ClientError as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                return False
            logger.error("[STORAGE] head_object failed for %s: %s", object_path, exc)
            raise StorageUnavailable()
        except BotoCoreError as exc:
            logger.error("[STORAGE] head_object failed for %s: %s", object_path, exc)
            raise StorageUnavailable()

    def fetch_object(self, object_path: str) -> StoredObject:
        try:
            response = self._get_client().get_object(
                Bucket=self._bucket, Key=self._key_for(object_path)
            )
        except ClientError as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                raise NotFoundError("Object not found")
            logger.error("[STORAGE] get_object failed for %s: %s", object_path, exc)
            raise StorageUnavailable()
        except BotoCoreError as exc:
            logger.error("[STORAGE] get_object failed for %s: %s", object_path, exc)
            raise StorageUnavailable()

        return StoredObject(
            body=response["Body"].iter_chunks(DOWNLOAD_CHUNK_SIZE),
            content_type=response.get("ContentType"),
            content_length=response.get("ContentLength"),
        )

    def delete_object(self, object_path: str) -> None:
        # S3 delete is idempotent: a missing key is not an error
        try:
            self._get_client().delete_object(Bucket=self._bucket, Key=self._key_for(object_path))
        except (ClientError, BotoCoreError) as exc:
            logger.error("[STORAGE] delete_object failed for %s: %s", object_path, exc)
            raise StorageUnavailable()


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


_storage_service: Optional[ObjectStorageService] = None


def get_object_storage() -> ObjectStorageService:
    """FastAPI dependency; one shared gateway per process."""
    global _storage_service
    if _storage_service is None:
        _storage_service = ObjectStorageService()
    return _storage_service
