"""
File Store - attachments in an S3-compatible bucket (MinIO, Cloudflare R2, AWS...).

Uploads arrive base64-encoded in JSON; each is written under

    attachments/<epoch-millis>_<6 random chars>_<sanitized name>

and served back through /api/files/<key> with its content type and ETag.
"""

import base64
import binascii
import logging
import re
import secrets
import string
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from partnerdb.config import config
from partnerdb.errors import NotFoundError, StoreError, ValidationError
from partnerdb.models import StoredFile
from partnerdb.bus.events import bus, EVENT_FILE_UPLOADED, EVENT_FILE_DELETED

logger = logging.getLogger(__name__)

KEY_PREFIX = 'attachments'
DEFAULT_MIME = 'application/octet-stream'
_UNSAFE_CHARS = re.compile(r'[^a-zA-Z0-9._-]')
_TOKEN_ALPHABET = string.ascii_lowercase + string.digits
_MISSING_CODES = {'NoSuchKey', '404', 'NotFound'}

_client = None


@dataclass
class FileObject:
    """An object read back from the bucket; body is streamed in chunks."""
    key: str
    body: Any
    content_type: str
    etag: Optional[str]
    content_length: Optional[int]

    def iter_chunks(self, chunk_size: int = 64 * 1024) -> Iterator[bytes]:
        try:
            for chunk in self.body.iter_chunks(chunk_size):
                yield chunk
        finally:
            self.body.close()


def get_client():
    """The boto3 S3 client, created on first use."""
    global _client
    if _client is None:
        _client = boto3.client(
            's3',
            endpoint_url=config.S3_ENDPOINT_URL,
            aws_access_key_id=config.S3_ACCESS_KEY or None,
            aws_secret_access_key=config.S3_SECRET_KEY or None,
            config=BotoConfig(signature_version='s3v4'),
            region_name=config.S3_REGION,
        )
        logger.debug(f"S3 client created (endpoint={config.S3_ENDPOINT_URL}, bucket={config.S3_BUCKET})")
    return _client


def sanitize_name(name: str) -> str:
    """Replace every character outside [a-zA-Z0-9._-] with '_'."""
    return _UNSAFE_CHARS.sub('_', name)


def make_key(name: str, now_ms: Optional[int] = None, token: Optional[str] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if token is None:
        token = ''.join(secrets.choice(_TOKEN_ALPHABET) for _ in range(6))
    return f"{KEY_PREFIX}/{now_ms}_{token}_{sanitize_name(name)}"


def decode_payload(data: str) -> bytes:
    """Decode base64 upload data; a data: URL prefix is accepted and stripped."""
    if data.startswith('data:') and ',' in data:
        data = data.split(',', 1)[1]
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("File data is not valid base64") from e


def _store_error(action: str, key: str, exc: Exception) -> Exception:
    if isinstance(exc, ClientError):
        code = exc.response.get('Error', {}).get('Code', '')
        if code in _MISSING_CODES:
            return NotFoundError(f"File not found: {key}")
    logger.error(f"S3 {action} failed for {key}: {exc}")
    return StoreError(f"Object store error during {action}")


def upload_file(data: str, name: str, mime_type: Optional[str] = None) -> StoredFile:
    """
    Store a base64-encoded file.
    Raises: ValidationError (missing/invalid data or name, too large), StoreError
    """
    if not data or not name:
        raise ValidationError("Missing file data or name")

    content = decode_payload(data)
    if len(content) > config.UPLOAD_MAX_BYTES:
        raise ValidationError(f"File is larger than {config.UPLOAD_MAX_BYTES} bytes")

    key = make_key(name)
    mime_type = mime_type or DEFAULT_MIME
    try:
        get_client().put_object(
            Bucket=config.S3_BUCKET,
            Key=key,
            Body=content,
            ContentType=mime_type,
        )
    except (ClientError, BotoCoreError) as e:
        raise _store_error('upload', key, e) from e

    stored = StoredFile(
        key=key,
        name=name,
        mime_type=mime_type,
        size=len(content),
        uploaded_at=datetime.now(timezone.utc),
    )
    logger.info(f"Uploaded {key} ({stored.size} bytes, {mime_type})")
    bus.emit(EVENT_FILE_UPLOADED, {'key': key, 'size': stored.size})
    return stored


def fetch_file(key: str) -> FileObject:
    """
    Open an object for streaming.
    Raises: NotFoundError, StoreError
    """
    try:
        response = get_client().get_object(Bucket=config.S3_BUCKET, Key=key)
    except (ClientError, BotoCoreError) as e:
        raise _store_error('download', key, e) from e

    return FileObject(
        key=key,
        body=response['Body'],
        content_type=response.get('ContentType') or DEFAULT_MIME,
        etag=response.get('ETag'),
        content_length=response.get('ContentLength'),
    )


def delete_file(key: str) -> None:
    """Remove an object. Deleting a missing key is not an error."""
    try:
        get_client().delete_object(Bucket=config.S3_BUCKET, Key=key)
    except (ClientError, BotoCoreError) as e:
        error = _store_error('delete', key, e)
        if not isinstance(error, NotFoundError):
            raise error from e
        return
    logger.info(f"Deleted {key}")
    bus.emit(EVENT_FILE_DELETED, {'key': key})
