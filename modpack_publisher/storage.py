"""
Object storage backends: the storage interface, the S3 implementation and an in-memory store.
"""

import io
import threading
from abc import ABC, abstractmethod
from typing import BinaryIO, Dict, Optional

import boto3
import boto3.s3.transfer as transfer
from botocore.config import Config
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from .config import DEFAULT_TIMEOUT
from .errors import StorageError
from .logger import logger

# Streams above this size are uploaded in multipart chunks
MULTIPART_THRESHOLD = 25 * 1024 * 1024

_MISSING_CODES = ("404", "NoSuchKey", "NotFound")


def _read_payload(stream):
    """Accept bytes or any object with read()."""
    if isinstance(stream, (bytes, bytearray)):
        return bytes(stream)
    return stream.read()


class ObjectStorage(ABC):
    """Capability interface the publisher needs from an object store."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if an object is stored at key."""

    @abstractmethod
    def get_object_stream(self, key: str) -> Optional[BinaryIO]:
        """Return a readable stream for key, or None if there is no such object."""

    @abstractmethod
    def upload(self, stream, key: str, overwrite: bool = True) -> None:
        """Store the stream's bytes at key. Raises StorageError on failure."""

    def shutdown(self) -> None:
        """Release client resources."""

    def read_bytes(self, key: str) -> Optional[bytes]:
        """Convenience wrapper returning the whole object, or None if missing."""
        stream = self.get_object_stream(key)
        if stream is None:
            return None
        try:
            return stream.read()
        finally:
            close = getattr(stream, "close", None)
            if close is not None:
                close()


class S3Storage(ObjectStorage):
    """ObjectStorage backed by an S3-compatible bucket (AWS S3, Tencent COS, R2, MinIO)."""

    def __init__(
        self,
        bucket_name,
        endpoint_url=None,
        region=None,
        access_key_id=None,
        secret_access_key=None,
        max_pool_connections=10,
        client=None,
    ):
        self.bucket_name = bucket_name
        self.endpoint_url = endpoint_url
        self.transfer_config = transfer.TransferConfig(
            multipart_threshold=MULTIPART_THRESHOLD,
            multipart_chunksize=MULTIPART_THRESHOLD,
            max_concurrency=4,
            use_threads=True,
        )

        if client is not None:
            self.client = client
            return

        config = Config(
            retries={"max_attempts": 3, "mode": "adaptive"},
            max_pool_connections=max_pool_connections,
            region_name=region or "us-east-1",
            signature_version="s3v4",
            s3={"addressing_style": "path"},
            read_timeout=300,
            connect_timeout=DEFAULT_TIMEOUT,
        )
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            config=config,
        )
        if endpoint_url:
            logger.info(f"Using custom S3 endpoint: {endpoint_url}")
        else:
            logger.info("Using AWS S3 standard endpoint")

    def test_connection(self):
        """Check that the bucket is reachable with the configured credentials."""
        try:
            self.client.head_bucket(Bucket=self.bucket_name)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Cannot access bucket '{self.bucket_name}': {e}") from e
        logger.info(f"S3 connection test successful for bucket: {self.bucket_name}")

    def exists(self, key):
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code", "") in _MISSING_CODES:
                return False
            raise StorageError(f"Error checking object: {e}", key) from e
        except BotoCoreError as e:
            raise StorageError(f"Error checking object: {e}", key) from e

    def get_object_stream(self, key):
        try:
            response = self.client.get_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code", "") in _MISSING_CODES:
                return None
            raise StorageError(f"Error reading object: {e}", key) from e
        except BotoCoreError as e:
            raise StorageError(f"Error reading object: {e}", key) from e
        return response["Body"]

    def upload(self, stream, key, overwrite=True):
        """
        Store bytes or a readable file object at key.

        File objects are handed to the transfer manager as they are, so large
        files go up in multipart chunks read from disk.
        """
        if not overwrite and self.exists(key):
            raise StorageError("Object already exists", key)

        try:
            if isinstance(stream, (bytes, bytearray)):
                self.client.put_object(
                    Bucket=self.bucket_name,
                    Key=key,
                    Body=bytes(stream),
                    ContentLength=len(stream),
                    ContentType="application/octet-stream",
                )
            else:
                self.client.upload_fileobj(
                    stream,
                    self.bucket_name,
                    key,
                    ExtraArgs={"ContentType": "application/octet-stream"},
                    Config=self.transfer_config,
                )
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            raise StorageError(f"Upload failed: {e}", key) from e
        logger.debug(f"Uploaded s3://{self.bucket_name}/{key}")

    def shutdown(self):
        self.client.close()
        logger.debug("S3 client closed")


class MemoryStorage(ObjectStorage):
    """Thread-safe in-memory store, used for dry runs and tests."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None):
        self.objects: Dict[str, bytes] = dict(objects or {})
        self._lock = threading.Lock()
        self.closed = False

    def exists(self, key):
        with self._lock:
            return key in self.objects

    def get_object_stream(self, key):
        with self._lock:
            data = self.objects.get(key)
        if data is None:
            return None
        return io.BytesIO(data)

    def upload(self, stream, key, overwrite=True):
        payload = _read_payload(stream)
        with self._lock:
            if not overwrite and key in self.objects:
                raise StorageError("Object already exists", key)
            self.objects[key] = payload

    def shutdown(self):
        self.closed = True
