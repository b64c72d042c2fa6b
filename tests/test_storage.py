"""Unit tests for the S3 and in-memory storage backends."""

import io
from unittest.mock import MagicMock

import boto3
import pytest
from moto import mock_aws

from modpack_publisher.errors import StorageError
from modpack_publisher.storage import MemoryStorage, S3Storage

_BUCKET = "modpack-bucket"


@pytest.fixture
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def s3_storage(aws_credentials):
    """S3Storage backed by a moto-mocked bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=_BUCKET)
        yield S3Storage(_BUCKET, client=client)


class TestS3Storage:
    """Tests for S3Storage against moto."""

    def test_exists_false_for_missing_key(self, s3_storage):
        assert s3_storage.exists("stable/p/meta.json") is False

    def test_upload_then_exists_and_read(self, s3_storage):
        s3_storage.upload(io.BytesIO(b"payload"), "stable/p/a.txt")

        assert s3_storage.exists("stable/p/a.txt") is True
        assert s3_storage.read_bytes("stable/p/a.txt") == b"payload"

    def test_upload_accepts_bytes(self, s3_storage):
        s3_storage.upload(b"raw", "k")

        assert s3_storage.get_object_stream("k").read() == b"raw"

    def test_get_object_stream_missing_returns_none(self, s3_storage):
        assert s3_storage.get_object_stream("missing") is None
        assert s3_storage.read_bytes("missing") is None

    def test_upload_without_overwrite_rejects_existing_key(self, s3_storage):
        s3_storage.upload(b"first", "k")

        with pytest.raises(StorageError):
            s3_storage.upload(b"second", "k", overwrite=False)

        assert s3_storage.read_bytes("k") == b"first"

    def test_upload_with_overwrite_replaces(self, s3_storage):
        s3_storage.upload(b"first", "k")
        s3_storage.upload(b"second", "k", overwrite=True)

        assert s3_storage.read_bytes("k") == b"second"

    def test_upload_to_missing_bucket_raises_storage_error(self, s3_storage):
        broken = S3Storage("no-such-bucket", client=s3_storage.client)

        with pytest.raises(StorageError):
            broken.upload(b"x", "k")

    def test_upload_streams_file_object(self, s3_storage, tmp_path):
        path = tmp_path / "mod.jar"
        path.write_bytes(b"PK" * 4096)

        with open(path, "rb") as f:
            s3_storage.upload(f, "stable/p/mods/mod.jar")

        assert s3_storage.read_bytes("stable/p/mods/mod.jar") == b"PK" * 4096

    def test_stream_upload_to_missing_bucket_raises_storage_error(self, s3_storage):
        broken = S3Storage("no-such-bucket", client=s3_storage.client)

        with pytest.raises(StorageError):
            broken.upload(io.BytesIO(b"x"), "k")

    def test_test_connection(self, s3_storage):
        s3_storage.test_connection()

        with pytest.raises(StorageError):
            S3Storage("no-such-bucket", client=s3_storage.client).test_connection()

    def test_builds_own_client(self, aws_credentials):
        with mock_aws():
            boto3.client("s3", region_name="us-east-1").create_bucket(Bucket=_BUCKET)
            storage = S3Storage(_BUCKET, region="us-east-1")

            storage.upload(b"hello", "greeting.txt")

            assert storage.read_bytes("greeting.txt") == b"hello"
            storage.shutdown()


class TestS3StorageTransfer:
    """Which client call S3Storage.upload makes for each payload type."""

    def test_file_object_goes_to_transfer_manager_unread(self):
        client = MagicMock()
        storage = S3Storage(_BUCKET, client=client)
        stream = MagicMock()

        storage.upload(stream, "stable/p/mods/big.jar")

        client.upload_fileobj.assert_called_once()
        args, kwargs = client.upload_fileobj.call_args
        assert args[0] is stream
        assert kwargs["Config"] is storage.transfer_config
        stream.read.assert_not_called()
        client.put_object.assert_not_called()

    def test_bytes_use_single_put(self):
        client = MagicMock()

        S3Storage(_BUCKET, client=client).upload(b"{}", "stable/p/meta.json")

        client.put_object.assert_called_once()
        assert client.put_object.call_args.kwargs["Body"] == b"{}"
        client.upload_fileobj.assert_not_called()


class TestMemoryStorage:
    """Tests for MemoryStorage."""

    def test_round_trip(self):
        storage = MemoryStorage()
        storage.upload(io.BytesIO(b"abc"), "k")

        assert storage.exists("k")
        assert storage.read_bytes("k") == b"abc"

    def test_missing_key(self):
        storage = MemoryStorage()

        assert storage.exists("k") is False
        assert storage.get_object_stream("k") is None

    def test_no_overwrite(self):
        storage = MemoryStorage({"k": b"old"})

        with pytest.raises(StorageError):
            storage.upload(b"new", "k", overwrite=False)

    def test_shutdown_marks_closed(self):
        storage = MemoryStorage()
        storage.shutdown()

        assert storage.closed is True
