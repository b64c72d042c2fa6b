"""Shared fixtures: instrumented in-memory stores and source trees."""

import threading
import time

import pytest

from modpack_publisher.errors import StorageError
from modpack_publisher.storage import MemoryStorage


class RecordingStorage(MemoryStorage):
    """MemoryStorage that records every upload and the peak number of concurrent uploads."""

    def __init__(self, upload_delay=0.0, fail_uploads=0, fail_keys=()):
        super().__init__()
        self.upload_delay = upload_delay
        self.fail_uploads = fail_uploads
        self.fail_keys = set(fail_keys)
        self.upload_calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._counter_lock = threading.Lock()

    @property
    def file_upload_calls(self):
        """Upload calls excluding MD5 sidecars."""
        return [key for key in self.upload_calls if "/.identity/" not in key]

    def upload(self, stream, key, overwrite=True):
        with self._counter_lock:
            self.upload_calls.append(key)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            should_fail = key in self.fail_keys or self.fail_uploads > 0
            if self.fail_uploads > 0 and key not in self.fail_keys:
                self.fail_uploads -= 1
        try:
            if self.upload_delay:
                time.sleep(self.upload_delay)
            if should_fail:
                raise StorageError("simulated transient failure", key)
            super().upload(stream, key, overwrite)
        finally:
            with self._counter_lock:
                self.in_flight -= 1


@pytest.fixture
def recording_storage():
    """Factory for RecordingStorage instances."""
    return RecordingStorage


@pytest.fixture
def memory_storage():
    return RecordingStorage()


@pytest.fixture
def modpack_dir(tmp_path):
    """Source tree with common/a.json, server/b.cfg and an empty client directory."""
    root = tmp_path / "modpack"
    (root / "common").mkdir(parents=True)
    (root / "server").mkdir()
    (root / "client").mkdir()
    (root / "common" / "a.json").write_text("X")
    (root / "server" / "b.cfg").write_text("Y")
    return root


@pytest.fixture
def category_dirs(modpack_dir):
    return {
        "common": str(modpack_dir / "common"),
        "server": str(modpack_dir / "server"),
        "client": str(modpack_dir / "client"),
    }
