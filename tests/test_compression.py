"""
Unit tests for the compression module.

Covers extension eligibility (non-compress list wins) and the deflate
round-trip of both the in-memory and the streaming compressor.
"""

import io
import os
import zlib

import pytest

from modpack_publisher.compression import (
    compress_bytes,
    compress_stream,
    decompress_bytes,
    should_compress_file,
)
from modpack_publisher.config import COMPRESS_EXTENSIONS, NON_COMPRESS_EXTENSIONS


class TestShouldCompressFile:
    """Test extension-based eligibility."""

    @pytest.mark.parametrize("ext", COMPRESS_EXTENSIONS)
    def test_allow_listed_extensions_are_compressed(self, ext):
        assert should_compress_file(f"config/file{ext}") is True

    @pytest.mark.parametrize("ext", NON_COMPRESS_EXTENSIONS)
    def test_deny_listed_extensions_are_not_compressed(self, ext):
        assert should_compress_file(f"mods/file{ext}") is False

    def test_extension_match_is_case_insensitive(self):
        assert should_compress_file("CONFIG/Forge.CFG") is True
        assert should_compress_file("textures/Icon.PNG") is False

    def test_unknown_extension_passes_through(self):
        assert should_compress_file("mods/readme") is False
        assert should_compress_file("saves/level.dat") is False

    def test_deny_list_wins_over_allow_list(self):
        # ".json.zip" ends with an allow-listed stem but a deny-listed extension
        assert should_compress_file("backup/settings.json.zip") is False
        assert should_compress_file("mods/library.js.jar") is False


class TestRoundTrip:
    """Test that decompressing the output gives back the input."""

    def test_stream_round_trip(self):
        original = os.urandom(512) + b"key=value\n" * 50
        target = io.BytesIO()

        bytes_read, bytes_written = compress_stream(io.BytesIO(original), target)

        assert bytes_read == len(original)
        assert bytes_written == len(target.getvalue())
        assert decompress_bytes(target.getvalue()) == original

    def test_stream_reads_in_chunks(self):
        original = b"0123456789" * 100
        target = io.BytesIO()

        compress_stream(io.BytesIO(original), target, chunk_size=7)

        assert zlib.decompress(target.getvalue()) == original

    def test_stream_of_empty_content(self):
        target = io.BytesIO()

        assert compress_stream(io.BytesIO(b""), target)[0] == 0
        assert decompress_bytes(target.getvalue()) == b""

    def test_round_trip_empty_content(self):
        assert decompress_bytes(compress_bytes(b"")) == b""

    def test_compress_bytes_uses_zlib_container(self):
        payload = compress_bytes(b"{}" * 100)

        assert zlib.decompress(payload) == b"{}" * 100

    def test_text_payload_shrinks(self):
        original = b'{"enabled": true}\n' * 1000

        assert len(compress_bytes(original)) < len(original)
