"""
Deflate compression for modpack files and manifests.
"""

import os
import zlib

from .config import CHUNK_SIZE, COMPRESS_EXTENSIONS, COMPRESSION_LEVEL, NON_COMPRESS_EXTENSIONS
from .logger import logger


def should_compress_file(file_name):
    """
    Check if a file should be compressed based on its extension.
    The non-compress list is checked first and always wins.
    """
    name = os.path.basename(file_name).lower()

    for ext in NON_COMPRESS_EXTENSIONS:
        if name.endswith(ext):
            return False

    for ext in COMPRESS_EXTENSIONS:
        if name.endswith(ext):
            return True

    return False


def compress_bytes(data):
    """Deflate data at maximum compression (zlib container)."""
    return zlib.compress(data, COMPRESSION_LEVEL)


def decompress_bytes(data):
    """Exact inverse of compress_bytes."""
    return zlib.decompress(data)


def compress_stream(source, target, chunk_size=CHUNK_SIZE):
    """
    Deflate source into target chunk by chunk (same zlib container as compress_bytes).
    Returns (bytes_read, bytes_written).
    """
    compressor = zlib.compressobj(COMPRESSION_LEVEL)
    bytes_read = 0
    bytes_written = 0

    while True:
        chunk = source.read(chunk_size)
        if not chunk:
            break
        bytes_read += len(chunk)
        data = compressor.compress(chunk)
        target.write(data)
        bytes_written += len(data)

    data = compressor.flush()
    target.write(data)
    bytes_written += len(data)
    return bytes_read, bytes_written


def log_compression(file_name, original_size, compressed_size):
    if original_size:
        reduction = ((original_size - compressed_size) / original_size) * 100
        logger.debug(
            f"Compressed {os.path.basename(file_name)} "
            f"({original_size:,} → {compressed_size:,} bytes, {reduction:.1f}% reduction)"
        )
