"""
Single-file upload with MD5 comparison, compression and bounded retries.
"""

import os
import tempfile
import time
from dataclasses import dataclass

from .compression import compress_stream, log_compression, should_compress_file
from .config import (
    COMPRESS_SPOOL_SIZE,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY,
    IDENTITY_DIR,
    MAX_RETRY_DELAY,
    MD5_SUFFIX,
)
from .errors import StorageError, UploadFailedError
from .file_utils import calculate_md5, format_md5_line, parse_md5_content
from .logger import logger
from .models import ModpackFileEntry

# Failures worth another attempt; anything else propagates immediately
TRANSIENT_ERRORS = (StorageError, OSError)


@dataclass(frozen=True)
class UploadOutcome:
    """Result of one upload task."""

    entry: ModpackFileEntry
    skipped: bool
    attempts: int


def build_remote_key(key_prefix, category, relative_path):
    """Remote key of a modpack file: {prefix}/{category}/{relative_path}."""
    return f"{key_prefix.rstrip('/')}/{category}/{relative_path.lstrip('/')}"


def build_identity_key(key_prefix, category, relative_path):
    """
    Key of the MD5 sidecar for a modpack file.

    Sidecars live under {prefix}/.identity/, which no category path can reach,
    so a source file named "x.md5" never collides with the sidecar of "x".
    """
    return (
        f"{key_prefix.rstrip('/')}/{IDENTITY_DIR}/{category}/"
        f"{relative_path.lstrip('/')}{MD5_SUFFIX}"
    )


def build_download_url(base_url, key):
    return f"{base_url.rstrip('/')}/{key}"


def get_remote_md5(storage, identity_key):
    """Read the hash stored in a sidecar, or None."""
    content = storage.read_bytes(identity_key)
    if content is None:
        return None
    return parse_md5_content(content)


def file_needs_upload(storage, key, identity_key, local_md5):
    """True unless the remote object exists and its recorded MD5 matches."""
    if not storage.exists(key):
        logger.debug(f"{key} needs upload (not on remote)")
        return True

    remote_md5 = get_remote_md5(storage, identity_key)
    if not remote_md5:
        logger.debug(f"{key} needs upload (no remote MD5)")
        return True

    if remote_md5 != local_md5.lower():
        logger.debug(f"{key} needs upload (MD5 mismatch)")
        logger.debug(f"Local MD5: {local_md5}, Remote MD5: {remote_md5}")
        return True

    logger.debug(f"{key} up-to-date (MD5 match)")
    return False


def calculate_backoff_delay(attempt, base_delay, max_delay=MAX_RETRY_DELAY):
    """Exponential backoff: base_delay, 2x, 4x, ... capped at max_delay."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


def _upload_payload(storage, local_path, key, relative_path, compressed):
    """Stream the file (deflated when eligible) to key without loading it whole."""
    with open(local_path, "rb") as source:
        if not compressed:
            storage.upload(source, key, overwrite=True)
            return

        with tempfile.SpooledTemporaryFile(max_size=COMPRESS_SPOOL_SIZE) as payload:
            original_size, compressed_size = compress_stream(source, payload)
            payload.seek(0)
            log_compression(relative_path, original_size, compressed_size)
            storage.upload(payload, key, overwrite=True)


def _attempt_upload(storage, local_path, key, identity_key, category, relative_path, download_url):
    """One attempt: hash, compare, compress and upload. Returns (entry, skipped)."""
    local_md5 = calculate_md5(local_path)
    file_size = os.path.getsize(local_path)
    compressed = should_compress_file(relative_path)
    entry = ModpackFileEntry(
        relative_path=relative_path,
        category=category,
        content_hash=local_md5,
        size_bytes=file_size,
        download_url=download_url,
        compressed=compressed,
    )

    if not file_needs_upload(storage, key, identity_key, local_md5):
        return entry, True

    _upload_payload(storage, local_path, key, relative_path, compressed)

    # Sidecar records the original file's MD5, not the compressed payload's
    md5_line = format_md5_line(local_md5, os.path.basename(relative_path))
    storage.upload(md5_line.encode("utf-8"), identity_key, overwrite=True)
    return entry, False


def upload_single_file(
    storage,
    local_path,
    relative_path,
    category,
    key_prefix,
    base_url,
    max_retries=DEFAULT_MAX_RETRIES,
    retry_delay=DEFAULT_RETRY_DELAY,
):
    """
    Publish one local file to its remote key, idempotently.

    Skips the transfer when the remote copy already carries the same MD5.
    Transient storage or local I/O errors are retried up to max_retries
    attempts in total; after the last one UploadFailedError is raised.
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be >= 1, got: {max_retries}")

    key = build_remote_key(key_prefix, category, relative_path)
    identity_key = build_identity_key(key_prefix, category, relative_path)
    download_url = build_download_url(base_url, key)
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            entry, skipped = _attempt_upload(
                storage, local_path, key, identity_key, category, relative_path, download_url
            )
        except TRANSIENT_ERRORS as e:
            last_error = e
            if attempt < max_retries:
                delay = calculate_backoff_delay(attempt, retry_delay)
                logger.warning(
                    f"Attempt {attempt}/{max_retries} failed for {category}/{relative_path}: {e}. "
                    f"Retrying in {delay:.1f}s"
                )
                if delay > 0:
                    time.sleep(delay)
            continue

        if skipped:
            logger.debug(f"Skipped (up-to-date): {category}/{relative_path}")
        else:
            logger.debug(f"Uploaded: {category}/{relative_path} (attempt {attempt})")
        return UploadOutcome(entry=entry, skipped=skipped, attempts=attempt)

    logger.error(f"Giving up on {category}/{relative_path} after {max_retries} attempts: {last_error}")
    raise UploadFailedError(local_path, last_error, attempts=max_retries)
