"""
File utilities for MD5 calculation, MD5 sidecar parsing and directory enumeration.
"""

import hashlib
import os

from .errors import DirectoryAccessError
from .logger import logger


def calculate_md5(file_path):
    """Calculate MD5 hash of a file. Read errors propagate to the caller."""
    hash_md5 = hashlib.md5()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            hash_md5.update(chunk)
    return hash_md5.hexdigest()


def format_md5_line(md5_hash, filename):
    """Build MD5 sidecar content.
    Format: hash *filename (asterisk indicates binary mode), Unix line ending."""
    return f"{md5_hash.lower()} *{filename}\n"


def parse_md5_content(md5_content):
    """Extract the hash from MD5 sidecar content, or None if it is not a valid MD5."""
    if isinstance(md5_content, bytes):
        md5_content = md5_content.decode("utf-8", errors="replace")

    # Handle "hash *filename", "hash  filename" and bare "hash"
    md5_content = md5_content.replace("\r\n", "\n").replace("\r", "\n").strip()
    parts = md5_content.split()
    if not parts:
        return None

    hash_value = parts[0].lower()
    if len(hash_value) != 32 or not all(c in "0123456789abcdef" for c in hash_value):
        logger.warning(f"Invalid MD5 hash format: {hash_value}")
        return None

    return hash_value


def to_relative_path(file_path, base_dir):
    """Path of file_path relative to base_dir, always with forward slashes."""
    return os.path.relpath(file_path, base_dir).replace(os.sep, "/")


def list_files(base_dir, create=True):
    """
    Enumerate every regular file under base_dir, recursively.
    Returns a sorted list of (file_path, relative_path) tuples.
    Raises DirectoryAccessError if base_dir cannot be created or read.
    """
    if create:
        try:
            os.makedirs(base_dir, exist_ok=True)
        except OSError as e:
            raise DirectoryAccessError(base_dir, e) from e

    if not os.path.isdir(base_dir):
        raise DirectoryAccessError(base_dir, "not a directory")
    if not os.access(base_dir, os.R_OK | os.X_OK):
        raise DirectoryAccessError(base_dir, "permission denied")

    def on_error(error):
        raise DirectoryAccessError(getattr(error, "filename", base_dir) or base_dir, error) from error

    files = []
    for root, dirs, filenames in os.walk(base_dir, onerror=on_error):
        dirs.sort()
        for filename in filenames:
            file_path = os.path.join(root, filename)
            if not os.path.isfile(file_path):
                continue
            files.append((file_path, to_relative_path(file_path, base_dir)))

    files.sort(key=lambda item: item[1])
    logger.debug(f"Found {len(files)} files in {base_dir}")
    return files
