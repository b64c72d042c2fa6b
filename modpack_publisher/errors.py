"""
Exception types raised while publishing a modpack.
"""


class PublishError(Exception):
    """Base class for every fatal publish error."""


class DirectoryAccessError(PublishError):
    """A local source directory is missing, not a directory or unreadable."""

    def __init__(self, path, cause=None):
        self.path = path
        self.cause = cause
        message = f"Cannot access directory {path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class DuplicateVersionError(PublishError):
    """The target version name has already been published."""

    def __init__(self, version_name):
        self.version_name = version_name
        super().__init__(f"Version '{version_name}' has already been published")


class UploadFailedError(PublishError):
    """A single file exhausted its retry budget."""

    def __init__(self, path, last_cause=None, attempts=0):
        self.path = path
        self.last_cause = last_cause
        self.attempts = attempts
        super().__init__(f"Failed to upload {path} after {attempts} attempt(s): {last_cause}")


class StorageError(PublishError):
    """Transport, auth or parse failure talking to the object store."""

    def __init__(self, message, key=None):
        self.key = key
        if key is not None:
            message = f"{message} (key: {key})"
        super().__init__(message)


class ManifestWriteError(PublishError):
    """One of the manifest chain writes failed; earlier writes are not undone."""

    def __init__(self, stage, cause=None):
        self.stage = stage
        self.cause = cause
        super().__init__(f"Manifest write failed during '{stage}': {cause}")
