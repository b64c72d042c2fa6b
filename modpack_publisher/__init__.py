"""
Modpack Publisher

Publishes versioned modpacks (common/server/client files plus manifests)
to S3-compatible object storage.
"""

__version__ = "1.0.0"
__author__ = "modpack-publisher"
__description__ = "Versioned modpack publisher for S3-compatible storage"

# Import main components
from .compression import compress_bytes, compress_stream, decompress_bytes, should_compress_file
from .config import CATEGORIES, COMPRESS_EXTENSIONS, NON_COMPRESS_EXTENSIONS, VERSION
from .errors import (
    DirectoryAccessError,
    DuplicateVersionError,
    ManifestWriteError,
    PublishError,
    StorageError,
    UploadFailedError,
)
from .file_utils import calculate_md5, list_files
from .logger import log_error, log_info, log_publish_summary, log_step, log_success, logger
from .models import MetaPointer, ModpackDescriptor, ModpackFileEntry, VersionInfo, VersionList
from .orchestrator import UploadSummary, default_worker_count, upload_all
from .publisher import ModpackPublisher, PublishResult
from .storage import MemoryStorage, ObjectStorage, S3Storage
from .uploader import UploadOutcome, upload_single_file
from .versions import VersionManifestManager
