"""
End-to-end publish run: enumerate, check version, upload, write manifests.
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .config import CATEGORIES, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY, DEFAULT_SHUTDOWN_GRACE
from .file_utils import list_files
from .logger import log_step, logger
from .models import MetaPointer
from .orchestrator import ProgressCallback, UploadSummary, upload_all
from .versions import VersionManifestManager

CompleteCallback = Callable[[int, int, int], None]


@dataclass
class PublishResult:
    """Outcome of a successful publish."""

    summary: UploadSummary
    meta: MetaPointer
    elapsed_seconds: float

    @property
    def uploaded(self):
        return self.summary.uploaded

    @property
    def skipped(self):
        return self.summary.skipped


class ModpackPublisher:
    """Publishes one modpack version of a project to an object store."""

    def __init__(
        self,
        storage,
        project_id,
        base_url,
        max_workers=None,
        max_retries=DEFAULT_MAX_RETRIES,
        retry_delay=DEFAULT_RETRY_DELAY,
        shutdown_grace=DEFAULT_SHUTDOWN_GRACE,
    ):
        self.storage = storage
        self.project_id = project_id
        self.base_url = base_url.rstrip("/")
        self.max_workers = max_workers
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.shutdown_grace = shutdown_grace
        self.manifests = VersionManifestManager(storage, project_id, self.base_url)

    def collect_files(self, category_dirs: Dict[str, str]):
        """Enumerate every category directory before any network activity."""
        files_by_category = {}
        for category in CATEGORIES:
            files = list_files(category_dirs[category])
            logger.info(f"Found {len(files)} files in {category}/")
            files_by_category[category] = files
        return files_by_category

    def publish(
        self,
        category_dirs: Dict[str, str],
        version_name: str,
        libraries: Dict[str, str],
        changelog: Optional[bytes] = None,
        progress_callback: Optional[ProgressCallback] = None,
        complete_callback: Optional[CompleteCallback] = None,
    ) -> PublishResult:
        """
        Publish version_name from category_dirs (category -> local directory).

        Order of effects: local enumeration, duplicate-version check, file
        uploads, then the manifest chain. Any error aborts the run; files
        already uploaded stay in the store.
        """
        start_time = time.time()

        log_step("STEP 1/4: SCANNING SOURCE DIRECTORIES")
        files_by_category = self.collect_files(category_dirs)

        log_step("STEP 2/4: CHECKING PUBLISHED VERSIONS")
        existing_versions = self.manifests.check_no_duplicate_version(version_name)

        log_step("STEP 3/4: UPLOADING FILES")
        summary = upload_all(
            self.storage,
            files_by_category,
            key_prefix=self.manifests.version_prefix(version_name),
            base_url=self.base_url,
            max_workers=self.max_workers,
            max_retries=self.max_retries,
            retry_delay=self.retry_delay,
            shutdown_grace=self.shutdown_grace,
            progress_callback=progress_callback,
        )
        if complete_callback is not None:
            complete_callback(summary.total, summary.uploaded, summary.skipped)

        log_step("STEP 4/4: WRITING MANIFESTS")
        changelog_url = ""
        if changelog is not None:
            changelog_url = self.manifests.upload_changelog(version_name, changelog)
        meta = self.manifests.compose_and_persist(
            summary.entries, version_name, libraries, existing_versions, changelog_url
        )

        elapsed = time.time() - start_time
        logger.info(f"Published version '{version_name}' of project '{self.project_id}'")
        return PublishResult(summary=summary, meta=meta, elapsed_seconds=elapsed)
