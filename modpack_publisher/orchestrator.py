"""
Parallel upload of all modpack files with a bounded worker pool.
"""

import concurrent.futures
import os
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .config import CATEGORIES, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY, DEFAULT_SHUTDOWN_GRACE
from .config_validator import performance_metrics
from .errors import UploadFailedError
from .logger import log_progress_grouped, logger
from .models import ModpackFileEntry
from .uploader import upload_single_file

ProgressCallback = Callable[[int, int, List[str]], None]


def default_worker_count():
    """Twice the available hardware parallelism, at least one."""
    return max(1, (os.cpu_count() or 1) * 2)


@dataclass
class UploadSummary:
    """Aggregated outcome of a full upload run."""

    entries: List[ModpackFileEntry] = field(default_factory=list)
    uploaded: int = 0
    skipped: int = 0

    @property
    def compressed(self):
        return sum(1 for entry in self.entries if entry.compressed)

    @property
    def total(self):
        return self.uploaded + self.skipped


class _ActiveFiles:
    """Names of files currently being processed by workers."""

    def __init__(self):
        self._names = set()
        self._lock = threading.Lock()

    def add(self, name):
        with self._lock:
            self._names.add(name)

    def discard(self, name):
        with self._lock:
            self._names.discard(name)

    def snapshot(self):
        with self._lock:
            return sorted(self._names)


def _shutdown_pool(executor, futures, grace_seconds):
    """Cancel queued work, drain in-flight work for grace_seconds, then force shutdown."""
    for future in futures:
        future.cancel()

    _, not_done = concurrent.futures.wait(futures, timeout=grace_seconds)
    if not_done:
        logger.warning(
            f"{len(not_done)} upload(s) still running after {grace_seconds}s, forcing pool shutdown"
        )
        executor.shutdown(wait=False, cancel_futures=True)
    else:
        executor.shutdown(wait=True)


def upload_all(
    storage,
    files_by_category: Dict[str, Sequence[Tuple[str, str]]],
    key_prefix: str,
    base_url: str,
    max_workers: Optional[int] = None,
    max_retries: int = DEFAULT_MAX_RETRIES,
    retry_delay: float = DEFAULT_RETRY_DELAY,
    shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE,
    progress_callback: Optional[ProgressCallback] = None,
) -> UploadSummary:
    """
    Upload every (file_path, relative_path) of every category in parallel.

    Fails fast: the first UploadFailedError stops scheduling, the pool is
    drained within shutdown_grace seconds and the error is re-raised.
    Files uploaded before the failure are left in place.
    """
    unknown = set(files_by_category) - set(CATEGORIES)
    if unknown:
        raise ValueError(f"Unknown categories: {sorted(unknown)}")

    tasks = []
    for category in CATEGORIES:
        for file_path, relative_path in files_by_category.get(category, []):
            tasks.append((category, file_path, relative_path))

    summary = UploadSummary()
    if not tasks:
        logger.warning("No files found to upload")
        return summary

    workers = max_workers or default_worker_count()
    total = len(tasks)
    logger.info(f"Uploading {total} files with {workers} workers")
    performance_metrics.start_operation("file_upload")

    active = _ActiveFiles()

    def run_task(category, file_path, relative_path):
        name = f"{category}/{relative_path}"
        active.add(name)
        try:
            return upload_single_file(
                storage,
                file_path,
                relative_path,
                category,
                key_prefix,
                base_url,
                max_retries=max_retries,
                retry_delay=retry_delay,
            )
        finally:
            active.discard(name)

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=workers, thread_name_prefix="upload"
    )
    future_to_task = {}
    first_error = None
    last_logged_percentage = None

    try:
        for task in tasks:
            future_to_task[executor.submit(run_task, *task)] = task

        for i, future in enumerate(concurrent.futures.as_completed(future_to_task)):
            category, file_path, relative_path = future_to_task[future]
            try:
                outcome = future.result()
            except UploadFailedError as e:
                first_error = e
                logger.error(f"Upload failed for {category}/{relative_path}: {e.last_cause}")
                break

            summary.entries.append(outcome.entry)
            if outcome.skipped:
                summary.skipped += 1
            else:
                summary.uploaded += 1

            percentage = ((i + 1) / total) * 100
            last_logged_percentage = log_progress_grouped(
                percentage,
                i + 1,
                total,
                f"Uploaded {summary.uploaded} files ({summary.skipped} up-to-date)",
                last_logged_percentage,
            )
            if progress_callback is not None:
                progress_callback(i + 1, total, active.snapshot())
    finally:
        _shutdown_pool(executor, list(future_to_task), shutdown_grace)
        performance_metrics.end_operation(
            "file_upload", uploaded=summary.uploaded, skipped=summary.skipped
        )

    if first_error is not None:
        raise first_error

    summary.entries.sort(key=ModpackFileEntry.sort_key)
    logger.info(
        f"Upload completed: {summary.uploaded} files uploaded, {summary.skipped} skipped"
    )
    return summary
