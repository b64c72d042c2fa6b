"""
Configuration validation and management for the modpack publisher.
Provides type-safe configuration handling with comprehensive validation.
"""

import os
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .config import CATEGORIES, DEFAULT_LIBRARIES, DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY
from .logger import logger


@dataclass
class StorageConfig:
    """S3/Object Storage configuration."""

    bucket_name: str
    endpoint_url: Optional[str] = None
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    def __post_init__(self):
        if not self.bucket_name:
            raise ValueError("S3 bucket name cannot be empty")
        if self.endpoint_url and not self.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid endpoint URL: {self.endpoint_url}")
        if bool(self.access_key_id) != bool(self.secret_access_key):
            raise ValueError("Access key id and secret access key must be provided together")
        if not re.match(r"^[a-z0-9][a-z0-9.\-]*[a-z0-9]$", self.bucket_name.lower()):
            logger.warning(f"S3 bucket name may not be valid: {self.bucket_name}")


@dataclass
class PublishConfig:
    """What to publish and where it will be downloaded from."""

    source_dir: str
    project_id: str
    version_name: str
    base_url: str
    category_dirs: Dict[str, str] = field(default_factory=dict)
    libraries: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LIBRARIES))
    changelog_path: Optional[str] = None
    upload_workers: Optional[int] = None
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_delay: float = DEFAULT_RETRY_DELAY
    dry_run: bool = False

    def __post_init__(self):
        if not self.source_dir:
            raise ValueError("Source directory cannot be empty")
        self.source_dir = os.path.abspath(self.source_dir)
        if not self.project_id:
            raise ValueError("Project id cannot be empty")
        if "/" in self.project_id:
            raise ValueError(f"Project id cannot contain '/': {self.project_id}")
        if not self.version_name or not self.version_name.strip():
            raise ValueError("Version name cannot be empty")
        if "/" in self.version_name:
            raise ValueError(f"Version name cannot contain '/': {self.version_name}")
        if not self.base_url or not self.base_url.startswith(("http://", "https://")):
            raise ValueError(f"Invalid base download URL: {self.base_url}")
        self.base_url = self.base_url.rstrip("/")

        unknown = set(self.category_dirs) - set(CATEGORIES)
        if unknown:
            raise ValueError(f"Unknown categories: {sorted(unknown)}")
        resolved = {}
        for category in CATEGORIES:
            path = self.category_dirs.get(category) or os.path.join(self.source_dir, category)
            resolved[category] = os.path.abspath(path)
        self.category_dirs = resolved

        if self.upload_workers is not None and not (1 <= self.upload_workers <= 64):
            raise ValueError(f"Upload workers must be between 1-64, got: {self.upload_workers}")
        if not (1 <= self.max_retries <= 10):
            raise ValueError(f"Max retries must be between 1-10, got: {self.max_retries}")
        if self.retry_delay < 0:
            raise ValueError(f"Retry delay cannot be negative, got: {self.retry_delay}")
        if self.changelog_path and not os.path.isfile(self.changelog_path):
            raise FileNotFoundError(f"Changelog file not found: {self.changelog_path}")


@dataclass
class AppConfig:
    """Main application configuration."""

    storage: StorageConfig
    publish: PublishConfig


def parse_libraries(values):
    """Parse repeated name=version strings into a dict."""
    libraries = {}
    for value in values or []:
        name, sep, version = value.partition("=")
        if not sep or not name.strip() or not version.strip():
            raise ValueError(f"Invalid library '{value}', expected name=version")
        libraries[name.strip()] = version.strip()
    return libraries


class ConfigValidator:
    """Configuration validator and loader."""

    @classmethod
    def from_args_and_env(cls, args) -> AppConfig:
        """Create configuration from command line arguments and environment variables."""
        storage_config = StorageConfig(
            # Dry runs never talk to a bucket
            bucket_name=args.bucket or ("dry-run" if args.dry_run else None),
            endpoint_url=args.endpoint_url,
            region=args.region,
            access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
            secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
        )

        category_dirs = {
            category: getattr(args, f"{category}_dir", None)
            for category in CATEGORIES
            if getattr(args, f"{category}_dir", None)
        }
        libraries = parse_libraries(args.library) or dict(DEFAULT_LIBRARIES)

        publish_config = PublishConfig(
            source_dir=args.source_dir,
            project_id=args.project_id,
            version_name=args.version_name,
            base_url=args.base_url,
            category_dirs=category_dirs,
            libraries=libraries,
            changelog_path=args.changelog,
            upload_workers=args.workers,
            max_retries=args.max_retries,
            retry_delay=args.retry_delay,
            dry_run=args.dry_run,
        )

        return AppConfig(storage=storage_config, publish=publish_config)

    @staticmethod
    def validate_runtime_requirements():
        """Validate runtime requirements and dependencies."""
        errors = []

        try:
            import boto3  # noqa: F401
            import botocore  # noqa: F401
        except ImportError as e:
            errors.append(f"Missing Python dependency: {e}")

        if errors:
            raise RuntimeError(
                "Runtime validation failed:\n" + "\n".join(f"- {error}" for error in errors)
            )

        logger.info("Runtime requirements validated successfully")


class PerformanceMetrics:
    """Performance metrics collection and reporting."""

    def __init__(self):
        self.metrics: Dict[str, Dict[str, Any]] = {}
        self.start_times: Dict[str, float] = {}

    def start_operation(self, operation: str):
        """Start timing an operation."""
        self.start_times[operation] = time.time()

    def end_operation(self, operation: str, **metadata):
        """End timing an operation and record metrics."""
        if operation not in self.start_times:
            logger.warning(f"No start time recorded for operation: {operation}")
            return

        duration = time.time() - self.start_times.pop(operation)
        self.metrics[operation] = {"duration": duration, "timestamp": time.time(), **metadata}

    def get_summary(self) -> Dict[str, Any]:
        """Get performance summary."""
        total_time = sum(m["duration"] for m in self.metrics.values())
        return {
            "total_duration": total_time,
            "operations": len(self.metrics),
            "breakdown": {op: m["duration"] for op, m in self.metrics.items()},
            "detailed_metrics": self.metrics,
        }

    def log_summary(self):
        """Log performance summary."""
        summary = self.get_summary()
        logger.info("=== PERFORMANCE SUMMARY ===")
        logger.info(f"Total Duration: {summary['total_duration']:.2f}s")
        logger.info(f"Operations: {summary['operations']}")

        for operation, duration in summary["breakdown"].items():
            percentage = (
                (duration / summary["total_duration"]) * 100 if summary["total_duration"] > 0 else 0
            )
            logger.info(f"  {operation}: {duration:.2f}s ({percentage:.1f}%)")


# Global performance metrics instance
performance_metrics = PerformanceMetrics()
