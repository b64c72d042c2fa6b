"""
Command-line argument parsing for the modpack publisher.
"""

import argparse
import os

from .config import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY


def _get_env_bool(key: str) -> bool:
    """Get boolean value from environment variable."""
    return os.environ.get(key, "").lower() in ("true", "yes", "1")


def _get_env_int(key: str, default):
    """Get integer value from environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except (TypeError, ValueError):
        return default


def _get_env_float(key: str, default: float) -> float:
    try:
        return float(os.environ.get(key, str(default)))
    except ValueError:
        return default


def build_parser():
    parser = argparse.ArgumentParser(
        description="Publish a modpack version to S3-compatible object storage.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  MODPACK_SOURCE_DIR      Directory holding common/, server/ and client/
  MODPACK_PROJECT_ID      Project id used in remote keys
  MODPACK_VERSION         Version name to publish
  MODPACK_BASE_URL        Public download URL of the bucket
  MODPACK_CHANGELOG       Changelog file to publish with the version
  S3_BUCKET_NAME          S3 bucket name
  S3_ENDPOINT_URL         S3 endpoint URL (COS, R2, MinIO, ...)
  S3_REGION               S3 region
  AWS_ACCESS_KEY_ID       Access key (otherwise the boto3 credential chain)
  AWS_SECRET_ACCESS_KEY   Secret key
  UPLOAD_WORKERS          Parallel upload workers (default: 2x CPU count)
  UPLOAD_MAX_RETRIES      Attempts per file (default: 3)
  UPLOAD_RETRY_DELAY      Base retry delay in seconds (default: 1.0)
  DRY_RUN                 Publish into memory only (true/false)

Examples:
  # Publish ./modpack as version 1.2.0
  python publish_modpack.py ./modpack --project-id my-pack --version 1.2.0 \\
      --bucket my-bucket --base-url https://cdn.example.com

  # Custom Forge version
  python publish_modpack.py ./modpack --version 1.2.1 --library net.minecraftforge=10.13.4.1614
        """,
    )

    parser.add_argument(
        "source_dir",
        nargs="?",
        default=os.environ.get("MODPACK_SOURCE_DIR"),
        help="Directory holding common/, server/ and client/ (env: MODPACK_SOURCE_DIR)",
    )

    pack_group = parser.add_argument_group("Modpack Configuration")
    pack_group.add_argument(
        "--project-id",
        default=os.environ.get("MODPACK_PROJECT_ID"),
        help="Project id (env: MODPACK_PROJECT_ID)",
    )
    pack_group.add_argument(
        "--version",
        dest="version_name",
        default=os.environ.get("MODPACK_VERSION"),
        help="Version name to publish (env: MODPACK_VERSION)",
    )
    pack_group.add_argument(
        "--base-url",
        default=os.environ.get("MODPACK_BASE_URL"),
        help="Public download URL prefix (env: MODPACK_BASE_URL)",
    )
    pack_group.add_argument(
        "--library",
        action="append",
        default=[],
        metavar="NAME=VERSION",
        help="Library dependency, repeatable (default: Minecraft 1.7.10 + Forge)",
    )
    pack_group.add_argument(
        "--changelog",
        default=os.environ.get("MODPACK_CHANGELOG"),
        help="Changelog file to publish with the version (env: MODPACK_CHANGELOG)",
    )
    for category in ("common", "server", "client"):
        pack_group.add_argument(
            f"--{category}-dir",
            default=None,
            help=f"Override the {category} directory (default: SOURCE_DIR/{category})",
        )

    s3_group = parser.add_argument_group("S3 Configuration")
    s3_group.add_argument(
        "--bucket",
        default=os.environ.get("S3_BUCKET_NAME"),
        help="S3 bucket name (env: S3_BUCKET_NAME)",
    )
    s3_group.add_argument(
        "--endpoint-url",
        default=os.environ.get("S3_ENDPOINT_URL"),
        help="S3 endpoint URL (env: S3_ENDPOINT_URL)",
    )
    s3_group.add_argument(
        "--region",
        default=os.environ.get("S3_REGION"),
        help="S3 region (env: S3_REGION)",
    )

    upload_group = parser.add_argument_group("Upload Configuration")
    upload_group.add_argument(
        "--workers",
        type=int,
        default=_get_env_int("UPLOAD_WORKERS", None),
        help="Parallel upload workers (env: UPLOAD_WORKERS, default: 2x CPU count)",
    )
    upload_group.add_argument(
        "--max-retries",
        type=int,
        default=_get_env_int("UPLOAD_MAX_RETRIES", DEFAULT_MAX_RETRIES),
        help=f"Attempts per file (env: UPLOAD_MAX_RETRIES, default: {DEFAULT_MAX_RETRIES})",
    )
    upload_group.add_argument(
        "--retry-delay",
        type=float,
        default=_get_env_float("UPLOAD_RETRY_DELAY", DEFAULT_RETRY_DELAY),
        help=f"Base retry delay in seconds (env: UPLOAD_RETRY_DELAY, default: {DEFAULT_RETRY_DELAY})",
    )
    upload_group.add_argument(
        "--dry-run",
        action="store_true",
        default=_get_env_bool("DRY_RUN"),
        help="Publish into memory only, nothing is sent to S3 (env: DRY_RUN)",
    )
    upload_group.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
