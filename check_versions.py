#!/usr/bin/env python3
"""
Version status utility: shows what is currently published for a project.
"""

import argparse
import os
import sys

from dotenv import load_dotenv

from modpack_publisher.errors import StorageError
from modpack_publisher.storage import S3Storage
from modpack_publisher.versions import VersionManifestManager


def check_versions(manager, show_files=False):
    """Print the published versions of a project. Returns the process exit code."""
    print(f"=== Modpack Version Status: {manager.project_id} ===\n")

    try:
        meta = manager.fetch_meta()
        versions = manager.fetch_versions()
    except StorageError as e:
        print(f"✗ Cannot read manifests: {e}")
        return 1

    print("Manifest Status:")
    print(f"  {manager.meta_key}: {'✓ EXISTS' if meta else '✗ MISSING'}")
    print(f"  {manager.versions_key}: {'✓ EXISTS' if versions else '✗ MISSING'}")

    if versions is None or not versions.versions:
        print("\nNo versions published yet.")
        return 0

    print(f"\nPublished Versions ({len(versions.versions)}):")
    for version in versions.versions:
        print(f"  {version.version_name:<20} {version.published_at}")

    print("\n=== Analysis ===")
    if meta is None:
        print("⚠ meta.json is missing - the last publish was interrupted")
        return 1
    if meta.latest_version != versions.latest:
        print(
            f"⚠ meta.json points at '{meta.latest_version.version_name}' but the last "
            f"listed version is '{versions.latest.version_name}'"
        )
        return 1
    print(f"✓ Latest version: {meta.latest_version.version_name}")

    if show_files:
        descriptor = manager.fetch_descriptor(meta.latest_version.version_name)
        if descriptor is None:
            print("✗ modpack.json for the latest version is missing")
            return 1
        print(f"\nFiles in {descriptor.version_name} ({len(descriptor.entries)}):")
        for entry in descriptor.entries:
            flag = " (compressed)" if entry.compressed else ""
            print(f"  {entry.category}/{entry.relative_path} {entry.size_bytes:,} bytes{flag}")

    return 0


def main(argv=None):
    load_dotenv(override=True)
    parser = argparse.ArgumentParser(description="Show published modpack versions.")
    parser.add_argument("--project-id", default=os.environ.get("MODPACK_PROJECT_ID"), required=False)
    parser.add_argument("--bucket", default=os.environ.get("S3_BUCKET_NAME"))
    parser.add_argument("--endpoint-url", default=os.environ.get("S3_ENDPOINT_URL"))
    parser.add_argument("--region", default=os.environ.get("S3_REGION"))
    parser.add_argument("--base-url", default=os.environ.get("MODPACK_BASE_URL", ""))
    parser.add_argument("--files", action="store_true", help="List files of the latest version")
    args = parser.parse_args(argv)

    if not args.project_id or not args.bucket:
        parser.error("--project-id and --bucket are required")

    storage = S3Storage(
        bucket_name=args.bucket,
        endpoint_url=args.endpoint_url,
        region=args.region,
        access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
        secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
    )
    try:
        manager = VersionManifestManager(storage, args.project_id, args.base_url)
        return check_versions(manager, show_files=args.files)
    finally:
        storage.shutdown()


if __name__ == "__main__":
    sys.exit(main())
