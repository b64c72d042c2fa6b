"""
Version manifests: duplicate-version guard and the modpack → versions → meta write chain.

The three manifests are independent objects in the store. They are written
in order (modpack.json, versions.json, meta.json) and a failure part-way
leaves the earlier ones in place.
"""

import json
import zlib
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .compression import compress_bytes, decompress_bytes
from .config import (
    CHANGELOG_FILENAME,
    META_KEY_TEMPLATE,
    MODPACK_FILENAME,
    VERSION_DIR_TEMPLATE,
    VERSIONS_KEY_TEMPLATE,
)
from .errors import DuplicateVersionError, ManifestWriteError, StorageError
from .logger import logger
from .models import MetaPointer, ModpackDescriptor, ModpackFileEntry, VersionInfo, VersionList


def serialize_manifest(data):
    """JSON-encode and deflate a manifest dict."""
    body = json.dumps(data, indent=2, ensure_ascii=False)
    return compress_bytes(body.encode("utf-8"))


def deserialize_manifest(payload, key=None):
    """Inverse of serialize_manifest. Raises StorageError on corrupt content."""
    try:
        return json.loads(decompress_bytes(payload).decode("utf-8"))
    except (zlib.error, UnicodeDecodeError, ValueError) as e:
        raise StorageError(f"Corrupt manifest: {e}", key) from e


def build_descriptor(entries: List[ModpackFileEntry], version_name, libraries) -> ModpackDescriptor:
    """Stage 1: descriptor with entries in (category, path) order."""
    return ModpackDescriptor(
        entries=sorted(entries, key=ModpackFileEntry.sort_key),
        version_name=version_name,
        libraries=dict(libraries or {}),
    )


def build_version_list(existing: VersionList, version: VersionInfo) -> VersionList:
    """Stage 2: publish history with the new version appended."""
    if existing.contains(version.version_name):
        raise DuplicateVersionError(version.version_name)
    return existing.appended(version)


def build_meta_pointer(versions_url, versions: VersionList) -> MetaPointer:
    """Stage 3: pointer to the history and its last entry."""
    if versions.latest is None:
        raise ValueError("Cannot build a meta pointer from an empty version list")
    return MetaPointer(versions_url=versions_url, latest_version=versions.latest)


class VersionManifestManager:
    """Reads and writes the manifest chain of one project."""

    def __init__(self, storage, project_id, base_url, clock=None):
        self.storage = storage
        self.project_id = project_id
        self.base_url = base_url.rstrip("/")
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # Key layout

    @property
    def meta_key(self):
        return META_KEY_TEMPLATE.format(project_id=self.project_id)

    @property
    def versions_key(self):
        return VERSIONS_KEY_TEMPLATE.format(project_id=self.project_id)

    def version_prefix(self, version_name):
        return VERSION_DIR_TEMPLATE.format(project_id=self.project_id, version_name=version_name)

    def modpack_key(self, version_name):
        return f"{self.version_prefix(version_name)}/{MODPACK_FILENAME}"

    def changelog_key(self, version_name):
        return f"{self.version_prefix(version_name)}/{CHANGELOG_FILENAME}"

    def url_for(self, key):
        return f"{self.base_url}/{key}"

    # Reads

    def _fetch_json(self, key):
        payload = self.storage.read_bytes(key)
        if payload is None:
            return None
        data = deserialize_manifest(payload, key)
        if not isinstance(data, dict):
            raise StorageError("Manifest is not a JSON object", key)
        return data

    def fetch_meta(self) -> Optional[MetaPointer]:
        """Current meta pointer, or None before the first publish."""
        data = self._fetch_json(self.meta_key)
        if data is None:
            logger.debug(f"No meta manifest at {self.meta_key}")
            return None
        try:
            return MetaPointer.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Invalid meta manifest: {e}", self.meta_key) from e

    def fetch_versions(self) -> Optional[VersionList]:
        """Publish history, or None before the first publish."""
        data = self._fetch_json(self.versions_key)
        if data is None:
            logger.debug(f"No version list at {self.versions_key}")
            return None
        try:
            return VersionList.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Invalid version list: {e}", self.versions_key) from e

    def fetch_descriptor(self, version_name) -> Optional[ModpackDescriptor]:
        key = self.modpack_key(version_name)
        data = self._fetch_json(key)
        if data is None:
            return None
        try:
            return ModpackDescriptor.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Invalid modpack manifest: {e}", key) from e

    def check_no_duplicate_version(self, version_name) -> VersionList:
        """
        Raise DuplicateVersionError if version_name is already published.
        Returns the existing version list (empty on first publish).
        """
        meta = self.fetch_meta()
        if meta is not None:
            logger.info(f"Latest published version: {meta.latest_version.version_name}")
        else:
            logger.info("No meta manifest found, this is the first publish")

        versions = self.fetch_versions() or VersionList()
        if versions.contains(version_name):
            raise DuplicateVersionError(version_name)

        logger.info(f"Version '{version_name}' is new ({len(versions.versions)} published before)")
        return versions

    # Writes

    def _write(self, stage, key, data):
        try:
            self.storage.upload(serialize_manifest(data), key, overwrite=True)
        except StorageError as e:
            raise ManifestWriteError(stage, e) from e
        logger.info(f"Wrote {key}")

    def upload_changelog(self, version_name, content: bytes):
        """Store a changelog next to the version's modpack manifest."""
        key = self.changelog_key(version_name)
        try:
            self.storage.upload(compress_bytes(content), key, overwrite=True)
        except StorageError as e:
            raise ManifestWriteError("changelog", e) from e
        logger.info(f"Wrote {key}")
        return self.url_for(key)

    def write_descriptor(self, entries, version_name, libraries) -> ModpackDescriptor:
        descriptor = build_descriptor(entries, version_name, libraries)
        self._write("modpack", self.modpack_key(version_name), descriptor.to_dict())
        return descriptor

    def append_version(
        self, existing_versions: VersionList, version_name, changelog_url=""
    ) -> VersionList:
        """Record version_name in the history; changelog_url stays empty when none was uploaded."""
        version = VersionInfo(
            version_name=version_name,
            published_at=self._clock().isoformat(),
            modpack_url=self.url_for(self.modpack_key(version_name)),
            changelog_url=changelog_url,
        )
        versions = build_version_list(existing_versions, version)
        self._write("versions", self.versions_key, versions.to_dict())
        return versions

    def write_meta_pointer(self, versions: VersionList) -> MetaPointer:
        meta = build_meta_pointer(self.url_for(self.versions_key), versions)
        self._write("meta", self.meta_key, meta.to_dict())
        return meta

    def compose_and_persist(
        self,
        entries: List[ModpackFileEntry],
        version_name: str,
        libraries: Dict[str, str],
        existing_versions: Optional[VersionList] = None,
        changelog_url: str = "",
    ) -> MetaPointer:
        """Write modpack.json, then versions.json, then meta.json."""
        existing_versions = existing_versions or VersionList()
        self.write_descriptor(entries, version_name, libraries)
        versions = self.append_version(existing_versions, version_name, changelog_url)
        return self.write_meta_pointer(versions)
