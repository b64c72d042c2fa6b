"""
Manifest data model: file entries, modpack descriptor, version list and meta pointer.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import CATEGORIES


@dataclass(frozen=True)
class ModpackFileEntry:
    """One published file, identified by (category, relative_path)."""

    relative_path: str
    category: str
    content_hash: str
    size_bytes: int
    download_url: str
    compressed: bool = False

    def __post_init__(self):
        if self.category not in CATEGORIES:
            raise ValueError(f"Unknown category: {self.category}")

    def sort_key(self):
        return (CATEGORIES.index(self.category), self.relative_path)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.relative_path,
            "category": self.category,
            "hash": self.content_hash,
            "size": self.size_bytes,
            "url": self.download_url,
            "compressed": self.compressed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModpackFileEntry":
        return cls(
            relative_path=data["path"],
            category=data["category"],
            content_hash=data["hash"],
            size_bytes=int(data["size"]),
            download_url=data["url"],
            compressed=bool(data.get("compressed", False)),
        )


@dataclass
class ModpackDescriptor:
    """Everything a client needs to install one version (modpack.json)."""

    entries: List[ModpackFileEntry]
    version_name: str
    libraries: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": [entry.to_dict() for entry in self.entries],
            "versionName": self.version_name,
            "libraries": dict(self.libraries),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModpackDescriptor":
        return cls(
            entries=[ModpackFileEntry.from_dict(item) for item in data.get("files", [])],
            version_name=data["versionName"],
            libraries=dict(data.get("libraries", {})),
        )


@dataclass(frozen=True)
class VersionInfo:
    """One published version."""

    version_name: str
    published_at: str  # ISO-8601, UTC
    modpack_url: str
    changelog_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "versionName": self.version_name,
            "publishedAt": self.published_at,
            "modpackUrl": self.modpack_url,
            "changelogUrl": self.changelog_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionInfo":
        return cls(
            version_name=data["versionName"],
            published_at=data.get("publishedAt", ""),
            modpack_url=data.get("modpackUrl", ""),
            changelog_url=data.get("changelogUrl", ""),
        )


@dataclass
class VersionList:
    """Publish history (versions.json). Append-only, in publish order."""

    versions: List[VersionInfo] = field(default_factory=list)

    def contains(self, version_name: str) -> bool:
        return any(v.version_name == version_name for v in self.versions)

    def appended(self, version: VersionInfo) -> "VersionList":
        """Return a new list with version added at the end."""
        return VersionList(versions=list(self.versions) + [version])

    @property
    def latest(self) -> Optional[VersionInfo]:
        return self.versions[-1] if self.versions else None

    def to_dict(self) -> Dict[str, Any]:
        return {"versions": [v.to_dict() for v in self.versions]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VersionList":
        versions = data["versions"]
        if not isinstance(versions, list):
            raise ValueError("'versions' must be a list")
        return cls(versions=[VersionInfo.from_dict(item) for item in versions])


@dataclass
class MetaPointer:
    """Entry point for clients (meta.json); overwritten on every publish."""

    versions_url: str
    latest_version: VersionInfo

    def to_dict(self) -> Dict[str, Any]:
        return {
            "versionsUrl": self.versions_url,
            "latestVersion": self.latest_version.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetaPointer":
        return cls(
            versions_url=data["versionsUrl"],
            latest_version=VersionInfo.from_dict(data["latestVersion"]),
        )
