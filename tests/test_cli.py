"""
Tests for the publish_modpack.py entry point and check_versions.py report.
"""

import pytest

import check_versions
import publish_modpack
from modpack_publisher.storage import MemoryStorage
from modpack_publisher.versions import VersionManifestManager


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """Run from tmp_path so log files and .env lookups stay local."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(publish_modpack, "load_dotenv", lambda override=True: None)
    for key in ("MODPACK_VERSION", "MODPACK_PROJECT_ID", "MODPACK_BASE_URL", "S3_BUCKET_NAME"):
        monkeypatch.delenv(key, raising=False)


def _args(modpack_dir, *extra):
    return [
        str(modpack_dir),
        "--project-id",
        "pack",
        "--version",
        "v1",
        "--base-url",
        "https://cdn.example.com",
        "--workers",
        "2",
        "--retry-delay",
        "0",
        *extra,
    ]


class TestPublishEntryPoint:
    def test_dry_run_succeeds(self, modpack_dir):
        assert publish_modpack.run(_args(modpack_dir, "--dry-run")) == 0

    def test_publish_to_injected_storage(self, modpack_dir, monkeypatch):
        storage = MemoryStorage()
        monkeypatch.setattr(publish_modpack, "create_storage", lambda config: storage)

        assert publish_modpack.run(_args(modpack_dir, "--bucket", "bucket")) == 0
        assert "stable/pack/meta.json" in storage.objects
        assert storage.closed is True

    def test_duplicate_version_exits_non_zero(self, modpack_dir, monkeypatch):
        storage = MemoryStorage()
        monkeypatch.setattr(publish_modpack, "create_storage", lambda config: storage)
        assert publish_modpack.run(_args(modpack_dir, "--bucket", "bucket")) == 0
        uploaded = dict(storage.objects)

        assert publish_modpack.run(_args(modpack_dir, "--bucket", "bucket")) == 1
        assert storage.objects == uploaded

    def test_invalid_configuration_exits_non_zero(self, modpack_dir):
        assert publish_modpack.run([str(modpack_dir), "--dry-run"]) == 1


class TestCheckVersions:
    def test_reports_consistent_chain(self, capsys):
        storage = MemoryStorage()
        manager = VersionManifestManager(storage, "pack", "https://cdn.example.com")
        manager.compose_and_persist([], "v1", {})

        assert check_versions.check_versions(manager, show_files=True) == 0
        assert "Latest version: v1" in capsys.readouterr().out

    def test_no_versions(self, capsys):
        manager = VersionManifestManager(MemoryStorage(), "pack", "https://cdn.example.com")

        assert check_versions.check_versions(manager) == 0
        assert "No versions published yet." in capsys.readouterr().out

    def test_detects_interrupted_publish(self, capsys):
        storage = MemoryStorage()
        manager = VersionManifestManager(storage, "pack", "https://cdn.example.com")
        manager.compose_and_persist([], "v1", {})
        del storage.objects[manager.meta_key]

        assert check_versions.check_versions(manager) == 1
