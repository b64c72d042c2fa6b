"""Unit tests for argument parsing and configuration validation."""

import os

import pytest

from modpack_publisher.cli import parse_arguments
from modpack_publisher.config import DEFAULT_LIBRARIES, DEFAULT_MAX_RETRIES
from modpack_publisher.config_validator import (
    ConfigValidator,
    PerformanceMetrics,
    PublishConfig,
    StorageConfig,
    parse_libraries,
)

_ENV_KEYS = [
    "MODPACK_SOURCE_DIR",
    "MODPACK_PROJECT_ID",
    "MODPACK_VERSION",
    "MODPACK_BASE_URL",
    "MODPACK_CHANGELOG",
    "S3_BUCKET_NAME",
    "S3_ENDPOINT_URL",
    "S3_REGION",
    "UPLOAD_WORKERS",
    "UPLOAD_MAX_RETRIES",
    "UPLOAD_RETRY_DELAY",
    "DRY_RUN",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _publish_config(tmp_path, **overrides):
    values = dict(
        source_dir=str(tmp_path),
        project_id="pack",
        version_name="1.0.0",
        base_url="https://cdn.example.com/",
    )
    values.update(overrides)
    return PublishConfig(**values)


class TestParseArguments:
    def test_defaults_from_environment(self, monkeypatch):
        monkeypatch.setenv("MODPACK_SOURCE_DIR", "/srv/modpack")
        monkeypatch.setenv("MODPACK_PROJECT_ID", "pack")
        monkeypatch.setenv("MODPACK_VERSION", "1.0.0")
        monkeypatch.setenv("S3_BUCKET_NAME", "bucket")
        monkeypatch.setenv("UPLOAD_WORKERS", "6")
        monkeypatch.setenv("DRY_RUN", "true")

        args = parse_arguments([])

        assert args.source_dir == "/srv/modpack"
        assert args.project_id == "pack"
        assert args.version_name == "1.0.0"
        assert args.bucket == "bucket"
        assert args.workers == 6
        assert args.dry_run is True
        assert args.max_retries == DEFAULT_MAX_RETRIES

    def test_command_line_overrides(self):
        args = parse_arguments(
            [
                "./modpack",
                "--version",
                "2.0",
                "--library",
                "a=1",
                "--library",
                "b=2",
                "--client-dir",
                "/tmp/client",
            ]
        )

        assert args.source_dir == "./modpack"
        assert args.version_name == "2.0"
        assert args.library == ["a=1", "b=2"]
        assert args.client_dir == "/tmp/client"
        assert args.workers is None


class TestStorageConfig:
    def test_requires_bucket(self):
        with pytest.raises(ValueError):
            StorageConfig(bucket_name="")

    def test_rejects_bad_endpoint(self):
        with pytest.raises(ValueError):
            StorageConfig(bucket_name="bucket", endpoint_url="cos.example.com")

    def test_keys_come_in_pairs(self):
        with pytest.raises(ValueError):
            StorageConfig(bucket_name="bucket", access_key_id="id")


class TestPublishConfig:
    def test_category_dirs_default_to_source_subdirectories(self, tmp_path):
        config = _publish_config(tmp_path)

        assert config.category_dirs == {
            "common": os.path.join(str(tmp_path), "common"),
            "server": os.path.join(str(tmp_path), "server"),
            "client": os.path.join(str(tmp_path), "client"),
        }
        assert config.base_url == "https://cdn.example.com"
        assert config.libraries == DEFAULT_LIBRARIES

    def test_category_override(self, tmp_path):
        other = tmp_path / "elsewhere"

        config = _publish_config(tmp_path, category_dirs={"server": str(other)})

        assert config.category_dirs["server"] == str(other)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"project_id": ""},
            {"version_name": " "},
            {"version_name": "a/b"},
            {"base_url": "cdn.example.com"},
            {"category_dirs": {"assets": "/x"}},
            {"upload_workers": 0},
            {"max_retries": 0},
            {"retry_delay": -1},
        ],
    )
    def test_invalid_values(self, tmp_path, overrides):
        with pytest.raises(ValueError):
            _publish_config(tmp_path, **overrides)

    def test_missing_changelog(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            _publish_config(tmp_path, changelog_path=str(tmp_path / "CHANGELOG.md"))


class TestConfigValidator:
    def test_from_args_and_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "id")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")
        args = parse_arguments(
            [
                str(tmp_path),
                "--project-id",
                "pack",
                "--version",
                "1.0",
                "--base-url",
                "https://cdn.example.com",
                "--bucket",
                "bucket",
                "--library",
                "net.minecraft=1.12.2",
            ]
        )

        config = ConfigValidator.from_args_and_env(args)

        assert config.storage.bucket_name == "bucket"
        assert config.storage.access_key_id == "id"
        assert config.publish.libraries == {"net.minecraft": "1.12.2"}
        assert config.publish.dry_run is False

    def test_dry_run_needs_no_bucket(self, tmp_path):
        args = parse_arguments(
            [str(tmp_path), "--project-id", "p", "--version", "1", "--base-url", "http://x", "--dry-run"]
        )

        config = ConfigValidator.from_args_and_env(args)

        assert config.publish.dry_run is True

    def test_parse_libraries(self):
        assert parse_libraries(["a=1", " b = 2 "]) == {"a": "1", "b": "2"}
        assert parse_libraries([]) == {}
        with pytest.raises(ValueError):
            parse_libraries(["missing-version"])


class TestPerformanceMetrics:
    def test_records_operation(self):
        metrics = PerformanceMetrics()
        metrics.start_operation("upload")
        metrics.end_operation("upload", files=3)

        summary = metrics.get_summary()

        assert summary["operations"] == 1
        assert summary["detailed_metrics"]["upload"]["files"] == 3

    def test_end_without_start_is_ignored(self):
        metrics = PerformanceMetrics()
        metrics.end_operation("never-started")

        assert metrics.get_summary()["operations"] == 0
