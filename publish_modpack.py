#!/usr/bin/env python3
"""
Modpack Publisher (publish_modpack.py)

Main entry point: uploads a modpack's common/server/client files to an
S3-compatible bucket and publishes the version manifests.
"""

import logging
import sys
import time
from datetime import datetime

# Third-party libraries - ensure these are installed (pip install -e .)
try:
    from dotenv import load_dotenv
except ImportError as e:
    print(f"Error: A required library is missing: {e}. Please install the project dependencies.")
    sys.exit(1)

from modpack_publisher.cli import parse_arguments
from modpack_publisher.config import VERSION
from modpack_publisher.config_validator import ConfigValidator, performance_metrics
from modpack_publisher.errors import DuplicateVersionError, PublishError
from modpack_publisher.logger import (
    format_time,
    log_error,
    log_publish_summary,
    log_step,
    logger,
    setup_logger,
)
from modpack_publisher.orchestrator import default_worker_count
from modpack_publisher.publisher import ModpackPublisher
from modpack_publisher.storage import MemoryStorage, S3Storage


def log_configuration(config):
    """Log configuration information in a clean format."""
    storage, publish = config.storage, config.publish
    logger.info("CONFIGURATION:")
    logger.info(f"Bucket:               {storage.bucket_name}")
    logger.info(f"Endpoint URL:         {storage.endpoint_url or 'AWS S3 Standard'}")
    logger.info(f"Region:               {storage.region or 'default'}")
    logger.info(f"Source Directory:     {publish.source_dir}")
    logger.info(f"Project ID:           {publish.project_id}")
    logger.info(f"Version:              {publish.version_name}")
    logger.info(f"Base URL:             {publish.base_url}")
    logger.info(f"Upload Workers:       {publish.upload_workers or default_worker_count()}")
    logger.info(f"Max Retries:          {publish.max_retries}")
    logger.info(f"Dry Run:              {publish.dry_run}")
    libraries = ", ".join(f"{name}={version}" for name, version in publish.libraries.items())
    logger.info(f"Libraries:            {libraries}")

    if storage.access_key_id and storage.secret_access_key:
        logger.info("Credentials:          Found in environment variables")
    else:
        logger.info("Credentials:          Using boto3 default credential chain")


def create_storage(config):
    if config.publish.dry_run:
        logger.info("Dry run: publishing into memory, nothing will be sent to S3")
        return MemoryStorage()

    storage = S3Storage(
        bucket_name=config.storage.bucket_name,
        endpoint_url=config.storage.endpoint_url,
        region=config.storage.region,
        access_key_id=config.storage.access_key_id,
        secret_access_key=config.storage.secret_access_key,
        max_pool_connections=max(10, config.publish.upload_workers or default_worker_count()),
    )
    storage.test_connection()
    return storage


def main(argv=None):
    """Main execution function. Returns the process exit code."""
    load_dotenv(override=True)
    args = parse_arguments(argv)
    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    start_time = time.time()
    start_datetime = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_step(f"MODPACK PUBLISHER v{VERSION}\nStarted at: {start_datetime}")

    try:
        ConfigValidator.validate_runtime_requirements()
        config = ConfigValidator.from_args_and_env(args)
        logger.info("Configuration validated successfully")
    except (ValueError, TypeError, FileNotFoundError, RuntimeError) as e:
        logger.error(f"Configuration validation failed: {e}")
        return 1

    log_configuration(config)
    performance_metrics.start_operation("total_execution")

    publish = config.publish
    changelog = None
    if publish.changelog_path:
        with open(publish.changelog_path, "rb") as f:
            changelog = f.read()

    storage = create_storage(config)
    try:
        publisher = ModpackPublisher(
            storage,
            project_id=publish.project_id,
            base_url=publish.base_url,
            max_workers=publish.upload_workers,
            max_retries=publish.max_retries,
            retry_delay=publish.retry_delay,
        )

        def on_progress(current, total, active_files):
            logger.debug(
                f"Progress: {current}/{total} | Active: {', '.join(active_files) if active_files else 'none'}"
            )

        def on_complete(total, uploaded, skipped):
            logger.info(f"All files processed: {total} total, {uploaded} uploaded, {skipped} skipped")

        result = publisher.publish(
            publish.category_dirs,
            publish.version_name,
            publish.libraries,
            changelog=changelog,
            progress_callback=on_progress,
            complete_callback=on_complete,
        )
    finally:
        storage.shutdown()

    performance_metrics.end_operation("total_execution")

    finish_datetime = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    log_step(f"PUBLISH COMPLETED SUCCESSFULLY!\nFinished at: {finish_datetime}")
    logger.info(f"Latest version: {result.meta.latest_version.version_name}")
    logger.info(f"Meta URL: {publisher.manifests.url_for(publisher.manifests.meta_key)}")
    logger.info(f"Total Time: {format_time(time.time() - start_time)}")

    log_publish_summary(
        result.uploaded, result.skipped, result.summary.compressed, result.elapsed_seconds
    )
    performance_metrics.log_summary()
    return 0


def run(argv=None):
    """Run main() and map failures to exit codes."""
    try:
        return main(argv)

    except KeyboardInterrupt:
        log_error("Script interrupted by user (Ctrl+C)")
        return 130  # Standard exit code for SIGINT

    except DuplicateVersionError as e:
        log_error(f"{e}. Choose a new version name.")
        return 1

    except PublishError as e:
        log_error(f"Publish aborted: {e}")
        return 1

    except PermissionError as e:
        log_error(f"Permission denied: {e}")
        return 1

    except Exception as e:
        log_error(f"Unexpected error occurred: {str(e)}")
        log_error(f"Error type: {type(e).__name__}")
        logger.debug("Full traceback:", exc_info=True)
        return 1

    finally:
        sys.stdout.flush()
        sys.stderr.flush()


if __name__ == "__main__":
    sys.exit(run())
