"""
Logging utilities and colored console output for the modpack publisher.
"""

import logging
import os
import sys

from .config import LOG_FILE


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support for different log levels"""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[41m",  # Red background
        "RESET": "\033[0m",  # Reset to default
    }

    CONFIG_PREFIXES = (
        "CONFIGURATION:",
        "Bucket:",
        "Endpoint URL:",
        "Region:",
        "Source Directory:",
        "Project ID:",
        "Version:",
        "Base URL:",
        "Upload Workers:",
        "Max Retries:",
        "Dry Run:",
        "Libraries:",
        "Credentials:",
    )

    def format(self, record):
        message = record.getMessage()
        reset = self.COLORS["RESET"]

        if message.startswith("STEP ") or "MODPACK PUBLISHER" in message or "PUBLISH COMPLETED" in message:
            prefix = "EXECUTE"
            color = "\033[35m"  # Purple for execution steps
        elif message.startswith("Progress:") or message.startswith("Uploading"):
            prefix = "PROGRESS"
            color = "\033[34m"  # Blue for progress
        elif message.startswith(self.CONFIG_PREFIXES):
            prefix = "CONFIG"
            color = "\033[36m"  # Cyan for configuration
        elif record.levelname in ("ERROR", "CRITICAL"):
            prefix = "ERROR"
            color = self.COLORS[record.levelname]
        elif record.levelname == "WARNING":
            prefix = "WARNING"
            color = self.COLORS["WARNING"]
        elif "completed" in message.lower() or "success" in message.lower() or "published" in message.lower():
            prefix = "SUCCESS"
            color = "\033[32m"  # Green for success
        else:
            prefix = "INFO"
            color = "\033[37m"  # White for general info

        formatted_message = f"{color}[{prefix}]{reset} {message}"
        if record.exc_info:
            formatted_message += "\n" + self.formatException(record.exc_info)
        return formatted_message


def setup_logger(log_file=LOG_FILE, level=logging.INFO):
    """Set up and configure the logger with file and console handlers."""
    logger = logging.getLogger("modpack_publisher")
    logger.setLevel(level)
    logger.handlers = []  # Clear any existing handlers to avoid duplicates
    logger.propagate = False

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(threadName)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter())
    logger.addHandler(console_handler)

    return logger


# Shared package logger; the entry script attaches handlers via setup_logger()
logger = logging.getLogger("modpack_publisher")


def log_step(message):
    """Log a major processing step with visual separation"""
    logger.info(f"\n{'='*70}\n{message}\n{'='*70}")


def log_info(message):
    logger.info(message)


def log_error(message):
    logger.error(message)


def log_success(message):
    logger.info(message)


def log_progress_grouped(
    percentage, count=None, total=None, extra_info=None, last_logged_percentage=None
):
    """Log a progress update only at 10% increments to reduce verbosity"""
    group_percentage = round(percentage / 10) * 10

    if (
        last_logged_percentage is None
        or group_percentage > last_logged_percentage
        or percentage == 100.0
        or (count is not None and count == 1)
    ):
        if count is not None and total is not None:
            progress_msg = f"Progress: {group_percentage:.0f}% ({count}/{total})"
        else:
            progress_msg = f"Progress: {group_percentage:.0f}%"

        if extra_info:
            progress_msg += f" - {extra_info}"

        logger.info(progress_msg)
        return group_percentage

    return last_logged_percentage


def format_time(seconds):
    """Format time duration in a human-readable format."""
    if seconds < 60:
        return f"{seconds:.2f} seconds"
    elif seconds < 3600:
        minutes = seconds // 60
        remaining_seconds = seconds % 60
        return f"{int(minutes)} minutes {int(remaining_seconds)} seconds"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        remaining_seconds = seconds % 60
        return f"{int(hours)} hours {int(minutes)} minutes {int(remaining_seconds)} seconds"


def log_publish_summary(uploaded_count, skipped_count, compressed_count, elapsed_seconds):
    """Log the end-of-run summary."""
    total = uploaded_count + skipped_count

    logger.info("\nPUBLISH SUMMARY:")
    logger.info(f"  Files Processed: {total}")
    logger.info(f"  - Uploaded: {uploaded_count}")
    logger.info(f"  - Skipped (up-to-date): {skipped_count}")
    logger.info(f"  - Compressed: {compressed_count}")

    if total > 0:
        skip_rate = (skipped_count / total) * 100
        logger.info(f"  Skip Rate (MD5): {skip_rate:.1f}%")

    logger.info(f"  Elapsed: {format_time(elapsed_seconds)}")
    logger.info("=" * 70)
