"""
Configuration constants and settings for the modpack publisher.
"""

# Version information
VERSION = "1.0.0"

# Content categories, in manifest order
CATEGORIES = ["common", "server", "client"]

# Already-compressed or binary formats, never deflated (takes precedence)
NON_COMPRESS_EXTENSIONS = [
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".zip",
    ".jar",
    ".gz",
    ".bz2",
    ".7z",
    ".ogg",
    ".mp3",
]

# Text and config formats that are deflated before upload
COMPRESS_EXTENSIONS = [
    ".json",
    ".txt",
    ".xml",
    ".toml",
    ".js",
    ".cfg",
    ".properties",
    ".yml",
    ".yaml",
    ".lang",
    ".mcmeta",
    ".conf",
    ".ini",
    ".csv",
    ".zs",  # CraftTweaker scripts
]

# Deflate level for files and manifests
COMPRESSION_LEVEL = 9

# Files are streamed in chunks of this size
CHUNK_SIZE = 1024 * 1024

# Compressed payloads spill from memory to a temp file above this size
COMPRESS_SPOOL_SIZE = 16 * 1024 * 1024

# Remote key layout
KEY_ROOT = "stable"
META_KEY_TEMPLATE = KEY_ROOT + "/{project_id}/meta.json"
VERSIONS_KEY_TEMPLATE = KEY_ROOT + "/{project_id}/versions.json"
VERSION_DIR_TEMPLATE = KEY_ROOT + "/{project_id}/versions/{version_name}"
MODPACK_FILENAME = "modpack.json"
CHANGELOG_FILENAME = "changelog.md"
MD5_SUFFIX = ".md5"
# MD5 sidecars live under {version_prefix}/{IDENTITY_DIR}, outside every category
IDENTITY_DIR = ".identity"

# Library dependencies recorded when none are configured
DEFAULT_LIBRARIES = {
    "net.minecraft": "1.7.10",
    "net.minecraftforge": "10.13.4.1614",
}

# Upload settings
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0
MAX_RETRY_DELAY = 30.0
DEFAULT_SHUTDOWN_GRACE = 30  # seconds to drain in-flight uploads
DEFAULT_TIMEOUT = 60

# Local log file
LOG_FILE = "modpack_publisher.log"
