"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================

ERROR_CODE_INVALID_INPUT = "INVALID_INPUT"
ERROR_CODE_UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"

# Remote fetch
ERROR_CODE_REMOTE_FETCH_FAILED = "REMOTE_FETCH_FAILURE"
ERROR_CODE_REMOTE_FETCH_TIMEOUT = "REMOTE_FETCH_TIMEOUT"
ERROR_CODE_REMOTE_FETCH_TOO_LARGE = "REMOTE_FETCH_TOO_LARGE"

# Processing
ERROR_CODE_PROCESSING_FAILED = "PROCESSING_FAILURE"
ERROR_CODE_DECODER_UNAVAILABLE = "DECODER_UNAVAILABLE"

# Storage
ERROR_CODE_STORAGE_FAILED = "STORAGE_FAILURE"

# Internal / Unexpected
ERROR_CODE_INTERNAL_ERROR = "INTERNAL_ERROR"


# ============================================================================
# Request Constraints
# ============================================================================

MAX_DIMENSION: Final[int] = 5000
MIN_QUALITY: Final[int] = 1
MAX_QUALITY: Final[int] = 100

OUTPUT_FORMATS: Final[tuple[str, ...]] = ("jpeg", "png", "webp")
FORMAT_ALIASES: Final[dict[str, str]] = {"jpg": "jpeg"}

CROP_MODES: Final[tuple[str, ...]] = ("fill", "fit", "inside", "outside")
DEFAULT_CROP_MODE: Final[str] = "fill"

# Crop mode -> resize strategy of the transformation engine
CROP_TO_FIT: Final[dict[str, str]] = {
    "fill": "cover",
    "fit": "contain",
    "inside": "inside",
    "outside": "outside",
}

# Probe order when the caller did not ask for a specific format
CACHE_PROBE_EXTENSIONS: Final[tuple[str, ...]] = ("jpeg", "png", "webp")

DEFAULT_OUTPUT_FORMAT: Final[str] = "jpeg"


# ============================================================================
# Remote Fetch Constraints
# ============================================================================

MAX_IMAGE_BYTES: Final[int] = 10 * 1024 * 1024  # 10MB
MAX_VIDEO_BYTES: Final[int] = 50 * 1024 * 1024  # 50MB

IMAGE_DOWNLOAD_TIMEOUT_SECONDS: Final[float] = 8.0
VIDEO_DOWNLOAD_TIMEOUT_SECONDS: Final[float] = 12.0

MAX_REDIRECTS: Final[int] = 5
DOWNLOAD_CHUNK_SIZE: Final[int] = 64 * 1024

BLOCKED_HOSTNAMES: Final[frozenset[str]] = frozenset({"localhost"})


# ============================================================================
# Artifact Storage
# ============================================================================

IMAGE_KEY_PREFIX = "images/"
THUMBNAIL_KEY_PREFIX = "thumbnails/"
DEFAULT_CACHE_CONTROL = "public,max-age=31536000,immutable"


# ============================================================================
# Video Decoding
# ============================================================================

DEFAULT_FFMPEG_BINARY = "ffmpeg"
DEFAULT_FFPROBE_BINARY = "ffprobe"
SCRATCH_FILE_PREFIX = "video-"
SCRATCH_FILE_SUFFIX = ".bin"
STDERR_TAIL_LINES = 5


# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length"
DEFAULT_CONTENT_TYPE = "application/json"

METRICS_NAMESPACE = "MediaDerivativeService"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_IMAGE_BUCKET_NAME = "IMAGE_BUCKET_NAME"
ENV_AWS_REGION = "AWS_REGION"
ENV_IMAGE_BUCKET_BASE_URL = "IMAGE_BUCKET_BASE_URL"
ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_ARTIFACT_CACHE_CONTROL = "ARTIFACT_CACHE_CONTROL"
ENV_FFMPEG_PATH = "FFMPEG_PATH"
ENV_FFPROBE_PATH = "FFPROBE_PATH"


# ============================================================================
# Helper Functions
# ============================================================================


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
