"""Pydantic models for the video thumbnail request/response."""

from core.models.media import ArtifactRecord
from core.models.requests import VideoMediaQuery


class VideoThumbnailRequest(VideoMediaQuery):
    """Validation model for ``GET /video/thumbnail``."""


class VideoThumbnailResponse(ArtifactRecord):
    """Response model for a generated (or cached) thumbnail."""
