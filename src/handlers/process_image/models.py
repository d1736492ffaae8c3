"""Pydantic models for the image processing request/response."""

from core.models.media import ArtifactRecord
from core.models.requests import MediaQuery


class ProcessImageRequest(MediaQuery):
    """Validation model for ``GET /process``."""


class ProcessImageResponse(ArtifactRecord):
    """Response model for a processed (or cached) image."""
