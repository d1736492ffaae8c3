"""Shared media pipeline models."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

from core.utils.constants import (
    DEFAULT_CROP_MODE,
    IMAGE_DOWNLOAD_TIMEOUT_SECONDS,
    IMAGE_KEY_PREFIX,
    MAX_IMAGE_BYTES,
    MAX_VIDEO_BYTES,
    THUMBNAIL_KEY_PREFIX,
    VIDEO_DOWNLOAD_TIMEOUT_SECONDS,
)

ImageFormat = Literal["jpeg", "png", "webp"]
CropMode = Literal["fill", "fit", "inside", "outside"]
FitStrategy = Literal["cover", "contain", "inside", "outside"]


class Modality(str, Enum):
    """Source media kind; selects the artifact key namespace."""

    IMAGE = "image"
    VIDEO = "video"

    @property
    def key_prefix(self) -> str:
        return IMAGE_KEY_PREFIX if self is Modality.IMAGE else THUMBNAIL_KEY_PREFIX


class TransformRequest(BaseModel):
    """Normalized transformation parameters for a single request."""

    model_config = ConfigDict(frozen=True)

    source_url: StrictStr = Field(..., description="Remote http(s) source URL")
    width: StrictInt | None = Field(None, description="Target width in pixels")
    height: StrictInt | None = Field(None, description="Target height in pixels")
    output_format: ImageFormat | None = Field(None, description="Requested output format")
    quality: StrictInt | None = Field(None, description="Encoder quality (1-100)")
    crop_mode: CropMode = Field(DEFAULT_CROP_MODE, description="Crop policy")
    timestamp_seconds: float | None = Field(
        None, description="Frame position in seconds (video only)"
    )

    @property
    def wants_resize(self) -> bool:
        return bool(self.width or self.height)


class ArtifactRecord(BaseModel):
    """Response describing a stored (or previously stored) artifact."""

    key: StrictStr = Field(..., description="Storage key of the artifact")
    url: StrictStr = Field(..., description="Public URL of the artifact")
    cached: StrictBool = Field(..., description="True when served from cache")
    width: StrictInt | None = Field(None, description="Output width in pixels")
    height: StrictInt | None = Field(None, description="Output height in pixels")
    format: ImageFormat | None = Field(None, description="Output format")


class FetchLimits(BaseModel):
    """Bounds applied to one remote download."""

    model_config = ConfigDict(frozen=True)

    max_bytes: StrictInt
    timeout_seconds: float
    content_type_prefix: StrictStr
    label: StrictStr


IMAGE_FETCH_LIMITS = FetchLimits(
    max_bytes=MAX_IMAGE_BYTES,
    timeout_seconds=IMAGE_DOWNLOAD_TIMEOUT_SECONDS,
    content_type_prefix="image/",
    label="image",
)

VIDEO_FETCH_LIMITS = FetchLimits(
    max_bytes=MAX_VIDEO_BYTES,
    timeout_seconds=VIDEO_DOWNLOAD_TIMEOUT_SECONDS,
    content_type_prefix="video/",
    label="video",
)


class RemoteResource(BaseModel):
    """Downloaded bytes plus the content type the remote declared."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    content_type: StrictStr

    @property
    def size(self) -> int:
        return len(self.data)


class TransformedImage(BaseModel):
    """Encoded output of the image transformation step."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    width: StrictInt
    height: StrictInt
    format: ImageFormat

    @property
    def content_type(self) -> str:
        return f"image/{self.format}"
