"""Query parameter models shared by the media endpoints."""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from core.models.media import CropMode, ImageFormat, TransformRequest
from core.utils.constants import (
    CROP_MODES,
    DEFAULT_CROP_MODE,
    FORMAT_ALIASES,
    MAX_DIMENSION,
    MAX_QUALITY,
    MIN_QUALITY,
    OUTPUT_FORMATS,
)


def _to_int(value: Any, message: str) -> int:
    if isinstance(value, bool):
        raise ValueError(message)
    if isinstance(value, int):
        return value
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise ValueError(message) from exc
    if not number.is_integer():
        raise ValueError(message)
    return int(number)


class MediaQuery(BaseModel):
    """Parameters common to every transformation endpoint.

    Values arrive as query strings and are coerced here; anything that
    cannot be coerced is rejected with a message naming the parameter.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    url: str = Field(..., description="Remote http(s) source URL")
    width: int | None = Field(None, description="Target width (1-5000)")
    height: int | None = Field(None, description="Target height (1-5000)")
    format: ImageFormat | None = Field(None, description="jpeg, png or webp")
    quality: int | None = Field(None, description="Encoder quality (1-100)")
    crop: CropMode = Field(DEFAULT_CROP_MODE, description="fill, fit, inside or outside")

    @field_validator("url", mode="before")
    @classmethod
    def validate_url_present(cls, value: Any) -> Any:
        if value is None or not str(value).strip():
            raise ValueError("url is required")
        return value

    @field_validator("width", "height", mode="before")
    @classmethod
    def validate_dimension(cls, value: Any, info: ValidationInfo) -> int | None:
        if value is None:
            return None

        label = info.field_name
        parsed = _to_int(value, f"{label} must be a positive integer")
        if parsed <= 0:
            raise ValueError(f"{label} must be a positive integer")
        if parsed > MAX_DIMENSION:
            raise ValueError(f"{label} must be <= {MAX_DIMENSION}")
        return parsed

    @field_validator("quality", mode="before")
    @classmethod
    def validate_quality(cls, value: Any) -> int | None:
        if value is None:
            return None

        message = f"quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}"
        parsed = _to_int(value, message)
        if not MIN_QUALITY <= parsed <= MAX_QUALITY:
            raise ValueError(message)
        return parsed

    @field_validator("format", mode="before")
    @classmethod
    def validate_format(cls, value: Any) -> str | None:
        if value is None or not str(value).strip():
            return None

        normalized = str(value).strip().lower()
        normalized = FORMAT_ALIASES.get(normalized, normalized)
        if normalized not in OUTPUT_FORMATS:
            raise ValueError("format must be jpeg, png, or webp")
        return normalized

    @field_validator("crop", mode="before")
    @classmethod
    def validate_crop(cls, value: Any) -> str:
        if value is None or not str(value).strip():
            return DEFAULT_CROP_MODE

        normalized = str(value).strip().lower()
        if normalized not in CROP_MODES:
            raise ValueError("crop must be fill, fit, inside, or outside")
        return normalized

    def to_transform_request(self) -> TransformRequest:
        return TransformRequest(
            source_url=self.url,
            width=self.width,
            height=self.height,
            output_format=self.format,
            quality=self.quality,
            crop_mode=self.crop,
        )


class VideoMediaQuery(MediaQuery):
    """Adds the mandatory frame timestamp."""

    time: float = Field(..., description="Frame position in seconds (>= 0)")

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, value: Any) -> float:
        if value is None:
            raise ValueError("time is required")

        message = "time must be a number >= 0"
        if isinstance(value, bool):
            raise ValueError(message)
        try:
            parsed = float(str(value).strip())
        except ValueError as exc:
            raise ValueError(message) from exc
        if not math.isfinite(parsed) or parsed < 0:
            raise ValueError(message)
        return parsed

    def to_transform_request(self) -> TransformRequest:
        return super().to_transform_request().model_copy(
            update={"timestamp_seconds": self.time}
        )
