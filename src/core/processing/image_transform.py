"""Image transform orchestration: format resolution, resize, re-encode."""

import asyncio
from typing import Protocol

from aws_lambda_powertools import Logger
from PIL import Image

from core.infrastructure.imaging.pillow_engine import (
    DecodedImage,
    EncodedImage,
    PillowImageEngine,
)
from core.models.errors import MediaServiceError
from core.models.media import FitStrategy, ImageFormat, TransformRequest, TransformedImage
from core.utils.constants import CROP_TO_FIT, DEFAULT_OUTPUT_FORMAT, OUTPUT_FORMATS

logger = Logger(UTC=True)


class ImageEngine(Protocol):
    """Narrow contract of the pixel transformation engine."""

    def decode(self, data: bytes) -> DecodedImage: ...

    def resize(
        self,
        image: Image.Image,
        *,
        width: int | None,
        height: int | None,
        fit: FitStrategy,
    ) -> Image.Image: ...

    def encode(
        self,
        image: Image.Image,
        *,
        format: ImageFormat,
        quality: int | None = None,
    ) -> EncodedImage: ...


def resolve_output_format(
    requested: ImageFormat | None, source_format: str | None
) -> ImageFormat:
    """Pick the output format.

    An explicit request wins; otherwise a jpeg/png/webp source keeps its
    format and anything else becomes jpeg. ``source_format`` must come from
    the decoder, never from the declared content type.
    """
    if requested:
        return requested
    if source_format in OUTPUT_FORMATS:
        return source_format  # type: ignore[return-value]
    return DEFAULT_OUTPUT_FORMAT  # type: ignore[return-value]


class ImageTransformer:
    """Decodes, resizes and encodes one image for the pipeline."""

    def __init__(self, engine: ImageEngine | None = None) -> None:
        self._engine = engine or PillowImageEngine()

    async def transform(self, data: bytes, request: TransformRequest) -> TransformedImage:
        """Transform ``data`` according to ``request``.

        CPU-bound work runs in a worker thread.

        Raises:
            MediaServiceError: PROCESSING_FAILURE if decoding or encoding fails
        """
        return await asyncio.to_thread(self.transform_sync, data, request)

    def transform_sync(self, data: bytes, request: TransformRequest) -> TransformedImage:
        try:
            decoded = self._engine.decode(data)
            output_format = resolve_output_format(request.output_format, decoded.format)

            image = decoded.image
            if request.wants_resize:
                image = self._engine.resize(
                    image,
                    width=request.width,
                    height=request.height,
                    fit=CROP_TO_FIT[request.crop_mode],  # type: ignore[arg-type]
                )

            reencode = (
                request.quality is not None
                or request.output_format is not None
                or output_format != decoded.format
            )

            if not reencode and image is decoded.image:
                logger.debug(
                    "Source already matches request, passing bytes through",
                    extra={"format": output_format},
                )
                return TransformedImage(
                    data=data,
                    width=decoded.width,
                    height=decoded.height,
                    format=output_format,
                )

            encoded = self._engine.encode(
                image, format=output_format, quality=request.quality
            )

        except Exception as exc:
            logger.warning(
                "Image processing failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )
            raise MediaServiceError.processing_failure(
                f"Failed to process image: {exc}"
            ) from exc

        logger.info(
            "Image transformed",
            extra={
                "source_format": decoded.format,
                "format": output_format,
                "width": encoded.width,
                "height": encoded.height,
                "size": len(encoded.data),
            },
        )
        return TransformedImage(
            data=encoded.data,
            width=encoded.width,
            height=encoded.height,
            format=output_format,
        )
