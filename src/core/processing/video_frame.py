"""Video thumbnail orchestration: duration guard, frame grab, image transform."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
import tempfile
from typing import Protocol
import uuid

from aws_lambda_powertools import Logger

from core.infrastructure.video.ffmpeg_decoder import FfmpegVideoDecoder
from core.models.errors import MediaServiceError
from core.models.media import TransformRequest, TransformedImage
from core.processing.image_transform import ImageTransformer
from core.utils.constants import SCRATCH_FILE_PREFIX, SCRATCH_FILE_SUFFIX

logger = Logger(UTC=True)


class VideoDecoder(Protocol):
    async def probe_duration(self, path: Path) -> float: ...

    async def extract_frame(self, path: Path, seconds: float) -> bytes: ...


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.warning("Failed to delete scratch file", extra={"path": str(path)})


@asynccontextmanager
async def scratch_file(data: bytes, directory: str | None = None) -> AsyncIterator[Path]:
    """Write ``data`` to a uniquely named temp file, removed on every exit path.

    Raises:
        MediaServiceError: PROCESSING_FAILURE if the file cannot be written
    """
    path = Path(directory or tempfile.gettempdir()) / (
        f"{SCRATCH_FILE_PREFIX}{uuid.uuid4()}{SCRATCH_FILE_SUFFIX}"
    )
    try:
        try:
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as exc:
            logger.error(
                "Failed to write scratch file",
                extra={"path": str(path), "error": str(exc)},
            )
            raise MediaServiceError.processing_failure(
                f"Failed to stage video for decoding: {exc.strerror or exc}"
            ) from exc
        yield path
    finally:
        await asyncio.to_thread(_remove_quietly, path)


class VideoFrameExtractor:
    """Grabs one still frame from a video and hands it to the image transformer."""

    def __init__(
        self,
        decoder: VideoDecoder | None = None,
        transformer: ImageTransformer | None = None,
        *,
        scratch_dir: str | None = None,
    ) -> None:
        self._decoder = decoder or FfmpegVideoDecoder()
        self._transformer = transformer or ImageTransformer()
        self._scratch_dir = scratch_dir

    async def extract_frame(self, data: bytes, timestamp_seconds: float) -> bytes:
        """Return a JPEG still taken at ``timestamp_seconds``.

        Raises:
            MediaServiceError: INVALID_INPUT for negative or out-of-range
                timestamps, PROCESSING_FAILURE for decoder failures
        """
        if timestamp_seconds < 0:
            raise MediaServiceError.invalid_input("time must be >= 0")

        async with scratch_file(data, self._scratch_dir) as path:
            try:
                duration = await self._decoder.probe_duration(path)
                if timestamp_seconds > duration:
                    raise MediaServiceError.invalid_input(
                        "Requested time is outside video duration",
                        details={"time": timestamp_seconds, "duration": duration},
                    )
                frame = await self._decoder.extract_frame(path, timestamp_seconds)

            except MediaServiceError:
                raise

            except Exception as exc:
                # only a failed spawn means the binary itself is absent
                if isinstance(exc, FileNotFoundError):
                    logger.error("Video decoder binary missing", extra={"error": str(exc)})
                    raise MediaServiceError.decoder_unavailable(
                        "ffmpeg is not available on the host"
                    ) from exc

                logger.warning(
                    "Video frame extraction failed",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                )
                raise MediaServiceError.processing_failure(
                    f"Failed to extract video frame: {str(exc) or 'unknown error'}"
                ) from exc

        logger.info(
            "Extracted video frame",
            extra={"time": timestamp_seconds, "duration": duration, "size": len(frame)},
        )
        return frame

    async def render(self, data: bytes, request: TransformRequest) -> TransformedImage:
        """Extract the requested frame, then resize/encode it like any image."""
        if request.timestamp_seconds is None:
            raise MediaServiceError.invalid_input("time is required")

        frame = await self.extract_frame(data, request.timestamp_seconds)
        return await self._transformer.transform(frame, request)
