"""Business logic for video thumbnails.

The pipeline is the same as for images; only the fetch limits, the
``thumbnails/`` key namespace and the transform step differ. The transform
grabs a frame with ffmpeg and hands it to the image transformer.
"""

from aws_lambda_powertools import Logger

from core.config import AppConfig
from core.infrastructure.video.ffmpeg_decoder import FfmpegVideoDecoder
from core.models.errors import MediaServiceError
from core.models.media import VIDEO_FETCH_LIMITS, ArtifactRecord, Modality, TransformRequest
from core.processing.pipeline import MediaPipeline
from core.processing.video_frame import VideoFrameExtractor

logger = Logger(UTC=True)


class VideoThumbnailService:
    """Application service responsible for video thumbnails."""

    def __init__(
        self,
        pipeline: MediaPipeline,
        extractor: VideoFrameExtractor | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.extractor = extractor or VideoFrameExtractor()

    @classmethod
    def from_config(cls, config: AppConfig) -> "VideoThumbnailService":
        return cls(
            MediaPipeline.from_config(config),
            VideoFrameExtractor(FfmpegVideoDecoder(config)),
        )

    async def process(self, request: TransformRequest) -> ArtifactRecord:
        """Return the thumbnail for ``request``, producing it if needed.

        Raises:
            MediaServiceError: INVALID_INPUT for a missing or negative
                timestamp (before any I/O), otherwise as classified by the
                failing component
        """
        if request.timestamp_seconds is None:
            raise MediaServiceError.invalid_input("time is required")
        if request.timestamp_seconds < 0:
            raise MediaServiceError.invalid_input("time must be >= 0")

        logger.debug(
            "Processing video thumbnail request",
            extra={
                "time": request.timestamp_seconds,
                "width": request.width,
                "height": request.height,
                "format": request.output_format,
            },
        )

        return await self.pipeline.run(
            request,
            modality=Modality.VIDEO,
            limits=VIDEO_FETCH_LIMITS,
            transform=self.extractor.render,
        )
