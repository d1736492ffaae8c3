"""Business logic for on-demand image derivatives.

Runs the shared media pipeline with image fetch limits, the ``images/`` key
namespace and the Pillow-backed transformer.
"""

from aws_lambda_powertools import Logger

from core.config import AppConfig
from core.models.media import IMAGE_FETCH_LIMITS, ArtifactRecord, Modality, TransformRequest
from core.processing.image_transform import ImageTransformer
from core.processing.pipeline import MediaPipeline

logger = Logger(UTC=True)


class ProcessImageService:
    """Application service responsible for image derivatives."""

    def __init__(
        self,
        pipeline: MediaPipeline,
        transformer: ImageTransformer | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.transformer = transformer or ImageTransformer()

    @classmethod
    def from_config(cls, config: AppConfig) -> "ProcessImageService":
        return cls(MediaPipeline.from_config(config))

    async def process(self, request: TransformRequest) -> ArtifactRecord:
        """Return the derivative for ``request``, producing it if needed.

        Raises:
            MediaServiceError: classified by the failing component
        """
        logger.debug(
            "Processing image request",
            extra={
                "width": request.width,
                "height": request.height,
                "format": request.output_format,
                "quality": request.quality,
                "crop": request.crop_mode,
            },
        )

        return await self.pipeline.run(
            request,
            modality=Modality.IMAGE,
            limits=IMAGE_FETCH_LIMITS,
            transform=self.transformer.transform,
        )
