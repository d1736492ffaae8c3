"""Request lifecycle shared by the image and video endpoints.

    Validated -> CacheProbe -> CacheHit
                            -> CacheMiss -> Fetch -> Transform -> Store

Any component failure ends the request with the MediaServiceError raised by
that component; the pipeline never reclassifies and never retries.
"""

from collections.abc import Awaitable, Callable

from aws_lambda_powertools import Logger

from core.config import AppConfig
from core.infrastructure.aws.s3_artifact_store import S3ArtifactStore
from core.infrastructure.http.remote_resource_guard import RemoteResourceGuard
from core.models.media import (
    ArtifactRecord,
    FetchLimits,
    ImageFormat,
    Modality,
    TransformRequest,
    TransformedImage,
)
from core.processing.in_flight import InFlightRegistry
from core.repositories.artifact_repository import ArtifactRepository
from core.utils.cache_key import build_artifact_key, fingerprint
from core.utils.constants import CACHE_PROBE_EXTENSIONS

logger = Logger(UTC=True)

TransformFn = Callable[[bytes, TransformRequest], Awaitable[TransformedImage]]

_SHARED_IN_FLIGHT = InFlightRegistry()


def probe_extensions(request: TransformRequest) -> tuple[ImageFormat, ...]:
    """Extensions to probe, in order: the requested one, else jpeg, png, webp."""
    if request.output_format:
        return (request.output_format,)
    return CACHE_PROBE_EXTENSIONS  # type: ignore[return-value]


class MediaPipeline:
    """Coordinates cache probe, fetch, transform and store for one request."""

    def __init__(
        self,
        *,
        store: ArtifactRepository,
        guard: RemoteResourceGuard | None = None,
        in_flight: InFlightRegistry | None = None,
    ) -> None:
        self.store = store
        self.guard = guard or RemoteResourceGuard()
        self._in_flight = in_flight or _SHARED_IN_FLIGHT

    @classmethod
    def from_config(cls, config: AppConfig) -> "MediaPipeline":
        return cls(store=S3ArtifactStore(config))

    async def run(
        self,
        request: TransformRequest,
        *,
        modality: Modality,
        limits: FetchLimits,
        transform: TransformFn,
    ) -> ArtifactRecord:
        """Return the artifact for ``request``, producing it on a cache miss.

        Raises:
            MediaServiceError: whatever the failing component raised
        """
        source_url = await self.guard.validate_url(request.source_url)
        request = request.model_copy(update={"source_url": source_url})
        digest = fingerprint(request)

        return await self._in_flight.run(
            f"{modality.value}:{digest}",
            lambda: self._produce(
                request,
                digest=digest,
                modality=modality,
                limits=limits,
                transform=transform,
            ),
        )

    async def probe(
        self, request: TransformRequest, *, digest: str, modality: Modality
    ) -> ArtifactRecord | None:
        for extension in probe_extensions(request):
            key = build_artifact_key(digest, extension, modality)
            if await self.store.exists(key):
                logger.info("Cache hit", extra={"key": key, "modality": modality.value})
                return ArtifactRecord(key=key, url=self.store.public_url(key), cached=True)
        return None

    async def _produce(
        self,
        request: TransformRequest,
        *,
        digest: str,
        modality: Modality,
        limits: FetchLimits,
        transform: TransformFn,
    ) -> ArtifactRecord:
        cached = await self.probe(request, digest=digest, modality=modality)
        if cached is not None:
            return cached

        logger.info(
            "Cache miss",
            extra={"fingerprint": digest, "modality": modality.value},
        )

        resource = await self.guard.fetch(request.source_url, limits)
        output = await transform(resource.data, request)

        # the transform decides the final extension; it is not probed again
        key = build_artifact_key(digest, output.format, modality)
        await self.store.put(key, output.data, output.content_type)

        return ArtifactRecord(
            key=key,
            url=self.store.public_url(key),
            cached=False,
            width=output.width,
            height=output.height,
            format=output.format,
        )
