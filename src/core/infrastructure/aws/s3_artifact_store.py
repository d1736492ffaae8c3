"""S3-backed implementation of ArtifactRepository."""

import asyncio

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.config import AppConfig
from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import MediaServiceError
from core.repositories.artifact_repository import ArtifactRepository

logger = Logger(UTC=True)

_MISSING_CODES = frozenset({"404", "NotFound", "NoSuchKey"})


def _is_missing(exc: ClientError) -> bool:
    code = str(exc.response.get("Error", {}).get("Code", ""))
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code in _MISSING_CODES or status == 404


class S3ArtifactStore(ArtifactRepository):
    """Artifact storage backed by Amazon S3.

    boto3 is blocking, so every call runs in a worker thread to keep the
    event loop free for other in-flight requests.
    """

    def __init__(
        self,
        config: AppConfig,
        adapter: S3AdapterProtocol | None = None,
    ) -> None:
        self._config = config
        self._s3 = adapter or S3Adapter(config)

    async def exists(self, key: str) -> bool:
        logger.debug("Probing artifact", extra={"key": key})

        try:
            await asyncio.to_thread(self._s3.head_object, key=key)
            return True

        except ClientError as exc:
            if _is_missing(exc):
                return False

            logger.error("S3 head failed", extra={"key": key})
            raise MediaServiceError.storage_failure(
                "Failed to check object in S3",
                details={"key": key},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error probing artifact")
            raise MediaServiceError.storage_failure(
                "Failed to check object in S3",
                details={"key": key},
            ) from exc

    async def put(self, key: str, body: bytes, content_type: str) -> str:
        logger.debug(
            "Uploading artifact",
            extra={"key": key, "size": len(body), "content_type": content_type},
        )

        try:
            await asyncio.to_thread(
                self._s3.put_object,
                key=key,
                body=body,
                content_type=content_type,
                cache_control=self._config.cache_control,
            )
        except Exception as exc:
            logger.exception("S3 upload failed", extra={"key": key})
            raise MediaServiceError.storage_failure(
                "Failed to upload object to S3",
                details={"key": key},
            ) from exc

        logger.info("Artifact stored", extra={"key": key})
        return key

    def public_url(self, key: str) -> str:
        if self._config.base_url:
            return f"{self._config.base_url.rstrip('/')}/{key}"
        return (
            f"https://{self._config.bucket_name}.s3."
            f"{self._config.region}.amazonaws.com/{key}"
        )
