"""Bounded download of untrusted remote media.

One attempt per call, no retries: fetching attacker-controlled URLs again
only amplifies whatever the remote is doing.
"""

import asyncio

from aws_lambda_powertools import Logger
import httpx

from core.models.errors import MediaServiceError
from core.models.media import FetchLimits, RemoteResource
from core.utils.constants import DOWNLOAD_CHUNK_SIZE, MAX_REDIRECTS, format_file_size
from core.utils.url_guard import Resolver, resolve_host, validate_remote_url

logger = Logger(UTC=True)


def _article(noun: str) -> str:
    return "an" if noun[:1] in "aeiou" else "a"


class RemoteResourceGuard:
    """Validates destinations and streams remote bodies under hard limits.

    Failure classification:
    - INVALID_INPUT: bad scheme, malformed URL, private or unresolvable host
    - UNSUPPORTED_MEDIA_TYPE: declared content type outside the allowed prefix
    - REMOTE_FETCH_FAILURE: transport errors, non-2xx, redirect loops,
      with REMOTE_FETCH_TIMEOUT / REMOTE_FETCH_TOO_LARGE sub-variants
    """

    def __init__(
        self,
        *,
        resolver: Resolver = resolve_host,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._resolver = resolver
        self._transport = transport

    async def validate_url(self, url: str | None) -> str:
        return await validate_remote_url(url, resolver=self._resolver)

    async def fetch(self, url: str, limits: FetchLimits) -> RemoteResource:
        """Download ``url`` within ``limits``.

        Raises:
            MediaServiceError: classified as described on the class
        """
        target = await self.validate_url(url)

        logger.debug(
            "Fetching remote resource",
            extra={
                "url": target,
                "kind": limits.label,
                "max_bytes": limits.max_bytes,
                "timeout_seconds": limits.timeout_seconds,
            },
        )

        try:
            resource = await asyncio.wait_for(
                self._download(target, limits),
                timeout=limits.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise self._timeout(limits, target) from exc

        logger.info(
            "Remote resource fetched",
            extra={
                "url": target,
                "size": format_file_size(resource.size),
                "content_type": resource.content_type,
            },
        )
        return resource

    async def _download(self, url: str, limits: FetchLimits) -> RemoteResource:
        try:
            async with httpx.AsyncClient(
                timeout=limits.timeout_seconds,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                current = url
                for _ in range(MAX_REDIRECTS + 1):
                    async with client.stream("GET", current) as response:
                        if response.is_redirect:
                            location = response.headers.get("location")
                            if not location:
                                raise self._failure(limits, current, response.status_code)
                            current = await self.validate_url(
                                str(response.url.join(location))
                            )
                            continue

                        return await self._read_body(response, limits)

        except MediaServiceError:
            raise
        except httpx.TimeoutException as exc:
            raise self._timeout(limits, url) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Remote fetch transport error",
                extra={"url": url, "error": str(exc), "error_type": type(exc).__name__},
            )
            raise self._failure(limits, url) from exc

        logger.warning("Too many redirects", extra={"url": url})
        raise MediaServiceError.remote_fetch_failure(
            f"Failed to download {limits.label}: too many redirects",
            details={"url": url},
        )

    async def _read_body(
        self, response: httpx.Response, limits: FetchLimits
    ) -> RemoteResource:
        url = str(response.url)

        if not response.is_success:
            raise self._failure(limits, url, response.status_code)

        content_type = response.headers.get("content-type", "").strip().lower()
        if not content_type.startswith(limits.content_type_prefix):
            raise MediaServiceError.unsupported_media_type(
                f"Remote content is not {_article(limits.label)} {limits.label}",
                details={"url": url, "content_type": content_type or None},
            )

        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > limits.max_bytes:
            raise self._too_large(limits, url, int(declared))

        chunks: list[bytes] = []
        received = 0
        async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
            received += len(chunk)
            if received > limits.max_bytes:
                raise self._too_large(limits, url, received)
            chunks.append(chunk)

        return RemoteResource(data=b"".join(chunks), content_type=content_type)

    @staticmethod
    def _failure(
        limits: FetchLimits, url: str, status: int | None = None
    ) -> MediaServiceError:
        return MediaServiceError.remote_fetch_failure(
            f"Failed to download {limits.label}",
            details={"url": url, "status": status},
        )

    @staticmethod
    def _timeout(limits: FetchLimits, url: str) -> MediaServiceError:
        logger.warning("Remote fetch timed out", extra={"url": url})
        return MediaServiceError.remote_fetch_timeout(
            f"Remote {limits.label} request timed out",
            details={"url": url, "timeout_seconds": limits.timeout_seconds},
        )

    @staticmethod
    def _too_large(limits: FetchLimits, url: str, size: int) -> MediaServiceError:
        logger.warning(
            "Remote resource exceeds size limit",
            extra={"url": url, "size": size, "max_bytes": limits.max_bytes},
        )
        return MediaServiceError.remote_fetch_too_large(
            f"{limits.label.capitalize()} exceeds maximum size limit",
            details={"url": url, "max_bytes": limits.max_bytes},
        )
