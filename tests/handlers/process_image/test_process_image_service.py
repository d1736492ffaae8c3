import asyncio

import httpx
import pytest

from core.infrastructure.http.remote_resource_guard import RemoteResourceGuard
from core.models.errors import ErrorKind, MediaServiceError
from core.models.media import TransformRequest
from core.processing.in_flight import InFlightRegistry
from core.processing.pipeline import MediaPipeline
from handlers.process_image.models import ProcessImageRequest, ProcessImageResponse
from handlers.process_image.service import ProcessImageService
from media_fakes import (
    SOURCE_URL,
    InMemoryArtifactStore,
    encode_image,
    media_transport,
    public_resolver,
)


def build_service(store, routes) -> ProcessImageService:
    guard = RemoteResourceGuard(resolver=public_resolver, transport=media_transport(routes))
    return ProcessImageService(
        MediaPipeline(store=store, guard=guard, in_flight=InFlightRegistry())
    )


class TestProcessImageService:
    def test_produces_derivative_in_images_namespace(self, memory_store):
        service = build_service(memory_store, {SOURCE_URL: (encode_image(100, 100), "image/png")})

        record = asyncio.run(
            service.process(TransformRequest(source_url=SOURCE_URL, width=100, height=100))
        )

        assert record.cached is False
        assert record.key.startswith("images/")
        assert (record.width, record.height, record.format) == (100, 100, "png")
        assert memory_store.puts == [record.key]

    def test_second_request_is_cached(self, memory_store):
        service = build_service(memory_store, {SOURCE_URL: (encode_image(100, 100), "image/png")})
        request = TransformRequest(source_url=SOURCE_URL, quality=80)

        first = asyncio.run(service.process(request))
        second = asyncio.run(service.process(request))

        assert (first.cached, second.cached) == (False, True)
        assert second.url == first.url
        assert len(memory_store.puts) == 1

    def test_different_parameters_produce_different_artifacts(self, memory_store):
        service = build_service(memory_store, {SOURCE_URL: (encode_image(100, 100), "image/png")})

        a = asyncio.run(service.process(TransformRequest(source_url=SOURCE_URL, width=10)))
        b = asyncio.run(service.process(TransformRequest(source_url=SOURCE_URL, width=20)))

        assert a.key != b.key
        assert len(memory_store.puts) == 2

    def test_oversized_remote(self, memory_store):
        async def chunks():
            for _ in range(11):
                yield b"\0" * (1024 * 1024)

        def handler(request):
            return httpx.Response(200, headers={"content-type": "image/png"}, content=chunks())

        guard = RemoteResourceGuard(resolver=public_resolver, transport=httpx.MockTransport(handler))
        service = ProcessImageService(
            MediaPipeline(store=memory_store, guard=guard, in_flight=InFlightRegistry())
        )

        with pytest.raises(MediaServiceError) as exc:
            asyncio.run(service.process(TransformRequest(source_url=SOURCE_URL)))

        assert exc.value.kind is ErrorKind.REMOTE_FETCH_FAILURE
        assert exc.value.error_code == "REMOTE_FETCH_TOO_LARGE"
        assert memory_store.puts == []


class TestProcessImageModels:
    def test_request_model_builds_transform_request(self):
        request = ProcessImageRequest(url=SOURCE_URL, width="120", crop="outside")

        transform = request.to_transform_request()

        assert transform.width == 120
        assert transform.crop_mode == "outside"

    def test_response_model_omits_empty_dimensions(self):
        response = ProcessImageResponse(key="images/a.png", url="https://x/images/a.png", cached=True)

        assert response.model_dump(exclude_none=True) == {
            "key": "images/a.png",
            "url": "https://x/images/a.png",
            "cached": True,
        }
