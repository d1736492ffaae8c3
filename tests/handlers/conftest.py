from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest

from core.infrastructure.aws.s3_artifact_store import S3ArtifactStore
from core.infrastructure.http.remote_resource_guard import RemoteResourceGuard
from core.processing.in_flight import InFlightRegistry
from core.processing.pipeline import MediaPipeline
from media_fakes import media_transport, public_resolver


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


@pytest.fixture
def query_event() -> Callable[..., dict[str, Any]]:
    """
    Build an API Gateway proxy GET event.

    Usage:
        event = query_event("/process", url=SOURCE_URL, width="100")
    """

    def _event(path: str, **params: str) -> dict[str, Any]:
        return {
            "httpMethod": "GET",
            "path": path,
            "queryStringParameters": params or None,
            "multiValueQueryStringParameters": (
                {name: [value] for name, value in params.items()} if params else None
            ),
            "headers": {"x-api-key": "test-api-key"},
        }

    return _event


@pytest.fixture
def s3_pipeline(app_config, s3_bucket) -> Callable[[dict[str, tuple[bytes, str]]], MediaPipeline]:
    """Pipeline storing into the moto bucket and fetching from canned routes."""

    def _pipeline(routes: dict[str, tuple[bytes, str]]) -> MediaPipeline:
        guard = RemoteResourceGuard(resolver=public_resolver, transport=media_transport(routes))
        return MediaPipeline(
            store=S3ArtifactStore(app_config),
            guard=guard,
            in_flight=InFlightRegistry(),
        )

    return _pipeline
