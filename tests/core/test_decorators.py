import json
from http import HTTPStatus
from types import SimpleNamespace

from core.models.errors import MediaServiceError
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder

CONTEXT = SimpleNamespace(aws_request_id="req-123")


class TestApiGatewayHandler:
    def test_passes_through_success(self) -> None:
        @api_gateway_handler
        def handler(event, context):
            return ResponseBuilder.ok({"status": "ok"})

        resp = handler({"httpMethod": "GET"}, CONTEXT)

        assert resp["statusCode"] == HTTPStatus.OK

    def test_options_preflight_short_circuits(self) -> None:
        calls = []

        @api_gateway_handler
        def handler(event, context):
            calls.append(event)
            return ResponseBuilder.ok({})

        resp = handler({"httpMethod": "OPTIONS"}, CONTEXT)

        assert resp["statusCode"] == HTTPStatus.NO_CONTENT
        assert calls == []

    def test_service_error_mapped_to_status(self) -> None:
        @api_gateway_handler
        def handler(event, context):
            raise MediaServiceError.unsupported_media_type("Remote content is not an image")

        resp = handler({"httpMethod": "GET"}, CONTEXT)
        body = json.loads(resp["body"])

        assert resp["statusCode"] == HTTPStatus.UNSUPPORTED_MEDIA_TYPE
        assert body["error"] == "Remote content is not an image"
        assert body["code"] == "UNSUPPORTED_MEDIA_TYPE"
        assert body["request_id"] == "req-123"

    def test_server_side_error_mapped_to_status(self) -> None:
        @api_gateway_handler
        def handler(event, context):
            raise MediaServiceError.decoder_unavailable("ffmpeg is not available on the host")

        resp = handler({"httpMethod": "GET"}, CONTEXT)

        assert resp["statusCode"] == HTTPStatus.INTERNAL_SERVER_ERROR
        assert json.loads(resp["body"])["code"] == "DECODER_UNAVAILABLE"

    def test_unexpected_error_is_not_echoed(self) -> None:
        @api_gateway_handler
        def handler(event, context):
            raise KeyError("secret-internal-detail")

        resp = handler({"httpMethod": "GET"}, CONTEXT)
        body = json.loads(resp["body"])

        assert resp["statusCode"] == HTTPStatus.INTERNAL_SERVER_ERROR
        assert body["error"] == "Unexpected server error"
        assert "secret-internal-detail" not in resp["body"]
