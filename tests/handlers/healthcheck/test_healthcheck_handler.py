import json

from handlers.healthcheck.handler import handler


def test_healthcheck_reports_ok(lambda_context) -> None:
    response = handler({"httpMethod": "GET", "path": "/healthcheck"}, lambda_context)

    assert response["statusCode"] == 200
    assert json.loads(response["body"]) == {"status": "ok"}


def test_healthcheck_preflight(lambda_context) -> None:
    response = handler({"httpMethod": "OPTIONS"}, lambda_context)

    assert response["statusCode"] == 204
