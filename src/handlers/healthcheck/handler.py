"""
Lambda handler for the liveness probe.
"""

from typing import Any

from aws_lambda_powertools.utilities.typing import LambdaContext

from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder


@api_gateway_handler
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """Return ``{"status": "ok"}`` without touching any collaborator."""
    return ResponseBuilder.ok({"status": "ok"})
