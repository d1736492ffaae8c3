"""
Lambda handler responsible for on-demand image derivatives.
"""

import asyncio
from functools import lru_cache
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.config import AppConfig
from core.models.errors import MediaServiceError
from core.models.media import Modality
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.metrics import record_failure, record_outcome
from core.utils.response import ResponseBuilder
from core.utils.validators import extract_query_params, validate_request

from .models import ProcessImageRequest, ProcessImageResponse
from .service import ProcessImageService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@lru_cache(maxsize=1)
def get_service() -> ProcessImageService:
    """Build the service once per execution environment."""
    return ProcessImageService.from_config(AppConfig.from_env())


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle ``GET /process`` requests.

    Query parameters: url (required), width, height, format, quality, crop.

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible response describing the artifact
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.info(
        "Received image process request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
        },
    )

    request = validate_request(ProcessImageRequest, extract_query_params(event))

    try:
        record = asyncio.run(get_service().process(request.to_transform_request()))
    except MediaServiceError as exc:
        record_failure(metrics, Modality.IMAGE, exc.error_code)
        raise

    record_outcome(metrics, Modality.IMAGE, record)

    response = ProcessImageResponse(**record.model_dump())
    return ResponseBuilder.ok(response.model_dump(exclude_none=True), request_id=request_id)
