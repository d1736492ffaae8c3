#!/usr/bin/env python3
"""
Pre-warm the derivative cache by calling the API for a list of sources.

Run:
    python seed/prewarm_derivatives.py \
      --api-id <API-ID> \
      --api-key <API-KEY>
"""

import argparse
import json
from pathlib import Path
import sys
from typing import Any, cast

from aws_lambda_powertools import Logger
import requests

logger = Logger(service="prewarm")


API_BASE_URL = "http://localhost:4566/restapis/{0}/snd/_user_request_"

ENDPOINTS: dict[str, str] = {
    "image": "/process",
    "video": "/video/thumbnail",
}

QUERY_FIELDS = ("url", "width", "height", "format", "quality", "crop", "time")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Pre-warm media derivatives via the API")

    parser.add_argument(
        "--api-id",
        required=True,
        help="Base API ID (e.g. LocalStack API Gateway ID)",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="API key for x-api-key header (optional for local)",
    )
    parser.add_argument(
        "--data-file",
        type=Path,
        default=Path(__file__).parent / "data" / "derivatives.json",
        help="JSON file with a 'derivatives' list",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Only warm the first N entries",
    )

    return parser.parse_args()


def load_derivatives(path: Path) -> list[dict[str, Any]]:
    with open(path, encoding="utf-8") as f:
        data = cast(dict[str, Any], json.load(f))
    return cast(list[dict[str, Any]], data.get("derivatives", []))


def build_query(item: dict[str, Any]) -> dict[str, str]:
    return {name: str(item[name]) for name in QUERY_FIELDS if item.get(name) is not None}


def prewarm() -> None:
    try:
        args = parse_args()
        items = load_derivatives(args.data_file)[: args.limit]

        headers: dict[str, str] = {}
        if args.api_key:
            headers["x-api-key"] = args.api_key

        base_url = API_BASE_URL.format(args.api_id)
        logger.info(
            "Starting pre-warm",
            extra={"api_base_url": base_url, "count": len(items)},
        )

        warmed = cached = failed = 0
        for item in items:
            kind = item.get("kind", "image")
            endpoint = ENDPOINTS.get(kind)
            if endpoint is None:
                logger.warning("Unknown derivative kind", extra={"kind": kind})
                failed += 1
                continue

            response = requests.get(
                f"{base_url}{endpoint}",
                headers=headers,
                params=build_query(item),
                timeout=60,
            )
            body = cast(dict[str, Any], response.json())

            if response.ok:
                if body.get("cached"):
                    cached += 1
                else:
                    warmed += 1
                logger.info(
                    "Derivative ready",
                    extra={"key": body.get("key"), "cached": body.get("cached")},
                )
            else:
                failed += 1
                logger.error(
                    "Failed to warm derivative",
                    extra={
                        "source": item.get("url"),
                        "status": response.status_code,
                        "response": body,
                    },
                )

        logger.info(
            "Pre-warm completed",
            extra={"warmed": warmed, "already_cached": cached, "failed": failed},
        )

    except Exception as exc:
        logger.exception("Pre-warm failed", exc_info=exc)
        sys.exit(1)


if __name__ == "__main__":
    prewarm()
