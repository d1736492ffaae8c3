"""
Pytest configuration and fixtures for media-derivative tests.
Provides AWS mocking, S3 fixtures, sample media and fetch fakes.
"""

import os
from collections.abc import Callable
from typing import Any

os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("IMAGE_BUCKET_NAME", "media-derivatives-test")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "MediaDerivativeService")

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from core.config import AppConfig
from media_fakes import InMemoryArtifactStore, encode_image


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        bucket_name=os.environ["IMAGE_BUCKET_NAME"],
        region=os.environ["AWS_REGION"],
    )


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


def _cleanup_s3_objects(s3_client, bucket_name):
    """Helper to delete all objects from S3 bucket efficiently."""
    try:
        paginator = s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name):
            objects = page.get("Contents", [])
            if objects:
                delete_keys = [{"Key": obj["Key"]} for obj in objects]
                s3_client.delete_objects(
                    Bucket=bucket_name, Delete={"Objects": delete_keys}
                )
    except ClientError as e:
        if e.response["Error"]["Code"] != "NoSuchBucket":
            raise


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """
    Create and manage S3 bucket for testing.

    Cleanup Strategy:
    - Objects are deleted after each test (teardown)
    - Bucket is NOT deleted (moto cleans up on context exit)
    """
    bucket_name = os.getenv("IMAGE_BUCKET_NAME")

    try:
        s3_client.head_bucket(Bucket=bucket_name)
    except ClientError:
        s3_client.create_bucket(Bucket=bucket_name)

    yield s3_client

    _cleanup_s3_objects(s3_client, bucket_name)


@pytest.fixture
def s3_put_object(s3_bucket) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        s3_put_object("images/abc.jpeg", image_bytes, "image/jpeg")
    """

    def _put(key: str, body: bytes, content_type: str = "application/octet-stream"):
        return s3_bucket.put_object(
            Bucket=os.getenv("IMAGE_BUCKET_NAME"),
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    return _put


@pytest.fixture
def s3_get_object(s3_bucket) -> Callable[[str], dict[str, Any]]:
    """
    Helper to get an object (body bytes plus headers) from S3.

    Usage:
        obj = s3_get_object("images/abc.jpeg"); obj["Body"]
    """

    def _get(key: str) -> dict[str, Any]:
        response: dict[str, Any] = s3_bucket.get_object(
            Bucket=os.getenv("IMAGE_BUCKET_NAME"),
            Key=key,
        )
        response["Body"] = response["Body"].read()
        return response

    return _get


@pytest.fixture
def s3_list_keys(s3_bucket) -> Callable[[], list[str]]:
    def _list() -> list[str]:
        response = s3_bucket.list_objects_v2(Bucket=os.getenv("IMAGE_BUCKET_NAME"))
        return sorted(obj["Key"] for obj in response.get("Contents", []))

    return _list


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """
    Factory for encoded sample images.

    Usage:
        png = make_image(100, 100)
        gif = make_image(40, 20, fmt="GIF", mode="P", color=1)
    """
    return encode_image


@pytest.fixture
def memory_store() -> InMemoryArtifactStore:
    return InMemoryArtifactStore()
