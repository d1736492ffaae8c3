"""Error type shared by every layer of the media service.

A single exception class carries an ``ErrorKind`` tag plus an ``error_code``
for the few sub-variants (timeout, oversize, missing decoder). Components
classify a failure at the point of detection; the pipeline only forwards it,
and the API boundary maps it to an HTTP status with ``status_for``.
"""

from enum import Enum
from http import HTTPStatus
from typing import Any

from core.utils.constants import (
    ERROR_CODE_DECODER_UNAVAILABLE,
    ERROR_CODE_INVALID_INPUT,
    ERROR_CODE_PROCESSING_FAILED,
    ERROR_CODE_REMOTE_FETCH_FAILED,
    ERROR_CODE_REMOTE_FETCH_TIMEOUT,
    ERROR_CODE_REMOTE_FETCH_TOO_LARGE,
    ERROR_CODE_STORAGE_FAILED,
    ERROR_CODE_UNSUPPORTED_MEDIA_TYPE,
)


class ErrorKind(str, Enum):
    """Outward failure categories."""

    INVALID_INPUT = "INVALID_INPUT"
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    REMOTE_FETCH_FAILURE = "REMOTE_FETCH_FAILURE"
    PROCESSING_FAILURE = "PROCESSING_FAILURE"
    STORAGE_FAILURE = "STORAGE_FAILURE"


_DEFAULT_CODES: dict[ErrorKind, str] = {
    ErrorKind.INVALID_INPUT: ERROR_CODE_INVALID_INPUT,
    ErrorKind.UNSUPPORTED_MEDIA_TYPE: ERROR_CODE_UNSUPPORTED_MEDIA_TYPE,
    ErrorKind.REMOTE_FETCH_FAILURE: ERROR_CODE_REMOTE_FETCH_FAILED,
    ErrorKind.PROCESSING_FAILURE: ERROR_CODE_PROCESSING_FAILED,
    ErrorKind.STORAGE_FAILURE: ERROR_CODE_STORAGE_FAILED,
}

_STATUS_BY_KIND: dict[ErrorKind, HTTPStatus] = {
    ErrorKind.INVALID_INPUT: HTTPStatus.BAD_REQUEST,
    ErrorKind.UNSUPPORTED_MEDIA_TYPE: HTTPStatus.UNSUPPORTED_MEDIA_TYPE,
    ErrorKind.REMOTE_FETCH_FAILURE: HTTPStatus.BAD_GATEWAY,
    ErrorKind.PROCESSING_FAILURE: HTTPStatus.INTERNAL_SERVER_ERROR,
    ErrorKind.STORAGE_FAILURE: HTTPStatus.BAD_GATEWAY,
}

_STATUS_BY_CODE: dict[str, HTTPStatus] = {
    ERROR_CODE_REMOTE_FETCH_TIMEOUT: HTTPStatus.GATEWAY_TIMEOUT,
    ERROR_CODE_REMOTE_FETCH_TOO_LARGE: HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
}


class MediaServiceError(Exception):
    """
    Base exception for all media service errors.

    ``kind`` selects the outward category, ``error_code`` narrows it.
    Optional contextual information can be supplied via `details`.
    """

    kind: ErrorKind
    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        kind: ErrorKind,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.error_code = error_code or _DEFAULT_CODES[kind]
        self.details = details or {}

        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"MediaServiceError(kind={self.kind.value}, "
            f"error_code={self.error_code}, message={self.message!r})"
        )

    @classmethod
    def invalid_input(
        cls, message: str, *, details: dict[str, Any] | None = None
    ) -> "MediaServiceError":
        return cls(kind=ErrorKind.INVALID_INPUT, message=message, details=details)

    @classmethod
    def unsupported_media_type(
        cls, message: str, *, details: dict[str, Any] | None = None
    ) -> "MediaServiceError":
        return cls(
            kind=ErrorKind.UNSUPPORTED_MEDIA_TYPE, message=message, details=details
        )

    @classmethod
    def remote_fetch_failure(
        cls,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> "MediaServiceError":
        return cls(
            kind=ErrorKind.REMOTE_FETCH_FAILURE,
            message=message,
            error_code=error_code,
            details=details,
        )

    @classmethod
    def remote_fetch_timeout(
        cls, message: str, *, details: dict[str, Any] | None = None
    ) -> "MediaServiceError":
        return cls.remote_fetch_failure(
            message, error_code=ERROR_CODE_REMOTE_FETCH_TIMEOUT, details=details
        )

    @classmethod
    def remote_fetch_too_large(
        cls, message: str, *, details: dict[str, Any] | None = None
    ) -> "MediaServiceError":
        return cls.remote_fetch_failure(
            message, error_code=ERROR_CODE_REMOTE_FETCH_TOO_LARGE, details=details
        )

    @classmethod
    def processing_failure(
        cls,
        message: str,
        *,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> "MediaServiceError":
        return cls(
            kind=ErrorKind.PROCESSING_FAILURE,
            message=message,
            error_code=error_code,
            details=details,
        )

    @classmethod
    def decoder_unavailable(
        cls, message: str, *, details: dict[str, Any] | None = None
    ) -> "MediaServiceError":
        return cls.processing_failure(
            message, error_code=ERROR_CODE_DECODER_UNAVAILABLE, details=details
        )

    @classmethod
    def storage_failure(
        cls, message: str, *, details: dict[str, Any] | None = None
    ) -> "MediaServiceError":
        return cls(kind=ErrorKind.STORAGE_FAILURE, message=message, details=details)


def status_for(error: MediaServiceError) -> HTTPStatus:
    """Return the HTTP status for an error, honoring sub-variant codes first."""
    override = _STATUS_BY_CODE.get(error.error_code)
    if override is not None:
        return override
    return _STATUS_BY_KIND[error.kind]
