from http import HTTPStatus

import pytest

from core.models.errors import ErrorKind, MediaServiceError, status_for


@pytest.mark.parametrize(
    "error,kind,code,status",
    [
        (
            MediaServiceError.invalid_input("bad"),
            ErrorKind.INVALID_INPUT,
            "INVALID_INPUT",
            HTTPStatus.BAD_REQUEST,
        ),
        (
            MediaServiceError.unsupported_media_type("bad"),
            ErrorKind.UNSUPPORTED_MEDIA_TYPE,
            "UNSUPPORTED_MEDIA_TYPE",
            HTTPStatus.UNSUPPORTED_MEDIA_TYPE,
        ),
        (
            MediaServiceError.remote_fetch_failure("bad"),
            ErrorKind.REMOTE_FETCH_FAILURE,
            "REMOTE_FETCH_FAILURE",
            HTTPStatus.BAD_GATEWAY,
        ),
        (
            MediaServiceError.remote_fetch_timeout("slow"),
            ErrorKind.REMOTE_FETCH_FAILURE,
            "REMOTE_FETCH_TIMEOUT",
            HTTPStatus.GATEWAY_TIMEOUT,
        ),
        (
            MediaServiceError.remote_fetch_too_large("big"),
            ErrorKind.REMOTE_FETCH_FAILURE,
            "REMOTE_FETCH_TOO_LARGE",
            HTTPStatus.REQUEST_ENTITY_TOO_LARGE,
        ),
        (
            MediaServiceError.processing_failure("bad"),
            ErrorKind.PROCESSING_FAILURE,
            "PROCESSING_FAILURE",
            HTTPStatus.INTERNAL_SERVER_ERROR,
        ),
        (
            MediaServiceError.decoder_unavailable("missing"),
            ErrorKind.PROCESSING_FAILURE,
            "DECODER_UNAVAILABLE",
            HTTPStatus.INTERNAL_SERVER_ERROR,
        ),
        (
            MediaServiceError.storage_failure("bad"),
            ErrorKind.STORAGE_FAILURE,
            "STORAGE_FAILURE",
            HTTPStatus.BAD_GATEWAY,
        ),
    ],
)
def test_constructors_classify_and_map_status(error, kind, code, status) -> None:
    assert error.kind is kind
    assert error.error_code == code
    assert status_for(error) == status


def test_error_carries_message_and_details() -> None:
    error = MediaServiceError.invalid_input("width must be <= 5000", details={"field": "width"})

    assert str(error) == "width must be <= 5000"
    assert error.message == "width must be <= 5000"
    assert error.details == {"field": "width"}


def test_details_default_to_empty_dict() -> None:
    assert MediaServiceError.storage_failure("nope").details == {}


def test_repr_names_kind_and_code() -> None:
    error = MediaServiceError.remote_fetch_timeout("slow")

    assert "REMOTE_FETCH_FAILURE" in repr(error)
    assert "REMOTE_FETCH_TIMEOUT" in repr(error)
