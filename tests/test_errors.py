import pytest

from schooldesk.core.errors import (
    Forbidden,
    InvalidCredentials,
    NotConnected,
    ServiceUnavailable,
    TenantInactive,
    get_error_message,
)


def test_error_body_shape():
    body = get_error_message(InvalidCredentials())

    assert body == {
        "success": False,
        "message": "Invalid email or password",
        "errorKind": "InvalidCredentials",
        "status_code": 401,
    }


@pytest.mark.parametrize("error,status_code", [
    (TenantInactive(), 403),
    (Forbidden(), 403),
    (NotConnected(), 503),
    (ServiceUnavailable(), 503),
])
def test_status_codes(error, status_code):
    assert get_error_message(error)["status_code"] == status_code


def test_messages_are_translated():
    body = get_error_message(TenantInactive(), language="ar")

    assert body["message"] == "مدرستك غير نشطة حاليا"
    assert body["errorKind"] == "TenantInactive"


def test_unknown_language_falls_back_to_english():
    assert get_error_message(Forbidden(), language="fr")["message"] == "Access denied. Insufficient permissions."


def test_unexpected_errors_hide_details():
    body = get_error_message(RuntimeError("connection string leaked"))

    assert body["message"] == "Internal server error"
    assert body["errorKind"] == "InternalError"
    assert body["status_code"] == 500
