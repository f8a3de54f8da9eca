from datetime import timedelta

import pytest
from jose import jwt

from schooldesk.core.config import get_jwt_settings
from schooldesk.core.errors import Unauthorized
from schooldesk.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
    verify_session_token,
)
from schooldesk.schemas.auth import SessionClaims
from schooldesk.schemas.user import UserRoleEnum


@pytest.fixture
def teacher_claims():
    return SessionClaims(
        account_id="TCH00001",
        email="tom@greenvalley.edu",
        role=UserRoleEnum.TEACHER,
        school_id="SCHL00001",
        database_name="school_green_valley_00001",
        subject_names=["Mathematics"],
    )


def test_password_hash_roundtrip():
    hashed = get_password_hash("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


@pytest.mark.parametrize("stored", [None, "", "plain-text-password"])
def test_unusable_hashes_never_match(stored):
    assert not verify_password("plain-text-password", stored)


def test_token_carries_claims(teacher_claims):
    token = create_access_token(teacher_claims)
    claims = verify_session_token(token)

    assert claims.account_id == "TCH00001"
    assert claims.role == UserRoleEnum.TEACHER
    assert claims.school_id == "SCHL00001"
    assert claims.subject_names == ["Mathematics"]
    assert claims.exp > claims.iat


def test_token_uses_camel_case_claims(teacher_claims):
    settings = get_jwt_settings()
    payload = jwt.decode(
        create_access_token(teacher_claims),
        settings["secret_key"],
        algorithms=[settings["algorithm"]],
        issuer=settings["token_issuer"],
    )

    assert payload["schoolId"] == "SCHL00001"
    assert payload["databaseName"] == "school_green_valley_00001"
    assert payload["sub"] == "TCH00001"
    assert "classId" not in payload


def test_default_expiry_is_days(teacher_claims):
    claims = verify_session_token(create_access_token(teacher_claims))

    assert claims.exp - claims.iat >= timedelta(days=1).total_seconds()


def test_expired_token_is_rejected(teacher_claims):
    token = create_access_token(teacher_claims, expires_delta=timedelta(seconds=-10))

    with pytest.raises(Unauthorized) as exc_info:
        verify_session_token(token)
    assert exc_info.value.message == "Invalid or expired token"


def test_tampered_token_is_rejected(teacher_claims):
    token = create_access_token(teacher_claims)
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    with pytest.raises(Unauthorized):
        verify_session_token(tampered)


def test_foreign_secret_is_rejected(teacher_claims):
    token = jwt.encode(teacher_claims.to_payload(), "another-secret", algorithm="HS256")

    with pytest.raises(Unauthorized):
        verify_session_token(token)


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token(token):
    with pytest.raises(Unauthorized) as exc_info:
        verify_session_token(token)
    assert exc_info.value.message == "No token provided"


def test_garbage_token():
    with pytest.raises(Unauthorized):
        verify_session_token("not-a-jwt")
