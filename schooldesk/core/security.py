# schooldesk/core/security.py

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import UnknownHashError
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from schooldesk.core.config import get_jwt_settings, get_token_expires_delta
from schooldesk.core.errors import Unauthorized
from schooldesk.core.logging import logger
from schooldesk.schemas.auth.tokens import SessionClaims


class SecurityConfig:
    """Security configuration constants"""
    PASSWORD_ROUNDS = 12
    TOKEN_TYPE = "access"


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=SecurityConfig.PASSWORD_ROUNDS
)


def get_password_hash(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify password against hash; unusable hashes never match"""
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (UnknownHashError, ValueError):
        logger.warning("Stored password hash is not a recognised bcrypt hash")
        return False


@lru_cache(maxsize=1)
def _decoy_hash() -> str:
    return pwd_context.hash("decoy-password-for-unknown-accounts")


def _verify_decoy(plain_password: str) -> bool:
    verify_password(plain_password, _decoy_hash())
    return False


async def hash_password(password: str) -> str:
    """Hash off the event loop"""
    return await run_in_threadpool(get_password_hash, password)


async def check_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify in a worker thread.

    Without a stored hash the password is checked against a decoy hash and
    the result is always False, so a missing account costs as much as a
    wrong password.
    """
    if not hashed_password:
        return await run_in_threadpool(_verify_decoy, plain_password)
    return await run_in_threadpool(verify_password, plain_password, hashed_password)


def create_access_token(
    claims: SessionClaims,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Sign a session token carrying the given claims"""
    jwt_settings = get_jwt_settings()
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or get_token_expires_delta())

    to_encode: Dict[str, Any] = claims.to_payload()
    to_encode.update({
        "sub": claims.account_id,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
        "iss": jwt_settings["token_issuer"],
        "type": SecurityConfig.TOKEN_TYPE,
    })

    return jwt.encode(
        to_encode,
        jwt_settings["secret_key"],
        algorithm=jwt_settings["algorithm"]
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature, expiry and issuer of a session token.

    Raises:
        Unauthorized: If the token is malformed, tampered with or expired
    """
    jwt_settings = get_jwt_settings()
    try:
        payload = jwt.decode(
            token,
            jwt_settings["secret_key"],
            algorithms=[jwt_settings["algorithm"]],
            issuer=jwt_settings["token_issuer"],
        )
    except ExpiredSignatureError:
        logger.info("Rejected expired session token")
        raise Unauthorized()
    except JWTError as e:
        logger.warning(f"Token verification failed: {str(e)}")
        raise Unauthorized()

    if payload.get("type") != SecurityConfig.TOKEN_TYPE:
        raise Unauthorized()

    return payload


def verify_session_token(token: Optional[str]) -> SessionClaims:
    """Decode a bearer token into session claims"""
    if not token:
        raise Unauthorized("No token provided")

    payload = decode_access_token(token)
    try:
        return SessionClaims.model_validate(payload)
    except PydanticValidationError:
        logger.warning("Session token carries malformed claims")
        raise Unauthorized()

