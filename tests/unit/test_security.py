"""Unit tests for password hashing and session tokens."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from app.config import settings
from app.core.exceptions import TokenExpiredError, UnauthenticatedError
from app.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def _claims():
    return {"sub": str(uuid4()), "role": "teacher", "name": "Tomas Berg"}


def test_password_hash_roundtrip():
    hashed = get_password_hash("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_password_longer_than_bcrypt_limit():
    long_password = "é" * 50  # 100 bytes in UTF-8
    hashed = get_password_hash(long_password)
    assert verify_password(long_password, hashed)


def test_decode_valid_token():
    claims = _claims()
    payload = decode_access_token(create_access_token(claims))
    assert payload["sub"] == claims["sub"]
    assert payload["role"] == "teacher"
    assert payload["type"] == "access"


def test_expired_token_raises_token_expired():
    token = create_access_token(_claims(), expires_delta=timedelta(minutes=-5))
    with pytest.raises(TokenExpiredError) as exc_info:
        decode_access_token(token)
    assert exc_info.value.code == "TOKEN_EXPIRED"
    assert exc_info.value.status_code == 401


def test_tampered_token_is_unauthenticated():
    token = create_access_token(_claims())
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    with pytest.raises(UnauthenticatedError) as exc_info:
        decode_access_token(tampered)
    assert exc_info.value.code == "UNAUTHENTICATED"


def test_token_signed_with_other_key_is_unauthenticated():
    token = jwt.encode({**_claims(), "type": "access"}, "not-the-secret", algorithm=settings.ALGORITHM)
    with pytest.raises(UnauthenticatedError):
        decode_access_token(token)


def test_garbage_token_is_unauthenticated():
    with pytest.raises(UnauthenticatedError):
        decode_access_token("not-a-jwt")


def test_token_without_role_is_unauthenticated():
    token = create_access_token({"sub": str(uuid4())})
    with pytest.raises(UnauthenticatedError):
        decode_access_token(token)


def test_non_access_token_rejected():
    token = jwt.encode({**_claims(), "type": "refresh"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(UnauthenticatedError):
        decode_access_token(token)
