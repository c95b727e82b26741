"""测试：JWTService"""

from datetime import timedelta

import jwt
import pytest

from pipestation.config import settings
from pipestation.domain.exceptions import UnauthorizedError
from pipestation.infrastructure.auth.jwt_service import JWTService


def test_round_trip_keeps_claims():
    token = JWTService.create_access_token({"sub": "user-1", "role": "editor"})

    payload = JWTService.decode_token(token)

    assert payload["sub"] == "user-1"
    assert payload["role"] == "editor"
    assert payload["exp"] > payload["iat"]


def test_custom_expiry():
    token = JWTService.create_access_token({"sub": "user-1"}, timedelta(minutes=5))

    payload = JWTService.decode_token(token)

    assert payload["exp"] - payload["iat"] == 300


def test_expired_token():
    token = JWTService.create_access_token({"sub": "user-1"}, timedelta(seconds=-1))

    with pytest.raises(UnauthorizedError, match="Token已过期"):
        JWTService.decode_token(token)


def test_token_signed_with_other_key():
    token = jwt.encode({"sub": "user-1"}, "another-secret", algorithm=settings.algorithm)

    with pytest.raises(UnauthorizedError, match="Token无效") as exc_info:
        JWTService.decode_token(token)

    assert exc_info.value.status_code == 401
