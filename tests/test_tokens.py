from datetime import timedelta

import pytest
from jose import jwt

from sheetsync import config
from sheetsync.errors import InvalidToken
from sheetsync.services.jwt import (
    TokenService,
    create_access_token,
    create_refresh_token,
    create_user_tokens,
)


@pytest.fixture
def service():
    return TokenService()


def test_access_token_round_trip(service):
    token = create_access_token({"sub": "42"})
    assert service.verify(token) == 42


def test_user_tokens(service):
    tokens = create_user_tokens(7)
    assert tokens["token_type"] == "bearer"
    assert service.verify(tokens["access_token"]) == 7
    assert service.verify(tokens["refresh_token"], token_type="refresh") == 7


def test_refresh_token_is_not_an_access_token(service):
    with pytest.raises(InvalidToken):
        service.verify(create_refresh_token({"sub": "42"}))


def test_expired_token(service):
    token = create_access_token({"sub": "42"}, expires_delta=timedelta(seconds=-10))
    with pytest.raises(InvalidToken):
        service.verify(token)


def test_token_signed_with_another_key():
    token = create_access_token({"sub": "42"})
    with pytest.raises(InvalidToken):
        TokenService(secret_key="another-key").verify(token)


@pytest.mark.parametrize("token", ["garbage", "", "a.b.c", None, 42, {"sub": "42"}])
def test_malformed_tokens(service, token):
    with pytest.raises(InvalidToken):
        service.verify(token)


@pytest.mark.parametrize("claims", [{}, {"sub": "alice"}, {"sub": None}])
def test_subject_must_be_a_user_id(service, claims):
    token = jwt.encode({**claims, "type": "access"}, config.SECRET_KEY, algorithm=config.ALGORITHM)
    with pytest.raises(InvalidToken):
        service.verify(token)
