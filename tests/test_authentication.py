from datetime import timedelta

import pytest

from tijara_server.exception import UnauthorizedError
from tijara_server.security.authentication import AuthSecurity, extract_bearer_token
from tests.conftest import TEST_SECRET


@pytest.fixture(autouse=True)
def configured():
    AuthSecurity.configure(secret_key=TEST_SECRET)


def test_round_trip_access_token():
    payload = AuthSecurity.decode_token(AuthSecurity.create_access_token('u1', role='ADMIN'))
    assert payload['user_id'] == 'u1'
    assert payload['role'] == 'ADMIN'
    assert payload['type'] == 'access'


def test_expired_token_rejected():
    token = AuthSecurity.create_access_token('u1', expires_delta=timedelta(seconds=-10))
    with pytest.raises(UnauthorizedError, match='expired'):
        AuthSecurity.decode_token(token)


def test_wrong_secret_rejected():
    token = AuthSecurity.create_access_token('u1')
    AuthSecurity.configure(secret_key='another-secret')
    with pytest.raises(UnauthorizedError):
        AuthSecurity.decode_token(token)


@pytest.mark.parametrize('token', ['', 'abc', 'a.b', None])
def test_malformed_token_rejected(token):
    with pytest.raises(UnauthorizedError):
        AuthSecurity.decode_token(token)


def test_refresh_tokens_are_not_access_tokens():
    token = AuthSecurity.encode_token({'user_id': 'u1', 'type': 'refresh'})
    with pytest.raises(UnauthorizedError, match='type'):
        AuthSecurity.decode_token(token)


def test_token_without_user_rejected():
    token = AuthSecurity.encode_token({'role': 'USER'})
    with pytest.raises(UnauthorizedError):
        AuthSecurity.decode_token(token)


def test_extract_bearer_token():
    assert extract_bearer_token('Bearer abc.def.ghi') == 'abc.def.ghi'
    assert extract_bearer_token('Basic xyz') == ''
    assert extract_bearer_token(None) == ''
