from datetime import timedelta

import jwt
import pytest
from argon2 import PasswordHasher

from eventos.auth_service.errors import AuthenticationError
from eventos.auth_service.utils import CredentialHasher, TokenIssuer, verify_token_from_request

CLAIMS = {"sub": "user-1", "email": "a@x.com", "userName": "abc", "role": "attendee"}


@pytest.fixture
def hasher():
    return CredentialHasher(PasswordHasher(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture
def tokens():
    return TokenIssuer("access_secret", "refresh_secret")


def test_hash_and_verify(hasher):
    hashed = hasher.hash("secret1")

    assert hashed != "secret1"
    assert hasher.verify("secret1", hashed)
    assert not hasher.verify("secret2", hashed)


def test_hash_is_salted(hasher):
    assert hasher.hash("secret1") != hasher.hash("secret1")


def test_verify_rejects_malformed_hash(hasher):
    assert not hasher.verify("secret1", "not-a-hash")


def test_verify_rejects_missing_password(hasher):
    assert not hasher.verify(None, hasher.hash("secret1"))


def test_access_token_contents(tokens):
    token = tokens.issue_access_token(CLAIMS)

    payload = jwt.decode(token, "access_secret", algorithms=["HS256"])
    assert payload["email"] == "a@x.com"
    assert payload["userName"] == "abc"
    assert payload["role"] == "attendee"
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == 3600


def test_refresh_token_contents(tokens):
    token = tokens.issue_refresh_token(CLAIMS)

    payload = jwt.decode(token, "refresh_secret", algorithms=["HS256"])
    assert payload["type"] == "refresh"
    assert payload["exp"] - payload["iat"] == 7 * 24 * 3600


def test_tokens_use_separate_secrets(tokens):
    access = tokens.issue_access_token(CLAIMS)
    refresh = tokens.issue_refresh_token(CLAIMS)

    with pytest.raises(jwt.InvalidSignatureError):
        jwt.decode(access, "refresh_secret", algorithms=["HS256"])
    with pytest.raises(AuthenticationError):
        tokens.decode_access_token(refresh)
    with pytest.raises(AuthenticationError):
        tokens.decode_refresh_token(access)


def test_decode_round_trip(tokens):
    assert tokens.decode_access_token(tokens.issue_access_token(CLAIMS))["sub"] == "user-1"
    assert tokens.decode_refresh_token(tokens.issue_refresh_token(CLAIMS))["sub"] == "user-1"


def test_expired_token(tokens):
    issuer = TokenIssuer("access_secret", "refresh_secret", access_ttl=timedelta(seconds=-1))
    token = issuer.issue_access_token(CLAIMS)

    with pytest.raises(AuthenticationError) as exc:
        tokens.decode_access_token(token)
    assert exc.value.message == "token expired"


def test_invalid_token(tokens):
    with pytest.raises(AuthenticationError) as exc:
        tokens.decode_access_token("invalid.token.here")
    assert exc.value.message == "invalid token"


@pytest.mark.parametrize("access, refresh", [(None, "r"), ("a", None), ("", "")])
def test_issuer_requires_secrets(access, refresh):
    with pytest.raises(RuntimeError):
        TokenIssuer(access, refresh)


def test_issuer_requires_distinct_secrets():
    with pytest.raises(RuntimeError):
        TokenIssuer("same", "same")


def test_verify_token_from_request_valid(app, tokens):
    token = tokens.issue_access_token(CLAIMS)

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        claims = verify_token_from_request(tokens)
    assert claims["role"] == "attendee"


def test_verify_token_from_request_missing_header(app, tokens):
    with app.test_request_context():
        with pytest.raises(AuthenticationError) as exc:
            verify_token_from_request(tokens)
    assert exc.value.message == "missing token"


def test_verify_token_from_request_invalid_format(app, tokens):
    with app.test_request_context(headers={"Authorization": "InvalidFormat"}):
        with pytest.raises(AuthenticationError) as exc:
            verify_token_from_request(tokens)
    # Logic says if not startswith Bearer
    assert exc.value.message == "missing token"
