import pytest
from sqlalchemy.exc import OperationalError

from eventos.auth_service.errors import (
    AuthenticationError,
    DuplicateKeyError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from eventos.auth_service.utils import TokenIssuer
from eventos.auth_service.workflow import login_user, register_user


@pytest.fixture
def repo(mocker):
    return mocker.Mock()


@pytest.fixture
def hasher(mocker):
    mock_hasher = mocker.Mock()
    mock_hasher.hash.return_value = "hashed_secret"
    return mock_hasher


def _stored_user(mocker, **overrides):
    user = mocker.Mock()
    user.id = "user-1"
    user.email = "a@x.com"
    user.user_name = "abc"
    user.password = "hashed_secret"
    user.claims.return_value = {"sub": "user-1", "email": "a@x.com", "userName": "abc", "role": "attendee"}
    user.to_dict.return_value = {"id": "user-1", "email": "a@x.com"}
    for key, value in overrides.items():
        setattr(user, key, value)
    return user


def test_register_passes_hash_to_repository(repo, hasher, mocker, attendee_payload):
    repo.find_existing.return_value = None
    repo.create_user_with_profile.return_value.to_dict.return_value = {"id": "att-1", "userId": "user-1"}

    result = register_user(attendee_payload, repo, hasher)

    assert result == {"id": "att-1", "userId": "user-1"}
    hasher.hash.assert_called_once_with("secret1")
    user_fields, profile_fields = repo.create_user_with_profile.call_args[0]
    assert user_fields["password"] == "hashed_secret"
    assert user_fields["role"] == "attendee"
    assert profile_fields == {"name": "A", "phone": None}


def test_register_validation_stops_before_database(repo, hasher):
    with pytest.raises(ValidationError):
        register_user({"email": "a@x.com"}, repo, hasher)

    repo.find_existing.assert_not_called()
    hasher.hash.assert_not_called()


def test_register_duplicate_username_names_the_username(repo, hasher, mocker, attendee_payload):
    repo.find_existing.return_value = _stored_user(mocker, email="someone@x.com")

    with pytest.raises(DuplicateKeyError) as exc:
        register_user(attendee_payload, repo, hasher)

    assert exc.value.field == "userName"
    assert exc.value.message == "User already exists with the 'abc' username."
    repo.create_user_with_profile.assert_not_called()
    hasher.hash.assert_not_called()


def test_register_wraps_database_errors(repo, hasher, attendee_payload):
    repo.find_existing.side_effect = OperationalError("SELECT", {}, Exception("timeout"))

    with pytest.raises(InternalError) as exc:
        register_user(attendee_payload, repo, hasher)

    assert exc.value.to_dict()["cause"] == "OperationalError: timeout"


def test_login_issues_both_tokens(repo, mocker):
    repo.find_for_login.return_value = _stored_user(mocker)
    hasher = mocker.Mock()
    hasher.verify.return_value = True
    tokens = TokenIssuer("access_secret", "refresh_secret")

    result = login_user({"email": "a@x.com", "password": "secret1"}, repo, hasher, tokens)

    assert result["data"] == {"id": "user-1", "email": "a@x.com"}
    assert tokens.decode_access_token(result["tokens"]["accessToken"])["userName"] == "abc"
    assert tokens.decode_refresh_token(result["tokens"]["refreshToken"])["role"] == "attendee"
    hasher.verify.assert_called_once_with("secret1", "hashed_secret")


def test_login_unknown_user(repo, mocker):
    repo.find_for_login.return_value = None

    with pytest.raises(NotFoundError):
        login_user({"email": "a@x.com", "password": "secret1"}, repo, mocker.Mock(), mocker.Mock())


def test_login_wrong_password(repo, mocker):
    repo.find_for_login.return_value = _stored_user(mocker)
    hasher = mocker.Mock()
    hasher.verify.return_value = False
    tokens = mocker.Mock()

    with pytest.raises(AuthenticationError):
        login_user({"email": "a@x.com", "password": "nope123"}, repo, hasher, tokens)

    tokens.issue_access_token.assert_not_called()
