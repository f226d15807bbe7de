"""
Shared authentication helpers.
Provides password hashing, token creation and token verification.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from flask import request

from eventos.auth_service.errors import AuthenticationError

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# --- PASSWORD HASHING ---
class CredentialHasher:
    """
    One-way password hashing with Argon2id.

    Each hash embeds its own random salt and cost parameters, so verify()
    only needs the stored string. Comparison is constant-time.
    """

    def __init__(self, hasher: Optional[PasswordHasher] = None) -> None:
        self._ph = hasher or PasswordHasher()

    def hash(self, plaintext: str) -> str:
        """
        Args:
            plaintext (str): The password as submitted.

        Returns:
            str: Encoded Argon2 hash, salt and parameters included.
        """
        return self._ph.hash(plaintext)

    def verify(self, plaintext: Optional[str], hashed: str) -> bool:
        """
        Check a plaintext candidate against a stored hash.

        Returns:
            bool: True on match. False on mismatch, on a malformed hash,
                  or when no plaintext was supplied.
        """
        if not plaintext or not hashed:
            return False
        try:
            return self._ph.verify(hashed, plaintext)
        except (VerificationError, InvalidHashError):
            return False


# --- JWT CREATION / VALIDATION ---
class TokenIssuer:
    """
    Issues short-lived access tokens and long-lived refresh tokens.

    Access and refresh tokens are signed with different secrets, so a leaked
    refresh secret cannot forge access tokens and vice versa.
    """

    def __init__(
        self,
        access_secret: Optional[str],
        refresh_secret: Optional[str],
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        if not access_secret or not refresh_secret:
            raise RuntimeError(
                "ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET are required. Set them in .env"
            )
        if access_secret == refresh_secret:
            raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")

        self._secrets = {
            ACCESS_TOKEN_TYPE: access_secret,
            REFRESH_TOKEN_TYPE: refresh_secret,
        }
        self._ttls = {
            ACCESS_TOKEN_TYPE: access_ttl,
            REFRESH_TOKEN_TYPE: refresh_ttl,
        }

    def _issue(self, claims: Dict[str, Any], token_type: str) -> str:
        now = datetime.now(timezone.utc)
        payload = dict(claims)
        payload.update({
            "type": token_type,
            "iat": now,
            "exp": now + self._ttls[token_type],
        })
        return jwt.encode(payload, self._secrets[token_type], algorithm=ALGORITHM)

    def _decode(self, token: str, token_type: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, self._secrets[token_type], algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("token expired") from None
        except jwt.InvalidTokenError:
            raise AuthenticationError("invalid token") from None

        if payload.get("type") != token_type:
            raise AuthenticationError("invalid token")
        return payload

    def issue_access_token(self, claims: Dict[str, Any]) -> str:
        """
        Sign a short-lived access token.

        Args:
            claims (dict): Identity claims, see User.claims().

        Returns:
            str: Encoded JWT string.
        """
        return self._issue(claims, ACCESS_TOKEN_TYPE)

    def issue_refresh_token(self, claims: Dict[str, Any]) -> str:
        """
        Sign a long-lived refresh token with the refresh secret.

        Args:
            claims (dict): Identity claims, see User.claims().

        Returns:
            str: Encoded JWT string.
        """
        return self._issue(claims, REFRESH_TOKEN_TYPE)

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        """
        Verify an access token.

        Returns:
            dict: The decoded claims.

        Raises:
            AuthenticationError: Token expired or invalid, including a
                                 refresh token passed in its place.
        """
        return self._decode(token, ACCESS_TOKEN_TYPE)

    def decode_refresh_token(self, token: str) -> Dict[str, Any]:
        """Refresh-token counterpart of decode_access_token()."""
        return self._decode(token, REFRESH_TOKEN_TYPE)


def verify_token_from_request(tokens: TokenIssuer) -> Dict[str, Any]:
    """
    Verify the access token in the Authorization header.

    Returns:
        dict: The decoded claims.

    Raises:
        AuthenticationError: Header missing, not a Bearer token, or the
                             token is invalid or expired.
    """
    auth = request.headers.get("Authorization", "")

    if not auth.startswith("Bearer "):
        raise AuthenticationError("missing token")

    token = auth.split(" ", 1)[1]
    try:
        return tokens.decode_access_token(token)
    except AuthenticationError as exc:
        logging.info(f"[Auth] Rejected bearer token: {exc.message}")
        raise
