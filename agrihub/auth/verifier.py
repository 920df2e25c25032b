"""Bearer token verification.

Tokens are HS256 JWTs carrying a ``userName`` claim.  A verified token maps to
its subject only when that user also exists in the graph store.  One
configured development token skips both checks and maps to a fixed subject;
callers cannot tell the two paths apart.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from agrihub.config import settings
from agrihub.db.connection import GraphStore
from agrihub.errors import AuthError

ALGORITHM = "HS256"
ACCESS_TOKEN_LIFETIME = timedelta(hours=24)
SUBJECT_CLAIM = "userName"

USER_EXISTS_QUERY = """
MATCH (u:User {username: $userName})
RETURN u.username AS username
LIMIT 1
"""


class IdentityVerifier:
    """Maps bearer tokens to verified subjects.

    Args:
        store: Graph store used for the user-existence check.  ``None``
            skips the check (CLI and tests).
        secret: HMAC secret; defaults to ``JWT_SECRET_KEY``.
        bypass_token: Development token; empty disables the bypass.
        dev_subject: Subject returned for the development token.
    """

    def __init__(
        self,
        store: Optional[GraphStore] = None,
        secret: Optional[str] = None,
        bypass_token: Optional[str] = None,
        dev_subject: Optional[str] = None,
    ) -> None:
        self._store = store
        self._secret = settings.jwt_secret_key if secret is None else secret
        self._bypass_token = settings.dev_bypass_token if bypass_token is None else bypass_token
        self._dev_subject = settings.dev_subject if dev_subject is None else dev_subject

    def verify(self, token: str) -> str:
        """Return the subject behind *token*.

        Raises:
            AuthError: Missing, malformed, expired or badly-signed token, a
                token without a subject, or a subject unknown to the store.
            QueryError: The user lookup itself failed.
        """
        if not token:
            raise AuthError("missing bearer token")

        if self._bypass_token and token == self._bypass_token:
            print("[AUTH] Development token accepted.")
            return self._dev_subject

        if not self._secret:
            raise AuthError("token verification is not configured")

        try:
            claims = jwt.decode(token, self._secret, algorithms=[ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthError("token has expired") from exc
        except jwt.PyJWTError as exc:
            raise AuthError(f"invalid token: {exc}") from exc

        subject = claims.get(SUBJECT_CLAIM)
        if not isinstance(subject, str) or not subject:
            raise AuthError("username not found in token")

        if self._store is not None:
            rows = self._store.read_query(USER_EXISTS_QUERY, {"userName": subject})
            if not rows:
                raise AuthError(f"user {subject!r} does not exist")

        return subject

    def issue(self, subject: str, lifetime: timedelta = ACCESS_TOKEN_LIFETIME) -> str:
        """Sign a token for *subject* (used by the CLI and by tests)."""
        if not self._secret:
            raise AuthError("token signing is not configured")
        now = datetime.now(timezone.utc)
        claims: dict[str, Any] = {
            SUBJECT_CLAIM: subject,
            "iat": now,
            "exp": now + lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=ALGORITHM)
