"""Utilities for issuing and validating registration JWTs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import jwt

from ..domain.errors import SigningError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IssuedToken:
    """Encoded token plus the expiry baked into its ``exp`` claim."""

    token: str
    expires_at: datetime
    expires_in: int


class TokenIssuer:
    """Signs time-bounded identity assertions with a symmetric key."""

    def __init__(
        self,
        secret: str | bytes,
        *,
        ttl_seconds: int = 86400,
        algorithm: str = "HS256",
        issuer: str | None = None,
    ) -> None:
        """Hold the signing configuration; an empty key only fails at :meth:`issue`."""
        self._secret = secret
        self._ttl_seconds = ttl_seconds
        self._algorithm = algorithm
        self._issuer = issuer or None

    def issue(self, identity: str, now: datetime | None = None) -> IssuedToken:
        """Create a signed JWT asserting ``identity`` until ``now + ttl``.

        Parameters
        ----------
        identity:
            Registered identity, embedded as both the ``email`` and ``sub`` claims.
        now:
            Issue time; defaults to the current UTC time.

        Returns
        -------
        IssuedToken
            The compact ``header.payload.signature`` token and its expiry.

        Raises
        ------
        SigningError
            When the key is empty or the claims cannot be encoded and signed.
        """
        if not self._secret:
            raise SigningError("signing key is not configured")

        issued_at = now or datetime.now(timezone.utc)
        iat = int(issued_at.timestamp())
        exp = iat + self._ttl_seconds
        payload: dict[str, Any] = {
            "email": identity,
            "sub": identity,
            "iat": iat,
            "exp": exp,
        }
        if self._issuer:
            payload["iss"] = self._issuer

        try:
            token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except (jwt.PyJWTError, NotImplementedError, TypeError, ValueError) as exc:
            logger.error("token signing failed: %s", exc)
            raise SigningError("could not sign token") from exc
        return IssuedToken(
            token=token,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
            expires_in=self._ttl_seconds,
        )

    def decode(self, token: str) -> dict[str, Any]:
        """Decode and verify a token issued by this issuer.

        Raises
        ------
        jwt.PyJWTError
            Propagated when the token is invalid, expired, or from another issuer.
        """
        options: dict[str, Any] = {"require": ["exp", "sub"]}
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            issuer=self._issuer,
            options=options,
        )
