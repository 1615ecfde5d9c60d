"""Password hashing and verification backed by bcrypt."""

from __future__ import annotations

import bcrypt

from ..domain.errors import HashingError

# bcrypt only ever looks at the first 72 bytes of a secret
MAX_SECRET_BYTES = 72
MIN_ROUNDS = 4
MAX_ROUNDS = 31


class PasswordHasher:
    """Salted bcrypt hashing with a configurable work factor.

    Hashes are stored in bcrypt's modular-crypt form (``$2b$<cost>$<salt><digest>``),
    so the algorithm, cost and salt travel with every stored value and
    :meth:`verify` needs nothing else.
    """

    def __init__(self, rounds: int = 12) -> None:
        """Fix the work factor; a cost bcrypt cannot use is a configuration error."""
        if not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
            raise ValueError(f"bcrypt rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}, got {rounds}")
        self._rounds = rounds

    def hash(self, secret: str) -> str:
        """Return the bcrypt hash for ``secret``.

        Raises
        ------
        HashingError
            When bcrypt rejects the secret.
        """
        if not isinstance(secret, str):
            raise HashingError("secret must be a string")
        encoded = secret.encode("utf-8")
        if len(encoded) > MAX_SECRET_BYTES:
            raise HashingError(f"secret exceeds {MAX_SECRET_BYTES} bytes")
        try:
            salt = bcrypt.gensalt(rounds=self._rounds)
            return bcrypt.hashpw(encoded, salt).decode("utf-8")
        except ValueError as exc:
            # bcrypt messages never echo the secret
            raise HashingError(f"bcrypt rejected input: {exc}") from exc

    def verify(self, secret: str, hashed: str) -> bool:
        """Constant-time check of ``secret`` against a stored hash."""
        try:
            return bcrypt.checkpw(secret.encode("utf-8"), hashed.encode("utf-8"))
        except (ValueError, TypeError, AttributeError):
            return False
