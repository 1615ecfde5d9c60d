"""Failure taxonomy for the registration pipeline.

Every error carries a stable machine-readable ``code`` and the HTTP status the
route layer answers with, so each failure kind is distinguishable by clients.
"""

from __future__ import annotations


class RegistrationError(Exception):
    """Unclassified registration failure."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str = "registration failed") -> None:
        super().__init__(message)
        self.message = message


class HashingError(RegistrationError):
    """The password hashing primitive rejected the secret or its parameters."""

    code = "hashing_failed"
    status_code = 422


class StoreError(RegistrationError):
    """The account store was unreachable or rejected the write."""

    code = "storage_unavailable"
    status_code = 503


class DuplicateAccountError(StoreError):
    """An account already exists for the identity."""

    code = "account_exists"
    status_code = 409


class SigningError(RegistrationError):
    """The token could not be signed (missing key, bad claims, bad algorithm)."""

    code = "signing_failed"
    status_code = 500
