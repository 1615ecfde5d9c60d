"""Registration service orchestrating hashing, persistence, and token issuance."""

from __future__ import annotations

import logging
from typing import Protocol

from .account import Account
from .contracts import RegistrationRequest, RegistrationResult
from .errors import RegistrationError, SigningError
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenIssuer

logger = logging.getLogger(__name__)


class AccountStore(Protocol):
    def insert_account(self, account: Account) -> Account: ...


class RegistrationService:
    """Registration workflow: hash the secret, store the account, sign a token.

    Each step gates the next. A signing failure after the account was written
    is not compensated; the account stays persisted and the caller only sees
    the error.
    """

    def __init__(self, repository: AccountStore, hasher: PasswordHasher, issuer: TokenIssuer) -> None:
        """Store dependencies used to orchestrate the registration pipeline."""
        self._repository = repository
        self._hasher = hasher
        self._issuer = issuer

    def register(self, request: RegistrationRequest) -> RegistrationResult:
        """Register ``request.identity`` and return a freshly signed token.

        Raises
        ------
        HashingError, StoreError, DuplicateAccountError, SigningError
            Propagated unchanged from the failing step.
        RegistrationError
            For any failure outside that taxonomy.
        """
        try:
            return self._run(request)
        except RegistrationError:
            raise
        except Exception as exc:
            logger.exception("unclassified registration failure")
            raise RegistrationError("registration failed") from exc

    def _run(self, request: RegistrationRequest) -> RegistrationResult:
        logger.debug("registration received for %s", request.identity)
        secret_hash = self._hasher.hash(request.secret)
        logger.debug("secret hashed for %s", request.identity)

        account = self._repository.insert_account(
            Account(identity=request.identity, secret_hash=secret_hash)
        )
        logger.info("account persisted for %s", account.identity)

        try:
            issued = self._issuer.issue(account.identity)
        except SigningError:
            logger.error("account %s persisted without a token: signing failed", account.identity)
            raise
        logger.debug("token issued for %s", account.identity)

        return RegistrationResult(
            token=issued.token,
            expires_at=issued.expires_at,
            expires_in=issued.expires_in,
        )
