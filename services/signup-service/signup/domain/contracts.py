"""Domain-level request/response contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True)
class RegistrationRequest:
    """Inputs required to register an account."""

    identity: str
    secret: str = field(repr=False)


@dataclass(slots=True)
class RegistrationResult:
    """Outcome of a successful registration: the signed token and its expiry."""

    token: str
    expires_at: datetime
    expires_in: int
