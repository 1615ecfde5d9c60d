from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class Account:
    """Registered identity together with its one-way secret hash."""

    identity: str
    secret_hash: str
    created_at: datetime | None = None
