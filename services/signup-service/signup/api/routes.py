"""HTTP route definitions for the signup service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from prometheus_client import Counter
from pydantic import BaseModel

from ..domain.contracts import RegistrationRequest
from ..domain.errors import RegistrationError
from ..domain.service import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter()

REGISTRATIONS = Counter(
    "signup_registrations_total",
    "Registration attempts partitioned by outcome.",
    ["outcome"],
)


class RegisterRequest(BaseModel):
    """Payload accepted by ``POST /register``; ``email`` is the account identity."""

    email: str
    password: str


class RegisterResponse(BaseModel):
    """Token returned once the account is stored."""

    token: str
    token_type: str = "bearer"
    expires_in: int


def get_service(request: Request) -> RegistrationService:
    """Resolve the `RegistrationService` stored on the FastAPI application state."""
    service: RegistrationService = request.app.state.registration_service
    return service


@router.post("/register", response_model=RegisterResponse)
def register(
    payload: RegisterRequest,
    service: RegistrationService = Depends(get_service),
) -> RegisterResponse:
    """Register an account and answer with a signed token for it."""
    try:
        result = service.register(
            RegistrationRequest(identity=payload.email, secret=payload.password)
        )
    except RegistrationError as exc:
        REGISTRATIONS.labels(outcome=exc.code).inc()
        raise
    REGISTRATIONS.labels(outcome="registered").inc()
    return RegisterResponse(token=result.token, expires_in=result.expires_in)
