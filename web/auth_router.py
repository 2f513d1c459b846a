"""
Login endpoint.

Surfaces the login outcome and the rate-limit decision over HTTP:
- 200: logged in
- 401: wrong credentials, attempts remain
- 423: account locked (time-bound or by an administrator)
- 429: rate limited, with Retry-After header
"""

import logging

from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from db import get_db_session
from enums.login_outcome_status import LoginOutcomeStatus
from services.auth import LoginService
from utils.client_ip import get_client_ip
from utils.password import MAX_PASSWORD_BYTES

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/users", tags=["auth"])

STATUS_CODES = {
    LoginOutcomeStatus.ALLOWED: 200,
    LoginOutcomeStatus.DENIED_RETRYABLE: 401,
    LoginOutcomeStatus.DENIED_LOCKED: 423,
    LoginOutcomeStatus.RATE_LIMITED: 429,
}


class LoginPayload(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=MAX_PASSWORD_BYTES)
    lang: str | None = None

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


async def get_session():
    async with get_db_session() as session:
        yield session


def get_login_service(request: Request) -> LoginService:
    return request.app.state.login_service


@auth_router.post("/login")
async def login(request: Request,
                payload: LoginPayload,
                session=Depends(get_session),
                login_service: LoginService = Depends(get_login_service)):
    remote_addr = request.client.host if request.client else None
    client_ip = get_client_ip(request.headers, remote_addr)
    outcome = await login_service.login(
        identifier=payload.email,
        password=payload.password,
        client_ip=client_ip,
        user_agent=request.headers.get("user-agent", ""),
        session=session,
        lang=payload.lang
    )

    headers = {}
    if outcome.status == LoginOutcomeStatus.RATE_LIMITED:
        headers["Retry-After"] = str(outcome.retry_after_sec)
    return JSONResponse(
        status_code=STATUS_CODES[outcome.status],
        content=outcome.model_dump(mode="json"),
        headers=headers
    )
