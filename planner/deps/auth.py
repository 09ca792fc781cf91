from __future__ import annotations

import hmac
from dataclasses import dataclass

from fastapi import Header, HTTPException, Request, status

from ..core.config import settings
from ..middlewares import principal_ctx_var

ANONYMOUS = "anonymous"
API_KEY_PRINCIPAL = "api-key"


@dataclass(frozen=True)
class AuthContext:
    subject: str
    scheme: str


def _authenticated(request: Request, subject: str, scheme: str) -> AuthContext:
    principal_ctx_var.set(subject)
    request.state.principal = subject
    return AuthContext(subject=subject, scheme=scheme)


async def require_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> AuthContext:
    """Gate API routes on ``X-API-Key`` when ``API_KEY`` is configured.

    With no key configured the planner runs open, which is the default for a
    single-user local install.
    """

    expected = settings.API_KEY
    if not expected:
        return _authenticated(request, ANONYMOUS, "open")

    provided = (x_api_key or "").strip()
    if not provided:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization required")
    if not hmac.compare_digest(expected.encode(), provided.encode()):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")
    return _authenticated(request, API_KEY_PRINCIPAL, "api_key")
