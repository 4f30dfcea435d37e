import logging
from typing import Optional

from fastapi import Depends, Request
from pydantic import BaseModel

from taskapp.backend.core.config import settings
from taskapp.backend.core.errors import InternalError, Unauthenticated
from taskapp.backend.core.tokens import decode_access_token
from taskapp.backend.services.auth_provider import (
    AuthApiError,
    AuthProvider,
    AuthUnavailableError,
    get_auth_provider,
)

log = logging.getLogger(__name__)


class SessionIdentity(BaseModel):
    user_id: str
    email: Optional[str] = None
    access_token: str


def _extract_access_token(request: Request) -> str | None:
    return request.cookies.get(settings.access_cookie_name) or None


def verify_session(
    access_token: str | None, provider: AuthProvider | None
) -> SessionIdentity | None:
    """
    쿠키의 access token으로 세션을 확인한다.
    - 토큰 없음/만료/위조/거절 → None (정상적인 "세션 없음")
    - 인증 서비스 통신 실패 → InternalError
    """
    if not access_token:
        return None

    if settings.auth_jwt_secret:
        payload = decode_access_token(access_token)
        if payload is None:
            return None
        return SessionIdentity(
            user_id=str(payload["sub"]),
            email=payload.get("email"),
            access_token=access_token,
        )

    if provider is None:
        log.error("no AUTH_JWT_SECRET and no AUTH_URL; cannot verify sessions")
        raise InternalError()

    try:
        user = provider.get_user(access_token)
    except AuthApiError:
        return None
    except AuthUnavailableError as exc:
        log.error("session lookup failed: %s", exc.message)
        raise InternalError() from exc
    return SessionIdentity(user_id=user.id, email=user.email, access_token=access_token)


def get_current_session(
    request: Request,
    provider: Optional[AuthProvider] = Depends(get_auth_provider),
) -> Optional[SessionIdentity]:
    """Lenient dependency; returns the session or None, never raises for no session."""
    return verify_session(_extract_access_token(request), provider)


def require_session(
    identity: Optional[SessionIdentity] = Depends(get_current_session),
) -> SessionIdentity:
    """Strict dependency; raises Unauthenticated when there is no session."""
    if identity is None:
        raise Unauthenticated()
    return identity
