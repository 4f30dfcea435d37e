from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request

from taskapp.backend.core.config import settings
from taskapp.backend.core.tokens import is_access_token_expired
from taskapp.backend.services import auth_provider
from taskapp.backend.services.auth_provider import AuthError, AuthSession

log = logging.getLogger(__name__)

# 세션 갱신 대상 경로
REFRESH_PATH_PREFIXES = ("/api/tasks", "/auth")


def needs_refresh(request: Request) -> bool:
    if not request.url.path.startswith(REFRESH_PATH_PREFIXES):
        return False
    if not request.cookies.get(settings.refresh_cookie_name):
        return False
    access = request.cookies.get(settings.access_cookie_name)
    return not access or is_access_token_expired(access)


def refresh_session(request: Request) -> Optional[AuthSession]:
    """
    만료된 access cookie를 refresh cookie로 갱신한다.
    - 실패해도 요청은 그대로 진행 (로그만 남김, 이후 라우트에서 401 처리)
    """
    provider = auth_provider.build_auth_provider()
    if provider is None:
        return None
    try:
        return provider.refresh_session(request.cookies[settings.refresh_cookie_name])
    except AuthError as exc:
        log.warning("session refresh failed: %s", exc.message)
        return None
    finally:
        provider.close()


def replace_request_cookies(request: Request, session: AuthSession) -> None:
    """다운스트림 핸들러가 새 토큰을 보도록 scope의 Cookie 헤더를 교체."""
    cookies = dict(request.cookies)
    cookies[settings.access_cookie_name] = session.access_token
    if session.refresh_token:
        cookies[settings.refresh_cookie_name] = session.refresh_token
    cookie_header = "; ".join(f"{k}={v}" for k, v in cookies.items())

    headers = [(k, v) for k, v in request.scope["headers"] if k != b"cookie"]
    headers.append((b"cookie", cookie_header.encode("latin-1")))
    request.scope["headers"] = headers
