from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from taskapp.backend.core.config import settings
from taskapp.backend.core.errors import InternalError, error_response
from taskapp.backend.core.tokens import clear_session_cookies, set_session_cookies
from taskapp.backend.services.auth_provider import (
    AuthApiError,
    AuthProvider,
    AuthUnavailableError,
    MSG_AUTH_GENERIC,
    get_auth_provider,
    localize_auth_error,
)

log = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["auth"])

MSG_SIGNED_IN = "ログインしました。"
MSG_SIGN_UP_SENT = "確認メールを送信しました。メールをご確認ください。"
MSG_SIGNED_OUT = "ログアウトしました"
MSG_SIGN_OUT_FAILED = "ログアウトに失敗しました"


class CredentialsReq(BaseModel):
    email: str
    password: str


def email_redirect_url() -> str:
    return f"{settings.site_url.rstrip('/')}/auth/callback"


def _require_provider(provider: Optional[AuthProvider]) -> AuthProvider:
    if provider is None:
        log.error("AUTH_URL is not configured")
        raise InternalError(MSG_AUTH_GENERIC)
    return provider


@auth_router.post("/sign-in")
def sign_in(
    body: CredentialsReq,
    response: Response,
    provider: Optional[AuthProvider] = Depends(get_auth_provider),
):
    provider = _require_provider(provider)
    try:
        session = provider.sign_in_with_password(body.email, body.password)
    except AuthApiError as exc:
        return error_response(exc.status or status.HTTP_400_BAD_REQUEST, localize_auth_error(exc))
    except AuthUnavailableError as exc:
        raise InternalError(MSG_AUTH_GENERIC) from exc

    set_session_cookies(response, session.access_token, session.refresh_token, session.expires_in)
    return {"message": MSG_SIGNED_IN, "userId": session.user.id}


@auth_router.post("/sign-up")
def sign_up(
    body: CredentialsReq,
    provider: Optional[AuthProvider] = Depends(get_auth_provider),
):
    provider = _require_provider(provider)
    try:
        provider.sign_up(body.email, body.password, email_redirect_to=email_redirect_url())
    except AuthApiError as exc:
        return error_response(exc.status or status.HTTP_400_BAD_REQUEST, localize_auth_error(exc))
    except AuthUnavailableError as exc:
        raise InternalError(MSG_AUTH_GENERIC) from exc
    # 가입 직후에는 로그인시키지 않고 메일 확인을 안내
    return {"message": MSG_SIGN_UP_SENT}


@auth_router.post("/sign-out")
def sign_out(
    request: Request,
    response: Response,
    provider: Optional[AuthProvider] = Depends(get_auth_provider),
):
    access_token = request.cookies.get(settings.access_cookie_name)
    if access_token and provider is not None:
        try:
            provider.sign_out(access_token)
        except AuthApiError as exc:
            # 이미 만료된 토큰이면 쿠키만 지우면 됨
            log.info("sign-out rejected by auth service: %s", exc.message)
        except AuthUnavailableError as exc:
            raise InternalError(MSG_SIGN_OUT_FAILED) from exc

    clear_session_cookies(response)
    return {"message": MSG_SIGNED_OUT}


@auth_router.get("/callback")
def auth_callback(
    token_hash: str,
    type_: str = Query("email", alias="type"),
    provider: Optional[AuthProvider] = Depends(get_auth_provider),
):
    """가입 확인 메일 링크의 도착점. 검증 후 세션 쿠키를 심고 홈으로."""
    redirect = RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)
    provider = _require_provider(provider)
    try:
        session = provider.verify_email(token_hash, type_)
    except (AuthApiError, AuthUnavailableError) as exc:
        log.warning("email verification failed: %s", exc.message)
        return redirect

    set_session_cookies(redirect, session.access_token, session.refresh_token, session.expires_in)
    return redirect
