from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

import httpx
from pydantic import BaseModel

from taskapp.backend.core.config import settings

log = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for failures reported by the external auth service."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class AuthApiError(AuthError):
    """The auth service answered and rejected the request (4xx)."""


class AuthUnavailableError(AuthError):
    """Network failure or 5xx from the auth service."""


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None


class AuthSession(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: AuthUser


def _error_message(r: httpx.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text or f"HTTP {r.status_code}"
    if not isinstance(body, dict):
        return f"HTTP {r.status_code}"
    for key in ("msg", "error_description", "message", "error"):
        if body.get(key):
            return str(body[key])
    return f"HTTP {r.status_code}"


class AuthProvider:
    """
    GoTrue(Supabase Auth) 호환 REST 클라이언트.
    - 비밀번호 해시/메일 발송/세션 발급은 전부 외부 서비스 담당
    - 여기서는 요청을 보내고 응답을 AuthSession/AuthUser로 바꾸기만 함
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        http: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self._http = http or httpx.Client(
            base_url=f"{base_url.rstrip('/')}/auth/v1", timeout=timeout
        )

    def close(self) -> None:
        self._http.close()

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
        }

    def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            r = self._http.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(access_token),
            )
        except httpx.HTTPError as exc:
            log.error("auth %s %s transport error: %s", method, path, exc)
            raise AuthUnavailableError(f"auth service unreachable: {exc}") from exc

        if r.status_code >= 500:
            raise AuthUnavailableError(_error_message(r), r.status_code)
        if r.status_code >= 400:
            raise AuthApiError(_error_message(r), r.status_code)
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    @staticmethod
    def _to_session(data: Any) -> AuthSession:
        if not isinstance(data, dict) or not data.get("access_token"):
            raise AuthApiError("session missing from auth response")
        return AuthSession.model_validate(data)

    # ---- 로그인 / 가입 / 로그아웃 ----
    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        data = self._request(
            "POST",
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return self._to_session(data)

    def sign_up(
        self, email: str, password: str, email_redirect_to: str | None = None
    ) -> Optional[AuthSession]:
        """메일 확인이 켜져 있으면 세션 없이 user만 돌아오므로 None."""
        params = {"redirect_to": email_redirect_to} if email_redirect_to else None
        data = self._request(
            "POST",
            "/signup",
            params=params,
            json={"email": email, "password": password},
        )
        if isinstance(data, dict) and data.get("access_token"):
            return self._to_session(data)
        return None

    def sign_out(self, access_token: str) -> None:
        self._request("POST", "/logout", access_token=access_token)

    # ---- 세션 ----
    def get_user(self, access_token: str) -> AuthUser:
        data = self._request("GET", "/user", access_token=access_token)
        return AuthUser.model_validate(data)

    def refresh_session(self, refresh_token: str) -> AuthSession:
        data = self._request(
            "POST",
            "/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )
        return self._to_session(data)

    def verify_email(self, token_hash: str, type_: str = "email") -> AuthSession:
        data = self._request(
            "POST", "/verify", json={"type": type_, "token_hash": token_hash}
        )
        return self._to_session(data)


def build_auth_provider() -> Optional[AuthProvider]:
    if not settings.auth_url:
        return None
    return AuthProvider(
        settings.auth_url,
        settings.auth_anon_key,
        timeout=settings.auth_timeout_seconds,
    )


def get_auth_provider() -> Iterator[Optional[AuthProvider]]:
    """FastAPI Depends(get_auth_provider) generator. AUTH_URL 미설정이면 None."""
    provider = build_auth_provider()
    try:
        yield provider
    finally:
        if provider is not None:
            provider.close()


# ---- 사용자 표시용 메시지 ----
AUTH_ERROR_MESSAGES = {
    "Invalid login credentials": "メールアドレスまたはパスワードが間違っています。",
    "Email not confirmed": "メールアドレスの確認が完了していません。",
}
MSG_AUTH_GENERIC = "エラーが発生しました。もう一度お試しください。"


def localize_auth_error(exc: Exception) -> str:
    if isinstance(exc, AuthError):
        return AUTH_ERROR_MESSAGES.get(exc.message, MSG_AUTH_GENERIC)
    return MSG_AUTH_GENERIC
