from __future__ import annotations

import time
from typing import Any, Dict, Optional

from fastapi import Response
from jose import jwt, JWTError

from taskapp.backend.core.config import settings

# ← python-jose 사용. 인증 서비스가 HS256으로 서명한 access token을 검증한다.
ALG = "HS256"


def _decode(token: str, secret: str, audience: str) -> Dict[str, Any]:
    # jose.jwt.decode는 서명 불일치·만료·aud 불일치 시 JWTError를 던짐
    return jwt.decode(token, secret, algorithms=[ALG], audience=audience)


def verify_access_token(token: str) -> Dict[str, Any]:
    payload = _decode(token, settings.auth_jwt_secret, settings.auth_jwt_audience)
    if not payload.get("sub"):
        raise JWTError("Missing sub")
    return payload


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """verify_access_token 과 동일하지만 실패 시 None을 반환."""
    try:
        return verify_access_token(token)
    except JWTError:
        return None


def is_access_token_expired(token: str) -> bool:
    """서명은 보지 않고 exp만 확인 (refresh 판단용)."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return True
    exp = claims.get("exp")
    if exp is None:
        return False
    try:
        return int(exp) <= int(time.time())
    except (TypeError, ValueError):
        return True


# ---- 쿠키 ----
def set_session_cookies(
    response: Response,
    access_token: str,
    refresh_token: str | None,
    expires_in: int | None = None,
) -> None:
    # 개발에서 http라면 .env에서 COOKIE_SECURE=false 유지
    response.set_cookie(
        key=settings.access_cookie_name,
        value=access_token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=expires_in,
        path="/",
    )
    if refresh_token:
        response.set_cookie(
            key=settings.refresh_cookie_name,
            value=refresh_token,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
            path="/",
        )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(key=settings.access_cookie_name, path="/")
    response.delete_cookie(key=settings.refresh_cookie_name, path="/")
