from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel

from taskapp.backend.services.auth_provider import (
    AuthError,
    AuthProvider,
    AuthSession,
    localize_auth_error,
)
from taskapp.client.task_list import LoggingNotifier, Notifier

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

MSG_SIGNED_IN = "ログインしました。"
MSG_SIGN_UP_SENT = "確認メールを送信しました。メールをご確認ください。"
MSG_INVALID_FORM = "メールアドレスと6文字以上のパスワードを入力してください。"


class AuthMode(str, Enum):
    SIGN_IN = "sign_in"
    SIGN_UP = "sign_up"


class AuthOutcome(BaseModel):
    ok: bool
    message: str
    navigate_to: Optional[str] = None


class AuthView:
    """
    로그인/가입 폼. Task 라우트를 거치지 않고 인증 서비스를 직접 호출한다.
    - 가입 성공: 확인 메일 안내 후 폼에 머무름
    - 로그인 성공: on_session으로 세션을 넘기고 홈("/")으로 이동
    """

    def __init__(
        self,
        auth: AuthProvider,
        *,
        site_url: str,
        notifier: Optional[Notifier] = None,
        navigate: Optional[Callable[[str], None]] = None,
        on_session: Optional[Callable[[AuthSession], None]] = None,
    ):
        self.auth = auth
        self.site_url = site_url.rstrip("/")
        self.notifier = notifier or LoggingNotifier()
        self.navigate = navigate or (lambda path: None)
        self.on_session = on_session or (lambda session: None)
        self.mode = AuthMode.SIGN_IN
        self.is_loading = False

    # ---- 표시 문자열 ----
    @property
    def title(self) -> str:
        return "アカウント作成" if self.mode is AuthMode.SIGN_UP else "ログイン"

    @property
    def submit_label(self) -> str:
        if self.is_loading:
            return "処理中..."
        return "アカウントを作成" if self.mode is AuthMode.SIGN_UP else "ログイン"

    @property
    def toggle_label(self) -> str:
        if self.mode is AuthMode.SIGN_UP:
            return "すでにアカウントをお持ちの方はこちら"
        return "アカウントをお持ちでない方はこちら"

    def toggle_mode(self) -> None:
        if self.is_loading:
            return
        self.mode = AuthMode.SIGN_IN if self.mode is AuthMode.SIGN_UP else AuthMode.SIGN_UP

    def submit(self, email: str, password: str) -> AuthOutcome:
        if not email or len(password) < MIN_PASSWORD_LENGTH:
            self.notifier.error(MSG_INVALID_FORM)
            return AuthOutcome(ok=False, message=MSG_INVALID_FORM)

        self.is_loading = True
        try:
            if self.mode is AuthMode.SIGN_UP:
                self.auth.sign_up(
                    email, password, email_redirect_to=f"{self.site_url}/auth/callback"
                )
                self.notifier.success(MSG_SIGN_UP_SENT)
                return AuthOutcome(ok=True, message=MSG_SIGN_UP_SENT)

            session = self.auth.sign_in_with_password(email, password)
            self.on_session(session)
            self.notifier.success(MSG_SIGNED_IN)
            self.navigate("/")
            return AuthOutcome(ok=True, message=MSG_SIGNED_IN, navigate_to="/")
        except AuthError as exc:
            log.info("auth %s failed: %s", self.mode.value, exc.message)
            message = localize_auth_error(exc)
            self.notifier.error(message)
            return AuthOutcome(ok=False, message=message)
        finally:
            self.is_loading = False
