from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Protocol

import httpx
from pydantic import ValidationError

from taskapp.backend.core.config import settings
from taskapp.backend.schemas.task import TaskOut
from taskapp.backend.services.auth_provider import AuthError, AuthProvider
from taskapp.client import state as st
from taskapp.client.display import error_message

log = logging.getLogger(__name__)

MSG_ADD_FAILED = "タスクの追加に失敗しました"
MSG_UPDATE_FAILED = "タスクの更新に失敗しました"
MSG_DELETE_FAILED = "タスクの削除に失敗しました"
MSG_SIGNED_OUT = "ログアウトしました"
MSG_SIGN_OUT_FAILED = "ログアウトに失敗しました"


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Default notifier: surfaces messages through the log."""

    def success(self, message: str) -> None:
        log.info(message)

    def error(self, message: str) -> None:
        log.error(message)


class RequestFailed(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TaskListView:
    """
    태스크 목록 화면의 클라이언트 측 컨트롤러.
    - 상태는 TaskListState로만 보관하고 state 모듈의 순수 함수로 갱신
    - 모든 변경은 서버 응답을 받은 뒤에 반영 (낙관적 갱신 없음)
    - 실패는 재시도 없이 notifier로 알림
    """

    def __init__(
        self,
        http: httpx.Client,
        *,
        user_id: str,
        initial_tasks: Iterable[TaskOut] = (),
        auth: Optional[AuthProvider] = None,
        notifier: Optional[Notifier] = None,
        reload: Optional[Callable[[], None]] = None,
    ):
        self.http = http
        self.user_id = user_id
        self.auth = auth
        self.notifier = notifier or LoggingNotifier()
        self.reload = reload or (lambda: None)
        self.state = st.initial_state(initial_tasks)

    def _send(self, method: str, url: str, default: str, **kwargs) -> httpx.Response:
        try:
            r = self.http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            log.error("%s %s failed: %s", method, url, exc)
            raise RequestFailed(default) from exc
        if r.is_error:
            raise RequestFailed(error_message(r, default))
        return r

    @staticmethod
    def _read_task(r: httpx.Response, default: str) -> TaskOut:
        # 2xx라도 본문이 태스크 형태가 아니면 실패로 취급
        try:
            return TaskOut.model_validate(r.json())
        except (ValueError, ValidationError) as exc:
            log.error("unexpected task payload: %s", exc)
            raise RequestFailed(default) from exc

    def edit_draft(self, *, title: str | None = None, description: str | None = None) -> None:
        self.state = st.edit_draft(self.state, title=title, description=description)

    def add_task(self) -> bool:
        if not st.can_add(self.state):
            return False

        self.state = st.start_add(self.state)
        draft = self.state.draft
        try:
            r = self._send(
                "POST",
                "/api/tasks",
                MSG_ADD_FAILED,
                json={
                    "title": draft.title,
                    "description": draft.description,
                    "userId": self.user_id,
                },
            )
            task = self._read_task(r, MSG_ADD_FAILED)
        except RequestFailed as exc:
            self.state = st.add_failed(self.state)
            self.notifier.error(exc.message)
            return False

        self.state = st.add_succeeded(self.state, task)
        return True

    def toggle_task(self, task_id: str) -> bool:
        task = st.find_task(self.state, task_id)
        if task is None or not st.can_mutate(self.state, task_id):
            return False

        snapshot = self.state
        self.state = st.start_operation(self.state, task_id)
        try:
            r = self._send(
                "PATCH",
                f"/api/tasks/{task_id}",
                MSG_UPDATE_FAILED,
                json={"isCompleted": not task.is_completed},
            )
            updated = self._read_task(r, MSG_UPDATE_FAILED)
        except RequestFailed as exc:
            self.notifier.error(exc.message)
            self.state = st.operation_failed(self.state, snapshot)
            return False

        self.state = st.toggle_succeeded(self.state, updated)
        return True

    def delete_task(self, task_id: str) -> bool:
        if not st.can_mutate(self.state, task_id):
            return False

        snapshot = self.state
        self.state = st.start_operation(self.state, task_id)
        try:
            self._send("DELETE", f"/api/tasks/{task_id}", MSG_DELETE_FAILED)
        except RequestFailed as exc:
            self.notifier.error(exc.message)
            self.state = st.operation_failed(self.state, snapshot)
            return False

        self.state = st.delete_succeeded(self.state, task_id)
        return True

    def sign_out(self) -> bool:
        """인증 서비스 세션 종료 후 화면 전체를 다시 로드 (로그인 폼 표시)."""
        access_token = self.http.cookies.get(settings.access_cookie_name)
        try:
            if self.auth is not None and access_token:
                self.auth.sign_out(access_token)
        except AuthError as exc:
            log.error("Error signing out: %s", exc.message)
            self.notifier.error(MSG_SIGN_OUT_FAILED)
            return False

        self.http.cookies.delete(settings.access_cookie_name)
        self.http.cookies.delete(settings.refresh_cookie_name)
        self.notifier.success(MSG_SIGNED_OUT)
        self.reload()
        return True
