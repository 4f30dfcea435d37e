"""Error taxonomy shared by the repository, the session verifier and the routes.

Every error carries a localized, user-facing message and the HTTP status it
maps to. The app-level exception handler renders them as ``{"error": message}``.
"""
from __future__ import annotations

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

MSG_UNAUTHENTICATED = "認証が必要です"
MSG_FORBIDDEN = "権限がありません"
MSG_NOT_FOUND = "タスクが見つかりません"
MSG_INVALID_REQUEST = "リクエストの形式が正しくありません"
MSG_INTERNAL = "サーバーエラーが発生しました"


class TaskAppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = MSG_INTERNAL

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(TaskAppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = MSG_UNAUTHENTICATED


class Forbidden(TaskAppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = MSG_FORBIDDEN


class NotFound(TaskAppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = MSG_NOT_FOUND


class ValidationError(TaskAppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = MSG_INVALID_REQUEST


class InternalError(TaskAppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = MSG_INTERNAL


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def task_app_error_handler(request: Request, exc: TaskAppError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, MSG_INVALID_REQUEST)
