# taskapp/backend/routers/task.py
import logging
from contextlib import contextmanager

from fastapi import APIRouter, Depends

from taskapp.backend.core.errors import (
    Forbidden,
    InternalError,
    NotFound,
    TaskAppError,
)
from taskapp.backend.dependencies.auth import SessionIdentity, require_session
from taskapp.backend.models.task import Task
from taskapp.backend.schemas.task import (
    MessageOut,
    TaskCompletionUpdate,
    TaskCreate,
    TaskOut,
)
from taskapp.backend.services.task_repository import TaskRepository, get_task_repository

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["Tasks"])

MSG_LIST_FAILED = "タスクの取得に失敗しました"
MSG_CREATE_FAILED = "タスクの作成に失敗しました"
MSG_UPDATE_FAILED = "タスクの更新に失敗しました"
MSG_DELETE_FAILED = "タスクの削除に失敗しました"
MSG_DELETED = "タスクを削除しました"


@contextmanager
def _route_boundary(action: str, message: str):
    """분류된 에러는 그대로, 나머지는 로그 후 라우트별 메시지의 500으로 변환."""
    try:
        yield
    except InternalError as exc:
        raise InternalError(message) from exc
    except TaskAppError:
        raise
    except Exception as exc:
        log.exception("Error %s task", action)
        raise InternalError(message) from exc


def _serialize(task: Task) -> TaskOut:
    return TaskOut.model_validate(task, from_attributes=True)


def _get_owned_task(repo: TaskRepository, task_id: str, identity: SessionIdentity) -> Task:
    task = repo.find_by_id(task_id)
    if task is None:
        raise NotFound()
    if task.user_id != identity.user_id:
        raise Forbidden()
    return task


@router.get("", response_model=list[TaskOut])
def list_tasks(
    identity: SessionIdentity = Depends(require_session),
    repo: TaskRepository = Depends(get_task_repository),
):
    with _route_boundary("listing", MSG_LIST_FAILED):
        tasks = repo.list_by_owner(identity.user_id)
    return [_serialize(t) for t in tasks]


@router.post("", response_model=TaskOut)
def create_task(
    payload: TaskCreate,
    identity: SessionIdentity = Depends(require_session),
    repo: TaskRepository = Depends(get_task_repository),
):
    # 소유자는 검증된 세션에서 가져온다. body의 userId는 교차 확인용
    if payload.user_id and payload.user_id != identity.user_id:
        raise Forbidden()
    with _route_boundary("creating", MSG_CREATE_FAILED):
        task = repo.create(identity.user_id, payload.title, payload.description)
    return _serialize(task)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: str,
    identity: SessionIdentity = Depends(require_session),
    repo: TaskRepository = Depends(get_task_repository),
):
    with _route_boundary("fetching", MSG_LIST_FAILED):
        task = _get_owned_task(repo, task_id, identity)
    return _serialize(task)


@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: str,
    payload: TaskCompletionUpdate,
    identity: SessionIdentity = Depends(require_session),
    repo: TaskRepository = Depends(get_task_repository),
):
    with _route_boundary("updating", MSG_UPDATE_FAILED):
        _get_owned_task(repo, task_id, identity)
        task = repo.update_completion(task_id, payload.is_completed)
    return _serialize(task)


@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(
    task_id: str,
    identity: SessionIdentity = Depends(require_session),
    repo: TaskRepository = Depends(get_task_repository),
):
    with _route_boundary("deleting", MSG_DELETE_FAILED):
        _get_owned_task(repo, task_id, identity)
        repo.delete(task_id)
    return MessageOut(message=MSG_DELETED)
