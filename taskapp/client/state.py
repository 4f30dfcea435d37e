"""Task list state container.

The list view never mutates state in place: every transition is a pure
function taking the current ``TaskListState`` and returning a new one. A
snapshot taken before a request can therefore be restored as-is when the
request fails.
"""
from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from taskapp.backend.schemas.task import TaskOut


class NewTaskDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""


class TaskListState(BaseModel):
    model_config = ConfigDict(frozen=True)

    tasks: tuple[TaskOut, ...] = ()
    pending_operation_id: Optional[str] = None
    is_submitting_new_task: bool = False
    draft: NewTaskDraft = NewTaskDraft()


def initial_state(tasks: Iterable[TaskOut] = ()) -> TaskListState:
    return TaskListState(tasks=tuple(tasks))


def find_task(state: TaskListState, task_id: str) -> Optional[TaskOut]:
    return next((t for t in state.tasks if t.id == task_id), None)


# ---- 새 태스크 ----
def edit_draft(
    state: TaskListState,
    *,
    title: str | None = None,
    description: str | None = None,
) -> TaskListState:
    update = {}
    if title is not None:
        update["title"] = title
    if description is not None:
        update["description"] = description
    return state.model_copy(update={"draft": state.draft.model_copy(update=update)})


def can_add(state: TaskListState) -> bool:
    return bool(state.draft.title) and not state.is_submitting_new_task


def start_add(state: TaskListState) -> TaskListState:
    return state.model_copy(update={"is_submitting_new_task": True})


def add_succeeded(state: TaskListState, task: TaskOut) -> TaskListState:
    return state.model_copy(
        update={
            "tasks": (task, *state.tasks),
            "draft": NewTaskDraft(),
            "is_submitting_new_task": False,
        }
    )


def add_failed(state: TaskListState) -> TaskListState:
    # 입력값은 그대로 남겨 재시도 가능
    return state.model_copy(update={"is_submitting_new_task": False})


# ---- 완료 토글 / 삭제 ----
def can_mutate(state: TaskListState, task_id: str) -> bool:
    return state.pending_operation_id != task_id


def start_operation(state: TaskListState, task_id: str) -> TaskListState:
    return state.model_copy(update={"pending_operation_id": task_id})


def toggle_succeeded(state: TaskListState, updated: TaskOut) -> TaskListState:
    tasks = tuple(updated if t.id == updated.id else t for t in state.tasks)
    return state.model_copy(update={"tasks": tasks, "pending_operation_id": None})


def delete_succeeded(state: TaskListState, task_id: str) -> TaskListState:
    tasks = tuple(t for t in state.tasks if t.id != task_id)
    return state.model_copy(update={"tasks": tasks, "pending_operation_id": None})


def operation_failed(state: TaskListState, snapshot: TaskListState) -> TaskListState:
    """Restore the task collection captured before the request."""
    return state.model_copy(update={"tasks": snapshot.tasks, "pending_operation_id": None})
