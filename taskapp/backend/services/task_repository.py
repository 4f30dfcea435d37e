from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from taskapp.backend.core.errors import InternalError, NotFound, ValidationError
from taskapp.backend.db.session import get_session
from taskapp.backend.models.task import Task, utcnow

log = logging.getLogger(__name__)

MSG_TITLE_REQUIRED = "タイトルを入力してください"
MSG_OWNER_REQUIRED = "所有者が指定されていません"

_TICK = timedelta(microseconds=1)


def _as_utc(value: datetime) -> datetime:
    # tz 없이 읽힌 값은 UTC로 저장된 것
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class TaskRepository:
    """Single-row CRUD over the ``task`` table.

    Storage failures are rolled back and surface as ``InternalError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def list_by_owner(self, owner_id: str) -> list[Task]:
        stmt = (
            select(Task)
            .where(Task.user_id == owner_id)
            .order_by(Task.created_at.desc())
        )
        return self._fetch_all(stmt)

    def list_all(self) -> list[Task]:
        return self._fetch_all(select(Task).order_by(Task.created_at.desc()))

    def find_by_id(self, task_id: str) -> Optional[Task]:
        try:
            return self.db.get(Task, task_id)
        except SQLAlchemyError as exc:
            raise self._storage_failure("find", exc) from exc

    def create(
        self, owner_id: str, title: str | None, description: str | None = None
    ) -> Task:
        if not owner_id:
            raise ValidationError(MSG_OWNER_REQUIRED)
        if not title or not title.strip():
            raise ValidationError(MSG_TITLE_REQUIRED)

        now = utcnow()
        task = Task(
            user_id=owner_id,
            title=title,
            description=description or None,
            is_completed=False,
            created_at=now,
            updated_at=now,
        )
        return self._save(task, "create")

    def update_completion(self, task_id: str, is_completed: bool) -> Task:
        task = self.find_by_id(task_id)
        if task is None:
            raise NotFound()

        task.is_completed = is_completed
        # 같은 마이크로초 안의 연속 변경에도 updated_at은 반드시 증가
        now = _as_utc(utcnow())
        last = _as_utc(task.updated_at)
        task.updated_at = now if now > last else last + _TICK
        return self._save(task, "update")

    def delete(self, task_id: str) -> None:
        task = self.find_by_id(task_id)
        if task is None:
            raise NotFound()
        try:
            self.db.delete(task)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise self._storage_failure("delete", exc) from exc

    def _fetch_all(self, stmt) -> list[Task]:
        try:
            return list(self.db.exec(stmt).all())
        except SQLAlchemyError as exc:
            raise self._storage_failure("list", exc) from exc

    def _save(self, task: Task, op: str) -> Task:
        try:
            self.db.add(task)
            self.db.commit()
            self.db.refresh(task)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise self._storage_failure(op, exc) from exc
        return task

    @staticmethod
    def _storage_failure(op: str, exc: Exception) -> InternalError:
        log.error("task %s failed: %s", op, exc)
        return InternalError()


def get_task_repository(db: Session = Depends(get_session)) -> TaskRepository:
    return TaskRepository(db)
