from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    # JSON은 camelCase(isCompleted, userId ...), 파이썬 쪽은 snake_case
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TaskOut(_CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    is_completed: bool
    created_at: datetime
    updated_at: datetime
    user_id: str


class TaskCreate(_CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    user_id: Optional[str] = None  # 호환용. 세션 사용자와 일치해야 함


class TaskCompletionUpdate(_CamelModel):
    is_completed: bool


class MessageOut(BaseModel):
    message: str
