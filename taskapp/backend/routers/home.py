import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from taskapp.backend.core.config import settings
from taskapp.backend.core.errors import TaskAppError
from taskapp.backend.dependencies.auth import verify_session
from taskapp.backend.schemas.task import TaskOut
from taskapp.backend.services.auth_provider import AuthProvider, get_auth_provider
from taskapp.backend.services.task_repository import TaskRepository, get_task_repository
from taskapp.backend.core.formatting import format_date

log = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["format_date"] = format_date

router = APIRouter(tags=["home"])


def _load_home_data(
    request: Request,
    provider: Optional[AuthProvider],
    repo: TaskRepository,
):
    """세션이 없거나 조회 중 오류가 나면 로그인 폼을 보여준다."""
    try:
        identity = verify_session(request.cookies.get(settings.access_cookie_name), provider)
        if identity is None:
            return None, []
        tasks = repo.list_by_owner(identity.user_id)
    except TaskAppError:
        log.exception("Error fetching server data")
        return None, []
    return identity, [TaskOut.model_validate(t, from_attributes=True) for t in tasks]


@router.get("/", response_class=HTMLResponse)
def home(
    request: Request,
    provider: Optional[AuthProvider] = Depends(get_auth_provider),
    repo: TaskRepository = Depends(get_task_repository),
):
    identity, tasks = _load_home_data(request, provider, repo)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "session": identity,
            "tasks": tasks,
        },
        headers={"Cache-Control": "no-store"},
    )
