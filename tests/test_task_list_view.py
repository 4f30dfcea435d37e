import json

import httpx
import pytest

from conftest import auth_headers, make_provider
from taskapp.backend.core.config import settings
from taskapp.backend.schemas.task import TaskOut
from taskapp.client.task_list import TaskListView


def _task_json(task_id: str, title: str = "Buy milk", done: bool = False) -> dict:
    return {
        "id": task_id,
        "title": title,
        "description": None,
        "isCompleted": done,
        "createdAt": "2026-10-17T09:00:00",
        "updatedAt": "2026-10-17T09:00:00",
        "userId": "user-u",
    }


class FakeTaskApi:
    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.next_response: httpx.Response | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.next_response


@pytest.fixture
def api():
    return FakeTaskApi()


@pytest.fixture
def view(api, notifier):
    http = httpx.Client(base_url="http://app.test", transport=httpx.MockTransport(api))
    initial = [TaskOut.model_validate(_task_json("a", "existing"))]
    return TaskListView(http, user_id="user-u", initial_tasks=initial, notifier=notifier)


def test_add_prepends_server_task_and_sends_owner(view, api):
    api.next_response = httpx.Response(200, json=_task_json("b", "Buy milk"))
    view.edit_draft(title="Buy milk", description="2 bottles")

    assert view.add_task() is True

    assert [t.id for t in view.state.tasks] == ["b", "a"]
    assert view.state.draft.title == ""
    assert view.state.is_submitting_new_task is False
    sent = api.requests[-1]
    assert (sent.method, sent.url.path) == ("POST", "/api/tasks")
    assert json.loads(sent.content) == {
        "title": "Buy milk",
        "description": "2 bottles",
        "userId": "user-u",
    }


def test_add_with_empty_title_sends_nothing(view, api):
    assert view.add_task() is False
    assert api.requests == []


def test_add_failure_alerts_and_keeps_draft(view, api, notifier):
    api.next_response = httpx.Response(401, json={"error": "認証が必要です"})
    view.edit_draft(title="Buy milk")

    assert view.add_task() is False

    assert notifier.errors == ["認証が必要です"]
    assert view.state.draft.title == "Buy milk"
    assert [t.id for t in view.state.tasks] == ["a"]


def test_toggle_applies_server_value(view, api):
    api.next_response = httpx.Response(200, json=_task_json("a", "existing", done=True))

    assert view.toggle_task("a") is True

    assert view.state.tasks[0].is_completed is True
    assert view.state.pending_operation_id is None
    assert json.loads(api.requests[-1].content) == {"isCompleted": True}


def test_toggle_failure_reverts_to_pre_attempt_state(view, api, notifier):
    api.next_response = httpx.Response(403, json={"error": "権限がありません"})
    before = view.state

    assert view.toggle_task("a") is False

    assert notifier.errors == ["権限がありません"]
    assert view.state.tasks == before.tasks
    assert view.state.tasks[0].is_completed is False
    assert view.state.pending_operation_id is None


def test_add_with_non_json_success_body_alerts_and_unlocks(view, api, notifier):
    api.next_response = httpx.Response(200, text="<html>proxy</html>")
    view.edit_draft(title="Buy milk")

    assert view.add_task() is False

    assert notifier.errors == ["タスクの追加に失敗しました"]
    assert view.state.is_submitting_new_task is False
    assert view.state.draft.title == "Buy milk"


def test_toggle_with_wrong_shape_body_reverts_and_allows_retry(view, api, notifier):
    api.next_response = httpx.Response(200, json={"unexpected": True})

    assert view.toggle_task("a") is False

    assert notifier.errors == ["タスクの更新に失敗しました"]
    assert view.state.pending_operation_id is None
    assert view.state.tasks[0].is_completed is False

    api.next_response = httpx.Response(200, json=_task_json("a", "existing", done=True))
    assert view.toggle_task("a") is True


def test_toggle_is_ignored_while_same_task_is_busy(view, api):
    view.state = view.state.model_copy(update={"pending_operation_id": "a"})

    assert view.toggle_task("a") is False
    assert view.delete_task("a") is False
    assert api.requests == []


def test_toggle_unknown_task_is_ignored(view, api):
    assert view.toggle_task("missing") is False
    assert api.requests == []


def test_delete_removes_task(view, api):
    api.next_response = httpx.Response(200, json={"message": "タスクを削除しました"})

    assert view.delete_task("a") is True

    assert view.state.tasks == ()
    assert (api.requests[-1].method, api.requests[-1].url.path) == ("DELETE", "/api/tasks/a")


def test_delete_failure_leaves_state_unchanged(view, api, notifier):
    api.next_response = httpx.Response(500, json={"error": "タスクの削除に失敗しました"})

    assert view.delete_task("a") is False

    assert [t.id for t in view.state.tasks] == ["a"]
    assert notifier.errors == ["タスクの削除に失敗しました"]


def test_transport_failure_uses_default_message(notifier):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.Client(base_url="http://app.test", transport=httpx.MockTransport(handler))
    view = TaskListView(http, user_id="user-u", notifier=notifier)
    view.edit_draft(title="Buy milk")

    assert view.add_task() is False
    assert notifier.errors == ["タスクの追加に失敗しました"]


def test_error_without_body_uses_default_message(view, api, notifier):
    api.next_response = httpx.Response(502, text="Bad Gateway")

    view.toggle_task("a")

    assert notifier.errors == ["タスクの更新に失敗しました"]


def test_sign_out_terminates_session_and_reloads(api, notifier):
    logout = []
    reloads = []

    def auth_handler(request):
        logout.append(request.headers["authorization"])
        return httpx.Response(204)

    http = httpx.Client(base_url="http://app.test", transport=httpx.MockTransport(api))
    http.cookies.set(settings.access_cookie_name, "at-1")
    view = TaskListView(
        http,
        user_id="user-u",
        auth=make_provider(auth_handler),
        notifier=notifier,
        reload=lambda: reloads.append(True),
    )

    assert view.sign_out() is True

    assert logout == ["Bearer at-1"]
    assert reloads == [True]
    assert notifier.successes == ["ログアウトしました"]
    assert http.cookies.get(settings.access_cookie_name) is None


def test_sign_out_failure_shows_toast_and_stays(api, notifier):
    reloads = []
    http = httpx.Client(base_url="http://app.test", transport=httpx.MockTransport(api))
    http.cookies.set(settings.access_cookie_name, "at-1")
    view = TaskListView(
        http,
        user_id="user-u",
        auth=make_provider(lambda r: httpx.Response(503, json={"msg": "down"})),
        notifier=notifier,
        reload=lambda: reloads.append(True),
    )

    assert view.sign_out() is False

    assert notifier.errors == ["ログアウトに失敗しました"]
    assert reloads == []


def test_view_against_running_app(client, clock, notifier):
    client.headers.update(auth_headers("user-u"))
    view = TaskListView(client, user_id="user-u", notifier=notifier)

    view.edit_draft(title="Buy milk")
    assert view.add_task() is True
    task_id = view.state.tasks[0].id
    assert view.toggle_task(task_id) is True
    assert view.state.tasks[0].is_completed is True
    assert view.delete_task(task_id) is True

    assert view.state.tasks == ()
    assert notifier.errors == []
    assert client.get("/api/tasks").json() == []
