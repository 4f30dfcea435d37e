from datetime import datetime, timedelta, timezone

import httpx

from taskapp.backend.core.formatting import format_date
from taskapp.client.display import error_message


def test_format_date_uses_japanese_month_day_and_time():
    value = datetime(2026, 3, 5, 7, 4, tzinfo=timezone.utc)

    assert format_date(value, timezone.utc) == "3月5日 07:04"


def test_format_date_treats_naive_values_as_utc():
    jst = timezone(timedelta(hours=9))

    assert format_date(datetime(2026, 10, 17, 20, 30), jst) == "10月18日 05:30"


def test_error_message_prefers_error_field():
    assert error_message(httpx.Response(404, json={"error": "タスクが見つかりません"}), "x") == (
        "タスクが見つかりません"
    )


def test_error_message_falls_back_to_default():
    assert error_message(httpx.Response(500, json={"detail": "boom"}), "default") == "default"
    assert error_message(httpx.Response(500, text="<html>"), "default") == "default"
