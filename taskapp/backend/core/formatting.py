from datetime import datetime, timezone, tzinfo
from typing import Optional


def format_date(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """ja-JP 短縮表示: 月/日/時:分 (例: 10月17日 09:05). naive 값은 UTC로 취급."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    local = value.astimezone(tz)
    return f"{local.month}月{local.day}日 {local:%H:%M}"
