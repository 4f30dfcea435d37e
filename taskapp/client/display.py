import httpx


def error_message(response: httpx.Response, default: str) -> str:
    """`{"error": ...}` 본문에서 메시지를 꺼내고, 없으면 기본 메시지."""
    try:
        body = response.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return default
