"""ASGI header helpers shared by the raw middlewares."""


def get_header(scope: dict, name: str) -> str | None:
    """Return first header value for name (case-insensitive). Headers are (bytes, bytes)."""
    want = name.lower().encode()
    for k, v in scope.get("headers", []):
        if k.lower() == want:
            return v.decode("utf-8", errors="replace")
    return None


def append_header(message: dict, name: str, value: str) -> None:
    """Append a header to an http.response.start message."""
    headers = list(message.get("headers", []))
    headers.append((name.encode(), value.encode()))
    message["headers"] = headers
