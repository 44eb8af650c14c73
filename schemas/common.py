from typing import Any, Optional


def envelope(message: str, data: Any = None, count: Optional[int] = None) -> dict:
    """Uniform success body: {success, message, data[, count]}."""
    body = {"success": True, "message": message, "data": data}
    if count is not None:
        body["count"] = count
    return body


def error_envelope(message: str) -> dict:
    return {"success": False, "message": message}
