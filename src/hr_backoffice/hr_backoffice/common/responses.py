from __future__ import annotations

from typing import Any

from .datetime_utils import now_utc


def success_response(data: Any) -> dict:
    return {"success": True, "data": data, "timestamp": now_utc().isoformat()}


def error_response(message: str, code: str = "ERROR") -> dict:
    return {"success": False, "error": message, "code": code, "timestamp": now_utc().isoformat()}
