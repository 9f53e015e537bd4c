# app/core/responses.py

"""
모든 JSON 응답이 공유하는 봉투(envelope) 형식을 만드는 헬퍼입니다.
성공 응답은 항상 `success`, `message`, `timestamp` 필드를 가집니다.
"""

from datetime import datetime, UTC
from typing import Any, Dict


def utc_timestamp() -> str:
    """ISO 8601 형식(밀리초, 'Z' 접미사)의 현재 UTC 시각 문자열."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def envelope(message: str, **payload: Any) -> Dict[str, Any]:
    """성공 응답 딕셔너리를 만듭니다. payload 필드는 봉투 필드 뒤에 그대로 붙습니다."""
    return {"success": True, "message": message, "timestamp": utc_timestamp(), **payload}
