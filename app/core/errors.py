# app/core/errors.py

"""
공통 에러 처리 모듈입니다.

모든 라우터의 예외는 이곳의 처리기 한 곳으로 모입니다.
- HTTPException (400/404 등)과 존재하지 않는 경로 → `{success: false, message}`
- 쿼리 파라미터 형변환 실패 (RequestValidationError) → 400
- 그 외 예외 → 500, 일반화된 메시지. 운영(production) 모드가 아닐 때만 `error`에 트레이스백을 붙입니다.
"""

import logging
import time
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "خطأ في الخادم"
VALIDATION_ERROR_MESSAGE = "معاملات الطلب غير صالحة"


def error_body(message: str, exc: BaseException | None = None) -> dict:
    body = {"success": False, "message": message}
    if exc is not None and not settings.is_production:
        body["error"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        # 라우터에 등록되지 않은 경로
        message = f"الطريق {request.url.path} غير موجود"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(f"{VALIDATION_ERROR_MESSAGE}: {details}"),
    )


async def log_and_catch_errors(request: Request, call_next):
    """
    요청 로그 미들웨어 겸 최종 에러 처리 단계입니다.
    처리되지 않은 예외는 여기서 500 응답으로 바뀌며, ASGI 서버까지 다시 던지지 않습니다.
    """
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as exc:
        logger.exception("처리되지 않은 예외: %s %s", request.method, request.url.path)
        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(SERVER_ERROR_MESSAGE, exc),
        )
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s - %s - %.0fms", request.method, request.url.path, response.status_code, duration_ms)
    return response


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.middleware("http")(log_and_catch_errors)
