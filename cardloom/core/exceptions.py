"""
전역 예외 핸들러

모든 에러 응답을 { success: false, error, detail? } 형태로 통일합니다.
"""
import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def _error_body(error: str, detail=None) -> dict:
    body = {"success": False, "error": error}
    if detail is not None:
        body["detail"] = detail
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, str):
        content = _error_body(exc.detail)
    else:
        content = _error_body("Request failed", exc.detail)
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # 사용자 친화적인 에러 메시지 생성
    error_messages = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = ".".join(str(p) for p in loc if p != "body") or "request"
        msg = error.get("msg", "")

        if error.get("type") == "missing":
            error_messages.append(f"{field} is required")
        else:
            error_messages.append(f"{field}: {msg}")

    for message in error_messages:
        logger.warning(f"요청 검증 실패 {request.method} {request.url.path} - {message}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Validation failed", error_messages),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    error_id = uuid.uuid4().hex[:12]
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    content = _error_body("Internal server error")
    content["error_id"] = error_id
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    logger.debug("Exception handlers registered")
