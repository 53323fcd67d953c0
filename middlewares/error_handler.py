import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from services.errors import RecordError

logger = logging.getLogger(__name__)


def _now_iso():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_body(code: str, message, **extra):
    return {
        "success": False,
        "error": {"code": code, "message": message, **extra},
        "generated_at": _now_iso(),
    }


def add_error_handlers(app: FastAPI):
    # ✅ 도메인 예외 (ValidationError / MissingReferenceError / ConfigError / PermissionDeniedError)
    @app.exception_handler(RecordError)
    async def record_error_handler(request: Request, exc: RecordError):
        logger.info(f"{request.method} {request.url.path} → {exc.code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))

    # ✅ 요청 본문/쿼리 형식 오류 (pydantic)
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=422,
            content=error_body("INVALID_REQUEST", "Invalid data", details=jsonable_encoder(exc.errors())),
        )

    # ✅ HTTPException (인증 실패 401 등)
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(f"HTTP_{exc.status_code}", exc.detail),
            headers=getattr(exc, "headers", None),
        )

    # ✅ 그 외 모든 예외
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"처리되지 않은 예외: {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content=error_body("INTERNAL_ERROR", str(exc)))
