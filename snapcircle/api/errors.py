"""Domain error → HTTP response mapping."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from snapcircle.core.errors import SnapCircleError
from snapcircle.core.logging import get_logger

logger = get_logger(__name__)


def error_body(code: str, message: str) -> dict:
    return {
        "success": False,
        "data": None,
        "error": {"code": code, "message": message},
    }


async def snapcircle_error_handler(request: Request, exc: SnapCircleError) -> JSONResponse:
    """SnapCircleError 계열을 status_code + 공통 에러 바디로 변환"""
    logger.info(
        "%s %s → %s (%s)", request.method, request.url.path, exc.status_code, exc.code
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SnapCircleError, snapcircle_error_handler)
