import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.api.routes import categories, chapters, courses, webhook
from app.core.config import get_settings
from app.core.error_codes import DEFAULT_MESSAGES, ErrorCode
from app.core.errors import ApiError
from app.core.logging_setup import configure_logging

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


def _operation_name(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "name", None) or f"{request.method} {request.url.path}"


def _error_response(code: ErrorCode, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, "code": code.value})


@app.exception_handler(ApiError)
async def handle_api_error(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error("%s failed: %s", _operation_name(request), exc.message, exc_info=exc)
    return _error_response(exc.code, exc.message, exc.status_code)


@app.exception_handler(SQLAlchemyError)
async def handle_persistence_error(request: Request, exc: SQLAlchemyError):
    logger.error("%s failed: persistence error", _operation_name(request), exc_info=exc)
    code = ErrorCode.PERSISTENCE_FAILED
    return _error_response(code, DEFAULT_MESSAGES[code], 500)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error("%s failed", _operation_name(request), exc_info=exc)
    code = ErrorCode.INTERNAL_ERROR
    return _error_response(code, DEFAULT_MESSAGES[code], 500)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(courses.router)
app.include_router(chapters.router)
app.include_router(categories.router)
app.include_router(webhook.router)
