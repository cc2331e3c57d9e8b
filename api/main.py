import time
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request

from api.shared.exceptions import ChatServiceException
from api.shared.i18n import negotiate_locale, translate
from api.shared.middleware import TRACE_HEADER, TraceIdMiddleware, get_trace_id
from api.shared.response import ErrorResponse
from core.logger import configure_logging
from core.settings import Settings, get_settings
from di.container import ApplicationContainer as DependencyContainer

logger = structlog.get_logger("bloom")


class CustomFastAPI(FastAPI):
    container: DependencyContainer


@asynccontextmanager
async def lifespan(_app: CustomFastAPI):
    logger.info("application_starting")
    start_time = time.time()

    try:
        db_start = time.time()
        db_resource = _app.container.infrastructure.database()
        await db_resource.init()
        async with db_resource.engine.begin() as _conn:
            if db_resource.dialect_name == "postgresql":
                await _conn.execute(text("SET lock_timeout = '4s'"))
                await _conn.execute(text("SET statement_timeout = '8s'"))
            # Verify database connection
            await _conn.execute(text("SELECT 1"))
        logger.info(
            "database_connected",
            dialect=db_resource.dialect_name,
            elapsed_s=round(time.time() - db_start, 2),
        )

        http_resource = _app.container.infrastructure.http_client()
        await http_resource.init()

        logger.info("application_started", elapsed_s=round(time.time() - start_time, 2))
    except Exception:
        logger.exception("application_start_failed")
        raise

    yield

    await _app.container.infrastructure.http_client().shutdown()
    await _app.container.infrastructure.database().shutdown()
    logger.info("application_stopped")


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    details: Optional[dict] = None,
) -> JSONResponse:
    locale = negotiate_locale(request.headers.get("accept-language"))
    trace_id = get_trace_id(request)
    body = ErrorResponse.build(
        error_code=error_code,
        message=translate(error_code, locale),
        trace_id=trace_id,
        details=details,
    )
    headers = {"Content-Language": locale}
    if trace_id:
        headers[TRACE_HEADER] = trace_id
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


async def service_exception_handler(request: Request, exc: ChatServiceException):
    logger.warning(
        "request_failed",
        error_code=exc.error_code,
        error=exc.message,
        details=exc.details,
        path=request.url.path,
    )
    # Storage and upstream details are internal only
    details = exc.details if exc.status_code < 500 else None
    return _error_response(request, exc.status_code, exc.error_code, details)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.warning("request_validation_failed", path=request.url.path, errors=errors)
    return _error_response(request, 400, "VALIDATION_ERROR", {"errors": errors})


async def general_exception_handler(request: Request, exc: Exception):
    # Runs outside the trace middleware, so the trace id is bound explicitly
    logger.exception(
        "unhandled_exception", path=request.url.path, trace_id=get_trace_id(request)
    )
    return _error_response(request, 500, "INTERNAL_ERROR")


def create_fastapi_app(settings: Optional[Settings] = None) -> CustomFastAPI:
    settings = settings or get_settings()
    configure_logging(settings.APP)

    _app = CustomFastAPI(
        title="Bloom Chat API",
        description="Chat backend proxying conversations to an OpenAI-compatible completion API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Initialize dependency container
    _app.container = DependencyContainer()
    _app.container.infrastructure.settings.override(settings)

    _app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.APP.cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _app.add_middleware(TraceIdMiddleware)

    _app.add_exception_handler(ChatServiceException, service_exception_handler)
    _app.add_exception_handler(RequestValidationError, validation_exception_handler)
    _app.add_exception_handler(Exception, general_exception_handler)

    @_app.get("/healthz", response_class=PlainTextResponse, include_in_schema=False)
    async def healthz():
        return "OK"

    from api.features.conversation.router import router as conversation_router

    _app.include_router(conversation_router, tags=["Conversations"])

    return _app


app = create_fastapi_app()


if __name__ == "__main__":
    _settings = get_settings()
    uvicorn.run(
        "api.main:app",
        host=_settings.APP.HOST,
        port=_settings.APP.PORT,
        timeout_graceful_shutdown=_settings.APP.SHUTDOWN_TIMEOUT,
    )
