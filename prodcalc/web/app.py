"""FastAPI application for ProdCalc: read-only KPI, calendar and export API."""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.base import BaseHTTPMiddleware

from prodcalc.config import get_config
from prodcalc.core.logging import configure_logging
from prodcalc.db.connection import close_db
from prodcalc.errors import AnalyticsError
from prodcalc.web.routes import analytics, exports, health

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id into structlog context and log one line per request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("request_failed", error=str(exc))
            raise

        logger.info(
            "request_handled",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


async def analytics_error_handler(request: Request, exc: AnalyticsError):
    """NotFound -> 404, InvalidRange -> 400, body ``{"detail": message}``."""
    logger.info("analytics_error", error_type=type(exc).__name__, detail=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_db()


def create_app() -> FastAPI:
    config = get_config()
    configure_logging(config.log_level, config.json_logs)

    application = FastAPI(
        title="ProdCalc API",
        description="Production cost, labor variance and scheduling KPIs",
        version="1.0.0",
        lifespan=lifespan,
    )
    application.add_middleware(RequestContextMiddleware)
    application.add_exception_handler(AnalyticsError, analytics_error_handler)

    for module in (health, analytics, exports):
        application.include_router(module.router)

    Instrumentator().instrument(application).expose(application, include_in_schema=False)
    return application


app = create_app()
