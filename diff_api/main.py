"""
FastAPI application for the structural diff service.

Routes:
- GET  /health    heartbeat
- POST /v1/diff   baseline vs candidate comparison under a JSON contract

Every request gets a trace id (taken from X-Request-ID when the caller sends
one) that is echoed in the response headers and stamped on each log line.
With ENABLE_AUDIT_LOGGING on, one redacted audit entry is written per request.
"""
from fastapi import FastAPI, status, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
import os
import logging
import uuid
import time
from contextvars import ContextVar

from diff_api.routes import health, diff
from diff_api.middleware.audit_logging import AuditLoggingMiddleware
from diff_api.settings import settings

# trace id of the request being served, '-' outside a request
trace_id_ctx: ContextVar[str] = ContextVar('trace_id', default='-')


class TraceIdFilter(logging.Filter):
    """Stamp record.trace_id so the log format can print it."""

    def filter(self, record):
        record.trace_id = trace_id_ctx.get()
        return True


if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO, format='[%(trace_id)s] %(name)s: %(message)s')

for handler in logging.root.handlers:
    if not any(isinstance(f, TraceIdFilter) for f in handler.filters):
        handler.addFilter(TraceIdFilter())

app = FastAPI(
    title="Structural Diff API",
    description="Compare baseline and candidate outputs structurally and report path-annotated differences.",
    version=settings.api_version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


@app.get("/")
def root():
    return {"name": "Structural Diff API", "status": "running", "docs": "/docs"}


@app.middleware("http")
async def trace_requests(request: Request, call_next):
    trace_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.trace_id = trace_id

    token = trace_id_ctx.set(trace_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        trace_id_ctx.reset(token)

    response.headers["X-Request-ID"] = trace_id
    response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.6f}"
    return response


if settings.enable_audit_logging:
    app.add_middleware(AuditLoggingMiddleware, enable_redaction=settings.enable_redaction)

app.include_router(health.router)
app.include_router(diff.router)


def _error_response(request: Request, status_code: int, error: dict) -> JSONResponse:
    trace_id = getattr(request.state, "trace_id", None) or request.headers.get("X-Request-ID") or str(uuid.uuid4())
    return JSONResponse(
        status_code=status_code,
        content={"trace_id": trace_id, "status": "error", "error": error},
    )


@app.exception_handler(HTTPException)
async def http_error(request: Request, exc: HTTPException):
    # the diff route raises with a taxonomy entry as detail
    if isinstance(exc.detail, dict):
        error = exc.detail
    else:
        error = {"code": str(exc.detail), "message": str(exc.detail)}
    return _error_response(request, exc.status_code, error)


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError):
    return _error_response(request, status.HTTP_422_UNPROCESSABLE_ENTITY, {
        "code": "REQUEST_VALIDATION_ERROR",
        "message": "Request body does not match DiffRequest",
        "detail": jsonable_encoder(exc.errors()),
    })


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logging.getLogger(__name__).exception("unhandled error on %s", request.url.path)
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, {
        "code": "INTERNAL_ERROR",
        "message": "The comparison could not be completed.",
    })


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "diff_api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.environment == "development"
    )
