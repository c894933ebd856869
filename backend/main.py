"""
AlgoSender — FastAPI Application

Send Algorand TestNet payments, track each one from pending to
confirmed/failed, and report aggregate statistics.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from config import settings
from domain.errors import DomainError
from domain.responses import error_response, success_response
from exceptions import StorageError
from routes import accounts, health, params, send, stats, status, transactions

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: validate settings, create DB tables. Shutdown: stop polls, release resources."""
    if settings.database_url.startswith("sqlite:///./"):
        os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()

    from database import init_db
    await init_db()
    logger.info("Database initialized")

    yield  # app runs here

    from services.confirmation_poller import get_poller
    await get_poller().shutdown()

    from database import dispose_engine
    await dispose_engine()

    from services.async_executor import shutdown_executor
    shutdown_executor()

    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="AlgoSender API",
    description="Send Algorand TestNet payments and track their confirmation",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(params.router)
app.include_router(send.router)
app.include_router(status.router)
app.include_router(transactions.router)
app.include_router(stats.router)
app.include_router(accounts.router)


# ── Poller Status Endpoint ─────────────────────────────────────────

@app.get("/poller/status", tags=["poller"])
async def get_poller_status():
    """Counters for the background confirmation poller."""
    from services.confirmation_poller import get_poller
    poller = get_poller()
    return success_response({
        "interval_seconds": poller.interval,
        "max_attempts": poller.max_attempts,
        "tasks_in_flight": poller.in_flight,
        **poller.metrics.to_dict(),
    })


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never return raw exception details to clients. The full traceback is
    logged server-side for debugging.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response("Internal server error", "internal_server_error"),
    )


@app.exception_handler(StorageError)
async def storage_exception_handler(request, exc: StorageError):
    logger.error(f"Storage error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content=error_response("Transaction store unavailable. Try again shortly.", "storage_error"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Malformed bodies and query params are 400s, with the first problem as the message."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        location = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        if first.get("type") == "missing":
            message = "Missing required fields"
        else:
            message = f"{location}: {first.get('msg')}" if location else first.get("msg", message)
    return JSONResponse(
        status_code=400,
        content=error_response(
            message,
            "validation_error",
            {"fields": [".".join(str(p) for p in e.get("loc", ())) for e in errors]},
        ),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Standardize HTTPException responses for frontend consumers.

    Keeps the original HTTP status code, but wraps the payload.
    """
    if isinstance(exc, DomainError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_response(exc.message, exc.code, exc.details),
        )

    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message, "http_error", None if isinstance(detail, str) else {"detail": detail}),
        headers=getattr(exc, "headers", None),
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
