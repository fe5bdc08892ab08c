"""
Giày Cứng API - sheet-backed backend for the shoe-cleaning shop.
FastAPI over a Google Sheets spreadsheet (one tab per table).

Run server:
uvicorn giaycung_api.main:app --host 0.0.0.0 --port 8000
"""

import contextvars
import logging
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .core.errors import ApiError
from .routers import auth, contact, messages, news, orders, products, service_orders
from .settings import get_settings

# ========== Request Context for Tracing ==========
request_id_var = contextvars.ContextVar("request_id", default=None)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logger.info(f"🔧 Storage Backend: {settings.storage_backend.upper()} (shoes: {settings.shoes_storage})")
if settings.open_admin:
    logger.warning("⚠️ ADMIN_TOKEN_SECRET is not set: admin writes are OPEN to everyone")

# ============================================================================
# FASTAPI APP
# ============================================================================

app = FastAPI(
    title="Giày Cứng API",
    description="Orders, service orders, products, news, contacts and messages stored in Google Sheets",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ========== Request Tracing Middleware ==========
@app.middleware("http")
async def request_tracing_middleware(request: Request, call_next):
    """Add request_id and timing to all requests."""
    request_id = str(uuid.uuid4())[:8]
    request_id_var.set(request_id)
    started = time.time()

    response = await call_next(request)

    latency_ms = round((time.time() - started) * 1000, 2)
    logger.info(
        f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} ({latency_ms}ms)"
    )
    response.headers["X-Request-ID"] = request_id
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_origins_list(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Admin-Token"],
)


# ========== Error envelope: {"ok": false, "message": ...} ==========

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "message": message})


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"[{request_id_var.get()}] {exc.message}")
    return _error(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        fields.append(".".join(loc) or "body")
    return _error(status.HTTP_400_BAD_REQUEST, f"Invalid request: {', '.join(dict.fromkeys(fields))}")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return _error(exc.status_code, "Method not allowed")
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"[{request_id_var.get()}] Unhandled exception: {str(exc)}", exc_info=True)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Server error: {exc}")


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(auth.router, prefix="/api")
app.include_router(service_orders.router, prefix="/api")
app.include_router(orders.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(news.router, prefix="/api")
app.include_router(contact.router, prefix="/api")
app.include_router(messages.router, prefix="/api")
