"""FastAPI application for the Employee Directory."""
import os
import sys
import time as _startup_time_module
from contextlib import asynccontextmanager
from dotenv import load_dotenv

_APP_START_TIME = _startup_time_module.time()

# Load .env file if present
load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

# Add parent dir to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from slowapi import _rate_limit_exceeded_handler  # noqa: E402
from slowapi.errors import RateLimitExceeded  # noqa: E402

# ── Import shared dependencies ──────────────────────────────────
from .dependencies import (  # noqa: E402
    _logger,
    get_controller,
    get_source,
    limiter,
)
from dirlib.errors import FetchError  # noqa: E402

# ── Config ──────────────────────────────────────────────────────
_DATA_DIR = os.path.join(os.path.dirname(__file__), '..', 'data')

DATA_PATH = os.path.normpath(os.environ.get(
    'DIR_DATA_PATH', os.path.join(_DATA_DIR, 'employees.json')
))
STATE_PATH = os.path.normpath(os.environ.get(
    'DIR_STATE_PATH', os.path.join(_DATA_DIR, 'state.json')
))
SEARCH_DELAY = int(os.environ.get('DIR_SEARCH_DELAY_MS', '300')) / 1000.0

# CORS origins from env
_raw_origins = os.environ.get('ALLOWED_ORIGINS', '')
ALLOWED_ORIGINS = (
    [o.strip() for o in _raw_origins.split(',') if o.strip()]
    or ['http://localhost:3000', 'http://localhost:8000']
)

_OPENAPI_TAGS = [
    {"name": "Health", "description": "System health and version info"},
    {"name": "Employees", "description": "Employee records (read-only)"},
    {"name": "Directory", "description": "Filtered, searched, sorted and paginated directory view"},
    {"name": "Sorting", "description": "Sort field catalogue and defaults"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One-shot record fetch; a failure leaves the directory in its error state
    # until POST /api/directory/reload.
    ctrl = get_controller()
    if not ctrl.load():
        _logger.warning("Startup: employee data could not be loaded from %s", DATA_PATH)
    yield
    _logger.info("Employee Directory API shutting down")


app = FastAPI(
    lifespan=lifespan,
    title="Employee Directory API",
    description=(
        "Read-only employee directory with tab filters, text search, "
        "multi-field cascading sort and pagination.\n\n"
        "The directory view keeps its state on the server; the `/api/directory` "
        "endpoints mirror the UI events (tab change, search, sort edits, paging)."
    ),
    version="0.1.0",
    openapi_tags=_OPENAPI_TAGS,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    """Add security headers to all responses."""
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Cross-Origin-Opener-Policy"] = "same-origin"
    if os.environ.get('DIR_HSTS', '').lower() in ('1', 'true', 'yes'):
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Collapse Pydantic validation errors into a single readable message."""
    _TYPE_MSGS = {
        "missing": "field required",
        "int_parsing": "must be an integer",
        "int_type": "must be an integer",
        "string_type": "must be a string",
        "bool_parsing": "must be true or false",
        "list_type": "must be a list",
        "dict_type": "must be an object",
        "value_error": "invalid value",
    }
    errors = []
    for e in exc.errors():
        field = ".".join(str(loc) for loc in e.get("loc", []) if loc not in ("body", "query", "path"))
        etype = e.get("type", "")
        msg = _TYPE_MSGS.get(etype, e.get("msg", "invalid value"))
        if field:
            errors.append(f"{field}: {msg}")
        else:
            errors.append(msg)
    detail = "; ".join(errors) if errors else "Invalid input"
    return JSONResponse(status_code=422, content={"detail": detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch unhandled exceptions, log with details, return sanitized 500."""
    import traceback
    _logger.error(
        "Unhandled exception: %s %s | %s | %s",
        request.method, request.url.path,
        type(exc).__name__,
        traceback.format_exc().splitlines()[-1],
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. Please try again."},
    )


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """Log every request as structured JSON with timing info and request-ID."""
    import time as _t
    import uuid as _uuid
    import json as _json_mod
    from datetime import datetime as _dt2, timezone as _tz2
    # Generate a short unique request ID for correlating log entries
    req_id = _uuid.uuid4().hex[:8]
    start = _t.time()
    response = await call_next(request)
    duration_ms = round((_t.time() - start) * 1000)
    now = _dt2.now(_tz2.utc)
    ts = now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"
    entry = {
        "timestamp": ts,
        "req_id": req_id,
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "duration_ms": duration_ms,
    }
    _logger.info(_json_mod.dumps(entry, ensure_ascii=False))
    response.headers["X-Request-ID"] = req_id
    return response


# ── Include routers ─────────────────────────────────────────────
from .routers import employees, directory, sorting  # noqa: E402

app.include_router(employees.router)
app.include_router(directory.router)
app.include_router(sorting.router)


# ── Routes ──────────────────────────────────────────────────────

_API_VERSION = "0.1.0"


@app.get(
    "/api/health",
    tags=["Health"],
    summary="Health check",
    description="Returns service status, API version, uptime in seconds and data-file state.",
)
def health():
    import time as _t
    data_status = "ok"
    try:
        get_source().load()
    except FetchError:
        data_status = "error"

    return {
        "status": "ok",
        "version": _API_VERSION,
        "uptime_seconds": round(_t.time() - _APP_START_TIME, 1),
        "data": {"status": data_status},
    }


@app.get("/api/version", tags=["Health"], summary="API version")
def version():
    return {"version": _API_VERSION, "service": "Employee Directory API"}


@app.get("/api", tags=["Health"], summary="API root", description="Returns basic service info.")
def root():
    return {"service": "Employee Directory API", "version": _API_VERSION}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
