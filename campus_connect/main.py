# campus_connect/main.py

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from campus_connect.core.config import settings
from campus_connect.core.database import init_db, test_connection
from campus_connect.core.exceptions import CampusError
from campus_connect.core.logging import configure_logging
from campus_connect.core.rate_limiter import limiter

from campus_connect.api.endpoints import (
    account,
    approvals,
    auth,
    comments,
    common,
    posts,
    profile,
    system,
)

configure_logging()

app = FastAPI(
    title="SPC Campus Connect Backend",
    version="1.0.0",
    description="Announcements, events and approvals for St. Peter's College departments.",
)
app.state.db_status = "Connecting..."

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ------------------------------------------------------------
# DOMAIN ERRORS -> JSON
# ------------------------------------------------------------
@app.exception_handler(CampusError)
async def campus_error_handler(request: Request, exc: CampusError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Same envelope as domain errors; first problem only
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=422,
        content={"detail": f"{field}: {message}" if field else message, "code": "ValidationError"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL, "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

for module in (system, auth, account, approvals, posts, comments, profile, common):
    app.include_router(module.router)


# ------------------------------------------------------------
# STARTUP: verify the database, then make sure tables exist
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting SPC Campus Connect Backend...")

    try:
        await test_connection()
    except Exception:
        app.state.db_status = "Error"
        logger.exception("Database unreachable; serving without tables check.")
        return

    app.state.db_status = "Connected"
    await init_db()
    logger.success("Database ready.")
