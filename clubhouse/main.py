"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from clubhouse.core.config import settings
from clubhouse.core.middleware import setup_middleware
from clubhouse.core.exceptions import ClubhouseError, InternalError
from clubhouse.db.session import init_db

from clubhouse.api.auth import router as auth_router
from clubhouse.api.clubs import router as clubs_router
from clubhouse.api.schedules import router as schedules_router
from clubhouse.api.posts import router as posts_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("clubhouse")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting %s API", settings.APP_NAME)
    init_db()
    yield
    logger.info("Shutting down %s API", settings.APP_NAME)


app = FastAPI(
    title="Clubhouse API",
    description="Club membership, schedules, and boards",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware
setup_middleware(app)


def _error_response(exc: ClubhouseError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
        headers=headers,
    )


@app.exception_handler(ClubhouseError)
async def clubhouse_exception_handler(request: Request, exc: ClubhouseError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error_response(exc)


@app.exception_handler(SQLAlchemyError)
async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return _error_response(InternalError("Storage failure"))


# Register routers
app.include_router(auth_router, prefix="/api")
app.include_router(clubs_router, prefix="/api")
app.include_router(schedules_router, prefix="/api")
app.include_router(posts_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/api/health")
async def health():
    """Quick health check endpoint."""
    return {"status": "ok"}
