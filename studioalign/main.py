# /studioalign/main.py

# --- Core FastAPI Imports ---
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

# --- Application-specific Imports ---
from .core import config
from .core.logging_config import configure_logging
from .db import base  # noqa: F401  registers every model on Base.metadata
from .routers import (
    auth_router,
    channels_router,
    classes_router,
    dashboard_router,
    invoices_router,
    messages_router,
    people_router,
    public_router,
    studio_router,
)
from .services.reference_cache import reference_cache

logger = logging.getLogger(__name__)


# --- Application Lifecycle Management ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(config.LOG_LEVEL)
    logger.info("StudioAlign backend starting")
    yield
    reference_cache.clear()
    logger.info("StudioAlign backend stopped")


# --- FastAPI Application Instance Creation ---
app = FastAPI(
    title="StudioAlign Backend API",
    description="Scheduling, attendance, messaging and invoicing for dance studios.",
    version="1.0.0",
    lifespan=lifespan,
)

# --- Middleware Configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Global Error Handling ---
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "A database error occurred. Please try again."},
    )


# --- API Router Inclusion ---
app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(dashboard_router.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(studio_router.router, prefix="/api/studio", tags=["Studio"])
app.include_router(people_router.teachers_router, prefix="/api/teachers", tags=["Teachers"])
app.include_router(people_router.students_router, prefix="/api/students", tags=["Students"])
app.include_router(people_router.my_students_router, prefix="/api/my-students", tags=["My Students"])
app.include_router(classes_router.router, prefix="/api/classes", tags=["Classes"])
app.include_router(messages_router.router, prefix="/api/messages", tags=["Messages"])
app.include_router(channels_router.router, prefix="/api/channels", tags=["Channels"])
app.include_router(invoices_router.router, prefix="/api/invoices", tags=["Invoices"])

# Unauthenticated routes for the sign-up form.
app.include_router(public_router.router, prefix="/public", tags=["Public"])


# --- Root / Health Check Endpoint ---
@app.get("/", tags=["Health Check"])
async def read_root():
    """A simple health check endpoint to confirm the API is online."""
    return {"status": "StudioAlign backend is running!", "version": app.version}
