"""
Lokisa - FastAPI Application Entry Point

Anonymous municipal issue reporting: citizens report geotagged
infrastructure problems, support existing reports once per device, and the
responsible municipal department is emailed.

DESIGN PRINCIPLES:
- Anonymous reporting: a device id is an idempotency key, not an identity
- Every location gets some recipient, even outside known municipalities
- Email is best effort and never fails a report or a support
"""

import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lokisa.core.errors import ConfigurationError, ConflictError, LokisaError, NotFoundError, ValidationError
from lokisa.core.settings import settings
from lokisa.routes import health, issues, municipalities, reminders

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Anonymous infrastructure issue reporting for South African municipalities",
    debug=settings.DEBUG
)


ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@app.exception_handler(LokisaError)
async def domain_exception_handler(request: Request, exc: LokisaError):
    """Translate domain error kinds to HTTP responses."""
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors(), "body": str(exc.body)}
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _reminder_loop():
    from lokisa.services.reminder_service import get_reminder_service

    interval_seconds = settings.REMINDER_CHECK_INTERVAL_HOURS * 3600
    # Give the server a minute to settle before the first run
    await asyncio.sleep(60)
    while True:
        try:
            await asyncio.to_thread(get_reminder_service().send_due_reminders)
        except Exception as e:
            logger.error(f"Reminder run failed: {e}", exc_info=True)
        await asyncio.sleep(interval_seconds)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Currently: issue repository and the optional reminder loop
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        from lokisa.services.repository import get_issue_repository
        get_issue_repository()
    except Exception as e:
        logger.warning(f"Repository initialization failed: {e}. The app will start but database operations may fail.")

    if settings.REMINDERS_ENABLED:
        app.state.reminder_task = asyncio.create_task(_reminder_loop())
        logger.info(f"Reminder loop scheduled every {settings.REMINDER_CHECK_INTERVAL_HOURS}h")


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "reminder_task", None)
    if task is not None:
        task.cancel()
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(issues.router)
app.include_router(municipalities.router)
app.include_router(reminders.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "issues": "/api/issues",
        "nearby": "/api/issues/nearby?lat={lat}&lng={lng}&radius=5"
    }
