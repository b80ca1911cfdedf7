# File: app/main.py
import os
import time
import logging
from typing import Callable
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from app.api.v1.api import api_router
from app.core.config import settings
from app.core.exceptions import (
    ErrorCategory,
    EventUnavailable,
    RateLimited,
    RegistrationServiceError,
)
from app.core.scheduler import start_scheduler, stop_scheduler
from app.db.database import Base, SessionLocal, engine
from app.services.notification_consumers import register_default_subscribers
from app.services.registration_events import event_bus
from app import models  # noqa: F401

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
)

allowed_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

# In production, get allowed origins from environment
if settings.is_production:
    frontend_urls = os.getenv("ALLOWED_ORIGINS", "").split(",")
    if frontend_urls and frontend_urls[0]:
        allowed_origins = [url.strip() for url in frontend_urls if url.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Admin-Key"],
    expose_headers=["X-Process-Time", "Retry-After", "X-RateLimit-Remaining"],
    max_age=3600,
)

# Request logging middleware (AFTER CORS)
@app.middleware("http")
async def log_requests(request: Request, call_next: Callable) -> Response:
    """Log all requests with timing"""
    start_time = time.time()
    client = request.client.host if request.client else "unknown"
    logger.info(f"{request.method} {request.url.path} from {client}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Time: {process_time:.4f}s"
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response


STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.UNAVAILABLE: 400,
    ErrorCategory.DUPLICATE: 409,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.RATE_LIMITED: 429,
    ErrorCategory.FORBIDDEN: 403,
    ErrorCategory.STORAGE: 500,
}


def error_status(exc: RegistrationServiceError) -> int:
    if isinstance(exc, EventUnavailable):
        return 404
    return STATUS_BY_CATEGORY.get(exc.category, 400)


# Error handlers
@app.exception_handler(RegistrationServiceError)
async def registration_error_handler(request: Request, exc: RegistrationServiceError):
    """Map domain errors onto HTTP responses"""
    status_code = error_status(exc)
    message = exc.message
    headers = None

    if exc.category == ErrorCategory.STORAGE:
        logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
        message = "Something went wrong on our end"
    elif isinstance(exc, RateLimited):
        logger.warning(f"Rate limit hit on {request.url.path}")
        headers = {
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Remaining": str(exc.remaining),
        }
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")

    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "errorCode": exc.error_code},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "message": first.get("msg", "Invalid input"),
            "errorCode": "VALIDATION_ERROR",
            "details": [
                {"field": ".".join(str(p) for p in e.get("loc", ())[1:]), "message": e.get("msg")}
                for e in errors
            ],
        },
    )


@app.on_event("startup")
async def startup_event():
    """Create tables, attach registration subscribers and start background jobs"""
    logger.info(f"Starting {settings.PROJECT_NAME}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"API V1 prefix: {settings.API_V1_STR}")

    Base.metadata.create_all(bind=engine)
    register_default_subscribers(event_bus, session_factory=SessionLocal)
    start_scheduler()

    logger.info("Application startup completed")


@app.on_event("shutdown")
async def shutdown_event():
    stop_scheduler()


# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)

# Basic routes
@app.get("/")
def read_root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "docs_url": "/docs",
        "status": "running",
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "database": "connected",
            "timestamp": time.time(),
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "environment": settings.ENVIRONMENT,
            "database": "error",
            "timestamp": time.time(),
        }

# For local development
if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    host = "0.0.0.0" if settings.is_production else "127.0.0.1"

    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.LOG_LEVEL.lower(),
    )
