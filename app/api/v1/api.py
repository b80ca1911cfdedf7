# File: app/api/v1/api.py
from fastapi import APIRouter
from app.api.v1.endpoints import checkin, credentials, public_registration, registrations_import, scanner

# Create main API router
api_router = APIRouter()

api_router.include_router(
    public_registration.router,
    prefix="/events",
    tags=["public-registration"]
)

api_router.include_router(
    credentials.router,
    tags=["credentials"]
)

api_router.include_router(
    scanner.router,
    prefix="/scanner",
    tags=["scanner"]
)

api_router.include_router(
    checkin.router,
    prefix="/checkin",
    tags=["checkin"]
)

api_router.include_router(
    registrations_import.router,
    prefix="/admin/registrations",
    tags=["admin-import"]
)
