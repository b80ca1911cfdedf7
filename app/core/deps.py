# File: app/core/deps.py
import secrets
from typing import Optional
from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from app.core.config import settings
from app.core.exceptions import RateLimited
from app.core.rate_limit import RateLimiter, get_client_identifier, get_rate_limiter
from app.core.security import SCANNER_TOKEN_TYPE, decode_token
from app.schemas.scanner import ScannerContext

security = HTTPBearer()


def get_current_scanner(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> ScannerContext:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate scanner credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != SCANNER_TOKEN_TYPE:
        raise credentials_exception

    operator_id: Optional[str] = payload.get("sub")
    event_id = payload.get("event_id")
    if operator_id is None or event_id is None:
        raise credentials_exception

    return ScannerContext(operator_id=operator_id, event_id=int(event_id))


def require_admin_key(x_admin_key: Optional[str] = Header(None)) -> None:
    """Guard for staff-only endpoints"""
    if not settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin access is not configured"
        )
    if not x_admin_key or not secrets.compare_digest(x_admin_key, settings.ADMIN_API_KEY):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin key")


def registration_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter)
) -> None:
    """Allow REGISTRATION_RATE_LIMIT attempts per client per window"""
    key = f"register:{get_client_identifier(request)}"
    result = limiter.check(key, settings.REGISTRATION_RATE_LIMIT, settings.REGISTRATION_RATE_WINDOW_SECONDS)
    if not result.success:
        raise RateLimited(retry_after=result.retry_after(limiter.clock()), remaining=result.remaining)
