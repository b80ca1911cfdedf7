# File: app/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from app.core.config import settings

SCANNER_TOKEN_TYPE = "scanner"


def create_scanner_token(operator_id: str, event_id: int, expires_delta: Optional[timedelta] = None) -> Dict[str, Any]:
    """Issue a signed token binding a scanner operator to one event"""
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(hours=settings.SCANNER_TOKEN_EXPIRE_HOURS))
    to_encode = {
        "sub": operator_id,
        "event_id": event_id,
        "type": SCANNER_TOKEN_TYPE,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return {"access_token": encoded_jwt, "expires_at": expire}


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
