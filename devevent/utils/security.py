"""
Security utilities and authentication
"""

import secrets

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from devevent.core.config import settings

security = HTTPBearer()

def verify_admin_token(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Verify admin authentication token

    Event writes are refused outright when no ADMIN_TOKEN is configured.
    """
    if not settings.ADMIN_TOKEN or not secrets.compare_digest(
        credentials.credentials.encode("utf-8"), settings.ADMIN_TOKEN.encode("utf-8")
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin token"
        )
    return credentials.credentials
