# Shared route dependencies

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.core.config import Settings
from app.core.security import TokenError, decode_access_token
import structlog

logger = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


class CurrentUser(BaseModel):
    """Identity carried by a bearer token; org_id is the tenant boundary"""
    id: str
    email: str
    org_id: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_user(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
        settings: Settings = Depends(get_settings)
) -> CurrentUser:
    """Decode the bearer token or reject the request with 401"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )

    try:
        claims = decode_access_token(settings, credentials.credentials)
    except TokenError as e:
        logger.info("token_rejected", reason=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return CurrentUser(id=claims["id"], email=claims.get("email", ""), org_id=claims["orgId"])
