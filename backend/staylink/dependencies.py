"""Request-scoped context: authenticated user and active organization."""

import logging
from dataclasses import dataclass

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from staylink.config import settings
from staylink.services.identity_client import IdentityError, identity_client

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class RequestContext:
    user_id: str
    org_id: str | None = None
    org_type: str | None = None
    org_role: str | None = None


def decode_session_token(token: str) -> dict:
    """Verify an identity-provider session token and return its claims."""
    return jwt.decode(
        token,
        settings.clerk_jwt_public_key,
        algorithms=[settings.clerk_jwt_algorithm],
        options={"verify_aud": False},
    )


async def get_request_context(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> RequestContext:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    try:
        claims = decode_session_token(credentials.credentials)
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        raise HTTPException(status_code=401, detail="Unauthorized")

    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return RequestContext(
        user_id=user_id,
        org_id=claims.get("org_id"),
        org_role=claims.get("org_role"),
    )


async def require_hotel_context(
    ctx: RequestContext = Depends(get_request_context),
) -> RequestContext:
    """Only members of a hotel organization may manage rooms."""
    if not ctx.org_id:
        raise HTTPException(status_code=400, detail="Organization ID required")
    try:
        ctx.org_type = await identity_client.get_organization_type(ctx.org_id)
    except IdentityError as e:
        logger.error(f"Organization lookup failed for {ctx.org_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to load organization")

    if ctx.org_type != "hotel":
        raise HTTPException(status_code=403, detail="Only hotel organizations can manage rooms")
    return ctx
