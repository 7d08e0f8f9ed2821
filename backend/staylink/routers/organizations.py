import logging
from typing import get_args

from fastapi import APIRouter, Depends, HTTPException

from staylink.dependencies import RequestContext, get_request_context
from staylink.schemas.organization import OrganizationRole, SetRoleRequest, SetRoleResponse
from staylink.services.identity_client import IdentityError, identity_client

logger = logging.getLogger(__name__)

router = APIRouter()

ORG_ADMIN_ROLES = {"org:admin", "admin"}


@router.post("/set-role", response_model=SetRoleResponse)
async def set_organization_role(
    req: SetRoleRequest,
    ctx: RequestContext = Depends(get_request_context),
):
    if not req.organization_id or not req.role:
        raise HTTPException(status_code=400, detail="Missing organizationId or role")

    if req.role not in get_args(OrganizationRole):
        raise HTTPException(status_code=400, detail="Invalid role. Must be 'agency' or 'hotel'")

    # the hotel gate reads this metadata, so only admins of the active org may write it
    if req.organization_id != ctx.org_id:
        raise HTTPException(status_code=403, detail="Can only set the role of your active organization")
    if ctx.org_role not in ORG_ADMIN_ROLES:
        raise HTTPException(status_code=403, detail="Only organization admins can set the role")

    try:
        await identity_client.update_organization_metadata(
            req.organization_id, {"role": req.role}
        )
    except IdentityError as e:
        logger.error(f"Error setting organization role: {e}")
        raise HTTPException(status_code=500, detail="Failed to set organization role")

    return SetRoleResponse()
