from typing import Literal

from pydantic import BaseModel, Field

OrganizationRole = Literal["agency", "hotel"]


class SetRoleRequest(BaseModel):
    organization_id: str | None = Field(default=None, alias="organizationId")
    role: str | None = None


class SetRoleResponse(BaseModel):
    success: bool = True
