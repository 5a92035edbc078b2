"""User profile schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

__all__ = ["UpdateRoleRequest", "UserProfileOut"]


class UpdateRoleRequest(BaseModel):
    """Request body for changing a user's role.

    The value is checked by the service so an unknown role maps to
    E_INVALID_ROLE.
    """

    role: str | None = None


class UserProfileOut(BaseModel):
    """Response schema for a user profile."""

    id: UUID
    role: str
    display_name: str | None
    avatar_url: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
