from typing import List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from coastwatch.models.enums import UserRole


class ProfileOut(BaseModel):
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MeOut(BaseModel):
    profile: ProfileOut
    role: UserRole


class UserWithRolesOut(BaseModel):
    profile: ProfileOut
    role: UserRole
    roles: List[UserRole]


class GrantRoleRequest(BaseModel):
    role: UserRole
