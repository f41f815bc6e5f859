from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coastwatch.db.session import get_db
from coastwatch.models.account import Account
from coastwatch.models.profile import Profile
from coastwatch.models.enums import UserRole
from coastwatch.schemas.user import MeOut, ProfileOut, UserWithRolesOut, GrantRoleRequest
from coastwatch.core.deps import get_current_user, require_role
from coastwatch.services.roles import resolve_role, list_roles, highest_role, grant_role

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=MeOut)
def me(user: Account = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = db.get(Profile, user.id)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return MeOut(profile=ProfileOut.model_validate(profile), role=resolve_role(db, user.id))


@router.get("/", response_model=List[UserWithRolesOut], dependencies=[Depends(require_role(UserRole.admin))])
def list_users(db: Session = Depends(get_db)):
    out = []
    for profile in db.query(Profile).order_by(Profile.created_at.desc()).all():
        roles = list_roles(db, profile.id)
        out.append(UserWithRolesOut(
            profile=ProfileOut.model_validate(profile),
            role=highest_role(roles),
            roles=roles,
        ))
    return out


@router.put("/{user_id}/roles", response_model=UserWithRolesOut, dependencies=[Depends(require_role(UserRole.admin))])
def assign_role(user_id: UUID, payload: GrantRoleRequest, db: Session = Depends(get_db)):
    profile = db.get(Profile, user_id)
    if not profile:
        raise HTTPException(status_code=404, detail="User not found")
    grant_role(db, user_id, payload.role)
    roles = list_roles(db, user_id)
    return UserWithRolesOut(profile=ProfileOut.model_validate(profile), role=highest_role(roles), roles=roles)
