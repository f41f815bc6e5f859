import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from coastwatch.models.enums import UserRole
from coastwatch.models.user_role import UserRoleGrant

logger = logging.getLogger("coastwatch.roles")

# admin > authority > citizen; права накопительные
ROLE_RANK = {
    UserRole.citizen: 1,
    UserRole.authority: 2,
    UserRole.admin: 3,
}


def _as_role(val: Union[UserRole, str, None]) -> Optional[UserRole]:
    if val is None:
        return None
    if isinstance(val, UserRole):
        return val
    try:
        return UserRole(str(val).lower())
    except ValueError:
        return None


def role_satisfies(role: Union[UserRole, str, None], required: Union[UserRole, str]) -> bool:
    have = _as_role(role)
    need = _as_role(required)
    if have is None or need is None:
        return False
    return ROLE_RANK[have] >= ROLE_RANK[need]


def highest_role(roles: List[Union[UserRole, str]]) -> UserRole:
    known = [r for r in (_as_role(x) for x in roles) if r is not None]
    if not known:
        return UserRole.citizen
    return max(known, key=lambda r: ROLE_RANK[r])


def list_roles(db: Session, user_id: UUID) -> List[UserRole]:
    rows = db.query(UserRoleGrant.role).filter(UserRoleGrant.user_id == user_id).all()
    return [r[0] for r in rows]


def resolve_role(db: Session, user_id: Optional[UUID]) -> UserRole:
    """Старшая роль пользователя; citizen, если строк нет или запрос упал."""
    if user_id is None:
        return UserRole.citizen
    try:
        return highest_role(list_roles(db, user_id))
    except SQLAlchemyError as e:
        logger.warning("role lookup failed for %s, falling back to citizen: %s", user_id, e)
        db.rollback()
        return UserRole.citizen


def has_role(db: Session, user_id: Optional[UUID], required: Union[UserRole, str]) -> bool:
    return role_satisfies(resolve_role(db, user_id), required)


def grant_role(db: Session, user_id: UUID, role: UserRole) -> UserRoleGrant:
    """Идемпотентно: пара (user_id, role) уникальна."""
    existing = (
        db.query(UserRoleGrant)
        .filter(UserRoleGrant.user_id == user_id, UserRoleGrant.role == role)
        .first()
    )
    if existing:
        return existing
    grant = UserRoleGrant(user_id=user_id, role=role)
    db.add(grant)
    try:
        db.commit()
    except IntegrityError:
        # параллельная выдача той же роли
        db.rollback()
        return (
            db.query(UserRoleGrant)
            .filter(UserRoleGrant.user_id == user_id, UserRoleGrant.role == role)
            .one()
        )
    db.refresh(grant)
    logger.info("granted role %s to %s", role.value, user_id)
    return grant
