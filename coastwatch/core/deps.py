# coastwatch/core/deps.py
import logging
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jose import jwt, JWTError

from coastwatch.db.session import get_db
from coastwatch.models.account import Account
from coastwatch.models.enums import UserRole
from coastwatch.core.config_env import settings
from coastwatch.services.roles import resolve_role, role_satisfies

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

logger = logging.getLogger("auth")


def _log(msg: str, **kw):
    if settings.DEBUG_AUTH:
        safe_kw = {k: (v if k != "token" else f"{str(v)[:16]}...") for k, v in kw.items()}
        logger.info("[auth] " + msg + " " + " ".join(f"{k}={v}" for k, v in safe_kw.items()))

def get_current_user(
    db: Session = Depends(get_db),
    token: str = Depends(oauth2_scheme),
) -> Account:
    credentials_exc = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    _log("incoming token", token=token, len=len(token) if token else 0)

    # 1) Декод токена
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
        tok_type = payload.get("type")
        sub_raw = payload.get("sub")
        if tok_type != "access" or not sub_raw:
            _log("bad claims", type=tok_type, sub=sub_raw)
            raise credentials_exc
        user_uuid = UUID(str(sub_raw))
    except JWTError as e:
        _log("JWTError on decode", err=str(e))
        raise credentials_exc
    except ValueError as e:
        _log("UUID parse failed", err=str(e))
        raise credentials_exc

    # 2) Поиск аккаунта
    user = db.query(Account).filter(Account.id == user_uuid, Account.is_active.is_(True)).first()
    if not user:
        _log("user not found -> 401", sub=user_uuid)
        raise credentials_exc

    _log("user resolved", user_id=user.id, email=user.email)
    return user


def get_current_role(
    user: Account = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserRole:
    return resolve_role(db, user.id)


def require_role(required: UserRole):
    """Доступ, если ранг роли пользователя >= требуемого (admin > authority > citizen)."""

    def dep(user: Account = Depends(get_current_user), db: Session = Depends(get_db)) -> Account:
        role = resolve_role(db, user.id)
        if not role_satisfies(role, required):
            _log("role denied", have=role.value, need=required.value)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return dep
