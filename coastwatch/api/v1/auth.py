# coastwatch/api/v1/auth.py
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coastwatch.db.session import get_db
from coastwatch.models.account import Account
from coastwatch.models.refresh_token import RefreshToken
from coastwatch.schemas.auth import LoginRequest, TokenPair, RefreshRequest, SignupRequest
from coastwatch.core.security import verify_password, hash_token
from coastwatch.core.tokens import create_access_token, create_refresh_token
from coastwatch.services.accounts import create_account, AccountExistsError
from coastwatch.services.roles import resolve_role

router = APIRouter(prefix="/auth", tags=["auth"])


def _as_aware(dt: datetime) -> datetime:
    # sqlite отдаёт наивные datetime, считаем их UTC
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _issue_tokens(db: Session, user: Account) -> TokenPair:
    role = resolve_role(db, user.id)
    access = create_access_token(sub=str(user.id), role=role.value)
    refresh_raw, expires_at = create_refresh_token(sub=str(user.id))

    # сохраняем refresh как хеш + дата истечения
    db.add(RefreshToken(
        user_id=user.id,
        token_hash=hash_token(refresh_raw),
        expires_at=expires_at,
        revoked=False,
    ))
    db.commit()
    return TokenPair(access_token=access, refresh_token=refresh_raw)


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    try:
        user = create_account(db, email=payload.email, password=payload.password, full_name=payload.full_name)
    except AccountExistsError:
        raise HTTPException(status_code=400, detail="Email already registered")
    return {"id": str(user.id), "email": user.email, "role": resolve_role(db, user.id).value}


@router.post("/login", response_model=TokenPair)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    email = payload.email.strip().lower()
    user = db.query(Account).filter(Account.email == email, Account.is_active.is_(True)).first()
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return _issue_tokens(db, user)


@router.post("/refresh", response_model=TokenPair)
def refresh(payload: RefreshRequest, db: Session = Depends(get_db)):
    token_hash = hash_token(payload.refresh_token)
    now = datetime.now(timezone.utc)

    rt = db.query(RefreshToken).filter(
        RefreshToken.token_hash == token_hash,
        RefreshToken.revoked.is_(False),
    ).first()
    if not rt or _as_aware(rt.expires_at) <= now:
        raise HTTPException(status_code=401, detail="Invalid/expired refresh token")

    user = db.query(Account).filter(Account.id == rt.user_id, Account.is_active.is_(True)).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    # rotate refresh
    rt.revoked = True
    return _issue_tokens(db, user)
