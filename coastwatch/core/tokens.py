# coastwatch/core/tokens.py
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional, Tuple
from jose import jwt, JWTError

from coastwatch.core.config_env import settings


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

def _to_epoch_seconds(dt: datetime) -> int:
    return int(dt.timestamp())

def create_access_token(sub: str, role: str, extra: Dict[str, Any] | None = None) -> str:
    """
    Возвращает JWT-строку. iat/exp: числовые секунды, UTC.
    `role`: роль на момент выдачи; сервер всё равно перепроверяет её по БД.
    """
    now = _now_utc()
    exp = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: Dict[str, Any] = {
        "sub": sub,
        "role": role,
        "type": "access",
        "iat": _to_epoch_seconds(now),
        "exp": _to_epoch_seconds(exp),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def create_refresh_token(sub: str) -> Tuple[str, datetime]:
    """
    Возвращает пару (refresh_token, expires_at_utc).
    """
    now = _now_utc()
    exp = now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    payload = {
        "sub": sub,
        "type": "refresh",
        # jti: два refresh-токена, выданные в одну секунду, не должны совпасть
        "jti": uuid.uuid4().hex,
        "iat": _to_epoch_seconds(now),
        "exp": _to_epoch_seconds(exp),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)
    return token, exp

def decode_access_token(token: Optional[str]) -> Optional[dict]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except JWTError:
        return None
    if payload.get("type") != "access" or not payload.get("sub"):
        return None
    return payload
