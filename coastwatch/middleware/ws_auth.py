# coastwatch/middleware/ws_auth.py
from typing import Iterable, Optional
from urllib.parse import parse_qs
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Scope, Receive, Send

from coastwatch.core.tokens import decode_access_token

DEFAULT_PROTECTED = ("/ws/reports", "/ws/alerts")


def token_from_scope(scope: Scope) -> Optional[str]:
    # token из query (?token=...) или Authorization: Bearer ...
    query_string = scope.get("query_string", b"").decode("utf-8")
    if query_string:
        values = parse_qs(query_string).get("token")
        if values:
            return values[0]
    headers = {k.decode().lower(): v.decode() for k, v in scope.get("headers", [])}
    auth = headers.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1]
    return None


class TokenWebSocketAuthMiddleware(BaseHTTPMiddleware):
    """
    Аутентификация вебсокетов: без валидного access-токена соединение закрывается 4401.
    Роль здесь не проверяется: claim в токене мог устареть, права сверяет обработчик по БД.
    """

    def __init__(self, app: ASGIApp, protected_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.protected_paths = frozenset(protected_paths or DEFAULT_PROTECTED)

    async def dispatch(self, request, call_next):
        return await call_next(request)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "websocket":
            return await super().__call__(scope, receive, send)

        if scope.get("path", "") not in self.protected_paths:
            return await self.app(scope, receive, send)

        token = token_from_scope(scope)
        if not token:
            await self._close_with_error(send, code=4401, reason="Missing token")
            return

        payload = decode_access_token(token)
        if payload is None:
            await self._close_with_error(send, code=4401, reason="Invalid token")
            return

        scope.setdefault("auth", {})
        scope["auth"]["user_id"] = payload.get("sub")
        scope["auth"]["role"] = (payload.get("role") or "").lower()

        await self.app(scope, receive, send)

    async def _close_with_error(self, send: Send, code: int, reason: str = ""):
        await send({"type": "websocket.close", "code": code, "reason": reason})
