import asyncio
import logging
from typing import Optional
from uuid import UUID

from fastapi import FastAPI, WebSocket
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles
from starlette.websockets import WebSocketDisconnect

from coastwatch.core.config_env import settings
from coastwatch.db.session import SessionLocal, init_db
from coastwatch.middleware.ws_auth import TokenWebSocketAuthMiddleware
from coastwatch.models.enums import UserRole
from coastwatch.services.realtime import change_feed, Subscription, REPORTS_TABLE, ALERTS_TABLE
from coastwatch.services.roles import has_role
from coastwatch.utils.media import ensure_dir

# -------------------- ЛОГИ --------------------
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger("coastwatch.server")

MEDIA_DIR = ensure_dir(settings.MEDIA_ROOT).resolve()

app = FastAPI(title="CoastWatch")

app.add_middleware(TokenWebSocketAuthMiddleware, protected_paths=("/ws/reports", "/ws/alerts"))
if settings.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
app.mount(settings.MEDIA_URL_PREFIX, StaticFiles(directory=str(MEDIA_DIR)), name="media")

# REST API смонтирован через общий роутер
from coastwatch.api.v1.router import api_router
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def on_startup():
    if settings.AUTO_CREATE_TABLES:
        init_db()
        logger.info("database tables ensured")


# -------------------- ВЕБСОКЕТЫ: ЛЕНТА ИЗМЕНЕНИЙ --------------------
def _ws_user_id(ws: WebSocket) -> Optional[UUID]:
    auth = ws.scope.get("auth") or {}
    try:
        return UUID(str(auth.get("user_id")))
    except ValueError:
        return None


def _check_role(user_id: Optional[UUID], required: UserRole) -> bool:
    # роль в токене могла устареть, сверяемся с БД
    db = SessionLocal()
    try:
        return has_role(db, user_id, required)
    finally:
        db.close()


async def _pump(ws: WebSocket, sub: Subscription) -> None:
    while True:
        try:
            if sub.dropped and sub.queue.empty():
                # отстал от ленты: отдаём накопленное и закрываем, клиент переподключится
                await ws.close(code=1013)
                return
            await ws.send_json(await sub.get())
        except (WebSocketDisconnect, RuntimeError):
            logger.info("%s subscriber gone, stop sending", sub.table)
            return


async def _serve_feed(ws: WebSocket, table: str, required: UserRole) -> None:
    user_id = _ws_user_id(ws)
    if user_id is None or not await run_in_threadpool(_check_role, user_id, required):
        await ws.close(code=4403)
        return

    # подписка до accept: события после рукопожатия не теряются
    sub = change_feed.subscribe(table)
    sender: Optional[asyncio.Task] = None
    try:
        await ws.accept()
        sender = asyncio.create_task(_pump(ws, sub))
        # держим соединение; входящие сообщения (пинги) игнорируем
        while True:
            await ws.receive_text()
    except WebSocketDisconnect as e:
        logger.info("%s feed disconnected: code=%s", table, getattr(e, "code", None))
    finally:
        if sender is not None:
            sender.cancel()
        change_feed.unsubscribe(sub)


@app.websocket("/ws/reports")
async def websocket_reports(ws: WebSocket):
    """
    Подписка панели сотрудника на изменения hazard_reports.
    Сервер отправляет {"event": "INSERT"|"UPDATE", "table": "hazard_reports", "new": {...}, "ts": ...}.
    """
    await _serve_feed(ws, REPORTS_TABLE, UserRole.authority)


@app.websocket("/ws/alerts")
async def websocket_alerts(ws: WebSocket):
    """Подписка на новые алерты: {"event": "INSERT", "table": "alerts", "new": {...}, "ts": ...}."""
    await _serve_feed(ws, ALERTS_TABLE, UserRole.citizen)


# -------------------- СИСТЕМНЫЕ ЭНДПОИНТЫ --------------------
@app.get("/")
async def root():
    return {"message": "CoastWatch backend is running"}
