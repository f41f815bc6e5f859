# coastwatch/services/realtime.py
import asyncio
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, Set

logger = logging.getLogger("coastwatch.realtime")

REPORTS_TABLE = "hazard_reports"
ALERTS_TABLE = "alerts"

# столько событий ждут отправки одному подписчику; дальше он считается зависшим
MAX_PENDING_EVENTS = 256


class Subscription:
    """Очередь событий одного подписчика, привязанная к его event loop."""

    def __init__(self, table: str, loop: asyncio.AbstractEventLoop, maxsize: int = MAX_PENDING_EVENTS) -> None:
        self.table = table
        self.loop = loop
        self.queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue(maxsize=maxsize)
        # выставляется, когда очередь переполнилась и подписка снята
        self.dropped = False

    async def get(self) -> Dict[str, Any]:
        return await self.queue.get()


class ChangeFeed:
    """
    Лента изменений по таблицам: INSERT/UPDATE рассылаются всем подпискам таблицы.
    publish() можно звать из sync-роутов (threadpool): доставка идёт через
    call_soon_threadsafe в loop подписчика.
    """

    def __init__(self, max_pending: int = MAX_PENDING_EVENTS) -> None:
        self._subs: Dict[str, Set[Subscription]] = {}
        self._lock = threading.Lock()
        self.max_pending = max_pending

    def subscribe(self, table: str) -> Subscription:
        sub = Subscription(table, asyncio.get_running_loop(), self.max_pending)
        with self._lock:
            self._subs.setdefault(table, set()).add(sub)
            total = len(self._subs[table])
        logger.info("%s subscriber connected; total=%d", table, total)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._subs.get(sub.table)
            if subs is None or sub not in subs:
                return
            subs.discard(sub)
            total = len(subs)
        logger.info("%s subscriber disconnected; total=%d", sub.table, total)

    def subscriber_count(self, table: str) -> int:
        with self._lock:
            return len(self._subs.get(table, ()))

    def _offer(self, sub: Subscription, payload: Dict[str, Any]) -> None:
        # выполняется в loop подписчика
        if sub.dropped:
            return
        try:
            sub.queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning("%s subscriber is not reading, dropping it", sub.table)
            sub.dropped = True
            self.unsubscribe(sub)

    def publish(self, table: str, event: str, record: Dict[str, Any]) -> int:
        payload = {
            "event": event,
            "table": table,
            "new": record,
            "ts": datetime.now(timezone.utc).isoformat(),
        }
        with self._lock:
            targets = list(self._subs.get(table, ()))
        delivered = 0
        for sub in targets:
            try:
                sub.loop.call_soon_threadsafe(self._offer, sub, payload)
                delivered += 1
            except RuntimeError:
                # loop подписчика уже закрыт
                self.unsubscribe(sub)
        return delivered


change_feed = ChangeFeed()
