import logging
from typing import Optional

import telebot
from telebot.apihelper import ApiException
from requests import RequestException
from sqlalchemy.orm import Session

from coastwatch.core.config_env import settings
from coastwatch.models.alert import Alert
from coastwatch.models.system_settings import SystemSettings

logger = logging.getLogger("coastwatch.notify")


def _make_bot(token: str) -> telebot.TeleBot:
    return telebot.TeleBot(token)


def load_system_settings(db: Session) -> SystemSettings:
    st = db.get(SystemSettings, 1)
    if not st:
        st = SystemSettings(id=1, telegram_enabled=True)
        db.add(st); db.commit(); db.refresh(st)
    return st


def telegram_target(db: Session) -> Optional[str]:
    """chat_id для зеркалирования алертов или None, если канал выключен."""
    if not settings.TELEGRAM_TOKEN:
        return None
    st = db.get(SystemSettings, 1)
    if st is not None and not st.telegram_enabled:
        return None
    chat_id = (st.telegram_chat_id if st is not None else None) or settings.TELEGRAM_CHAT_ID_ADMIN
    return chat_id or None


def format_alert(alert: Alert) -> str:
    audience = "All Citizens" if (alert.sent_to or "all") == "all" else f"{alert.sent_to} citizens"
    ts = alert.created_at.strftime("%Y-%m-%d %H:%M:%S UTC") if alert.created_at else ""
    return f"⚠️ Coastal hazard alert\n{alert.alert_message}\nTo: {audience}\nTime: {ts}"


def send_alert_notification(db: Session, alert: Alert) -> bool:
    chat_id = telegram_target(db)
    if not chat_id:
        return False
    try:
        bot = _make_bot(settings.TELEGRAM_TOKEN)
        bot.send_message(chat_id=chat_id, text=format_alert(alert))
        return True
    except RequestException as e:
        logger.warning("telegram send failed (network): %s", e)
    except ApiException as e:
        logger.warning("telegram send failed: %s", e)
    return False
