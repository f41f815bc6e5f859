from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from coastwatch.core.config_env import settings


def _engine_kwargs(url: str) -> dict:
    # sqlite connections are shared with the threadpool that runs sync routes
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.DATABASE_URL, future=True, **_engine_kwargs(settings.DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Создаёт таблицы по метаданным моделей (dev / tests; в проде alembic)."""
    # регистрируем все модели в metadata
    from coastwatch.models import account, profile, user_role, hazard_report, alert, refresh_token, system_settings  # noqa: F401
    Base.metadata.create_all(bind=engine)
