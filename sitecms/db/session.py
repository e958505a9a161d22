# sitecms/db/session.py
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from .base import Base
from ..core.config import settings

log = logging.getLogger("sitecms.db")

SQLITE_FALLBACK_URL = "sqlite:///./sitecms.db"


def _enable_sqlite_foreign_keys(dbapi_conn, _record):
    # SQLite mặc định tắt FK -> ON DELETE SET NULL của activity_log không chạy
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def build_engine(url_str: str, **kwargs) -> Engine:
    url = make_url(url_str)
    backend = url.get_backend_name()
    connect_args = kwargs.pop("connect_args", {})

    if backend == "sqlite":
        connect_args.setdefault("check_same_thread", False)
    elif backend == "mysql":
        connect_args.setdefault("charset", "utf8mb4")
        kwargs.setdefault("pool_recycle", 3600)
        kwargs.setdefault("pool_pre_ping", True)

    eng = create_engine(url, connect_args=connect_args, **kwargs)
    if backend == "sqlite":
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
    return eng


engine = build_engine(settings.DB_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def bind_engine(new_engine: Engine) -> None:
    """Đổi engine dùng chung (fallback SQLite, test)."""
    global engine
    engine = new_engine
    SessionLocal.configure(bind=new_engine)


def init_db() -> Engine:
    """Tạo bảng còn thiếu. MySQL không lên + DB_FALLBACK_SQLITE=1 -> chạy tạm bằng SQLite."""
    import sitecms.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
    except OperationalError as e:
        backend = engine.url.get_backend_name()
        log.error("DB init failed on %s: %s", backend, e)
        if backend != "mysql" or not settings.DB_FALLBACK_SQLITE:
            raise
        log.warning("Falling back to SQLite: %s", SQLITE_FALLBACK_URL)
        bind_engine(build_engine(SQLITE_FALLBACK_URL))
        Base.metadata.create_all(bind=engine)

    log.info("DB init OK with %s", engine.url.render_as_string(hide_password=True))
    return engine


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
