# db/session.py
# -*- coding: utf-8 -*-
"""
SQLAlchemy engine / session setup

- DATABASE_URL set           -> use it as-is (hosted PostgreSQL etc.)
- MySQL settings all present -> mysql+pymysql
- fallback                   -> SQLite file (SQLITE_PATH, default ./campus_portal.db)

All three engines go through the same models and the same SqlStore adapter,
only the URL changes.
"""

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from core.config import (
    DATABASE_URL,
    DB_HOST,
    DB_PORT,
    DB_USER,
    DB_PASSWORD,
    DB_NAME,
    SQLITE_PATH,
    DB_ECHO,
)

# ---------------------------------------------------------
# 1) pick the backend
# ---------------------------------------------------------

if DATABASE_URL:
    DB_BACKEND = DATABASE_URL.split(":", 1)[0].split("+", 1)[0]
    RESOLVED_DATABASE_URL = DATABASE_URL
elif DB_HOST and DB_USER and DB_PASSWORD and DB_NAME:
    DB_BACKEND = "mysql"
    RESOLVED_DATABASE_URL = (
        f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        "?charset=utf8mb4"
    )
else:
    DB_BACKEND = "sqlite"
    RESOLVED_DATABASE_URL = f"sqlite:///{SQLITE_PATH}"


# ---------------------------------------------------------
# 2) engine factory
# ---------------------------------------------------------

def make_engine(url: str, echo: bool = DB_ECHO) -> Engine:
    """
    Build an engine for `url`.

    SQLite needs check_same_thread=False for FastAPI's threadpool and
    `PRAGMA foreign_keys=ON` on every connection, otherwise ON DELETE CASCADE
    is silently ignored.
    """
    engine_kwargs = {
        "echo": echo,
        "future": True,
        "pool_pre_ping": True,
    }

    if url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
    else:
        # recycle pooled connections on MySQL / PostgreSQL
        engine_kwargs["pool_recycle"] = 3600

    engine = create_engine(url, **engine_kwargs)

    if url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_sqlite_fk(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=Session,
    )


# ---------------------------------------------------------
# 3) default engine / SessionLocal
# ---------------------------------------------------------

engine = make_engine(RESOLVED_DATABASE_URL)
SessionLocal = make_session_factory(engine)


# ---------------------------------------------------------
# 4) FastAPI Depends
# ---------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    One session per request.

        from db.session import get_db

        @router.get("/items")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
