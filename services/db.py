# services/db.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """SQLAlchemy Declarative Base"""
    pass


_engine: Optional[Engine] = None
_Session: Optional[sessionmaker] = None


# -----------------------------
# URL 解析
# -----------------------------
def _to_sqlite_url(db_file: str | Path) -> str:
    """本機檔案路徑 -> sqlite URL（絕對路徑、正斜線）。"""
    p = Path(db_file).expanduser().resolve()
    return f"sqlite:///{p.as_posix()}"


def resolve_database_url() -> str:
    """
    優先順序：
    1) DATABASE_URL
    2) DIGITORA_DB_FILE（檔名或路徑） -> sqlite URL
    3) 專案根目錄下的 digitora.db
    """
    env_url = os.getenv("DATABASE_URL")
    if env_url:
        return env_url

    db_file = os.getenv("DIGITORA_DB_FILE")
    if db_file:
        return _to_sqlite_url(db_file)

    project_root = Path(__file__).resolve().parents[1]
    return _to_sqlite_url(project_root / "digitora.db")


# -----------------------------
# 初始化與 Session
# -----------------------------
def init_db(uri: Optional[str] = None, echo: bool = False) -> Engine:
    """初始化 Engine 與 Session factory；重複呼叫會換掉舊的 engine（測試會用到）。"""
    global _engine, _Session

    if _engine is not None:
        _engine.dispose()

    uri = uri or resolve_database_url()
    _engine = create_engine(uri, echo=echo)
    _Session = sessionmaker(bind=_engine, autoflush=False, expire_on_commit=False)
    return _engine


def get_session() -> Session:
    """
    取得一個 Session，搭配 with 使用：
        with get_session() as s:
            ...
    """
    assert _Session is not None, "DB not initialized; call init_db() first."
    return _Session()


def get_db_path() -> Optional[str]:
    """目前 engine 指向的 SQLite 檔案路徑；非 SQLite 或未初始化時回 None。"""
    if _engine is None:
        return None
    dbfile = _engine.url.database
    if not dbfile or dbfile == ":memory:":
        return None
    return str(Path(dbfile).resolve())


def create_all() -> None:
    """建立所有資料表（已存在則略過）"""
    from services import models  # noqa: F401  確保模型已載入
    assert _engine is not None, "DB engine not initialized. Call init_db() first."
    Base.metadata.create_all(bind=_engine)
