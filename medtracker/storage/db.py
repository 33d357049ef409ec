"""
永続化DB（medtracker.db）接続とセッション管理

服薬リストはキー/値ストアの1キーとして丸ごと保存する。
ここでは SQLite の接続とセッションスコープだけを扱う。
"""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker


logger = logging.getLogger(__name__)

# medtracker.db 用 Base
StorageBase = declarative_base()

# グローバルセッション（medtracker.db 用）
StorageSessionLocal: sessionmaker | None = None
_engine: Engine | None = None


def get_storage_db_url(db_path: str | Path) -> str:
    """SQLite ファイルパスから SQLAlchemy URL を返す。"""

    return f"sqlite:///{Path(db_path)}"


def init_storage_db(db_path: str | Path) -> None:
    """
    medtracker.db を初期化する（起動時）。

    - 保存先ディレクトリを作る
    - セッションファクトリを作成する
    - テーブルを作成する
    """

    global StorageSessionLocal, _engine

    # --- 既存エンジンがあれば閉じる（再初期化/テスト向け） ---
    dispose_storage_db()

    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    db_url = get_storage_db_url(path)
    connect_args = {"check_same_thread": False, "timeout": 10.0}
    _engine = create_engine(db_url, future=True, connect_args=connect_args)
    StorageSessionLocal = sessionmaker(bind=_engine, autoflush=False, autocommit=False, future=True)

    # テーブル群を作成（モデル import が必要）
    import medtracker.storage.models  # noqa: F401

    StorageBase.metadata.create_all(bind=_engine)
    logger.info("storage DB initialized: %s", db_url)


def dispose_storage_db() -> None:
    """エンジンを破棄してセッションファクトリを外す。"""

    global StorageSessionLocal, _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
    StorageSessionLocal = None


@contextlib.contextmanager
def storage_session_scope() -> Iterator[Session]:
    """
    medtracker.db のセッションスコープ（with文用）。

    正常終了時はコミット、例外時はロールバックする。
    """

    if StorageSessionLocal is None:
        raise RuntimeError("Storage database not initialized. Call init_storage_db() first.")
    session = StorageSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
