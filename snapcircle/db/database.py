"""Database engine and session configuration."""

from collections.abc import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from snapcircle.config import settings


def _connect_args(url: str) -> dict:
    if url.startswith("sqlite"):
        return {"check_same_thread": False}  # required for SQLite
    return {}


def configure_sqlite(target: Engine) -> Engine:
    """SQLite 연결 설정: FK 강제, SAVEPOINT 지원.

    pysqlite의 암묵적 BEGIN을 끄고 트랜잭션 시작을 SQLAlchemy가 직접 발행한다.
    그래야 Session.begin_nested()가 바깥 트랜잭션 안의 SAVEPOINT로 동작한다.
    """

    @event.listens_for(target, "connect")
    def _on_connect(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(target, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return target


def build_engine(url: str, echo: bool = False) -> Engine:
    created = create_engine(url, connect_args=_connect_args(url), echo=echo)
    if url.startswith("sqlite"):
        configure_sqlite(created)
    return created


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """요청 단위 세션. 커밋은 핸들러 몫이고, 여기서는 닫기만 한다."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
