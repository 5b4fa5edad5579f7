"""SQLite connection, session management and the unit-of-work helper."""

from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings


def configure_sqlite_transactions(target: Engine) -> None:
    """
    Make every transaction on target start with BEGIN IMMEDIATE.

    pysqlite normally defers BEGIN until the first INSERT/UPDATE, so the reads that
    validate a write (ancestor walk, descendant load) would run outside the transaction.
    Taking the write lock up front serializes read-validate-write units of work.
    """

    @event.listens_for(target, "connect")
    def _disable_pysqlite_begin(dbapi_connection, _connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(target, "begin")
    def _begin_immediate(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = create_engine(
    settings.DATABASE_URL,
    # FastAPI runs sync dependencies in a threadpool; one session never spans threads.
    # timeout: seconds a writer waits for another transaction's lock.
    connect_args={"check_same_thread": False, "timeout": settings.DB_LOCK_TIMEOUT_SEC},
    echo=settings.DEBUG,
)
configure_sqlite_transactions(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Scoped unit of work: commit when the block exits normally, roll back on any
    exception and let it propagate. Nothing written inside the block survives a failure.
    """
    try:
        yield db
        db.commit()
    except BaseException:
        db.rollback()
        raise


def init_db() -> None:
    """Create all tables that do not exist yet."""
    from app.models import Base

    Base.metadata.create_all(bind=engine)


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
