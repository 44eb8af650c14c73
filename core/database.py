from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.orm.exc import StaleDataError

from core.config import settings
from core.exceptions import ConflictError
from utils.logger import get_logger

logger = get_logger(__name__)

if settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
else:
    connect_args = {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)


def enable_sqlite_foreign_keys(target_engine):
    """SQLite ignores ON DELETE SET NULL unless the pragma is on for every connection."""
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@contextmanager
def transaction(db: Session):
    """
    Unit of work for one top-level mutation.

    Everything flushed inside the block (the aggregate row and every counter or
    stock adjustment it triggers) commits together or not at all.
    """
    try:
        yield db
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Optimistic concurrency conflict", extra={"error": str(exc)})
        raise ConflictError("Record was modified by another request, reload and retry")
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity constraint violated", extra={"error": str(exc.orig)})
        raise ConflictError("Record conflicts with an existing one")
    except Exception:
        db.rollback()
        raise
