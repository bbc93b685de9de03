"""Database engine and session management."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from tableside.core.config import settings
from tableside.services.errors import SettlementError, StoreError

logger = logging.getLogger(__name__)

connect_args: dict[str, bool] = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and ensure proper cleanup."""
    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session, action: str) -> Iterator[Session]:
    """Run one unit of work: commit on success, roll back everything on any failure.

    Domain errors propagate unchanged. Unexpected store errors are logged with
    their traceback and re-raised as a generic StoreError.
    """
    try:
        yield db
        db.commit()
    except SettlementError:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[STORE] %s failed", action)
        raise StoreError(f"Failed to {action}") from exc
