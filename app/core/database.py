import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.core.config import settings
from app.core.exceptions import DeadlineExceeded

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite gets a busy timeout so concurrent writers wait on the lock"""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": settings.DB_BUSY_TIMEOUT_SECONDS,
        }
    return create_engine(database_url, echo=echo, connect_args=connect_args)


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """Commit on success, roll back everything on any error and re-raise"""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


class Deadline:
    """Absolute time budget for one unit of work, checked between storage steps"""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        self.expires_at = time.monotonic() + timeout_seconds

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    def expired(self) -> bool:
        return self.remaining() <= 0

    def check(self, step: str = "") -> None:
        if self.expired():
            raise DeadlineExceeded(
                f"Request deadline of {self.timeout_seconds:.1f}s exceeded"
                + (f" during {step}" if step else "")
            )


def apply_deadline(db: Session, deadline: Optional[Deadline]) -> None:
    """Bound statements in the current transaction by the remaining deadline"""
    if deadline is None:
        return
    deadline.check("transaction start")
    if db.get_bind().dialect.name == "postgresql":
        remaining_ms = max(1, int(deadline.remaining() * 1000))
        db.execute(text(f"SET LOCAL statement_timeout = {remaining_ms}"))
        logger.debug(f"statement_timeout set to {remaining_ms}ms")
