import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from feedback_hub.core.config import settings

# Support both PostgreSQL and SQLite via centralized settings
DATABASE_URL = settings.database_url

if DATABASE_URL.startswith("postgresql"):
    engine = create_engine(DATABASE_URL, pool_pre_ping=True)
else:
    # SQLite configuration for local development/testing
    engine = create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False}
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    Session Provider: Provides a database session per request.
    Transaction management is handled explicitly in the Service Layer.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from feedback_hub.models import user, organization, cycle, feedback, hierarchy  # noqa: F401
    Base.metadata.create_all(bind=engine)


class UnitOfWork:
    """
    Explicit transaction boundary shared by every store and service taking part in one use case.

    Usage:
        with UnitOfWork(db) as uow:
            feedback = feedback_store.create(data, uow=uow)
            content_store.create({...}, uow=uow)

    Commits once on clean exit, rolls back if the block raises. Nested use of the same
    unit (passing ``uow`` down the call chain) never commits early.
    """

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    def __enter__(self) -> "UnitOfWork":
        self._depth += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._depth -= 1
        if self._depth > 0:
            return False
        if exc_type is None:
            try:
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
        else:
            self.session.rollback()
        return False

    def flush(self) -> None:
        self.session.flush()


def session_for(db: Session, uow: Optional[UnitOfWork]) -> Session:
    """The session a write should use: the unit's when one is in play, else the caller's."""
    return uow.session if uow is not None else db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())
