"""
Per-entity data-access objects.

Every write takes an optional ``uow``. Inside a unit of work the store only flushes and the
unit commits once at the end; on its own the store commits immediately.
"""
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from sqlalchemy.orm import Session

from feedback_hub.database import Base, UnitOfWork, session_for

ModelT = TypeVar("ModelT", bound=Base)


class BaseStore(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def _session(self, uow: Optional[UnitOfWork]) -> Session:
        return session_for(self.db, uow)

    def _finish(self, session: Session, uow: Optional[UnitOfWork], obj: Optional[ModelT] = None) -> None:
        if uow is not None:
            session.flush()
            return
        try:
            session.commit()
        except Exception:
            session.rollback()
            raise
        if obj is not None:
            session.refresh(obj)

    def create(self, data: Dict[str, Any], uow: Optional[UnitOfWork] = None) -> ModelT:
        session = self._session(uow)
        obj = self.model(**data)
        session.add(obj)
        self._finish(session, uow, obj)
        return obj

    def find_by_id(self, id: str, uow: Optional[UnitOfWork] = None) -> Optional[ModelT]:
        return self._session(uow).get(self.model, id)

    def update(self, id: str, partial: Dict[str, Any], uow: Optional[UnitOfWork] = None) -> Optional[ModelT]:
        session = self._session(uow)
        obj = session.get(self.model, id)
        if obj is None:
            return None
        for key, value in partial.items():
            setattr(obj, key, value)
        self._finish(session, uow, obj)
        return obj

    def delete(self, id: str, uow: Optional[UnitOfWork] = None) -> bool:
        session = self._session(uow)
        obj = session.get(self.model, id)
        if obj is None:
            return False
        session.delete(obj)
        self._finish(session, uow)
        return True


class FeedbackChildStore(BaseStore[ModelT]):
    """Stores for rows hanging off a single feedback."""

    def find_by_feedback_id(self, feedback_id: str, uow: Optional[UnitOfWork] = None) -> List[ModelT]:
        return (
            self._session(uow)
            .query(self.model)
            .filter(self.model.feedback_id == feedback_id)
            .order_by(self.model.created_at)
            .all()
        )

    def delete_by_feedback_id(self, feedback_id: str, uow: Optional[UnitOfWork] = None) -> int:
        session = self._session(uow)
        rows = session.query(self.model).filter(self.model.feedback_id == feedback_id).all()
        for row in rows:
            session.delete(row)
        self._finish(session, uow)
        return len(rows)
