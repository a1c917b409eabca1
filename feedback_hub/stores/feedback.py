from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from feedback_hub.database import UnitOfWork
from feedback_hub.models.feedback import Feedback, FeedbackStatus
from feedback_hub.stores.base import BaseStore

PENDING_STATUSES = (FeedbackStatus.SUBMITTED, FeedbackStatus.UNDER_REVIEW)
DONE_STATUSES = (FeedbackStatus.COMPLETED, FeedbackStatus.ACKNOWLEDGED)

_FILTER_COLUMNS = {
    "cycle_id": Feedback.cycle_id,
    "from_user_id": Feedback.from_user_id,
    "to_user_id": Feedback.to_user_id,
    "review_type": Feedback.review_type,
}


def _day_start(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


class FeedbackStore(BaseStore[Feedback]):
    model = Feedback

    def _query(self, session: Session):
        return session.query(Feedback).options(
            selectinload(Feedback.content),
            selectinload(Feedback.ratings),
            selectinload(Feedback.goals),
            selectinload(Feedback.acknowledgment),
            selectinload(Feedback.from_user),
            selectinload(Feedback.to_user),
            selectinload(Feedback.cycle),
        )

    def find_by_id(self, id: str, uow: Optional[UnitOfWork] = None) -> Optional[Feedback]:
        return self._query(self._session(uow)).filter(Feedback.id == id).first()

    def find_existing(
        self, cycle_id: str, from_user_id: str, to_user_id: str, review_type, uow: Optional[UnitOfWork] = None
    ) -> Optional[Feedback]:
        return (
            self._session(uow)
            .query(Feedback)
            .filter(
                Feedback.cycle_id == cycle_id,
                Feedback.from_user_id == from_user_id,
                Feedback.to_user_id == to_user_id,
                Feedback.review_type == review_type,
            )
            .first()
        )

    def find_with_filters(self, filters: Dict[str, Any], page: int = 1, limit: int = 20) -> Tuple[List[Feedback], int]:
        """
        Apply the optional filters and return one page plus the unpaged total.
        ``status`` may be a single value or a collection of values; ``exclude_status``
        drops one status from the result.
        """
        query = self.db.query(Feedback)
        for key, column in _FILTER_COLUMNS.items():
            value = filters.get(key)
            if value:
                query = query.filter(column == value)

        status = filters.get("status")
        if status:
            if isinstance(status, (list, tuple, set)):
                query = query.filter(Feedback.status.in_(list(status)))
            else:
                query = query.filter(Feedback.status == status)
        if filters.get("exclude_status"):
            query = query.filter(Feedback.status != filters["exclude_status"])

        if filters.get("date_from"):
            query = query.filter(Feedback.created_at >= _day_start(filters["date_from"]))
        if filters.get("date_to"):
            # date_to is inclusive of the whole day
            query = query.filter(Feedback.created_at < _day_start(filters["date_to"]) + timedelta(days=1))

        total = query.count()
        ids = [
            row.id
            for row in query.with_entities(Feedback.id)
            .order_by(Feedback.created_at.desc(), Feedback.id)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        ]
        if not ids:
            return [], total
        by_id = {fb.id: fb for fb in self._query(self.db).filter(Feedback.id.in_(ids)).all()}
        return [by_id[i] for i in ids], total

    def _status_counts(self, *criteria) -> Dict[FeedbackStatus, int]:
        rows = (
            self.db.query(Feedback.status, func.count(Feedback.id))
            .filter(*criteria)
            .group_by(Feedback.status)
            .all()
        )
        return {status: count for status, count in rows}

    def get_stats_by_cycle(self, cycle_id: str) -> Dict[str, int]:
        counts = self._status_counts(Feedback.cycle_id == cycle_id)
        return {
            "total_feedback": sum(counts.values()),
            "completed_feedback": sum(counts.get(s, 0) for s in DONE_STATUSES),
            "pending_feedback": sum(counts.get(s, 0) for s in PENDING_STATUSES),
            "draft_feedback": counts.get(FeedbackStatus.DRAFT, 0),
        }

    def get_stats_by_user(self, user_id: str) -> Dict[str, int]:
        received = self._status_counts(Feedback.to_user_id == user_id)
        given = self._status_counts(Feedback.from_user_id == user_id)
        return {
            "total_feedback": sum(received.values()),
            "total_given": sum(given.values()),
            "received_shared": sum(received.values()) - received.get(FeedbackStatus.DRAFT, 0),
            "completed_feedback": sum(received.get(s, 0) for s in DONE_STATUSES),
            "pending_feedback": sum(received.get(s, 0) for s in PENDING_STATUSES),
            "drafts": given.get(FeedbackStatus.DRAFT, 0),
            "acknowledged": received.get(FeedbackStatus.ACKNOWLEDGED, 0),
        }

    def find_by_author(self, user_id: str, statuses=None) -> List[Feedback]:
        query = self._query(self.db).filter(Feedback.from_user_id == user_id)
        if statuses:
            query = query.filter(Feedback.status.in_(list(statuses)))
        return query.order_by(Feedback.updated_at.desc()).all()

    def find_by_recipient(self, user_id: str, statuses=None) -> List[Feedback]:
        query = self._query(self.db).filter(Feedback.to_user_id == user_id)
        if statuses:
            query = query.filter(Feedback.status.in_(list(statuses)))
        return query.order_by(Feedback.updated_at.desc()).all()

    def count_for_cycle(self, cycle_id: str) -> int:
        return self.db.query(func.count(Feedback.id)).filter(Feedback.cycle_id == cycle_id).scalar() or 0
