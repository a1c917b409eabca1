from typing import Any, Dict, Optional

from feedback_hub.database import UnitOfWork
from feedback_hub.models.feedback import FeedbackContent, Rating, Comment, Goal, Acknowledgment
from feedback_hub.stores.base import FeedbackChildStore


class FeedbackContentStore(FeedbackChildStore[FeedbackContent]):
    model = FeedbackContent

    def find_one_by_feedback_id(self, feedback_id: str, uow: Optional[UnitOfWork] = None) -> Optional[FeedbackContent]:
        return (
            self._session(uow)
            .query(FeedbackContent)
            .filter(FeedbackContent.feedback_id == feedback_id)
            .first()
        )

    def update_by_feedback_id(
        self, feedback_id: str, partial: Dict[str, Any], uow: Optional[UnitOfWork] = None
    ) -> Optional[FeedbackContent]:
        content = self.find_one_by_feedback_id(feedback_id, uow)
        if content is None:
            return None
        return self.update(content.id, partial, uow=uow)


class RatingStore(FeedbackChildStore[Rating]):
    model = Rating


class GoalStore(FeedbackChildStore[Goal]):
    model = Goal


class CommentStore(FeedbackChildStore[Comment]):
    model = Comment

    def find_visible(self, feedback_id: str, viewer_id: str):
        """Public comments plus the viewer's own private ones, oldest first."""
        return (
            self.db.query(Comment)
            .filter(
                Comment.feedback_id == feedback_id,
                (Comment.is_private == False) | (Comment.user_id == viewer_id),  # noqa: E712
            )
            .order_by(Comment.created_at)
            .all()
        )


class AcknowledgmentStore(FeedbackChildStore[Acknowledgment]):
    model = Acknowledgment

    def find_by_feedback_id(self, feedback_id: str, uow: Optional[UnitOfWork] = None) -> Optional[Acknowledgment]:
        return (
            self._session(uow)
            .query(Acknowledgment)
            .filter(Acknowledgment.feedback_id == feedback_id)
            .first()
        )
