from typing import List, Optional
from sqlalchemy.orm import Session

from feedback_hub.core.exceptions import AccessDeniedError, NotFoundError, ValidationError
from feedback_hub.database import UnitOfWork, utcnow
from feedback_hub.models.feedback import Comment, Feedback
from feedback_hub.models.user import User
from feedback_hub.schemas.comment import CommentCreate
from feedback_hub.services.base import BaseService
from feedback_hub.stores.children import CommentStore


class CommentService(BaseService):
    """Threaded discussion on a feedback. Private comments are only ever shown to their author."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.comments = CommentStore(db)

    def _get_feedback_for(self, feedback_id: str, user_id: str) -> Feedback:
        feedback = self.db.get(Feedback, feedback_id)
        if not feedback:
            raise NotFoundError("Feedback not found")
        user = self.db.get(User, user_id)
        if feedback.hidden_from(user):
            raise NotFoundError("Feedback not found")
        if not feedback.visible_to(user):
            raise AccessDeniedError("Insufficient permission to access this feedback")
        return feedback

    def _get_own_comment(self, comment_id: str, user_id: str, feedback_id: Optional[str] = None) -> Comment:
        comment = self.comments.find_by_id(comment_id)
        if not comment or (feedback_id and comment.feedback_id != feedback_id):
            raise NotFoundError("Comment not found")
        if comment.user_id != user_id:
            raise AccessDeniedError("Only the comment author can modify this comment")
        return comment

    def find_by_feedback_id(self, feedback_id: str, viewer_id: str) -> List[Comment]:
        self._get_feedback_for(feedback_id, viewer_id)
        return self.comments.find_visible(feedback_id, viewer_id)

    def add_comment(
        self, feedback_id: str, user_id: str, request: CommentCreate, uow: Optional[UnitOfWork] = None
    ) -> Comment:
        self._get_feedback_for(feedback_id, user_id)

        if request.parent_comment_id:
            parent = self.comments.find_by_id(request.parent_comment_id)
            if not parent or parent.feedback_id != feedback_id:
                raise ValidationError("Parent comment does not belong to this feedback")

        comment = self.comments.create(
            {
                "feedback_id": feedback_id,
                "user_id": user_id,
                "parent_comment_id": request.parent_comment_id,
                "content": request.content,
                "is_private": request.is_private,
            },
            uow=uow,
        )
        self.log_info("Comment added", feedback_id=feedback_id, comment_id=comment.id, user_id=user_id)
        return comment

    def update_comment(self, comment_id: str, content: str, user_id: str, feedback_id: Optional[str] = None) -> Comment:
        self._get_own_comment(comment_id, user_id, feedback_id)
        return self.comments.update(comment_id, {"content": content, "updated_at": utcnow()})

    def delete_comment(self, comment_id: str, user_id: str, feedback_id: Optional[str] = None) -> None:
        self._get_own_comment(comment_id, user_id, feedback_id)
        self.comments.delete(comment_id)
        self.log_info("Comment deleted", comment_id=comment_id, user_id=user_id)

    def delete_by_feedback_id(self, feedback_id: str, uow: Optional[UnitOfWork] = None) -> int:
        return self.comments.delete_by_feedback_id(feedback_id, uow=uow)
