"""
Feedback Service Layer

Business rules for the feedback lifecycle:
draft -> submitted -> (under_review) -> completed -> acknowledged.

Multi-row writes (create, update, delete) run inside one UnitOfWork so a failure
part-way leaves nothing behind.
"""
from collections import Counter
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from feedback_hub.core.exceptions import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from feedback_hub.models.cycle import ReviewCycle, CycleStatus
from feedback_hub.models.feedback import Feedback, FeedbackStatus, GoalStatus
from feedback_hub.models.hierarchy import OrganizationalHierarchy
from feedback_hub.models.user import User
from feedback_hub.schemas.feedback import (
    AcknowledgmentResponse,
    CreateFeedbackRequest,
    FeedbackListResponse,
    FeedbackQuery,
    FeedbackResponse,
    FeedbackStats,
    FeedbackSummary,
    UpdateFeedbackRequest,
)
from feedback_hub.services.base import BaseService
from feedback_hub.services.comment_service import CommentService
from feedback_hub.services.goal_service import GoalService
from feedback_hub.services.rating_service import RatingService
from feedback_hub.stores.children import AcknowledgmentStore, FeedbackContentStore
from feedback_hub.stores.feedback import DONE_STATUSES, PENDING_STATUSES, FeedbackStore

TOP_ITEMS = 5
SUMMARY_SAMPLE = 100


def _top(items: Iterable[str], n: int = TOP_ITEMS) -> List[str]:
    """Most frequent entries, compared case-insensitively after trimming."""
    counts = Counter(item.strip().lower() for item in items if item and item.strip())
    return [item for item, _ in counts.most_common(n)]


class FeedbackService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.feedbacks = FeedbackStore(db)
        self.contents = FeedbackContentStore(db)
        self.acknowledgments = AcknowledgmentStore(db)
        self.rating_service = RatingService(db)
        self.goal_service = GoalService(db)
        self.comment_service = CommentService(db)

    # --- Helpers ---

    def _get(self, feedback_id: str) -> Feedback:
        feedback = self.feedbacks.find_by_id(feedback_id)
        if not feedback:
            raise NotFoundError("Feedback not found")
        return feedback

    def _get_authored(self, feedback_id: str, user_id: str, action: str) -> Feedback:
        feedback = self._get(feedback_id)
        if feedback.from_user_id != user_id:
            raise AccessDeniedError(f"Only feedback author can {action} feedback")
        return feedback

    def _ensure_visible(self, feedback: Feedback, user: User) -> None:
        if feedback.hidden_from(user):
            raise NotFoundError("Feedback not found")
        if not feedback.visible_to(user):
            raise AccessDeniedError("Insufficient permission to view this feedback")

    def to_view(self, feedback: Feedback, viewer_id: Optional[str]) -> FeedbackResponse:
        view = FeedbackResponse.model_validate(feedback)
        # The internal triage color never reaches the person being reviewed
        if viewer_id == feedback.to_user_id:
            view.color_classification = None
        return view

    def _reload(self, feedback_id: str, viewer_id: str) -> FeedbackResponse:
        return self.to_view(self._get(feedback_id), viewer_id)

    def _validate_new_feedback(self, from_user_id: str, request: CreateFeedbackRequest) -> None:
        if from_user_id == request.to_user_id:
            raise ValidationError("Users cannot give feedback to themselves")

        recipient = self.db.get(User, request.to_user_id)
        if not recipient or not recipient.is_active:
            raise NotFoundError("Recipient not found")

        cycle = self.db.get(ReviewCycle, request.cycle_id)
        if not cycle:
            raise NotFoundError("Review cycle not found")
        if cycle.status != CycleStatus.ACTIVE:
            raise ValidationError("Feedback can only be given in an active review cycle")

        existing = self.feedbacks.find_existing(
            request.cycle_id, from_user_id, request.to_user_id, request.review_type
        )
        if existing:
            raise ConflictError(
                "Feedback of this review type already exists for this user in this cycle",
                details={"feedbackId": existing.id},
            )

    def _ensure_can_view_user(self, requesting_user: User, user_id: str) -> None:
        """Own data, people admins, or the user's current manager."""
        if requesting_user.id == user_id or requesting_user.is_people_admin:
            return
        is_manager = (
            self.db.query(OrganizationalHierarchy)
            .filter(
                OrganizationalHierarchy.manager_id == requesting_user.id,
                OrganizationalHierarchy.employee_id == user_id,
                OrganizationalHierarchy.is_active == True,  # noqa: E712
            )
            .first()
        )
        if not is_manager:
            raise AccessDeniedError("Insufficient permission to view this user's feedback")

    # --- Lifecycle ---

    def create_feedback(self, from_user_id: str, request: CreateFeedbackRequest) -> FeedbackResponse:
        self._validate_new_feedback(from_user_id, request)

        try:
            with self.unit_of_work() as uow:
                feedback = self.feedbacks.create(
                    {
                        "cycle_id": request.cycle_id,
                        "from_user_id": from_user_id,
                        "to_user_id": request.to_user_id,
                        "review_type": request.review_type,
                        "status": FeedbackStatus.DRAFT,
                        "color_classification": request.color_classification,
                    },
                    uow=uow,
                )
                content = request.content
                self.contents.create(
                    {
                        "feedback_id": feedback.id,
                        "overall_comment": content.overall_comment,
                        "strengths": list(content.strengths),
                        "areas_for_improvement": list(content.areas_for_improvement),
                        "specific_examples": list(content.specific_examples),
                        "recommendations": list(content.recommendations),
                        "confidential": content.confidential,
                    },
                    uow=uow,
                )
                for rating in request.ratings or []:
                    self.rating_service.create(feedback.id, rating, uow=uow)
                for goal in request.goals or []:
                    self.goal_service.create(feedback.id, goal, uow=uow)
                feedback_id = feedback.id
        except IntegrityError:
            self.log_warning("Duplicate feedback rejected", from_user_id=from_user_id, to_user_id=request.to_user_id)
            raise ConflictError("Feedback of this review type already exists for this user in this cycle")

        self.log_info(
            "Feedback created",
            feedback_id=feedback_id,
            from_user_id=from_user_id,
            to_user_id=request.to_user_id,
            cycle_id=request.cycle_id,
        )
        return self._reload(feedback_id, from_user_id)

    def get_feedback_by_id(self, feedback_id: str, requesting_user: User) -> FeedbackResponse:
        feedback = self._get(feedback_id)
        self._ensure_visible(feedback, requesting_user)
        return self.to_view(feedback, requesting_user.id)

    def get_feedback_list(self, query: FeedbackQuery, requesting_user: User) -> FeedbackListResponse:
        filters = query.model_dump(exclude={"page", "limit"})
        if not filters["from_user_id"] and not filters["to_user_id"]:
            # Without an explicit party, list what the requester has received
            filters["to_user_id"] = requesting_user.id
        elif not requesting_user.is_people_admin and requesting_user.id not in (
            filters["from_user_id"], filters["to_user_id"]
        ):
            raise AccessDeniedError("You can only list feedback you gave or received")
        if filters["to_user_id"] and filters["from_user_id"] != requesting_user.id:
            # Unsent drafts only show up for their author
            filters["exclude_status"] = FeedbackStatus.DRAFT

        items, total = self.feedbacks.find_with_filters(filters, query.page, query.limit)
        return FeedbackListResponse(
            feedbacks=[self.to_view(f, requesting_user.id) for f in items],
            total=total,
            page=query.page,
            limit=query.limit,
            has_next=query.page * query.limit < total,
            has_prev=query.page > 1,
        )

    def update_feedback(
        self, feedback_id: str, updates: UpdateFeedbackRequest, requesting_user_id: str
    ) -> FeedbackResponse:
        feedback = self._get_authored(feedback_id, requesting_user_id, "update")
        if feedback.is_locked:
            raise ValidationError("Cannot update completed or acknowledged feedback")
        if updates.status == FeedbackStatus.ACKNOWLEDGED:
            raise ValidationError("Only the recipient can acknowledge feedback")

        with self.unit_of_work() as uow:
            partial = {}
            if updates.status is not None:
                partial["status"] = updates.status
            if "color_classification" in updates.model_fields_set:
                partial["color_classification"] = updates.color_classification
            if partial:
                self.feedbacks.update(feedback_id, partial, uow=uow)

            if updates.content is not None:
                content_changes = updates.content.model_dump(exclude_unset=True, exclude_none=True)
                if "overall_comment" in content_changes and not content_changes["overall_comment"].strip():
                    raise ValidationError("Overall comment is required")
                if content_changes:
                    self.contents.update_by_feedback_id(feedback_id, content_changes, uow=uow)

            if updates.ratings is not None:
                self.rating_service.update_for_feedback(feedback_id, updates.ratings, uow=uow)
            if updates.goals is not None:
                self.goal_service.update_for_feedback(feedback_id, updates.goals, uow=uow)

        self.log_info("Feedback updated", feedback_id=feedback_id, updated_by=requesting_user_id)
        return self._reload(feedback_id, requesting_user_id)

    def submit_feedback(self, feedback_id: str, requesting_user_id: str) -> FeedbackResponse:
        feedback = self._get_authored(feedback_id, requesting_user_id, "submit")
        if feedback.status != FeedbackStatus.DRAFT:
            raise ValidationError("Only draft feedback can be submitted")

        content = self.contents.find_one_by_feedback_id(feedback_id)
        if not content:
            raise ValidationError("Feedback content is required")
        if not content.overall_comment or not content.overall_comment.strip():
            raise ValidationError("Overall comment is required")

        self.feedbacks.update(feedback_id, {"status": FeedbackStatus.SUBMITTED})
        self.log_info("Feedback submitted", feedback_id=feedback_id, submitted_by=requesting_user_id)
        return self._reload(feedback_id, requesting_user_id)

    def complete_feedback(self, feedback_id: str, requesting_user_id: str) -> FeedbackResponse:
        feedback = self._get_authored(feedback_id, requesting_user_id, "complete")
        if feedback.status not in PENDING_STATUSES:
            raise ValidationError("Only submitted feedback can be completed")

        self.feedbacks.update(feedback_id, {"status": FeedbackStatus.COMPLETED})
        self.log_info("Feedback completed", feedback_id=feedback_id, completed_by=requesting_user_id)
        return self._reload(feedback_id, requesting_user_id)

    def acknowledge_feedback(
        self, feedback_id: str, user_id: str, response: Optional[str] = None
    ) -> AcknowledgmentResponse:
        feedback = self._get(feedback_id)
        if feedback.to_user_id != user_id:
            raise AccessDeniedError("Only the feedback recipient can acknowledge feedback")
        if feedback.status == FeedbackStatus.DRAFT:
            raise NotFoundError("Feedback not found")
        if feedback.status == FeedbackStatus.ACKNOWLEDGED or self.acknowledgments.find_by_feedback_id(feedback_id):
            raise ConflictError("Feedback has already been acknowledged")

        with self.unit_of_work() as uow:
            ack = self.acknowledgments.create(
                {"feedback_id": feedback_id, "user_id": user_id, "response": response}, uow=uow
            )
            self.feedbacks.update(feedback_id, {"status": FeedbackStatus.ACKNOWLEDGED}, uow=uow)
            ack_id = ack.id

        self.log_info("Feedback acknowledged", feedback_id=feedback_id, user_id=user_id)
        return AcknowledgmentResponse.model_validate(self.acknowledgments.find_by_id(ack_id))

    def get_acknowledgment(self, feedback_id: str, requesting_user: User) -> AcknowledgmentResponse:
        feedback = self._get(feedback_id)
        self._ensure_visible(feedback, requesting_user)
        ack = self.acknowledgments.find_by_feedback_id(feedback_id)
        if not ack:
            raise NotFoundError("Feedback has not been acknowledged")
        return AcknowledgmentResponse.model_validate(ack)

    def delete_feedback(self, feedback_id: str, requesting_user_id: str) -> None:
        feedback = self._get_authored(feedback_id, requesting_user_id, "delete")
        if feedback.is_locked:
            raise ValidationError("Cannot delete completed or acknowledged feedback")

        with self.unit_of_work() as uow:
            self.comment_service.delete_by_feedback_id(feedback_id, uow=uow)
            self.goal_service.delete_by_feedback_id(feedback_id, uow=uow)
            self.rating_service.delete_by_feedback_id(feedback_id, uow=uow)
            self.acknowledgments.delete_by_feedback_id(feedback_id, uow=uow)
            self.contents.delete_by_feedback_id(feedback_id, uow=uow)
            # Children are gone; drop the collections loaded with the feedback before deleting it
            self.db.expire(feedback)
            self.feedbacks.delete(feedback_id, uow=uow)

        self.log_info("Feedback deleted", feedback_id=feedback_id, deleted_by=requesting_user_id)

    # --- Aggregates ---

    def get_feedback_summary(
        self, user_id: str, cycle_id: Optional[str] = None, requesting_user: Optional[User] = None
    ) -> FeedbackSummary:
        if requesting_user is not None:
            self._ensure_can_view_user(requesting_user, user_id)

        if cycle_id:
            stats = self.feedbacks.get_stats_by_cycle(cycle_id)
            filters: Dict = {"cycle_id": cycle_id, "status": DONE_STATUSES}
        else:
            stats = self.feedbacks.get_stats_by_user(user_id)
            filters = {"to_user_id": user_id, "status": DONE_STATUSES}

        feedbacks, _ = self.feedbacks.find_with_filters(filters, 1, SUMMARY_SAMPLE)

        ratings, strengths, improvements, goals = [], [], [], []
        for fb in feedbacks:
            ratings.extend(fb.ratings)
            goals.extend(fb.goals)
            if fb.content:
                strengths.extend(fb.content.strengths or [])
                improvements.extend(fb.content.areas_for_improvement or [])

        average = (
            sum(r.score / r.max_score * 100 for r in ratings) / len(ratings)
            if ratings else 0.0
        )
        completed_goals = sum(1 for g in goals if g.status == GoalStatus.COMPLETED)
        completion_rate = completed_goals / len(goals) * 100 if goals else 0.0

        return FeedbackSummary(
            total_feedback=stats["total_feedback"],
            completed_feedback=stats["completed_feedback"],
            pending_feedback=stats["pending_feedback"],
            average_rating=round(average, 2),
            top_strengths=_top(strengths),
            top_areas_for_improvement=_top(improvements),
            goal_completion_rate=round(completion_rate, 2),
        )

    def get_drafts(self, user_id: str) -> List[FeedbackResponse]:
        return [self.to_view(f, user_id) for f in self.feedbacks.find_by_author(user_id, [FeedbackStatus.DRAFT])]

    def get_pending(self, user_id: str) -> List[FeedbackResponse]:
        """Feedback the user has received that is submitted but not yet completed."""
        return [self.to_view(f, user_id) for f in self.feedbacks.find_by_recipient(user_id, PENDING_STATUSES)]

    def get_user_stats(self, user_id: str) -> FeedbackStats:
        stats = self.feedbacks.get_stats_by_user(user_id)
        return FeedbackStats(
            given=stats["total_given"],
            received=stats["received_shared"],
            drafts=stats["drafts"],
            pending_to_complete=stats["pending_feedback"],
            completed=stats["completed_feedback"],
            acknowledged=stats["acknowledged"],
        )
