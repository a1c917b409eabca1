"""
Review views: the same feedback records seen from the reviewer's and reviewee's side,
plus the static question templates used to start a review.
"""
from typing import Dict, List
from sqlalchemy import false
from sqlalchemy.orm import Session

from feedback_hub.core.exceptions import NotFoundError
from feedback_hub.models.cycle import ReviewCycle, CycleStatus
from feedback_hub.models.feedback import FeedbackStatus, ReviewType
from feedback_hub.models.user import User
from feedback_hub.schemas.cycle import CycleResponse
from feedback_hub.schemas.feedback import FeedbackResponse
from feedback_hub.schemas.review import ReviewDashboard, ReviewQuestion, ReviewTemplate
from feedback_hub.services.base import BaseService
from feedback_hub.services.feedback_service import FeedbackService

SHARED_STATUSES = [s for s in FeedbackStatus if s != FeedbackStatus.DRAFT]


def _q(key: str, prompt: str, category: str) -> ReviewQuestion:
    return ReviewQuestion(key=key, prompt=prompt, rating_category=category)


REVIEW_TEMPLATES: Dict[ReviewType, ReviewTemplate] = {
    ReviewType.SELF_ASSESSMENT: ReviewTemplate(
        review_type=ReviewType.SELF_ASSESSMENT,
        title="Self Assessment",
        description="Reflect on your own contributions during the cycle.",
        questions=[
            _q("achievements", "What are you most proud of this cycle?", "performance"),
            _q("challenges", "Which challenges slowed you down?", "performance"),
            _q("growth", "Where do you want to grow next?", "career_development"),
        ],
    ),
    ReviewType.MANAGER_REVIEW: ReviewTemplate(
        review_type=ReviewType.MANAGER_REVIEW,
        title="Manager Review",
        description="Feedback from a manager to a direct report.",
        questions=[
            _q("impact", "Describe the impact of their work this cycle.", "performance"),
            _q("skills", "Which technical skills stood out?", "technical_skills"),
            _q("collaboration", "How well do they collaborate with the team?", "communication"),
            _q("next_steps", "What should they focus on next?", "career_development"),
        ],
    ),
    ReviewType.PEER_REVIEW: ReviewTemplate(
        review_type=ReviewType.PEER_REVIEW,
        title="Peer Review",
        description="Feedback between colleagues who work together.",
        questions=[
            _q("teamwork", "How is it to work with them day to day?", "soft_skills"),
            _q("strengths", "What do they do particularly well?", "technical_skills"),
            _q("improve", "What could they do differently?", "communication"),
        ],
    ),
    ReviewType.UPWARD_REVIEW: ReviewTemplate(
        review_type=ReviewType.UPWARD_REVIEW,
        title="Upward Review",
        description="Feedback from a report to their manager.",
        questions=[
            _q("support", "How well does your manager support your work?", "leadership"),
            _q("clarity", "How clear are goals and expectations?", "communication"),
            _q("development", "Does your manager help you grow?", "leadership"),
        ],
    ),
    ReviewType.THREE_SIXTY_REVIEW: ReviewTemplate(
        review_type=ReviewType.THREE_SIXTY_REVIEW,
        title="360 Review",
        description="Broad feedback gathered from several directions.",
        questions=[
            _q("strengths", "What are their key strengths?", "performance"),
            _q("communication", "How effectively do they communicate?", "communication"),
            _q("leadership", "Where do they show leadership?", "leadership"),
            _q("improve", "What is the one thing they should improve?", "soft_skills"),
        ],
    ),
    ReviewType.PROJECT_REVIEW: ReviewTemplate(
        review_type=ReviewType.PROJECT_REVIEW,
        title="Project Review",
        description="Feedback scoped to a single project.",
        questions=[
            _q("delivery", "How did they contribute to delivery?", "performance"),
            _q("quality", "How was the quality of their work?", "technical_skills"),
            _q("lessons", "What should carry over to the next project?", "career_development"),
        ],
    ),
}


class ReviewService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.feedback_service = FeedbackService(db)
        self.feedbacks = self.feedback_service.feedbacks

    def _views(self, items, user_id: str) -> List[FeedbackResponse]:
        return [self.feedback_service.to_view(f, user_id) for f in items]

    def get_assigned_reviews(self, user_id: str) -> List[FeedbackResponse]:
        """Reviews the user has started but not yet submitted."""
        return self._views(self.feedbacks.find_by_author(user_id, [FeedbackStatus.DRAFT]), user_id)

    def get_given_reviews(self, user_id: str) -> List[FeedbackResponse]:
        return self._views(self.feedbacks.find_by_author(user_id, SHARED_STATUSES), user_id)

    def get_received_reviews(self, user_id: str) -> List[FeedbackResponse]:
        return self._views(self.feedbacks.find_by_recipient(user_id, SHARED_STATUSES), user_id)

    def complete_review(self, feedback_id: str, user_id: str) -> FeedbackResponse:
        return self.feedback_service.complete_feedback(feedback_id, user_id)

    def get_dashboard(self, user: User) -> ReviewDashboard:
        stats = self.feedbacks.get_stats_by_user(user.id)
        awaiting_ack = self.feedbacks.find_by_recipient(user.id, [FeedbackStatus.COMPLETED])

        cycles = self.db.query(ReviewCycle).filter(ReviewCycle.status == CycleStatus.ACTIVE)
        if user.organization_id:
            cycles = cycles.filter(ReviewCycle.organization_id == user.organization_id)
        elif not user.is_super_admin:
            cycles = cycles.filter(false())

        return ReviewDashboard(
            assigned=stats["drafts"],
            given=stats["total_given"] - stats["drafts"],
            received=stats["received_shared"],
            completed=stats["completed_feedback"],
            pending_acknowledgment=len(awaiting_ack),
            active_cycles=[CycleResponse.model_validate(c) for c in cycles.order_by(ReviewCycle.start_date).all()],
        )

    def get_templates(self) -> List[ReviewTemplate]:
        return list(REVIEW_TEMPLATES.values())

    def get_template(self, review_type: str) -> ReviewTemplate:
        try:
            return REVIEW_TEMPLATES[ReviewType(review_type)]
        except ValueError:
            raise NotFoundError(f"No review template for type '{review_type}'")
