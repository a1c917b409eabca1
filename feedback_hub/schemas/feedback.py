from datetime import date, datetime
from typing import List, Optional
from pydantic import ConfigDict, Field, field_validator, model_validator

from feedback_hub.core.schemas import CamelModel
from feedback_hub.models.cycle import CycleStatus, CycleType
from feedback_hub.models.feedback import (
    ReviewType, FeedbackStatus, ColorClassification, GoalCategory, GoalPriority, GoalStatus,
)


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be empty")
    return value


# --- Requests ---

class RatingInput(CamelModel):
    id: Optional[str] = None
    category: str = Field(..., min_length=1)
    subcategory: Optional[str] = None
    score: float = Field(..., ge=0)
    max_score: float = Field(..., gt=0)
    weight: Optional[float] = Field(None, gt=0)
    comment: Optional[str] = None

    @model_validator(mode="after")
    def score_within_scale(self):
        if self.score > self.max_score:
            raise ValueError("score cannot exceed maxScore")
        return self


class GoalInput(CamelModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    description: str = ""
    category: GoalCategory
    priority: GoalPriority
    target_date: date
    status: Optional[GoalStatus] = None
    progress: Optional[int] = Field(None, ge=0, le=100)

    @field_validator("target_date", mode="before")
    @classmethod
    def calendar_day_of_timestamp(cls, value):
        # ISO timestamps such as 2026-12-31T15:00:00.000Z keep only their date part
        if isinstance(value, str) and len(value) > 10 and value[10] in "Tt ":
            return value[:10]
        return value


class FeedbackContentInput(CamelModel):
    overall_comment: str
    strengths: List[str] = []
    areas_for_improvement: List[str] = []
    specific_examples: List[str] = []
    recommendations: List[str] = []
    confidential: bool = False

    @field_validator("overall_comment")
    @classmethod
    def comment_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class FeedbackContentUpdate(CamelModel):
    overall_comment: Optional[str] = None
    strengths: Optional[List[str]] = None
    areas_for_improvement: Optional[List[str]] = None
    specific_examples: Optional[List[str]] = None
    recommendations: Optional[List[str]] = None
    confidential: Optional[bool] = None


class CreateFeedbackRequest(CamelModel):
    cycle_id: str
    to_user_id: str
    review_type: ReviewType
    content: FeedbackContentInput
    ratings: Optional[List[RatingInput]] = None
    goals: Optional[List[GoalInput]] = None
    color_classification: Optional[ColorClassification] = None

    @field_validator("cycle_id", "to_user_id")
    @classmethod
    def ids_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class UpdateFeedbackRequest(CamelModel):
    content: Optional[FeedbackContentUpdate] = None
    ratings: Optional[List[RatingInput]] = None
    goals: Optional[List[GoalInput]] = None
    color_classification: Optional[ColorClassification] = None
    status: Optional[FeedbackStatus] = None


class FeedbackQuery(CamelModel):
    """List filters. Every filter is optional; paging is bounded."""
    cycle_id: Optional[str] = None
    from_user_id: Optional[str] = None
    to_user_id: Optional[str] = None
    review_type: Optional[str] = None
    status: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class AcknowledgeRequest(CamelModel):
    response: Optional[str] = None


# --- Responses ---

class UserSummary(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: Optional[str] = None
    email: str
    picture: Optional[str] = None


class CycleSummary(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    status: CycleStatus
    type: CycleType


class FeedbackContentResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    feedback_id: str
    overall_comment: str
    strengths: List[str]
    areas_for_improvement: List[str]
    specific_examples: List[str]
    recommendations: List[str]
    confidential: bool
    created_at: datetime
    updated_at: datetime


class RatingResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    feedback_id: str
    category: str
    subcategory: Optional[str] = None
    score: float
    max_score: float
    weight: float
    comment: Optional[str] = None
    created_at: datetime


class GoalResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    feedback_id: str
    title: str
    description: str
    category: GoalCategory
    priority: GoalPriority
    target_date: date
    status: GoalStatus
    progress: int
    created_at: datetime
    updated_at: datetime


class AcknowledgmentResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    feedback_id: str
    user_id: str
    response: Optional[str] = None
    acknowledged_at: datetime


class FeedbackResponse(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    cycle_id: str
    from_user_id: str
    to_user_id: str
    review_type: ReviewType
    status: FeedbackStatus
    color_classification: Optional[ColorClassification] = None
    created_at: datetime
    updated_at: datetime
    from_user: Optional[UserSummary] = None
    to_user: Optional[UserSummary] = None
    cycle: Optional[CycleSummary] = None
    content: Optional[FeedbackContentResponse] = None
    ratings: List[RatingResponse] = []
    goals: List[GoalResponse] = []
    acknowledgment: Optional[AcknowledgmentResponse] = None


class FeedbackListResponse(CamelModel):
    feedbacks: List[FeedbackResponse]
    total: int
    page: int
    limit: int
    has_next: bool
    has_prev: bool


class FeedbackSummary(CamelModel):
    total_feedback: int
    completed_feedback: int
    pending_feedback: int
    average_rating: float
    top_strengths: List[str]
    top_areas_for_improvement: List[str]
    goal_completion_rate: float


class FeedbackStats(CamelModel):
    given: int
    received: int
    drafts: int
    pending_to_complete: int
    completed: int
    acknowledged: int
