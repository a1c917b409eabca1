from typing import List

from feedback_hub.core.schemas import CamelModel
from feedback_hub.models.feedback import ReviewType
from feedback_hub.schemas.cycle import CycleResponse


class ReviewDashboard(CamelModel):
    assigned: int
    given: int
    received: int
    completed: int
    pending_acknowledgment: int
    active_cycles: List[CycleResponse]


class ReviewQuestion(CamelModel):
    key: str
    prompt: str
    rating_category: str


class ReviewTemplate(CamelModel):
    review_type: ReviewType
    title: str
    description: str
    questions: List[ReviewQuestion]
