# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, organization, cycle, feedback, hierarchy

# Explicit class exports for cleaner imports
from .user import User, UserRole
from .organization import Organization
from .cycle import ReviewCycle, CycleStatus, CycleType
from .feedback import (
    Feedback, FeedbackContent, Rating, Comment, Goal, Acknowledgment,
    ReviewType, FeedbackStatus, ColorClassification, GoalCategory, GoalPriority, GoalStatus,
)
from .hierarchy import OrganizationalHierarchy

__all__ = [
    "User",
    "UserRole",
    "Organization",
    "ReviewCycle",
    "CycleStatus",
    "CycleType",
    "Feedback",
    "FeedbackContent",
    "Rating",
    "Comment",
    "Goal",
    "Acknowledgment",
    "ReviewType",
    "FeedbackStatus",
    "ColorClassification",
    "GoalCategory",
    "GoalPriority",
    "GoalStatus",
    "OrganizationalHierarchy",
]
