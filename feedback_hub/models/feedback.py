"""
Feedback family: the feedback record plus its content, ratings, comments, goals and acknowledgment.
"""
from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, Date, DateTime, ForeignKey, JSON, Enum,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum
from feedback_hub.database import Base, new_id, utcnow


class ReviewType(str, enum.Enum):
    SELF_ASSESSMENT = "self_assessment"
    MANAGER_REVIEW = "manager_review"
    PEER_REVIEW = "peer_review"
    UPWARD_REVIEW = "upward_review"
    THREE_SIXTY_REVIEW = "360_review"
    PROJECT_REVIEW = "project_review"


class FeedbackStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    COMPLETED = "completed"
    ACKNOWLEDGED = "acknowledged"
    ARCHIVED = "archived"


class ColorClassification(str, enum.Enum):
    """Internal triage color, visible to the giver and managers only."""
    GREEN = "green"    # Exceeds expectations
    YELLOW = "yellow"  # Meets expectations
    RED = "red"        # Needs improvement


class GoalCategory(str, enum.Enum):
    TECHNICAL_SKILLS = "technical_skills"
    SOFT_SKILLS = "soft_skills"
    LEADERSHIP = "leadership"
    COMMUNICATION = "communication"
    PERFORMANCE = "performance"
    CAREER_DEVELOPMENT = "career_development"


class GoalPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class GoalStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Feedback in these states can no longer be edited or deleted
LOCKED_STATUSES = (FeedbackStatus.COMPLETED, FeedbackStatus.ACKNOWLEDGED)


def _enum(enum_cls):
    return Enum(enum_cls, values_callable=lambda e: [m.value for m in e], native_enum=False, length=32)


class Feedback(Base):
    __tablename__ = "feedbacks"
    __table_args__ = (
        UniqueConstraint("cycle_id", "from_user_id", "to_user_id", "review_type", name="uq_feedback_per_review"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    cycle_id = Column(String(36), ForeignKey("review_cycles.id"), nullable=False, index=True)
    from_user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    to_user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    review_type = Column(_enum(ReviewType), nullable=False)
    status = Column(_enum(FeedbackStatus), default=FeedbackStatus.DRAFT, nullable=False, index=True)
    color_classification = Column(_enum(ColorClassification), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    cycle = relationship("ReviewCycle", back_populates="feedbacks")
    from_user = relationship("User", foreign_keys=[from_user_id])
    to_user = relationship("User", foreign_keys=[to_user_id])
    content = relationship("FeedbackContent", back_populates="feedback", uselist=False, cascade="all, delete-orphan")
    ratings = relationship("Rating", back_populates="feedback", cascade="all, delete-orphan", order_by="Rating.created_at")
    comments = relationship("Comment", back_populates="feedback", cascade="all, delete-orphan", order_by="Comment.created_at")
    goals = relationship("Goal", back_populates="feedback", cascade="all, delete-orphan", order_by="Goal.created_at")
    acknowledgment = relationship("Acknowledgment", back_populates="feedback", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Feedback {self.id} {self.review_type.value} ({self.status.value})>"

    @property
    def is_locked(self) -> bool:
        return self.status in LOCKED_STATUSES

    def hidden_from(self, user) -> bool:
        """A draft does not exist yet as far as its recipient is concerned."""
        return (
            user is not None
            and self.status == FeedbackStatus.DRAFT
            and user.id == self.to_user_id
            and user.id != self.from_user_id
            and not user.is_people_admin
        )

    def visible_to(self, user) -> bool:
        """Giver, receiver and people admins (admin, hr, super_admin) may read a feedback."""
        if user is None or self.hidden_from(user):
            return False
        return user.id in (self.from_user_id, self.to_user_id) or user.is_people_admin


class FeedbackContent(Base):
    __tablename__ = "feedback_contents"

    id = Column(String(36), primary_key=True, default=new_id)
    feedback_id = Column(String(36), ForeignKey("feedbacks.id", ondelete="CASCADE"), unique=True, nullable=False)
    overall_comment = Column(Text, nullable=False)
    strengths = Column(JSON, nullable=False, default=list)
    areas_for_improvement = Column(JSON, nullable=False, default=list)
    specific_examples = Column(JSON, nullable=False, default=list)
    recommendations = Column(JSON, nullable=False, default=list)
    confidential = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    feedback = relationship("Feedback", back_populates="content")


class Rating(Base):
    __tablename__ = "ratings"

    id = Column(String(36), primary_key=True, default=new_id)
    feedback_id = Column(String(36), ForeignKey("feedbacks.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String, nullable=False)
    subcategory = Column(String, nullable=True)
    score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False)
    weight = Column(Float, default=1.0, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    feedback = relationship("Feedback", back_populates="ratings")


class Comment(Base):
    __tablename__ = "feedback_comments"

    id = Column(String(36), primary_key=True, default=new_id)
    feedback_id = Column(String(36), ForeignKey("feedbacks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    parent_comment_id = Column(String(36), ForeignKey("feedback_comments.id", ondelete="CASCADE"), nullable=True)
    content = Column(Text, nullable=False)
    is_private = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    feedback = relationship("Feedback", back_populates="comments")
    author = relationship("User")
    parent = relationship("Comment", remote_side=[id], back_populates="replies")
    replies = relationship("Comment", back_populates="parent", cascade="all, delete-orphan")


class Goal(Base):
    __tablename__ = "feedback_goals"

    id = Column(String(36), primary_key=True, default=new_id)
    feedback_id = Column(String(36), ForeignKey("feedbacks.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(_enum(GoalCategory), nullable=False)
    priority = Column(_enum(GoalPriority), nullable=False)
    target_date = Column(Date, nullable=False)
    status = Column(_enum(GoalStatus), default=GoalStatus.NOT_STARTED, nullable=False)
    progress = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    feedback = relationship("Feedback", back_populates="goals")


class Acknowledgment(Base):
    __tablename__ = "feedback_acknowledgments"

    id = Column(String(36), primary_key=True, default=new_id)
    feedback_id = Column(String(36), ForeignKey("feedbacks.id", ondelete="CASCADE"), unique=True, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    response = Column(Text, nullable=True)
    acknowledged_at = Column(DateTime(timezone=True), default=utcnow)

    feedback = relationship("Feedback", back_populates="acknowledgment")
