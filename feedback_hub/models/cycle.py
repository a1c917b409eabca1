from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, JSON, Enum
from sqlalchemy.orm import relationship
import enum
from feedback_hub.database import Base, new_id, utcnow


class CycleType(str, enum.Enum):
    QUARTERLY = "quarterly"
    ANNUAL = "annual"
    PROJECT = "project"
    CUSTOM = "custom"


class CycleStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"
    ARCHIVED = "archived"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class ReviewCycle(Base):
    """A recurring review period during which feedback, ratings and goals are collected."""
    __tablename__ = "review_cycles"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    type = Column(Enum(CycleType, values_callable=_values, native_enum=False, length=32), default=CycleType.QUARTERLY, nullable=False)
    status = Column(Enum(CycleStatus, values_callable=_values, native_enum=False, length=32), default=CycleStatus.DRAFT, nullable=False, index=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    feedback_start_date = Column(Date, nullable=True)
    feedback_end_date = Column(Date, nullable=True)
    settings = Column(JSON, nullable=False, default=dict)

    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    organization = relationship("Organization", back_populates="cycles")
    feedbacks = relationship("Feedback", back_populates="cycle")

    def __repr__(self):
        return f"<ReviewCycle {self.name} ({self.status.value})>"
