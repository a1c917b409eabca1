from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from feedback_hub.database import Base, new_id, utcnow


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    users = relationship("User", back_populates="organization")
    cycles = relationship("ReviewCycle", back_populates="organization", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Organization {self.slug}>"
