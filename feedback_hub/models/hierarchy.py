"""
Organizational Hierarchy Model.
Manager -> employee edges with an effective date range. Historical edges are kept
(inactive, with an end_date) so the table describes reporting lines over time.
"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from feedback_hub.database import Base, new_id, utcnow


class OrganizationalHierarchy(Base):
    __tablename__ = "organizational_hierarchy"

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=False, index=True)
    manager_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    employee_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    level = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    effective_date = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    manager = relationship("User", foreign_keys=[manager_id])
    employee = relationship("User", foreign_keys=[employee_id])

    def __repr__(self):
        state = "active" if self.is_active else "ended"
        return f"<OrganizationalHierarchy {self.manager_id} -> {self.employee_id} ({state})>"
