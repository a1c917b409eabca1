"""
User Model.
Roles live in a single list column; every role check (including super admin) reads from it.
"""
from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
import enum
from feedback_hub.database import Base, new_id, utcnow


class UserRole(str, enum.Enum):
    """
    User roles.

    - SUPER_ADMIN: Cross-organization administration
    - ADMIN: Organization administration
    - HR: People operations within an organization
    - MANAGER: Line manager (reviews for direct reports)
    - EMPLOYEE: Self-service access
    """
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=True)
    picture = Column(String, nullable=True)
    google_id = Column(String, unique=True, nullable=True)

    roles = Column(JSON, nullable=False, default=lambda: [UserRole.EMPLOYEE.value])

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Organization context
    organization_id = Column(String(36), ForeignKey("organizations.id"), nullable=True, index=True)

    organization = relationship("Organization", back_populates="users")

    def __repr__(self):
        return f"<User {self.email} {self.roles}>"

    def has_role(self, *roles) -> bool:
        wanted = {r.value if isinstance(r, UserRole) else r for r in roles}
        return bool(wanted.intersection(self.roles or []))

    @property
    def is_super_admin(self) -> bool:
        return self.has_role(UserRole.SUPER_ADMIN)

    @property
    def is_people_admin(self) -> bool:
        """Admins and HR can see across the organization's feedback."""
        return self.has_role(UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.HR)
