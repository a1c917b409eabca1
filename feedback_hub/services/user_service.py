from typing import List, Optional
from sqlalchemy.orm import Session

from feedback_hub.models.user import User, UserRole
from feedback_hub.services.base import BaseService


class UserService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def upsert_google_user(
        self, email: str, name: Optional[str] = None, picture: Optional[str] = None, google_id: Optional[str] = None
    ) -> User:
        """
        Create the user on first Google login, otherwise refresh the profile fields.
        Roles and organization of an existing user are never touched here.
        """
        user = None
        if google_id:
            user = self.db.query(User).filter(User.google_id == google_id).first()
        if user is None:
            user = self.get_by_email(email)

        if user is None:
            user = User(
                email=email.lower(),
                name=name,
                picture=picture,
                google_id=google_id,
                roles=[UserRole.EMPLOYEE.value],
            )
            self.db.add(user)
            created = True
        else:
            if name:
                user.name = name
            if picture:
                user.picture = picture
            if google_id and not user.google_id:
                user.google_id = google_id
            created = False

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        self.log_info("Google user signed in", user_id=user.id, new_user=created)
        return user

    def upsert_mock_user(self, email: str, name: Optional[str] = None, roles: Optional[List[str]] = None) -> User:
        """Development-only login: create or update a user with the requested roles."""
        user = self.get_by_email(email)
        if user is None:
            user = User(email=email.lower(), name=name or email.split("@")[0])
            self.db.add(user)
        elif name:
            user.name = name
        if roles:
            user.roles = list(roles)
        elif not user.roles:
            user.roles = [UserRole.EMPLOYEE.value]

        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(user)
        self.log_info("Mock user signed in", user_id=user.id)
        return user
