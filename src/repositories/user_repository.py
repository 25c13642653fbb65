from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import ValidationError
from ..models.user import User

SETTINGS_FIELDS = ("display_name", "photo_url", "theme", "auto_summarize")


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self.db.query(User).filter(User.user_id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def get_by_firebase_uid(self, firebase_uid: str) -> Optional[User]:
        return self.db.query(User).filter(User.firebase_uid == firebase_uid).first()

    def create(
        self,
        email: str,
        display_name: str,
        firebase_uid: Optional[str] = None,
        user_id: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> User:
        email = email.lower()
        if self.get_by_email(email):
            raise ValidationError("Email already registered")

        user = User(
            email=email,
            display_name=display_name,
            firebase_uid=firebase_uid,
            photo_url=photo_url,
        )
        if user_id:
            user.user_id = user_id

        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationError("Email already registered")
        self.db.refresh(user)
        return user

    def update_settings(self, user: User, **fields) -> User:
        for key, value in fields.items():
            if key in SETTINGS_FIELDS:
                setattr(user, key, value)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_last_read_at(self, user_id: str) -> Optional[datetime]:
        user = self.get_by_id(user_id)
        return user.last_read_at if user else None

    def update_last_read_at(self, user: User) -> datetime:
        user.last_read_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(user)
        return user.last_read_at
