from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import User
from .....application.ports.errors import DuplicateRecordError
from .....application.ports.user_repo import UserRepository, UserDto


class SqlUserRepository(UserRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            name=user.name,
            email=user.email,
            password_hash=user.password_hash,
            google_id=user.google_id,
            avatar_url=user.avatar_url,
            phone=user.phone,
            role=user.role,
            is_google_user=bool(user.is_google_user),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def get_by_email(self, email: str) -> Optional[UserDto]:
        user = self.session.exec(select(User).where(User.email == email.strip().lower())).first()
        return self._to_dto(user) if user else None

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        user = self.session.get(User, user_id)
        return self._to_dto(user) if user else None

    def create(self, name: str, email: str, password_hash: Optional[str] = None, phone: Optional[str] = None,
               google_id: Optional[str] = None, avatar_url: Optional[str] = None, is_google_user: bool = False) -> UserDto:
        user = User(
            name=name,
            email=email.strip().lower(),
            password_hash=password_hash,
            phone=phone,
            google_id=google_id,
            avatar_url=avatar_url,
            is_google_user=is_google_user,
        )
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateRecordError(f"User with email {user.email} already exists") from e
        self.session.refresh(user)
        return self._to_dto(user)

    def link_google(self, user_id: str, google_id: str, avatar_url: Optional[str]) -> UserDto:
        user = self.session.get(User, user_id)
        if not user:
            raise LookupError(f"User {user_id} not found")
        user.google_id = google_id
        user.is_google_user = True
        if avatar_url:
            user.avatar_url = avatar_url
        user.updated_at = datetime.utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return self._to_dto(user)
