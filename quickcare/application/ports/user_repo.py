from typing import Protocol, Optional
from datetime import datetime


class UserDto:
    def __init__(self, id: str, name: str, email: str, password_hash: Optional[str], google_id: Optional[str],
                 avatar_url: Optional[str], phone: Optional[str], role: str, is_google_user: bool,
                 created_at: datetime, updated_at: datetime):
        self.id = id
        self.name = name
        self.email = email
        self.password_hash = password_hash
        self.google_id = google_id
        self.avatar_url = avatar_url
        self.phone = phone
        self.role = role
        self.is_google_user = is_google_user
        self.created_at = created_at
        self.updated_at = updated_at


class UserRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def create(self, name: str, email: str, password_hash: Optional[str] = None, phone: Optional[str] = None,
               google_id: Optional[str] = None, avatar_url: Optional[str] = None, is_google_user: bool = False) -> UserDto:
        ...

    def link_google(self, user_id: str, google_id: str, avatar_url: Optional[str]) -> UserDto:
        ...
