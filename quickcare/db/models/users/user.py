# quickcare/db/models/users/user.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid


class User(SQLModel, table=True):
    __tablename__ = "users"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: Optional[str] = Field(max_length=255, default=None)
    google_id: Optional[str] = Field(max_length=255, default=None, index=True)
    avatar_url: Optional[str] = Field(max_length=500, default=None)
    phone: Optional[str] = Field(max_length=20, default=None)
    role: str = Field(max_length=20, default="patient")
    is_google_user: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
