# quickcare/db/models/health/review.py
from typing import Optional
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid


class Review(SQLModel, table=True):
    __tablename__ = "reviews"
    # One review per user per hospital, enforced by the database
    __table_args__ = (UniqueConstraint("hospital_id", "user_id", name="uq_reviews_hospital_user"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    hospital_id: str = Field(max_length=50, index=True)
    user_id: str = Field(foreign_key="users.id", index=True)
    user_name: str = Field(max_length=100)
    rating: int
    comment: Optional[str] = Field(max_length=500, default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
