from dataclasses import dataclass
from typing import List, Optional
from datetime import datetime


@dataclass
class ReviewDto:
    id: str
    hospital_id: str
    user_id: str
    user_name: str
    rating: int
    comment: Optional[str]
    created_at: datetime
    updated_at: datetime


class ReviewsRepository:
    def create(self, hospital_id: str, user_id: str, user_name: str, rating: int, comment: Optional[str]) -> ReviewDto:
        """Raises DuplicateRecordError when the user already reviewed the hospital."""
        ...

    def list_for_hospital(self, hospital_id: str) -> List[ReviewDto]:
        ...

    def list_for_user(self, user_id: str) -> List[ReviewDto]:
        ...
