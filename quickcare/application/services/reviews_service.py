from dataclasses import dataclass
from typing import Any, List, Optional
from fastapi import HTTPException

from ..ports.errors import DuplicateRecordError
from ..ports.reviews_repo import ReviewsRepository, ReviewDto
from ...infrastructure.hospitals.directory import HospitalDirectory

MAX_COMMENT_LENGTH = 500


@dataclass
class ReviewsService:
    repo: ReviewsRepository
    directory: HospitalDirectory

    def submit(self, user, hospital_id: str, rating: Any, comment: Optional[str] = None) -> ReviewDto:
        if user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        self.directory.resolve(hospital_id)

        if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
            raise HTTPException(status_code=400, detail="Rating must be a whole number between 1 and 5")
        comment = (comment or "").strip() or None
        if comment and len(comment) > MAX_COMMENT_LENGTH:
            raise HTTPException(status_code=400, detail=f"Comment cannot exceed {MAX_COMMENT_LENGTH} characters")

        try:
            return self.repo.create(hospital_id, user.id, user.name, rating, comment)
        except DuplicateRecordError:
            raise HTTPException(status_code=409, detail="You have already reviewed this hospital")

    def list(self, hospital_id: str) -> List[ReviewDto]:
        self.directory.resolve(hospital_id)
        return self.repo.list_for_hospital(hospital_id)

    def list_for_user(self, user_id: str) -> List[ReviewDto]:
        return self.repo.list_for_user(user_id)
