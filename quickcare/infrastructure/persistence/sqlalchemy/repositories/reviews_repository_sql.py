from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Review
from .....application.ports.errors import DuplicateRecordError
from .....application.ports.reviews_repo import ReviewsRepository, ReviewDto


class SqlReviewsRepository(ReviewsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, r: Review) -> ReviewDto:
        return ReviewDto(
            id=r.id,
            hospital_id=r.hospital_id,
            user_id=r.user_id,
            user_name=r.user_name,
            rating=r.rating,
            comment=r.comment,
            created_at=r.created_at,
            updated_at=r.updated_at,
        )

    def create(self, hospital_id: str, user_id: str, user_name: str, rating: int, comment: Optional[str]) -> ReviewDto:
        review = Review(
            hospital_id=hospital_id,
            user_id=user_id,
            user_name=user_name,
            rating=rating,
            comment=comment,
        )
        self.session.add(review)
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateRecordError(f"User {user_id} already reviewed hospital {hospital_id}") from e
        self.session.refresh(review)
        return self._to_dto(review)

    def list_for_hospital(self, hospital_id: str) -> List[ReviewDto]:
        rows = self.session.exec(
            select(Review)
            .where(Review.hospital_id == hospital_id)
            .order_by(Review.created_at.desc())
        ).all()
        return [self._to_dto(r) for r in rows]

    def list_for_user(self, user_id: str) -> List[ReviewDto]:
        rows = self.session.exec(
            select(Review)
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc())
        ).all()
        return [self._to_dto(r) for r in rows]
