# quickcare/routers/users_router.py
from fastapi import APIRouter, Depends

from .deps import get_appointments_service, get_current_user, get_reviews_service
from .hospitals_router import appointment_to_dict, review_to_dict
from ..application.services.appointments_service import AppointmentsService
from ..application.services.auth_service import SessionUser
from ..application.services.reviews_service import ReviewsService
from ..exceptions import create_success_response

router = APIRouter(prefix="/api/user", tags=["User"])


@router.get("/appointments")
def my_appointments(
    current_user: SessionUser = Depends(get_current_user),
    appointments_service: AppointmentsService = Depends(get_appointments_service),
):
    appointments = appointments_service.list_for_user(current_user.id)
    return create_success_response({"appointments": [appointment_to_dict(a) for a in appointments]})


@router.get("/reviews")
def my_reviews(
    current_user: SessionUser = Depends(get_current_user),
    reviews_service: ReviewsService = Depends(get_reviews_service),
):
    reviews = reviews_service.list_for_user(current_user.id)
    return create_success_response({"reviews": [review_to_dict(r) for r in reviews]})
