# quickcare/routers/hospitals_router.py
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.encoders import jsonable_encoder

from .deps import (
    get_booking_service,
    get_current_user,
    get_hospital_directory,
    get_hospital_gateway,
    get_reviews_service,
)
from ..application.services.auth_service import SessionUser
from ..application.services.booking_service import BookingService, DoctorRef, PatientDetails
from ..application.services.reviews_service import ReviewsService
from ..exceptions import create_success_response
from ..infrastructure.hospitals.directory import HospitalDirectory
from ..infrastructure.hospitals.proxy import HospitalProxy
from ..schemas import AppointmentResponse, PayRequest, ReviewCreate, ReviewResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hospitals", tags=["Hospitals"])


def review_to_dict(review) -> dict:
    return jsonable_encoder(ReviewResponse(**vars(review)))


def appointment_to_dict(appointment) -> dict:
    return jsonable_encoder(AppointmentResponse(**vars(appointment)))


@router.get("")
def list_hospitals(directory: HospitalDirectory = Depends(get_hospital_directory)):
    return create_success_response({"hospitals": directory.ids()})


# Declared before the /{hospital_id} routes so "health" is not taken for an id
@router.get("/health")
async def hospitals_health(gateway: HospitalProxy = Depends(get_hospital_gateway)):
    results = await gateway.probe_all()
    return create_success_response({
        "hospitals": results,
        "healthy": sum(1 for r in results if r["ok"]),
        "total": len(results),
    })


@router.post("/reload")
def reload_hospitals(
    current_user: SessionUser = Depends(get_current_user),
    directory: HospitalDirectory = Depends(get_hospital_directory),
):
    """Re-read the hospital map from HOSPITALS_FILE or HOSPITAL_URLS without a restart."""
    if current_user.role != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    try:
        directory.reload()
    except (OSError, ValueError) as e:
        logger.error(f"Hospital directory reload by user {current_user.id} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Hospital directory reload failed: {e}")
    logger.info(f"Hospital directory reloaded by user {current_user.id}")
    return create_success_response({"hospitals": directory.ids()})


@router.get("/{hospital_id}/doctors")
async def list_doctors(hospital_id: str, gateway: HospitalProxy = Depends(get_hospital_gateway)) -> Any:
    return await gateway.list_doctors(hospital_id)


@router.get("/{hospital_id}/doctors/{doctor_id}/status")
async def queue_status(
    hospital_id: str,
    doctor_id: str,
    name: str = Query("", description="Patient name as given at booking"),
    gateway: HospitalProxy = Depends(get_hospital_gateway),
) -> Any:
    return await gateway.get_queue_status(hospital_id, doctor_id, name)


@router.post("/{hospital_id}/doctors/{doctor_id}/pay")
async def pay(
    hospital_id: str,
    doctor_id: str,
    body: PayRequest,
    current_user: SessionUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    confirmation = await booking_service.book(
        current_user,
        hospital_id,
        DoctorRef(id=doctor_id, name=body.doctorName, specialization=body.specialization, fee=body.fee, currency=body.currency),
        PatientDetails(name=body.name, age=body.age, gender=body.gender, reason=body.reason, location=body.location),
    )
    upstream = confirmation.upstream if isinstance(confirmation.upstream, dict) else {"data": confirmation.upstream}
    return {**upstream, "appointment": appointment_to_dict(confirmation.appointment)}


@router.get("/{hospital_id}/review")
def list_reviews(hospital_id: str, reviews_service: ReviewsService = Depends(get_reviews_service)):
    reviews = reviews_service.list(hospital_id)
    return create_success_response({"reviews": [review_to_dict(r) for r in reviews]})


@router.post("/{hospital_id}/review")
def submit_review(
    hospital_id: str,
    body: ReviewCreate,
    current_user: SessionUser = Depends(get_current_user),
    reviews_service: ReviewsService = Depends(get_reviews_service),
):
    review = reviews_service.submit(current_user, hospital_id, body.rating, body.comment)
    logger.info(f"Review {review.id} submitted for hospital {hospital_id} by user {current_user.id}")
    return create_success_response({"message": "Review submitted", "review": review_to_dict(review)})
