# quickcare/routers/appointments_router.py
from fastapi import APIRouter, Depends, HTTPException

from .deps import get_appointments_service, get_booking_service, get_current_user
from .hospitals_router import appointment_to_dict
from ..application.services.appointments_service import AppointmentsService
from ..application.services.auth_service import SessionUser
from ..application.services.booking_service import BookingService, DoctorRef, PatientDetails
from ..exceptions import create_success_response
from ..schemas import BookingRequest

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


@router.get("")
def list_appointments(
    current_user: SessionUser = Depends(get_current_user),
    appointments_service: AppointmentsService = Depends(get_appointments_service),
):
    appointments = appointments_service.list_for_user(current_user.id)
    return create_success_response({"appointments": [appointment_to_dict(a) for a in appointments]})


@router.post("")
async def book_appointment(
    body: BookingRequest,
    current_user: SessionUser = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
):
    if not body.hospitalId or not body.doctorId:
        raise HTTPException(status_code=400, detail="hospitalId and doctorId are required")
    confirmation = await booking_service.book(
        current_user,
        body.hospitalId,
        DoctorRef(id=body.doctorId, name=body.doctorName, specialization=body.specialization, fee=body.fee, currency=body.currency),
        PatientDetails(name=body.name, age=body.age, gender=body.gender, reason=body.reason, location=body.location),
    )
    return create_success_response({
        "transactionId": confirmation.transaction_id,
        "queuePosition": confirmation.queue_position,
        "estimatedWaitTime": confirmation.estimated_wait_time,
        "appointment": appointment_to_dict(confirmation.appointment),
    })
