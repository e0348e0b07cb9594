# vetclinic/routers/appointment_requests.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from vetclinic.core.auth import get_principal, require_operator, require_tutor
from vetclinic.core.principal import Principal, TutorPrincipal
from vetclinic.database import get_session
from vetclinic.repositories.animal_repo import AnimalRepository
from vetclinic.repositories.appointment_repo import (
    AppointmentRepository,
    AppointmentRequestRepository,
)
from vetclinic.repositories.profile_repo import VeterinarianRepository
from vetclinic.schemas.appointment import (
    AppointmentRequestCreate,
    AppointmentRequestRead,
    ApprovalResult,
    ApproveRequest,
    RejectRequest,
    RequestStatus,
)
from vetclinic.services.appointment_service import AppointmentRequestService

router = APIRouter(prefix="/appointment-requests", tags=["Appointment Requests"])

service = AppointmentRequestService(
    AppointmentRequestRepository(),
    AppointmentRepository(),
    AnimalRepository(),
    VeterinarianRepository(),
)


# -------- Tutor-facing endpoints --------


@router.post(
    "",
    response_model=AppointmentRequestRead,
    status_code=status.HTTP_201_CREATED,
)
def create_request(
    payload: AppointmentRequestCreate,
    session: Session = Depends(get_session),
    tutor: TutorPrincipal = Depends(require_tutor),
):
    """
    Ask the clinic for an appointment for one of the caller's animals.
    The request starts as 'pending'.
    """
    return service.create_request(session, tutor, payload)


# -------- Shared endpoints --------


@router.get(
    "",
    response_model=list[AppointmentRequestRead],
)
def list_requests(
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_principal),
    status_filter: RequestStatus | None = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 100,
):
    """
    Newest first.

    Front desk: the clinic's requests, 'pending' unless ?status= is given.
    Tutor: the caller's own requests.
    """
    return service.list_requests(session, principal, status_filter, skip, limit)


@router.get(
    "/{request_id}",
    response_model=AppointmentRequestRead,
)
def get_request(
    request_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_principal),
):
    return service.get_request(session, principal, request_id)


# -------- Front desk endpoints --------


@router.post(
    "/{request_id}/approve",
    response_model=ApprovalResult,
)
def approve_request(
    request_id: uuid.UUID,
    payload: ApproveRequest | None = None,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    """
    Approve a pending request and create the confirmed appointment.

      pending  -> approved   (appointment created in the same transaction)

      approved, rejected -> 409
    """
    return service.approve(session, principal, request_id, payload or ApproveRequest())


@router.post(
    "/{request_id}/reject",
    response_model=AppointmentRequestRead,
)
def reject_request(
    request_id: uuid.UUID,
    payload: RejectRequest | None = None,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    """
    Reject a pending request. Without a reason the clinic's default
    reason is stored.
    """
    return service.reject(session, principal, request_id, payload or RejectRequest())
