# vetclinic/routers/appointments.py
import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from vetclinic.core.auth import get_principal, require_clinic_worker, require_operator
from vetclinic.core.principal import Principal
from vetclinic.database import get_session
from vetclinic.repositories.animal_repo import AnimalRepository
from vetclinic.repositories.appointment_repo import AppointmentRepository
from vetclinic.repositories.profile_repo import VeterinarianRepository
from vetclinic.schemas.appointment import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentStatus,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from vetclinic.services.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])

service = AppointmentService(
    AppointmentRepository(),
    AnimalRepository(),
    VeterinarianRepository(),
)


@router.get(
    "",
    response_model=list[AppointmentRead],
)
def list_appointments(
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_principal),
    day: date | None = Query(None, alias="date"),
    status_filter: AppointmentStatus | None = Query(None, alias="status"),
    veterinarian_id: uuid.UUID | None = None,
    animal_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    Appointments of the active clinic, ordered by scheduled_at.

    Query params (optional):
      - date: only that calendar day (clinic-local)
      - status, veterinarian_id, animal_id

    A veterinarian only sees their own schedule; a tutor only sees
    appointments of their own animals.
    """
    return service.list_appointments(
        session,
        principal,
        day=day,
        status=status_filter,
        veterinarian_id=veterinarian_id,
        animal_id=animal_id,
        skip=skip,
        limit=limit,
    )


@router.get(
    "/{appointment_id}",
    response_model=AppointmentRead,
)
def get_appointment(
    appointment_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.get_appointment(session, principal, appointment_id)


@router.post(
    "",
    response_model=AppointmentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_appointment(
    payload: AppointmentCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    return service.create_appointment(session, principal, payload)


@router.patch(
    "/{appointment_id}",
    response_model=AppointmentRead,
)
def update_appointment(
    appointment_id: uuid.UUID,
    payload: AppointmentUpdate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    return service.update_appointment(session, principal, appointment_id, payload)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentRead,
)
def update_appointment_status(
    appointment_id: uuid.UUID,
    payload: AppointmentStatusUpdate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    """
    Move an appointment to any status of the set:

      pending, scheduled, confirmed, reception, in_progress, completed, cancelled
    """
    return service.update_status(session, principal, appointment_id, payload)


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_appointment(
    appointment_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    service.delete_appointment(session, principal, appointment_id)
