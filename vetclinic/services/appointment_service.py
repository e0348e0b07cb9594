# vetclinic/services/appointment_service.py
import logging
import uuid
from datetime import date, datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from vetclinic.core.config import get_settings
from vetclinic.core.errors import (
    InvalidTransitionError,
    NotFoundError,
    RemoteError,
    ValidationError,
)
from vetclinic.core.principal import (
    Principal,
    TutorPrincipal,
    VeterinarianPrincipal,
)
from vetclinic.models.appointment import Appointment, AppointmentRequest
from vetclinic.repositories.animal_repo import AnimalRepository
from vetclinic.repositories.appointment_repo import (
    AppointmentRepository,
    AppointmentRequestRepository,
)
from vetclinic.repositories.profile_repo import VeterinarianRepository
from vetclinic.schemas.appointment import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentRequestCreate,
    AppointmentRequestRead,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    ApprovalResult,
    ApproveRequest,
    RejectRequest,
)

logger = logging.getLogger(__name__)


class AppointmentService:
    """
    Clinic schedule.

    Visibility:
      - veterinarian principal: only its own appointments
      - tutor principal: only appointments of its own animals
      - staff / receptionist: the whole clinic

    Status changes are free within the status set; only appointment
    requests follow a state machine.
    """

    def __init__(
        self,
        appointment_repo: AppointmentRepository,
        animal_repo: AnimalRepository,
        vet_repo: VeterinarianRepository,
    ):
        self.appointment_repo = appointment_repo
        self.animal_repo = animal_repo
        self.vet_repo = vet_repo

    def list_appointments(
        self,
        session: Session,
        principal: Principal,
        day: date | None = None,
        status: str | None = None,
        veterinarian_id: uuid.UUID | None = None,
        animal_id: uuid.UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Appointment]:
        filters = {
            "status": status,
            "veterinarian_id": veterinarian_id,
            "animal_id": animal_id,
        }

        if isinstance(principal, VeterinarianPrincipal):
            filters["veterinarian_id"] = principal.profile.id
        elif isinstance(principal, TutorPrincipal):
            own = self.animal_repo.list_for_clinic(
                session, principal.clinic_id, limit=1000, tutor_id=principal.profile.id
            )
            own_ids = [a.id for a in own]
            if animal_id is not None:
                own_ids = [i for i in own_ids if i == animal_id]
            filters["animal_id"] = own_ids

        if day is not None:
            return self.appointment_repo.list_on_day(
                session, principal.clinic_id, day, **filters
            )

        return self.appointment_repo.list_for_clinic(
            session,
            principal.clinic_id,
            order_by=Appointment.scheduled_at,
            skip=skip,
            limit=limit,
            **filters,
        )

    def get_appointment(
        self,
        session: Session,
        principal: Principal,
        appointment_id: uuid.UUID,
    ) -> Appointment:
        appointment = self.appointment_repo.get(session, principal.clinic_id, appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment")
        if (
            isinstance(principal, VeterinarianPrincipal)
            and appointment.veterinarian_id != principal.profile.id
        ):
            raise NotFoundError("Appointment")
        return appointment

    def create_appointment(
        self,
        session: Session,
        principal: Principal,
        payload: AppointmentCreate,
    ) -> Appointment:
        self._check_animal(session, principal.clinic_id, payload.animal_id)
        self._check_veterinarian(session, principal.clinic_id, payload.veterinarian_id)

        appointment = Appointment(
            clinic_id=principal.clinic_id,
            animal_id=payload.animal_id,
            veterinarian_id=payload.veterinarian_id,
            scheduled_at=payload.scheduled_at,
            duration_minutes=(
                payload.duration_minutes
                or get_settings().DEFAULT_APPOINTMENT_DURATION_MINUTES
            ),
            status=payload.status,
            notes=payload.notes,
        )
        appointment = self.appointment_repo.add(session, appointment)
        session.commit()
        session.refresh(appointment)
        return appointment

    def update_appointment(
        self,
        session: Session,
        principal: Principal,
        appointment_id: uuid.UUID,
        payload: AppointmentUpdate,
    ) -> Appointment:
        appointment = self.get_appointment(session, principal, appointment_id)
        data = payload.model_dump(exclude_unset=True)

        if data.get("veterinarian_id") is not None:
            self._check_veterinarian(session, principal.clinic_id, data["veterinarian_id"])
        for key in ("veterinarian_id", "scheduled_at", "duration_minutes"):
            if key in data and data[key] is None:
                raise ValidationError(f"{key} cannot be empty")

        for key, value in data.items():
            setattr(appointment, key, value)
        self.appointment_repo.add(session, appointment)
        session.commit()
        session.refresh(appointment)
        return appointment

    def update_status(
        self,
        session: Session,
        principal: Principal,
        appointment_id: uuid.UUID,
        payload: AppointmentStatusUpdate,
    ) -> Appointment:
        appointment = self.get_appointment(session, principal, appointment_id)
        if appointment.status == payload.status:
            return appointment

        logger.info(
            f"Appointment {appointment_id}: {appointment.status} -> {payload.status} "
            f"by {principal.identity.id}"
        )
        appointment.status = payload.status
        self.appointment_repo.add(session, appointment)
        session.commit()
        session.refresh(appointment)
        return appointment

    def delete_appointment(
        self,
        session: Session,
        principal: Principal,
        appointment_id: uuid.UUID,
    ) -> None:
        appointment = self.get_appointment(session, principal, appointment_id)
        self.appointment_repo.delete(session, appointment)
        session.commit()

    # -------- Helpers --------

    def _check_animal(self, session: Session, clinic_id: uuid.UUID, animal_id: uuid.UUID):
        animal = self.animal_repo.get(session, clinic_id, animal_id)
        if animal is None:
            raise NotFoundError("Animal")
        return animal

    def _check_veterinarian(
        self, session: Session, clinic_id: uuid.UUID, veterinarian_id: uuid.UUID
    ):
        vet = self.vet_repo.get(session, clinic_id, veterinarian_id)
        if vet is None:
            raise NotFoundError("Veterinarian")
        return vet


class AppointmentRequestService:
    """
    Tutor-submitted appointment requests.

    State machine:

      pending -> approved   (creates a confirmed Appointment)
      pending -> rejected   (records a reason)
      approved, rejected    terminal

    Approval writes the appointment and the request decision in one
    database transaction: either both are stored or neither is.
    """

    def __init__(
        self,
        request_repo: AppointmentRequestRepository,
        appointment_repo: AppointmentRepository,
        animal_repo: AnimalRepository,
        vet_repo: VeterinarianRepository,
    ):
        self.request_repo = request_repo
        self.appointment_repo = appointment_repo
        self.animal_repo = animal_repo
        self.vet_repo = vet_repo

    # -------- Tutor-facing --------

    def create_request(
        self,
        session: Session,
        tutor: TutorPrincipal,
        payload: AppointmentRequestCreate,
    ) -> AppointmentRequest:
        animal = self.animal_repo.get(session, tutor.clinic_id, payload.animal_id)
        if animal is None or animal.tutor_id != tutor.profile.id:
            raise NotFoundError("Animal")

        if payload.veterinarian_id is not None:
            vet = self.vet_repo.get(session, tutor.clinic_id, payload.veterinarian_id)
            if vet is None or not vet.is_active:
                raise NotFoundError("Veterinarian")

        request = AppointmentRequest(
            clinic_id=tutor.clinic_id,
            tutor_id=tutor.profile.id,
            animal_id=payload.animal_id,
            veterinarian_id=payload.veterinarian_id,
            requested_date=payload.requested_date,
            requested_time=payload.requested_time,
            notes=payload.notes,
            status="pending",
        )
        request = self.request_repo.add(session, request)
        session.commit()
        session.refresh(request)

        logger.info(f"Appointment request {request.id} submitted by tutor {tutor.profile.id}")
        return request

    # -------- Shared --------

    def list_requests(
        self,
        session: Session,
        principal: Principal,
        status: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AppointmentRequest]:
        """
        Newest first. The front desk sees the pending queue unless a status
        is asked for; a tutor sees all of their own requests.
        """
        tutor_id = None
        if isinstance(principal, TutorPrincipal):
            tutor_id = principal.profile.id
        elif status is None:
            status = "pending"

        return self.request_repo.list_for_clinic(
            session,
            principal.clinic_id,
            order_by=AppointmentRequest.created_at.desc(),
            skip=skip,
            limit=limit,
            status=status,
            tutor_id=tutor_id,
        )

    def get_request(
        self,
        session: Session,
        principal: Principal,
        request_id: uuid.UUID,
    ) -> AppointmentRequest:
        request = self.request_repo.get(session, principal.clinic_id, request_id)
        if request is None:
            raise NotFoundError("Appointment request")
        if isinstance(principal, TutorPrincipal) and request.tutor_id != principal.profile.id:
            raise NotFoundError("Appointment request")
        return request

    # -------- Front desk --------

    def approve(
        self,
        session: Session,
        principal: Principal,
        request_id: uuid.UUID,
        payload: ApproveRequest,
    ) -> ApprovalResult:
        """
        Steps:
          1. Load the request; it must be pending.
          2. Pick the veterinarian: payload first, then the tutor's choice.
          3. Insert the Appointment (status 'confirmed',
             scheduled_at = requested_date + requested_time).
          4. Mark the request approved (guarded on status = 'pending').
          5. Commit both, or roll both back.
        """
        request = self.get_request(session, principal, request_id)
        self._ensure_pending(request)

        veterinarian_id = payload.veterinarian_id or request.veterinarian_id
        if veterinarian_id is None:
            raise ValidationError("A veterinarian must be chosen to approve this request")
        vet = self.vet_repo.get(session, request.clinic_id, veterinarian_id)
        if vet is None:
            raise NotFoundError("Veterinarian")
        if not vet.is_active:
            raise ValidationError("Veterinarian is not active")

        now = datetime.now(timezone.utc)
        appointment = Appointment(
            clinic_id=request.clinic_id,
            animal_id=request.animal_id,
            veterinarian_id=veterinarian_id,
            scheduled_at=datetime.combine(request.requested_date, request.requested_time),
            duration_minutes=get_settings().DEFAULT_APPOINTMENT_DURATION_MINUTES,
            status="confirmed",
            notes=request.notes,
        )

        try:
            appointment = self.appointment_repo.add(session, appointment)
            marked = self.request_repo.mark_reviewed(
                session,
                request,
                status="approved",
                reviewed_by=principal.identity.id,
                reviewed_at=now,
                veterinarian_id=veterinarian_id,
            )
            if not marked:
                session.rollback()
                raise InvalidTransitionError("Appointment request was already reviewed")
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Approving request {request_id} failed, nothing stored: {e}")
            raise RemoteError("Could not approve the appointment request")

        session.refresh(appointment)
        session.refresh(request)

        logger.info(
            f"Appointment request {request_id} approved by {principal.identity.id}: "
            f"appointment {appointment.id} at {appointment.scheduled_at}"
        )
        return ApprovalResult(
            request=AppointmentRequestRead.model_validate(request),
            appointment=AppointmentRead.model_validate(appointment),
        )

    def reject(
        self,
        session: Session,
        principal: Principal,
        request_id: uuid.UUID,
        payload: RejectRequest,
    ) -> AppointmentRequest:
        request = self.get_request(session, principal, request_id)
        self._ensure_pending(request)

        reason = payload.reason or get_settings().DEFAULT_REJECTION_REASON

        try:
            marked = self.request_repo.mark_reviewed(
                session,
                request,
                status="rejected",
                reviewed_by=principal.identity.id,
                reviewed_at=datetime.now(timezone.utc),
                rejection_reason=reason,
            )
            if not marked:
                session.rollback()
                raise InvalidTransitionError("Appointment request was already reviewed")
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Rejecting request {request_id} failed: {e}")
            raise RemoteError("Could not reject the appointment request")

        session.refresh(request)
        logger.info(
            f"Appointment request {request_id} rejected by {principal.identity.id}: {reason}"
        )
        return request

    def _ensure_pending(self, request: AppointmentRequest) -> None:
        if request.status != "pending":
            raise InvalidTransitionError(
                f"Appointment request is already {request.status}"
            )
