# vetclinic/repositories/appointment_repo.py
import uuid
from datetime import date, datetime, time, timedelta

from sqlalchemy import update
from sqlmodel import Session

from vetclinic.models.appointment import Appointment, AppointmentRequest
from vetclinic.repositories.base import ClinicScopedRepository


class AppointmentRepository(ClinicScopedRepository[Appointment]):
    model = Appointment

    def list_between(
        self,
        session: Session,
        clinic_id: uuid.UUID,
        start: datetime,
        end: datetime,
        **filters,
    ) -> list[Appointment]:
        stmt = (
            self._scoped(clinic_id, **filters)
            .where(Appointment.scheduled_at >= start, Appointment.scheduled_at < end)
            .order_by(Appointment.scheduled_at)
        )
        return list(session.exec(stmt).all())

    def list_on_day(
        self,
        session: Session,
        clinic_id: uuid.UUID,
        day: date,
        **filters,
    ) -> list[Appointment]:
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)
        return self.list_between(session, clinic_id, start, end, **filters)


class AppointmentRequestRepository(ClinicScopedRepository[AppointmentRequest]):
    model = AppointmentRequest

    def mark_reviewed(
        self,
        session: Session,
        request: AppointmentRequest,
        status: str,
        reviewed_by: uuid.UUID,
        reviewed_at: datetime,
        veterinarian_id: uuid.UUID | None = None,
        rejection_reason: str | None = None,
    ) -> bool:
        """
        Move a request out of 'pending'.

        The UPDATE is guarded by status = 'pending', so of two concurrent
        reviewers only one matches a row. Returns False for the other.
        """
        values = {
            "status": status,
            "reviewed_by": reviewed_by,
            "reviewed_at": reviewed_at,
            "rejection_reason": rejection_reason,
            "updated_at": reviewed_at,
        }
        if veterinarian_id is not None:
            values["veterinarian_id"] = veterinarian_id

        stmt = (
            update(AppointmentRequest)
            .where(
                AppointmentRequest.id == request.id,
                AppointmentRequest.clinic_id == request.clinic_id,
                AppointmentRequest.status == "pending",
            )
            .values(**values)
        )
        result = session.exec(stmt)
        session.flush()
        return result.rowcount == 1
