# vetclinic/repositories/stats_repo.py
import uuid
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from vetclinic.models.animal import Animal
from vetclinic.models.appointment import Appointment, AppointmentRequest


class StatsRepository:
    """
    Read-only aggregated queries for the clinic dashboard.
    All counts are restricted to one clinic.
    """

    def count_animals(self, session: Session, clinic_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(Animal).where(Animal.clinic_id == clinic_id)
        # SQLModel's Session.exec() -> ScalarResult -> use .one()
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_appointments_between(
        self,
        session: Session,
        clinic_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(Appointment)
            .where(
                Appointment.clinic_id == clinic_id,
                Appointment.scheduled_at >= start,
                Appointment.scheduled_at < end,
            )
        )
        value = session.exec(stmt).one()
        return int(value or 0)

    def count_pending_requests(self, session: Session, clinic_id: uuid.UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(AppointmentRequest)
            .where(
                AppointmentRequest.clinic_id == clinic_id,
                AppointmentRequest.status == "pending",
            )
        )
        value = session.exec(stmt).one()
        return int(value or 0)

    def latest_pending_requests(
        self,
        session: Session,
        clinic_id: uuid.UUID,
        limit: int = 5,
    ) -> list[AppointmentRequest]:
        """
        Latest N pending requests by created_at.
        """
        stmt = (
            select(AppointmentRequest)
            .where(
                AppointmentRequest.clinic_id == clinic_id,
                AppointmentRequest.status == "pending",
            )
            .order_by(AppointmentRequest.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())
