# vetclinic/models/appointment.py
import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field


class Appointment(SQLModel, table=True):
    """
    Scheduled visit.

    scheduled_at is the clinic's local wall-clock time (naive), built
    the same way the tutor requested it: "<date>T<time>".
    """

    __tablename__ = "appointments"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    clinic_id: uuid.UUID = Field(
        foreign_key="clinics.id",
        ondelete="CASCADE",
        index=True,
    )

    animal_id: uuid.UUID = Field(
        foreign_key="animals.id",
        ondelete="CASCADE",
        index=True,
    )

    veterinarian_id: uuid.UUID = Field(
        foreign_key="veterinarians.id",
        index=True,
    )

    # Clinic wall-clock time, stored without a timezone
    scheduled_at: datetime = Field(
        sa_column=Column(DateTime(timezone=False), nullable=False, index=True),
    )
    duration_minutes: int = Field(default=30, gt=0)

    # pending | scheduled | confirmed | reception | in_progress | completed | cancelled
    status: str = Field(default="scheduled", index=True)

    notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class AppointmentRequest(SQLModel, table=True):
    """
    Tutor-submitted scheduling request.

    Lifecycle:
      pending -> approved | rejected  (both terminal)
    """

    __tablename__ = "appointment_requests"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    clinic_id: uuid.UUID = Field(
        foreign_key="clinics.id",
        ondelete="CASCADE",
        index=True,
    )

    tutor_id: uuid.UUID = Field(
        foreign_key="tutors.id",
        ondelete="CASCADE",
        index=True,
    )

    animal_id: uuid.UUID = Field(
        foreign_key="animals.id",
        ondelete="CASCADE",
        index=True,
    )

    veterinarian_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="veterinarians.id",
    )

    requested_date: date
    requested_time: time
    notes: str | None = None

    status: str = Field(default="pending", index=True)

    # Identity id of the staff member / receptionist who decided
    reviewed_by: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
