# vetclinic/schemas/appointment.py
import uuid
from datetime import date, datetime, time
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

AppointmentStatus = Literal[
    "pending",
    "scheduled",
    "confirmed",
    "reception",
    "in_progress",
    "completed",
    "cancelled",
]
RequestStatus = Literal["pending", "approved", "rejected"]


def _strip_optional(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


# ----- Appointments -----


class AppointmentCreate(SQLModel):
    """
    Direct scheduling by the front desk.

    scheduled_at is clinic-local wall-clock time; a timezone, if sent,
    is dropped.
    """

    model_config = ConfigDict(extra="forbid")

    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID
    scheduled_at: datetime
    duration_minutes: int | None = Field(default=None, gt=0, le=24 * 60)
    status: AppointmentStatus = "scheduled"
    notes: str | None = None

    @field_validator("scheduled_at")
    @classmethod
    def drop_tz(cls, v: datetime) -> datetime:
        return v.replace(tzinfo=None)

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class AppointmentUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    veterinarian_id: uuid.UUID | None = None
    scheduled_at: datetime | None = None
    duration_minutes: int | None = Field(default=None, gt=0, le=24 * 60)
    notes: str | None = None

    @field_validator("scheduled_at")
    @classmethod
    def drop_tz(cls, v: datetime | None) -> datetime | None:
        return None if v is None else v.replace(tzinfo=None)


class AppointmentStatusUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    status: AppointmentStatus


class AppointmentRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID
    scheduled_at: datetime
    duration_minutes: int
    status: AppointmentStatus
    notes: str | None
    created_at: datetime
    updated_at: datetime


# ----- Appointment requests -----


class AppointmentRequestCreate(SQLModel):
    """
    Tutor payload. Clinic and tutor come from the caller's profile.
    """

    model_config = ConfigDict(extra="forbid")

    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID | None = None
    requested_date: date
    requested_time: time
    notes: str | None = None

    @field_validator("notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class AppointmentRequestRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    tutor_id: uuid.UUID
    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID | None
    requested_date: date
    requested_time: time
    notes: str | None
    status: RequestStatus
    reviewed_by: uuid.UUID | None
    reviewed_at: datetime | None
    rejection_reason: str | None
    created_at: datetime


class ApproveRequest(SQLModel):
    """Overrides the veterinarian the tutor asked for (if any)."""

    model_config = ConfigDict(extra="forbid")

    veterinarian_id: uuid.UUID | None = None


class RejectRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    reason: str | None = Field(default=None, max_length=500)

    @field_validator("reason")
    @classmethod
    def normalize_reason(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class ApprovalResult(SQLModel):
    request: AppointmentRequestRead
    appointment: AppointmentRead
