# vetclinic/schemas/clinic.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

from vetclinic.schemas.appointment import AppointmentRequestRead

# Roles a membership row can carry
StaffRole = Literal["super_admin", "admin", "veterinarian", "receptionist"]


class ClinicRead(SQLModel):
    id: uuid.UUID
    name: str
    cnpj: str | None
    phone: str | None
    city: str | None
    created_at: datetime


class MembershipRead(SQLModel):
    """A clinic the caller may act within, with their role there."""

    clinic_id: uuid.UUID
    clinic_name: str
    role: StaffRole


class MemberRead(SQLModel):
    """Raw membership row, for the clinic admin screen."""

    id: uuid.UUID
    clinic_id: uuid.UUID
    user_id: uuid.UUID
    role: StaffRole
    is_active: bool
    created_at: datetime


class MemberUpdate(SQLModel):
    """
    Admin-only membership change. Omitted fields are left untouched.
    Suspension is is_active=false; rows are never deleted.
    """

    model_config = ConfigDict(extra="forbid")

    role: StaffRole | None = None
    is_active: bool | None = None


class ClinicDashboardStats(SQLModel):
    model_config = ConfigDict(extra="forbid")

    total_animals: int
    today_appointments: int
    pending_requests: int
    latest_pending_requests: list[AppointmentRequestRead]
