# vetclinic/models/profile.py
"""
Role profiles for the veterinarian, receptionist and tutor portals.

All three share the same linkage rules:
  - owned by a clinic (deleting the clinic cascades)
  - user_id is a weak back-reference to Supabase auth.users.id
  - user_id is NULL until an admin provisions an access account
    ("data-only" profile: known to the clinic, cannot log in)
"""

import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Veterinarian(SQLModel, table=True):
    __tablename__ = "veterinarians"

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

    user_id: uuid.UUID | None = Field(default=None, index=True)

    name: str = Field(max_length=200)
    email: str | None = None
    cpf: str | None = Field(default=None, description="Digits only")
    crmv: str = Field(description="Veterinary council register, e.g. 12345/SP")
    phone: str | None = None
    specialization: str | None = None

    # Only the veterinarian portal enforces this at login
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Receptionist(SQLModel, table=True):
    __tablename__ = "receptionists"

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

    user_id: uuid.UUID | None = Field(default=None, index=True)

    name: str = Field(max_length=200)
    email: str | None = None
    cpf: str | None = None
    phone: str | None = None
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Tutor(SQLModel, table=True):
    """Animal owner. Has no active flag."""

    __tablename__ = "tutors"

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

    user_id: uuid.UUID | None = Field(default=None, index=True)

    name: str = Field(max_length=200)
    cpf: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    number: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
