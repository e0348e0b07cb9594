# vetclinic/models/clinic.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Clinic(SQLModel, table=True):
    """
    Tenant boundary. Every domain row carries a clinic_id.

    Created by the founding admin at signup; not owned by any single
    user afterwards.
    """

    __tablename__ = "clinics"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(max_length=200)
    cnpj: str | None = Field(default=None, description="Company register number")
    phone: str | None = None
    city: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class ClinicUser(SQLModel, table=True):
    """
    Membership: identity + clinic + role.

    This is the only authorization fact for the staff portal.

    Rules:
      - one row per (clinic_id, user_id)
      - is_active=False means suspended; treated as absent everywhere
      - never hard-deleted by the application
    """

    __tablename__ = "clinic_users"
    __table_args__ = (UniqueConstraint("clinic_id", "user_id"),)

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

    # Supabase auth.users.id (JWT "sub")
    user_id: uuid.UUID = Field(index=True)

    # super_admin | admin | veterinarian | receptionist
    role: str = Field(index=True)

    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class UserProfile(SQLModel, table=True):
    """
    Staff profile keyed by the identity id.

    Supabase Auth stores the credential; we only mirror display data.
    """

    __tablename__ = "user_profiles"

    id: uuid.UUID = Field(
        primary_key=True,
        description="Matches Supabase auth.users.id",
    )

    full_name: str | None = Field(default=None, max_length=200)
    cpf: str | None = None
    professional_register: str | None = None
    avatar_url: str | None = None
    is_super_admin: bool = False

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
